import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "upstream-proxy")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def _parse_proxy_target(raw: str):
    """
    Parse "proto,host" or "proto,host,port" into a tuple.

    A non-numeric port is kept as a string so that target resolution can
    reject it with a proper diagnostic.
    """
    if not raw or not raw.strip():
        return None
    parts = tuple(part.strip() for part in raw.split(","))
    if len(parts) == 3 and parts[2].isdigit():
        return parts[0], parts[1], int(parts[2])
    return parts


PROXY_TARGET = _parse_proxy_target(os.environ.get("PROXY_TARGET", ""))
PROXY_TIMEOUT = float(os.environ.get("PROXY_TIMEOUT", "30"))
PROXY_VERIFY_TLS = os.environ.get("PROXY_VERIFY_TLS", "true").lower() == "true"
# Send the synthetic "code" response header on the wire as well
PROXY_EMIT_CODE_HEADER = (
    os.environ.get("PROXY_EMIT_CODE_HEADER", "false").lower() == "true"
)

EXPOSE_METRICS = os.getenv("EXPOSE_METRICS", "false").lower() == "true"
METRICS_PATH = os.getenv("METRICS_PATH", "/metrics")

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")


def env_config_lookup(key: str):
    """Configuration lookup backed by the environment variables above."""
    return {"proxy_target": PROXY_TARGET}.get(key)
