"""
Resolution of the single upstream the proxy forwards to.

The configured value is either ``(protocol, host)`` or ``(protocol, host, port)``.
It is resolved once, when the handler is built, so that a bad value stops the
process at startup instead of failing every request.
"""

from dataclasses import dataclass
from typing import Any, Callable

from .errors import MalformedTargetConfig

PROXY_TARGET_KEY = "proxy_target"
DEFAULT_PORTS = {"http": 80, "https": 443}

ConfigLookup = Callable[[str], Any]


@dataclass(frozen=True)
class ProxyTarget:
    protocol: str
    host: str
    port: int

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"

    def url_for(self, uri: str) -> str:
        """Append the inbound request URI verbatim, without any normalization."""
        return f"{self.base_url}{uri}"

    def __str__(self) -> str:
        return self.base_url


def resolve_proxy_target(value) -> ProxyTarget:
    """Turn a 2- or 3-tuple from configuration into a ProxyTarget."""
    if not isinstance(value, (tuple, list)) or len(value) not in (2, 3):
        raise MalformedTargetConfig(
            f"{PROXY_TARGET_KEY} must be (protocol, host) or (protocol, host, port), "
            f"got {value!r}",
            value,
        )

    protocol, host = value[0], value[1]
    if protocol not in DEFAULT_PORTS:
        raise MalformedTargetConfig(
            f"{PROXY_TARGET_KEY} protocol must be 'http' or 'https', got {protocol!r}",
            value,
        )
    # Host only: no scheme, path or trailing slash.
    if not isinstance(host, str) or not host or "/" in host:
        raise MalformedTargetConfig(
            f"{PROXY_TARGET_KEY} host must be a bare host name, got {host!r}", value
        )

    if len(value) == 2:
        return ProxyTarget(protocol, host, DEFAULT_PORTS[protocol])

    port = value[2]
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise MalformedTargetConfig(
            f"{PROXY_TARGET_KEY} port must be an integer in 1..65535, got {port!r}",
            value,
        )
    return ProxyTarget(protocol, host, port)


def load_proxy_target(config_lookup: ConfigLookup) -> ProxyTarget:
    value = config_lookup(PROXY_TARGET_KEY)
    if value is None:
        raise MalformedTargetConfig(f"{PROXY_TARGET_KEY} is not configured")
    return resolve_proxy_target(value)
