import logging
from typing import Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator

from upstream_proxy.proxy import ProxyHandler
from upstream_proxy.routes import PROXY_PATH, ProxyEndpoint
from upstream_proxy.vars import (
    EXPOSE_METRICS,
    LOG_LEVEL,
    METRICS_PATH,
    OTLP_ENDPOINT,
    OTLP_HEADERS,
    PROXY_EMIT_CODE_HEADER,
    PROXY_TIMEOUT,
    PROXY_VERIFY_TLS,
    SERVICE_NAME,
    env_config_lookup,
)

logger = logging.getLogger("uvicorn.error")

trace.set_tracer_provider(
    TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
)
tracer_provider = trace.get_tracer_provider()
if OTLP_ENDPOINT:
    otlp_exporter = OTLPSpanExporter(
        endpoint=OTLP_ENDPOINT,
        headers=OTLP_HEADERS or None,
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

app_info = Info("upstream_proxy_app_info", "Application Info")


def create_app(
    proxy_handler: Optional[ProxyHandler] = None,
    emit_code_header: bool = PROXY_EMIT_CODE_HEADER,
) -> FastAPI:
    """
    Build the proxy application.

    Without an explicit handler the target is read from the environment;
    a malformed value raises MalformedTargetConfig here, before serving.
    """
    logger.setLevel(LOG_LEVEL)

    if proxy_handler is None:
        proxy_handler = ProxyHandler.from_config(
            env_config_lookup, timeout=PROXY_TIMEOUT, verify=PROXY_VERIFY_TLS
        )
    logger.info(f"Proxying all requests to {proxy_handler.target}")

    # Every path belongs to the upstream, so no docs or schema routes.
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    app.state.proxy_handler = proxy_handler
    app.state.emit_code_header = emit_code_header

    instrumentator = Instrumentator()
    instrumentator.instrument(app)
    if EXPOSE_METRICS:
        instrumentator.expose(app, endpoint=METRICS_PATH)
        logger.info(f"Exposing metrics on {METRICS_PATH}, not proxied")

    FastAPIInstrumentor.instrument_app(app)

    app_info.info({"app_name": SERVICE_NAME, "target": str(proxy_handler.target)})

    app.add_route(PROXY_PATH, ProxyEndpoint(), include_in_schema=False)
    return app


app = create_app()
