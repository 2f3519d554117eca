from .directive import ResponseDirective, to_response_directive
from .errors import (
    MalformedTargetConfig,
    NoContentType,
    ProxyError,
    UnsupportedMethod,
    UpstreamError,
)
from .handler import ProxyHandler, handle
from .models import Failed, Forwarded, HttpMethod, InboundRequest, ProxyOutcome
from .target import ProxyTarget, load_proxy_target, resolve_proxy_target

__all__ = [
    "ResponseDirective",
    "to_response_directive",
    "MalformedTargetConfig",
    "NoContentType",
    "ProxyError",
    "UnsupportedMethod",
    "UpstreamError",
    "ProxyHandler",
    "handle",
    "Failed",
    "Forwarded",
    "HttpMethod",
    "InboundRequest",
    "ProxyOutcome",
    "ProxyTarget",
    "load_proxy_target",
    "resolve_proxy_target",
]
