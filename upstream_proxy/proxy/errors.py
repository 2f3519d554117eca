class ProxyError(Exception):
    """Base class for failures while proxying a single request."""

    reason = "proxy_error"
    status_code = 502


class NoContentType(ProxyError):
    reason = "no_content_type"

    def __init__(self, method: str):
        super().__init__(f"{method} request has no content-type header")
        self.method = method


class UpstreamError(ProxyError):
    reason = "upstream_error"

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"Upstream request to {url} failed: {cause!r}")
        self.url = url
        self.cause = cause


class UnsupportedMethod(ProxyError):
    reason = "unsupported_method"
    status_code = 405

    def __init__(self, method: str):
        super().__init__(f"HTTP method {method!r} is not supported")
        self.method = method


class MalformedTargetConfig(ProxyError):
    """Raised at startup when the proxy target configuration is unusable."""

    reason = "malformed_target_config"

    def __init__(self, message: str, value=None):
        super().__init__(message)
        self.value = value
