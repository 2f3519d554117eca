from fastapi import Request
from fastapi.responses import Response

from upstream_proxy.proxy import InboundRequest, ResponseDirective, to_response_directive

# Registered without a method list; methods the proxy does not forward are
# answered with 405 by the handler itself.
PROXY_PATH = "/{path:path}"

# Message framing belongs to the ASGI server on both sides of the proxy.
INBOUND_FRAMING_HEADERS = {"transfer-encoding"}
OUTBOUND_FRAMING_HEADERS = {"connection", "keep-alive", "transfer-encoding"}


def get_request_uri(request: Request) -> str:
    """
    Path and query exactly as received, without normalization.

    A server that puts the whole request target in raw_path has it used
    verbatim. Otherwise an empty query cannot be told apart from none, and
    the URI carries a "?" only when the query string is non-empty.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path and b"?" in raw_path:
        return raw_path.decode("latin-1")
    if raw_path:
        path = raw_path.decode("latin-1")
    else:
        path = request.scope["path"]
    query_string = request.scope.get("query_string", b"")
    if query_string:
        return f"{path}?{query_string.decode('latin-1')}"
    return path


def build_inbound_request(request: Request, body: bytes) -> InboundRequest:
    # ASGI header names are already lower-cased.
    headers = []
    for raw_name, raw_value in request.headers.raw:
        name = raw_name.decode("latin-1")
        if name in INBOUND_FRAMING_HEADERS:
            continue
        headers.append((name, raw_value.decode("latin-1")))
    return InboundRequest(
        method=request.method,
        uri=get_request_uri(request),
        headers=tuple(headers),
        body=body,
    )


def build_response(directive: ResponseDirective, emit_code_header: bool) -> Response:
    """
    Emit a directive as a Starlette response.

    The status travels in the native status field; the leading ("code", status)
    entry is only sent as a header when ``emit_code_header`` is set. Repeated
    headers such as set-cookie are kept. Header strings hold one character per
    byte and are written back as latin-1.
    """
    response = Response(content=directive.body, status_code=directive.status_code)

    raw_headers = []
    has_content_length = False
    for index, (name, value) in enumerate(directive.headers):
        if index == 0 and name == "code" and not emit_code_header:
            continue
        if name in OUTBOUND_FRAMING_HEADERS:
            continue
        if name == "content-length":
            has_content_length = True
        raw_headers.append((name.encode("latin-1"), str(value).encode("latin-1")))

    if not has_content_length:
        raw_headers.extend(
            (name, value)
            for name, value in response.raw_headers
            if name == b"content-length"
        )
    response.raw_headers = raw_headers
    return response


class ProxyEndpoint:
    """
    ASGI endpoint for the catch-all route.

    Starlette only restricts methods for function endpoints, so a class
    endpoint receives every method, including ones it has never heard of.
    """

    async def __call__(self, scope, receive, send):
        request = Request(scope, receive, send)
        handler = request.app.state.proxy_handler
        body = await request.body()
        outcome = await handler.handle(build_inbound_request(request, body))
        response = build_response(
            to_response_directive(outcome), request.app.state.emit_code_header
        )
        await response(scope, receive, send)
