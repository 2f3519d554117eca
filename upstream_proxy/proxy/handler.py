import logging
from typing import List, Optional, Sequence

import httpx
from opentelemetry import trace

from upstream_proxy.utils.exception_logging import log_exception_with_details
from upstream_proxy.utils.traced_requests import traced_request

from .directive import ResponseDirective, to_response_directive
from .errors import NoContentType, ProxyError, UnsupportedMethod, UpstreamError
from .models import (
    Failed,
    Forwarded,
    Header,
    HttpMethod,
    InboundRequest,
    OutboundRequest,
    ProxyOutcome,
    UpstreamResponse,
)
from .target import ConfigLookup, ProxyTarget, load_proxy_target

tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

DEFAULT_TIMEOUT = 30.0


def derive_headers(incoming_headers: Sequence[Header], host: str) -> List[Header]:
    """Drop every "host" entry and put the target host first."""
    return [("host", host)] + [
        (name, value) for name, value in incoming_headers if name != "host"
    ]


def _encode_header_value(value: str) -> bytes:
    # ASGI hands values over latin-1 decoded; anything wider goes out as UTF-8.
    try:
        return value.encode("latin-1")
    except UnicodeEncodeError:
        return value.encode("utf-8")


def _encode_headers(headers: Sequence[Header], has_body: bool) -> List[tuple]:
    # A content-length for a body that is not sent would stall the upstream.
    return [
        (_encode_header_value(name), _encode_header_value(value))
        for name, value in headers
        if has_body or name != "content-length"
    ]


class ProxyHandler:
    """Forwards every inbound request to one fixed upstream target."""

    def __init__(
        self,
        target: ProxyTarget,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        verify: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.target = target
        self.timeout = timeout
        self.verify = verify
        self.transport = transport

    @classmethod
    def from_config(cls, config_lookup: ConfigLookup, **kwargs) -> "ProxyHandler":
        """Resolve the target once and build a handler bound to it."""
        return cls(load_proxy_target(config_lookup), **kwargs)

    def build_outbound_request(self, inbound: InboundRequest) -> OutboundRequest:
        method = HttpMethod.from_token(inbound.method)
        if method is HttpMethod.UNSUPPORTED:
            raise UnsupportedMethod(inbound.method)

        url = self.target.url_for(inbound.uri)
        headers = derive_headers(inbound.headers, self.target.host)

        if method.carries_body:
            content_type = inbound.content_type()
            if content_type is None:
                raise NoContentType(inbound.method)
            return OutboundRequest(method, url, headers, content_type, inbound.body)
        return OutboundRequest(method, url, headers)

    async def send(self, outbound: OutboundRequest) -> UpstreamResponse:
        """
        Perform the outbound call.

        Redirects are never followed. The body is read undecoded so that the
        relayed content-encoding header still matches it.
        """
        try:
            # Built directly so the client adds none of its default headers.
            request = httpx.Request(
                outbound.method.value,
                outbound.url,
                headers=_encode_headers(
                    outbound.headers, has_body=outbound.body is not None
                ),
                content=outbound.body,
            )
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=False,
                trust_env=False,
                verify=self.verify,
                transport=self.transport,
            ) as client:
                response = await client.send(request, stream=True)
                try:
                    body = b"".join([chunk async for chunk in response.aiter_raw()])
                finally:
                    await response.aclose()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamError(outbound.url, e) from e

        # One character per byte, so the host glue can emit them unchanged.
        response.headers.encoding = "latin-1"
        return UpstreamResponse(
            http_version=response.http_version,
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers=response.headers.multi_items(),
            body=body,
        )

    async def handle(self, inbound: InboundRequest) -> ProxyOutcome:
        with traced_request(
            tracer,
            "proxy_request",
            f"Proxying request {inbound.method} {inbound.uri} to {self.target}",
            extra_attrs={
                "proxy.method": inbound.method,
                "proxy.target": str(self.target),
            },
        ) as span:
            try:
                outbound = self.build_outbound_request(inbound)
                span.set_attribute("proxy.target_url", outbound.url)
                upstream = await self.send(outbound)
            except UnsupportedMethod as e:
                logger.warning(f"[Proxy] Rejecting request: {e}")
                span.set_attribute("proxy.error", e.reason)
                return Failed(e.reason, e.status_code)
            except ProxyError as e:
                log_exception_with_details(logger, "[Proxy]", e)
                span.set_attribute("proxy.error", e.reason)
                return Failed(e.reason, e.status_code)

            span.set_attribute("proxy.status_code", upstream.status_code)
            logger.debug(
                f"Upstream answered {upstream.http_version} {upstream.status_code} "
                f"{upstream.reason_phrase} for {outbound.url}"
            )
            return Forwarded(
                status_code=upstream.status_code,
                headers=[("code", upstream.status_code)] + list(upstream.headers),
                body=upstream.body,
            )


async def handle(
    inbound_request: InboundRequest, config_lookup: ConfigLookup, **kwargs
) -> ResponseDirective:
    """
    Resolve the target through ``config_lookup``, proxy one request and
    translate the outcome into a response directive.

    Long-running hosts should build a ProxyHandler once instead, so that the
    target is validated at startup.
    """
    handler = ProxyHandler.from_config(config_lookup, **kwargs)
    outcome = await handler.handle(inbound_request)
    return to_response_directive(outcome)
