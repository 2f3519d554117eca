from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

Header = Tuple[str, str]


class HttpMethod(Enum):
    """Methods the proxy forwards, plus an explicit variant for everything else."""

    GET = "GET"
    POST = "POST"
    HEAD = "HEAD"
    PUT = "PUT"
    DELETE = "DELETE"
    TRACE = "TRACE"
    OPTIONS = "OPTIONS"
    UNSUPPORTED = "UNSUPPORTED"

    @classmethod
    def from_token(cls, token: str) -> "HttpMethod":
        # Tokens are matched exactly; "get" is not GET.
        for method in SUPPORTED_METHODS:
            if method.value == token:
                return method
        return cls.UNSUPPORTED

    @property
    def carries_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT)


SUPPORTED_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.HEAD,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.TRACE,
    HttpMethod.OPTIONS,
)


@dataclass(frozen=True)
class InboundRequest:
    """
    A request as decoded by the host runtime.

    Header keys are expected to be lower-cased already; duplicates are allowed
    and their order is significant.
    """

    method: str
    uri: str
    headers: Sequence[Header] = field(default_factory=tuple)
    body: bytes = b""

    def content_type(self) -> Optional[str]:
        for key, value in self.headers:
            if key == "content-type":
                return value
        return None


@dataclass(frozen=True)
class OutboundRequest:
    method: HttpMethod
    url: str
    headers: List[Header]
    content_type: Optional[str] = None
    body: Optional[bytes] = None


@dataclass(frozen=True)
class UpstreamResponse:
    http_version: str
    status_code: int
    reason_phrase: str
    headers: List[Header]
    body: bytes


@dataclass(frozen=True)
class Forwarded:
    """Upstream answered; headers start with the synthetic ("code", status) entry."""

    status_code: int
    headers: List[Tuple[str, Union[str, int]]]
    body: bytes


@dataclass(frozen=True)
class Failed:
    reason: str
    status_code: int = 502


ProxyOutcome = Union[Forwarded, Failed]
