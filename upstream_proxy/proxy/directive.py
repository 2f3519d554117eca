from dataclasses import dataclass, field
from typing import List, Tuple, Union

from .models import Forwarded, ProxyOutcome, SUPPORTED_METHODS

ALLOWED_METHODS = ", ".join(method.value for method in SUPPORTED_METHODS)


@dataclass(frozen=True)
class ResponseDirective:
    """What the host runtime should answer with."""

    status_code: int
    headers: List[Tuple[str, Union[str, int]]] = field(default_factory=list)
    body: bytes = b""


def to_response_directive(outcome: ProxyOutcome) -> ResponseDirective:
    """
    Map a proxy outcome to a response.

    Forwarded outcomes are relayed verbatim. Failures become a bare response
    with their status code (502, or 405 with an Allow header for methods the
    proxy does not forward); the failure reason is never exposed.
    """
    if isinstance(outcome, Forwarded):
        return ResponseDirective(
            status_code=outcome.status_code,
            headers=list(outcome.headers),
            body=outcome.body,
        )
    if outcome.status_code == 405:
        return ResponseDirective(status_code=405, headers=[("allow", ALLOWED_METHODS)])
    return ResponseDirective(status_code=outcome.status_code)
