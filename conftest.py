# Ensure tests import modules from this service directory first and that
# `upstream_proxy.server` can build its module-level app, which needs a target.
import os
import sys

import httpx
import pytest

SERVICE_ROOT = os.path.dirname(__file__)

if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

os.environ.setdefault("PROXY_TARGET", "http,upstream.test")


class RecordingUpstream:
    """httpx.MockTransport handler that records requests and replays one answer."""

    def __init__(self, response_factory=None):
        self.requests = []
        self.response_factory = response_factory or (
            lambda request: httpx.Response(200, stream=httpx.ByteStream(b"ok"))
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response_factory(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def recording_upstream():
    """Create a recording upstream; pass a callable to customise the answer."""

    def _create(response_factory=None):
        return RecordingUpstream(response_factory)

    return _create
