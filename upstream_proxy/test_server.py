import pytest
from fastapi.testclient import TestClient

from upstream_proxy.proxy import MalformedTargetConfig, ProxyHandler, ProxyTarget
from upstream_proxy.server import create_app


def test_target_is_resolved_from_environment(monkeypatch):
    monkeypatch.setattr("upstream_proxy.vars.PROXY_TARGET", ("https", "example.com"))

    app = create_app()

    assert app.state.proxy_handler.target == ProxyTarget("https", "example.com", 443)


def test_timeout_is_taken_from_settings(monkeypatch):
    monkeypatch.setattr("upstream_proxy.server.PROXY_TIMEOUT", 5.0)

    app = create_app()

    assert app.state.proxy_handler.timeout == 5.0


@pytest.mark.parametrize(
    "value",
    [None, ("ftp", "example.com"), ("http", "example.com", "eighty")],
)
def test_malformed_target_fails_at_startup(monkeypatch, value):
    monkeypatch.setattr("upstream_proxy.vars.PROXY_TARGET", value)

    with pytest.raises(MalformedTargetConfig):
        create_app()


def _proxy_client(recording_upstream):
    upstream = recording_upstream()
    handler = ProxyHandler(
        ProxyTarget("http", "upstream.test", 80), transport=upstream.transport()
    )
    return TestClient(create_app(proxy_handler=handler)), upstream


def test_metrics_path_is_proxied_by_default(recording_upstream):
    client, upstream = _proxy_client(recording_upstream)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert [r.url.raw_path for r in upstream.requests] == [b"/metrics"]


def test_metrics_served_locally_when_enabled(monkeypatch, recording_upstream):
    monkeypatch.setattr("upstream_proxy.server.EXPOSE_METRICS", True)
    client, upstream = _proxy_client(recording_upstream)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "upstream_proxy_app_info" in response.text
    assert upstream.call_count == 0
