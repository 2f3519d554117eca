import importlib

import pytest


@pytest.fixture
def reload_vars(monkeypatch):
    """Reload upstream_proxy.vars with the given environment, then restore it."""
    import upstream_proxy.vars as vars_module

    def _reload(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return importlib.reload(vars_module)

    yield _reload

    monkeypatch.undo()
    importlib.reload(vars_module)


def test_proxy_target_pair(reload_vars):
    vars_module = reload_vars(PROXY_TARGET="https,example.com")

    assert vars_module.PROXY_TARGET == ("https", "example.com")
    assert vars_module.env_config_lookup("proxy_target") == ("https", "example.com")


def test_proxy_target_triple_has_integer_port(reload_vars):
    vars_module = reload_vars(PROXY_TARGET="http, internal-app , 8080")

    assert vars_module.PROXY_TARGET == ("http", "internal-app", 8080)


def test_non_numeric_port_is_kept_for_validation(reload_vars):
    vars_module = reload_vars(PROXY_TARGET="http,internal-app,eighty")

    assert vars_module.PROXY_TARGET == ("http", "internal-app", "eighty")


def test_empty_proxy_target_is_unset(reload_vars):
    vars_module = reload_vars(PROXY_TARGET="  ")

    assert vars_module.PROXY_TARGET is None
    assert vars_module.env_config_lookup("proxy_target") is None


def test_unknown_key_is_none(reload_vars):
    vars_module = reload_vars()

    assert vars_module.env_config_lookup("something_else") is None


def test_timeout_and_flags(reload_vars):
    vars_module = reload_vars(
        PROXY_TIMEOUT="2.5",
        PROXY_VERIFY_TLS="false",
        PROXY_EMIT_CODE_HEADER="TRUE",
    )

    assert vars_module.PROXY_TIMEOUT == 2.5
    assert vars_module.PROXY_VERIFY_TLS is False
    assert vars_module.PROXY_EMIT_CODE_HEADER is True
