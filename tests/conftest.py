"""Shared fixtures for httpcli tests."""

import os

import pytest
from click.testing import CliRunner

from httpcli import core
from httpcli.executor import RequestResult


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    """Point the config dir at a temp location and pin the session id."""
    fake_dir = tmp_path / "config" / "http"
    monkeypatch.setattr(core, "CONFIG_DIR", fake_dir)
    monkeypatch.delenv(core.CONFIG_DIR_ENV_VAR, raising=False)
    monkeypatch.delenv(core.BACKEND_ENV_VAR, raising=False)
    monkeypatch.setenv(core.SESSION_ENV_VAR, "test-session")
    for name in [n for n in os.environ if n.startswith("HTTPCLI_")]:
        if name != core.SESSION_ENV_VAR:
            monkeypatch.delenv(name, raising=False)
    core.resolve_session.cache_clear()
    yield fake_dir
    core.resolve_session.cache_clear()


@pytest.fixture
def session_file(config_dir):
    return config_dir / "test-session.env"


def make_request_result(
    status_code=200,
    body=b"",
    headers=None,
    reason="OK",
    error=None,
):
    """Factory for mock RequestResult objects."""
    r = RequestResult()
    r.status_code = status_code
    r.reason = reason
    r.headers = headers or {}
    r.chunks = [body] if body else []
    r.error = error
    return r


@pytest.fixture
def request_result():
    return make_request_result


@pytest.fixture
def env_backend(monkeypatch):
    """Select the environment backend on a throwaway copy of os.environ."""
    monkeypatch.setattr(os, "environ", dict(os.environ))
    monkeypatch.setenv(core.BACKEND_ENV_VAR, "env")
    return os.environ
