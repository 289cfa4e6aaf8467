import logging

import pytest

from questionflow.core.logging import (
    SessionIdFilter,
    session_id_ctx_var,
    session_log_context,
    setup_logging,
)
from questionflow.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "LOG_LEVEL",
        "STORAGE_BACKEND",
        "REDIS_URL",
        "REDIS_HOST",
        "REDIS_PORT",
        "REDIS_DB",
        "REDIS_PASSWORD",
        "REDIS_NAMESPACE",
        "SESSION_TTL_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.unit
def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.log_level == "INFO"
    assert settings.storage_backend == "memory"
    assert settings.redis_conn_url is None
    assert settings.redis_namespace == "questionflow"
    assert settings.session_ttl_days == 30


@pytest.mark.unit
def test_reads_environment(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "redis")
    monkeypatch.setenv("SESSION_TTL_DAYS", "7")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")

    settings = get_settings()

    assert settings.storage_backend == "redis"
    assert settings.session_ttl_days == 7
    assert settings.redis_conn_url == "redis://cache:6379/2"
    assert get_settings() is settings


@pytest.mark.unit
def test_redis_url_is_composed_from_parts(monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "redis.local")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.setenv("REDIS_PASSWORD", "s3cret")

    assert Settings(_env_file=None).redis_conn_url == "redis://:s3cret@redis.local:6380/0"


@pytest.mark.unit
def test_session_log_context_binds_and_resets():
    assert session_id_ctx_var.get() is None
    with session_log_context("abc"):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        SessionIdFilter().filter(record)
        assert record.session_id == "abc"
    assert session_id_ctx_var.get() is None


@pytest.mark.unit
def test_setup_logging_uses_settings_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    root = logging.getLogger()
    previous_level = root.level
    previous_handlers = root.handlers[:]
    try:
        setup_logging()
        assert root.level == logging.DEBUG
        setup_logging("warning")
        assert root.level == logging.WARNING
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)
