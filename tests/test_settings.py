from __future__ import annotations

import pytest

from qr_relay import _test_hooks
from qr_relay.settings import load_settings_from_env


def _use_env(values: dict[str, str]) -> None:
    _test_hooks.get_env = lambda key: values.get(key)


def test_load_settings_defaults() -> None:
    _use_env({})

    settings = load_settings_from_env()

    assert settings["variant"] == "poll"
    assert settings["database_url"] is None
    assert settings["host"] == "0.0.0.0"
    assert settings["port"] == 3000
    assert settings["duplicate_policy"] == "accept"
    assert settings["session_queue_size"] == 100
    assert settings["sse_keepalive_seconds"] == 15.0
    assert settings["log_level"] == "INFO"
    assert settings["log_format"] == "json"


def test_load_settings_respects_overrides() -> None:
    _use_env(
        {
            "RELAY_VARIANT": "PUSH",
            "DATABASE_URL": "postgresql://relay@db/relay",
            "HOST": "127.0.0.1",
            "PORT": "8080",
            "RELAY_DUPLICATE_POLICY": "skip_consecutive",
            "RELAY_SESSION_QUEUE_SIZE": "7",
            "RELAY_SSE_KEEPALIVE_SECONDS": "2.5",
            "LOG_LEVEL": "debug",
            "LOG_FORMAT": "text",
        }
    )

    settings = load_settings_from_env()

    assert settings["variant"] == "push"
    assert settings["database_url"] == "postgresql://relay@db/relay"
    assert settings["host"] == "127.0.0.1"
    assert settings["port"] == 8080
    assert settings["duplicate_policy"] == "skip_consecutive"
    assert settings["session_queue_size"] == 7
    assert settings["sse_keepalive_seconds"] == 2.5
    assert settings["log_level"] == "DEBUG"
    assert settings["log_format"] == "text"


def test_blank_values_fall_back_to_defaults() -> None:
    _use_env({"DATABASE_URL": "   ", "PORT": "", "RELAY_VARIANT": " "})

    settings = load_settings_from_env()

    assert settings["database_url"] is None
    assert settings["port"] == 3000
    assert settings["variant"] == "poll"


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("RELAY_VARIANT", "websocket"),
        ("PORT", "0"),
        ("PORT", "70000"),
        ("PORT", "http"),
        ("RELAY_DUPLICATE_POLICY", "drop_all"),
        ("RELAY_SESSION_QUEUE_SIZE", "0"),
        ("RELAY_SSE_KEEPALIVE_SECONDS", "0"),
        ("LOG_LEVEL", "LOUD"),
        ("LOG_FORMAT", "xml"),
    ],
)
def test_load_settings_rejects_invalid(key: str, value: str) -> None:
    _use_env({key: value})

    with pytest.raises(ValueError):
        load_settings_from_env()
