from __future__ import annotations

import logging

from usermgmt.core.config import Settings
from usermgmt.core.logging_config import configure_logging


def test_auth_bypass_read_from_environment(monkeypatch):
    monkeypatch.setenv("AUTH_DISABLED", "true")
    monkeypatch.setenv("AVATAR_MAX_BYTES", "1024")

    settings = Settings(_env_file=None)

    assert settings.auth_disabled is True
    assert settings.avatar_max_bytes == 1024


def test_explicit_values_win_over_environment(monkeypatch):
    monkeypatch.setenv("AUTH_DISABLED", "true")

    assert Settings(_env_file=None, auth_disabled=False).auth_disabled is False


def test_allowed_origins():
    assert Settings(_env_file=None, cors_origins="https://a.test, https://b.test,").allowed_origins() == [
        "https://a.test",
        "https://b.test",
    ]
    assert set(Settings(_env_file=None, frontend_url="https://app.test").allowed_origins()) == {
        "https://app.test",
        "http://localhost:3000",
    }


def test_configure_logging_tolerates_unknown_level():
    configure_logging("chatty")
    assert logging.getLogger().level == logging.INFO

    configure_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    configure_logging("warning")
