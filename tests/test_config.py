"""Unit tests for core/config.py -- Settings validation and immutability.

Covers:
- production mode refuses to start without SECRET_KEY
- debug mode generates a random key
- short keys are rejected
- the default token lifetime is one minute
- Settings cannot be mutated after construction
"""

import pytest
from pydantic import ValidationError

from core.config import Settings

GOOD_KEY = "k" * 32


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SECRET_KEY", "DEBUG", "TOKEN_EXPIRE_SECONDS", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)


def test_missing_secret_in_production_raises() -> None:
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(_env_file=None)


def test_debug_generates_secret() -> None:
    settings = Settings(_env_file=None, debug=True)
    assert len(settings.secret_key) >= 32


def test_debug_secrets_differ_between_instances() -> None:
    assert Settings(_env_file=None, debug=True).secret_key != Settings(_env_file=None, debug=True).secret_key


def test_short_secret_rejected() -> None:
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings(_env_file=None, secret_key="short")


def test_secret_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SECRET_KEY", GOOD_KEY)
    assert Settings(_env_file=None).secret_key == GOOD_KEY


def test_default_token_lifetime_is_one_minute() -> None:
    assert Settings(_env_file=None, secret_key=GOOD_KEY).token_expire_seconds == 60


def test_non_positive_lifetime_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, secret_key=GOOD_KEY, token_expire_seconds=0)


def test_settings_are_frozen() -> None:
    settings = Settings(_env_file=None, secret_key=GOOD_KEY)
    with pytest.raises(ValidationError):
        settings.secret_key = "x" * 40
