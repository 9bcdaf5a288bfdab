from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_default_secret_key_allowed_in_development() -> None:
    settings = Settings(_env_file=None, app_env="development", secret_key="change-me")
    assert settings.secret_key == "change-me"


def test_default_secret_key_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production", secret_key="change-me")


def test_placeholder_secret_key_prefix_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="prod", secret_key="change-me-in-production")


def test_debug_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production", secret_key="super-secure-value", debug=True)


def test_custom_secret_key_allowed_in_production() -> None:
    settings = Settings(_env_file=None, app_env="production", secret_key="super-secure-value")
    assert settings.secret_key == "super-secure-value"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("/api/v1", "/api/v1"), ("api/v1/", "/api/v1"), (" /api/ ", "/api"), ("/", "")],
)
def test_api_prefix_is_normalized(raw: str, expected: str) -> None:
    settings = Settings(_env_file=None, api_prefix=raw)
    assert settings.api_prefix == expected


def test_booking_default_duration_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, booking_default_duration_hours=0)
