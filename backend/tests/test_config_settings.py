# ruff: noqa: INP001
"""Settings validation for auth mode, job token, and path prefix."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.core.config import AuthMode, Settings

STRONG_LOCAL_TOKEN = "a" * 50


def test_local_mode_requires_minimum_length() -> None:
    with pytest.raises(
        ValidationError,
        match="LOCAL_AUTH_TOKEN must be at least 50 characters and non-placeholder when AUTH_MODE=local",
    ):
        Settings(
            _env_file=None,
            auth_mode=AuthMode.LOCAL,
            local_auth_token="x" * 49,
        )


def test_local_mode_rejects_placeholder_token() -> None:
    with pytest.raises(ValidationError, match="LOCAL_AUTH_TOKEN"):
        Settings(
            _env_file=None,
            auth_mode=AuthMode.LOCAL,
            local_auth_token="change-me",
        )


def test_clerk_mode_requires_secret_key() -> None:
    with pytest.raises(
        ValidationError,
        match="CLERK_SECRET_KEY must be set and non-empty when AUTH_MODE=clerk",
    ):
        Settings(
            _env_file=None,
            auth_mode=AuthMode.CLERK,
            clerk_secret_key="",
        )


def test_weak_job_service_token_is_rejected() -> None:
    with pytest.raises(ValidationError, match="JOB_SERVICE_TOKEN must be at least 32"):
        Settings(
            _env_file=None,
            auth_mode=AuthMode.LOCAL,
            local_auth_token=STRONG_LOCAL_TOKEN,
            job_service_token="short",
        )


def test_empty_job_service_token_is_allowed() -> None:
    settings = Settings(
        _env_file=None,
        auth_mode=AuthMode.LOCAL,
        local_auth_token=STRONG_LOCAL_TOKEN,
        job_service_token="",
    )

    assert settings.job_service_token == ""


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("/t", "/t"), ("t/", "/t"), ("  /links/t/ ", "/links/t"), ("/", "")],
)
def test_public_path_prefix_is_normalized(raw: str, expected: str) -> None:
    settings = Settings(
        _env_file=None,
        auth_mode=AuthMode.LOCAL,
        local_auth_token=STRONG_LOCAL_TOKEN,
        public_path_prefix=raw,
    )

    assert settings.public_path_prefix == expected


def test_default_link_days_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(
            _env_file=None,
            auth_mode=AuthMode.LOCAL,
            local_auth_token=STRONG_LOCAL_TOKEN,
            default_territory_link_days=0,
        )


def test_dev_environment_enables_auto_migrate_by_default(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("DB_AUTO_MIGRATE", raising=False)
    dev = Settings(
        _env_file=None,
        auth_mode=AuthMode.LOCAL,
        local_auth_token=STRONG_LOCAL_TOKEN,
        environment="dev",
    )
    prod = Settings(
        _env_file=None,
        auth_mode=AuthMode.LOCAL,
        local_auth_token=STRONG_LOCAL_TOKEN,
        environment="production",
    )

    assert dev.db_auto_migrate is True
    assert prod.db_auto_migrate is False
