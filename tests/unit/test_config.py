"""Settings defaults and workflow limit validation."""

import pytest
from pydantic import ValidationError

from bookflow.core.config import Settings, get_settings


def test_workflow_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "WORKFLOW_STEP_MAX_ATTEMPTS",
        "WORKFLOW_STEP_RETRY_DELAY_SECONDS",
        "WORKFLOW_EXECUTION_TIMEOUT_SECONDS",
        "WORKFLOW_RUN_CONCURRENTLY",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.workflow_step_max_attempts == 3
    assert settings.workflow_step_retry_delay_seconds == 1.0
    assert settings.workflow_execution_timeout_seconds is None
    assert settings.workflow_run_concurrently is False
    assert settings.webhook_default_timeout_seconds == 30


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORKFLOW_STEP_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("WORKFLOW_EXECUTION_TIMEOUT_SECONDS", "120")
    settings = Settings(_env_file=None)
    assert settings.workflow_step_max_attempts == 5
    assert settings.workflow_execution_timeout_seconds == 120.0


@pytest.mark.parametrize(
    ("field", "value", "message"),
    [
        ("workflow_step_max_attempts", 0, "WORKFLOW_STEP_MAX_ATTEMPTS"),
        ("workflow_step_retry_delay_seconds", -1.0, "WORKFLOW_STEP_RETRY_DELAY_SECONDS"),
        ("workflow_execution_timeout_seconds", 0, "WORKFLOW_EXECUTION_TIMEOUT_SECONDS"),
        ("webhook_default_timeout_seconds", 301, "WEBHOOK_DEFAULT_TIMEOUT_SECONDS"),
    ],
)
def test_rejects_invalid_limits(field: str, value: float, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        Settings(_env_file=None, **{field: value})


def test_get_settings_is_cached() -> None:
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
