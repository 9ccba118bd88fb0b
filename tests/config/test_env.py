from __future__ import annotations

import os

import pytest

from storyledger.config import (
    ConfigurationError,
    MissingConfigurationError,
    int_env_var,
    require_env_var,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRESENT_VAR", "yes")
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["PRESENT_VAR", "MISSING_VAR"])

    assert "MISSING_VAR" in str(exc.value)
    assert "PRESENT_VAR" not in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_require_env_var_reads_current_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEMP_VAR", "123")

    assert os.getenv("TEMP_VAR") == "123"
    assert require_env_var("TEMP_VAR") == "123"


def test_int_env_var(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PAGE_VAR", raising=False)
    assert int_env_var("PAGE_VAR", default=7) == 7

    monkeypatch.setenv("PAGE_VAR", " 25 ")
    assert int_env_var("PAGE_VAR", default=7) == 25

    monkeypatch.setenv("PAGE_VAR", "many")
    with pytest.raises(ConfigurationError, match="PAGE_VAR"):
        int_env_var("PAGE_VAR", default=7)
