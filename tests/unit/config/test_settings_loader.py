"""
shapekit — unit tests for the settings schema and loader

File: tests/unit/config/test_settings_loader.py
Last updated: 2026-10-18

Purpose
- Validate settings defaults, the validation of raw settings documents and
  the precedence of ``load_settings`` sources.

What this test file should cover
- Defaults when no source provides a value.
- Precedence: overrides > environment > ``[tool.shapekit]`` > defaults.
- Environment string values coerced by the settings shape.
- Deterministic ``path: message`` error rendering and issue codes.

Functional requirements
- Offline and deterministic; files live under ``tmp_path``.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from shapekit.config import (
    SETTINGS_SHAPE,
    SettingsError,
    ShapekitSettings,
    default_settings,
    env_name_for,
    load_settings,
    validate_settings,
)

pytestmark = pytest.mark.unit


def _write_pyproject(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "pyproject.toml"
    path.write_text(body, encoding="utf-8")
    return path


def test_default_settings() -> None:
    assert default_settings() == ShapekitSettings(
        log_level="WARNING",
        log_format="text",
        redact_values=True,
        sensitive_keys=(),
        max_union_details=10,
    )


def test_load_without_sources_returns_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert load_settings(environ={}) == default_settings()


def test_pyproject_without_tool_table_returns_defaults(tmp_path: Path) -> None:
    path = _write_pyproject(tmp_path, '[project]\nname = "demo"\n')

    assert load_settings(path, environ={}) == default_settings()


def test_tool_table_values_are_loaded(tmp_path: Path) -> None:
    path = _write_pyproject(
        tmp_path,
        "\n".join(
            [
                "[tool.shapekit]",
                'log_level = "debug"',
                'log_format = "JSON"',
                "redact_values = false",
                'sensitive_keys = ["ssn"]',
                "max_union_details = 3",
                "",
            ]
        ),
    )

    settings = load_settings(path, environ={})

    assert settings == ShapekitSettings(
        log_level="DEBUG",
        log_format="json",
        redact_values=False,
        sensitive_keys=("ssn",),
        max_union_details=3,
    )


def test_environment_overrides_file(tmp_path: Path) -> None:
    path = _write_pyproject(tmp_path, '[tool.shapekit]\nlog_level = "DEBUG"\nmax_union_details = 3\n')
    environ = {
        "SHAPEKIT_LOG_LEVEL": "error",
        "SHAPEKIT_REDACT_VALUES": "off",
        "SHAPEKIT_SENSITIVE_KEYS": "ssn, pin,",
        "SHAPEKIT_MAX_UNION_DETAILS": "5",
        "UNRELATED": "ignored",
    }

    settings = load_settings(path, environ=environ)

    assert settings.log_level == "ERROR"
    assert settings.redact_values is False
    assert settings.sensitive_keys == ("ssn", "pin")
    assert settings.max_union_details == 5


def test_overrides_win_and_none_means_unset(tmp_path: Path) -> None:
    path = _write_pyproject(tmp_path, '[tool.shapekit]\nlog_level = "DEBUG"\n')

    settings = load_settings(
        path,
        environ={"SHAPEKIT_LOG_FORMAT": "json", "SHAPEKIT_LOG_LEVEL": "INFO"},
        overrides={"log_level": "ERROR", "log_format": None},
    )

    assert settings.log_level == "ERROR"
    assert settings.log_format == "json"


def test_env_name_for() -> None:
    assert env_name_for("log_level") == "SHAPEKIT_LOG_LEVEL"


def test_explicit_missing_pyproject_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(SettingsError) as excinfo:
        load_settings(tmp_path / "missing.toml", environ={})

    assert excinfo.value.issues[0].code == "FILE_NOT_FOUND"


def test_invalid_toml_is_an_error(tmp_path: Path) -> None:
    path = _write_pyproject(tmp_path, "[tool.shapekit\n")

    with pytest.raises(SettingsError) as excinfo:
        load_settings(path, environ={})

    assert excinfo.value.issues[0].code == "INVALID_TOML"
    assert isinstance(excinfo.value, ValueError)


def test_tool_table_must_be_a_table(tmp_path: Path) -> None:
    path = _write_pyproject(tmp_path, '[tool]\nshapekit = "nope"\n')

    with pytest.raises(SettingsError):
        load_settings(path, environ={})


def test_invalid_values_render_path_and_message() -> None:
    with pytest.raises(SettingsError) as excinfo:
        validate_settings({"log_level": "loud", "max_union_details": "0"})

    codes = {issue.path: issue.code for issue in excinfo.value.issues}
    assert codes == {"log_level": "INVALID_LOG_LEVEL", "max_union_details": "NUMBER_TOO_SMALL"}
    rendered = str(excinfo.value)
    assert rendered.startswith("invalid settings:\n")
    assert "- log_level: String must be one of: DEBUG, INFO, WARNING, ERROR" in rendered


def test_unknown_settings_are_rejected() -> None:
    with pytest.raises(SettingsError) as excinfo:
        validate_settings({"colour": "blue", "log_level": "INFO"})

    assert [(issue.path, issue.code) for issue in excinfo.value.issues] == [
        ("colour", "UNKNOWN_SETTING")
    ]


def test_flag_setting_reports_every_union_candidate() -> None:
    with pytest.raises(SettingsError) as excinfo:
        validate_settings({"redact_values": "maybe"})

    issues = excinfo.value.issues
    assert [issue.code for issue in issues] == ["NOT_BOOLEAN", "INVALID_FLAG"]
    assert {issue.path for issue in issues} == {"redact_values"}


def test_sensitive_keys_reject_blank_entries() -> None:
    with pytest.raises(SettingsError):
        validate_settings({"sensitive_keys": ["ok", ""]})


def test_settings_error_root_path_placeholder() -> None:
    error = SettingsError.single("", "broken")

    assert str(error) == "invalid settings:\n- <root>: broken"


def test_settings_shape_is_self_describing() -> None:
    snapshot = SETTINGS_SHAPE.describe()

    assert snapshot["note"].startswith("shapekit settings")
    assert set(snapshot["properties"]) == {
        "log_level",
        "log_format",
        "redact_values",
        "sensitive_keys",
        "max_union_details",
    }
