from __future__ import annotations

import json

import pytest

pytest.importorskip("pydantic")

from pchtxt.config import AppConfig, load_config, save_config, validate_config
from pchtxt.exceptions import ConfigurationError, ValidationError


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PCHTXT_LOG_LEVEL", "PCHTXT_LOG_JSON", "PCHTXT_OUTPUT_DIR"):
        monkeypatch.delenv(name, raising=False)


def test_bundled_defaults() -> None:
    config = load_config()
    assert config.logging.level == "INFO"
    assert config.logging.json_output is False
    assert config.output.output_dir == "."
    assert config.output.file_name("ABCDEF") == "ABCDEF.ips"
    assert config.output.all_collections is False


def test_yaml_file_overrides_defaults(tmp_path) -> None:
    path = tmp_path / "pchtxt.yaml"
    path.write_text("logging:\n  level: debug\noutput:\n  output_dir: build\n", encoding="utf-8")

    config = load_config(path)

    assert config.logging.level == "DEBUG"
    assert config.logging.backup_count == 3
    assert config.output.output_dir == "build"


def test_json_file_overrides_defaults(tmp_path) -> None:
    path = tmp_path / "pchtxt.json"
    path.write_text(json.dumps({"output": {"file_template": "{build_id}_patch.ips"}}), encoding="utf-8")

    config = load_config(path)
    assert config.output.file_name("0123") == "0123_patch.ips"


def test_environment_overrides(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PCHTXT_LOG_LEVEL", "warning")
    monkeypatch.setenv("PCHTXT_LOG_JSON", "1")
    monkeypatch.setenv("PCHTXT_OUTPUT_DIR", str(tmp_path))

    config = load_config()

    assert config.logging.level == "WARNING"
    assert config.logging.json_output is True
    assert config.output.output_dir == str(tmp_path)


def test_invalid_value_raises_validation_error(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("output:\n  file_template: fixed.ips\n", encoding="utf-8")

    with pytest.raises(ValidationError) as excinfo:
        load_config(path)

    assert excinfo.value.error_code == "VALIDATION_ERROR"
    assert excinfo.value.details["field_name"] == "output.file_template"


def test_malformed_file_raises_configuration_error(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError) as excinfo:
        load_config(path)
    assert excinfo.value.error_code == "CONFIG_SYNTAX"


def test_non_mapping_root_is_rejected(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_missing_file_raises_configuration_error(tmp_path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "nope.json")


def test_save_config_round_trip_yaml(tmp_path) -> None:
    config = validate_config({"logging": {"level": "error", "json": True}})
    path = save_config(config, tmp_path / "saved" / "config.yaml")

    loaded = load_config(path)
    assert isinstance(loaded, AppConfig)
    assert loaded.logging.level == "ERROR"
    assert loaded.logging.json_output is True
