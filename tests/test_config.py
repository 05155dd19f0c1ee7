# tests/test_config.py
import json

import pytest

from subocr_core.config import AppConfig
from subocr_core.errors import ConfigError
from subocr_core.models.settings import AppSettings, parse_engine_var


def test_defaults_match_settings_defaults():
    assert AppConfig().to_settings() == AppSettings()


def test_settings_round_trip_through_dict():
    settings = AppSettings(ocr_threshold=0.4, ocr_engine_vars=[("a", "1")], ocr_workers=2)
    assert AppSettings.from_config(settings.to_dict()) == settings


def test_json_file_overrides_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "ocr_threshold": 0.45,
        "ocr_engine_vars": [["load_system_dawg", "0"], "tessedit_do_invert=0"],
        "not_a_setting": 1,
    }), encoding="utf-8")

    settings = AppConfig(path).to_settings()

    assert settings.ocr_threshold == 0.45
    assert settings.ocr_engine_vars == [("load_system_dawg", "0"), ("tessedit_do_invert", "0")]
    assert settings.ocr_dpi == 150
    assert "not_a_setting" in caplog.text


def test_update_skips_none_and_rejects_unknown():
    config = AppConfig()
    config.update({"ocr_dpi": 300, "ocr_border": None})
    assert config.get("ocr_dpi") == 300
    assert config.get("ocr_border") == 10
    with pytest.raises(ConfigError):
        config.set("bogus", 1)


def test_save_and_reload(tmp_path):
    config = AppConfig()
    config.set("ocr_language", "fra")
    path = tmp_path / "saved.json"
    config.save(path)
    assert AppConfig(path).get("ocr_language") == "fra"


def test_missing_or_broken_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        AppConfig(tmp_path / "nope.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError):
        AppConfig(broken)


@pytest.mark.parametrize("field,value", [
    ("ocr_threshold", 1.5),
    ("ocr_threshold", -0.1),
    ("ocr_border", -1),
    ("ocr_dpi", 0),
    ("ocr_workers", 0),
    ("ocr_language", ""),
    ("ocr_output_format", "vtt"),
])
def test_validation_rejects(field, value):
    with pytest.raises(ConfigError):
        AppSettings(**{field: value}).validate()


def test_threshold_bounds_are_inclusive():
    AppSettings(ocr_threshold=0.0).validate()
    AppSettings(ocr_threshold=1.0).validate()


def test_parse_engine_var():
    assert parse_engine_var("a=b=c") == ("a", "b=c")
    assert parse_engine_var(["x", 1]) == ("x", "1")
    with pytest.raises(ConfigError):
        parse_engine_var("novalue")
    with pytest.raises(ConfigError):
        parse_engine_var(["only-one"])


@pytest.mark.parametrize("key,value", [
    ("ocr_border", "wide"),
    ("ocr_dpi", "x"),
    ("ocr_threshold", [0.5]),
    ("ocr_workers", "many"),
])
def test_malformed_values_are_config_errors(tmp_path, key, value):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({key: value}), encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid setting value"):
        AppConfig(path).to_settings()


def test_zero_workers_is_rejected_not_defaulted():
    settings = AppSettings.from_config({"ocr_workers": 0})
    assert settings.ocr_workers == 0
    with pytest.raises(ConfigError, match="Worker count"):
        settings.validate()
