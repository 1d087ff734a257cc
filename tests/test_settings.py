"""
Testy konfiguracji ze zmiennych środowiskowych (słownik zamiast os.environ).
"""

import pathlib

import pytest

from data_model.units import UnitType
from extraction.model_client import DEFAULT_MODEL
from ifrs._settings import load_settings


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings({})
        assert settings.thresholds == {
            UnitType.FUNCTIONS:   0.75,
            UnitType.CLAIMS:      0.8,
            UnitType.DEFINITIONS: 0.85,
            UnitType.FORMULAS:    0.75,
        }
        assert settings.max_quote_chars == 300
        assert settings.data_dir == pathlib.Path(".")
        assert settings.model == DEFAULT_MODEL
        assert settings.api_key is None

    def test_overrides(self):
        settings = load_settings({
            "IFRS_CONFIDENCE_DEF": "0.9",
            "IFRS_CONFIDENCE_CLAIM": " ",
            "IFRS_MAX_QUOTE_CHARS": "120",
            "IFRS_DATA_DIR": "/tmp/ifrs",
            "GEMINI_MODEL": "gemini-2.5-pro",
            "GEMINI_API_KEY": "secret",
        })
        assert settings.thresholds[UnitType.DEFINITIONS] == 0.9
        assert settings.thresholds[UnitType.CLAIMS] == 0.8
        assert settings.max_quote_chars == 120
        assert settings.data_dir == pathlib.Path("/tmp/ifrs")
        assert settings.model == "gemini-2.5-pro"
        assert settings.api_key == "secret"

    @pytest.mark.parametrize("env", [
        {"IFRS_CONFIDENCE_FUNC": "high"},
        {"IFRS_CONFIDENCE_FORMULA": "1.5"},
        {"IFRS_MAX_QUOTE_CHARS": "0"},
        {"IFRS_MAX_QUOTE_CHARS": "12.5"},
    ])
    def test_invalid_values(self, env):
        with pytest.raises(ValueError):
            load_settings(env)

    def test_defaults_not_shared(self):
        a = load_settings({})
        a.thresholds[UnitType.CLAIMS] = 0.1
        assert load_settings({}).thresholds[UnitType.CLAIMS] == 0.8
