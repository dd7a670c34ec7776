"""
tests/test_settings.py
======================

Unit tests for echeancier.settings.Settings.
"""

import pytest
from pydantic import ValidationError

from echeancier.settings import Settings


def test_defaults():
    s = Settings()
    assert s.default_currency == "MAD"
    assert s.system_user == "system"
    assert s.generation_horizon_years == 1
    assert s.log_level


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ECHEANCIER_DEFAULT_CURRENCY", "EUR")
    monkeypatch.setenv("ECHEANCIER_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("ECHEANCIER_GENERATION_HORIZON_YEARS", "3")
    s = Settings()
    assert s.default_currency == "EUR"
    assert s.log_level == "DEBUG"
    assert s.generation_horizon_years == 3


def test_horizon_is_bounded(monkeypatch):
    monkeypatch.setenv("ECHEANCIER_GENERATION_HORIZON_YEARS", "10")
    with pytest.raises(ValidationError):
        Settings()
