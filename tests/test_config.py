"""Tests for environment-driven settings."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from svgbake.config import Settings


def test_defaults():
    settings = Settings()
    assert settings.svgbake_precision == 80
    assert settings.svgbake_verification_tolerance == Decimal("1e-30")
    assert settings.engine_config().context().prec == 80
    options = settings.flatten_options()
    assert options.precision == 6
    assert options.dpi == 96


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SVGBAKE_PRECISION", "50")
    monkeypatch.setenv("SVGBAKE_OUTPUT_PRECISION", "3")
    settings = Settings()
    assert settings.engine_config().context().prec == 50
    assert settings.flatten_options().precision == 3


def test_is_verified():
    settings = Settings()
    assert settings.is_verified(Decimal("1e-35"))
    assert not settings.is_verified(Decimal("1e-20"))


def test_tolerance_below_epsilon_is_rejected():
    with pytest.raises(ValidationError):
        Settings(svgbake_verification_tolerance=Decimal("1e-50"))


def test_low_precision_is_rejected():
    with pytest.raises(ValidationError):
        Settings(svgbake_precision=10)
