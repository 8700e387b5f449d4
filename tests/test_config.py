"""
Tests for the application settings (ecopulse.config).
"""
from datetime import datetime, timezone, tzinfo

import pytest

from ecopulse.config import AppConfig, local_timezone


def test_named_timezone_is_resolved():
    tz = AppConfig(timezone="Europe/Berlin").resolve_timezone()

    assert tz.name == "Europe/Berlin"
    winter = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc).astimezone(tz)
    assert winter.utcoffset().total_seconds() == 3600


def test_without_timezone_the_host_zone_is_used():
    tz = AppConfig().resolve_timezone()

    assert isinstance(tz, tzinfo)
    assert isinstance(local_timezone(), tzinfo)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"default_impact": 40.0},
        {"min_impact": 0.0},
        {"impact_step": 0.0},
    ],
)
def test_inconsistent_slider_bounds_are_rejected(kwargs):
    with pytest.raises(ValueError):
        AppConfig(**kwargs)
