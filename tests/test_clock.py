"""Tests for the WorldTime day/night model."""

from datetime import datetime

import pytest

from chott.core.clock import WorldTime


class TestWorldTime:
    @pytest.mark.parametrize("hour", range(6, 18))
    def test_daytime(self, hour):
        t = WorldTime(hour=hour)
        assert t.is_daytime()
        assert not t.is_night()

    @pytest.mark.parametrize("hour", [0, 1, 5, 18, 19, 23])
    def test_night(self, hour):
        t = WorldTime(hour=hour)
        assert t.is_night()
        assert not t.is_daytime()

    def test_custom_daylight(self):
        assert WorldTime(hour=20, day_start=8, day_end=21).is_daytime()
        assert WorldTime(hour=7, day_start=8, day_end=21).is_night()

    @pytest.mark.parametrize("hour,expected", [(5, True), (6, True), (7, False), (17, True), (18, True), (19, False), (12, False)])
    def test_twilight(self, hour, expected):
        assert WorldTime(hour=hour).is_twilight() is expected

    def test_from_datetime(self):
        t = WorldTime.from_datetime(datetime(2024, 3, 1, 14, 35))
        assert (t.hour, t.minute) == (14, 35)

    def test_now_in_range(self):
        t = WorldTime.now()
        assert 0 <= t.hour <= 23

    @pytest.mark.parametrize("hour,minute", [(24, 0), (-1, 0), (10, 60)])
    def test_invalid(self, hour, minute):
        with pytest.raises(ValueError):
            WorldTime(hour=hour, minute=minute)

    def test_to_dict(self):
        assert WorldTime(hour=12, minute=5).to_dict() == {
            "hour": 12, "minute": 5, "is_daytime": True, "is_twilight": False,
        }
