"""Unit tests for feed frame parsing.

Pure function tests - no mocks needed.
"""

from datetime import datetime

import pytest

from quake_alert.core.events import (
    JST,
    DomesticTsunami,
    EEWArea,
    EEWEvent,
    TsunamiGrade,
    parse_eew,
    parse_hypocenter,
    parse_quake,
    parse_time,
    parse_tsunami,
)


class TestParseTime:
    """Tests for parse_time() function."""

    def test_with_milliseconds(self):
        result = parse_time("2024/01/01 16:13:02.123")
        assert result == datetime(2024, 1, 1, 16, 13, 2, 123000, tzinfo=JST)

    def test_without_milliseconds(self):
        result = parse_time("2024/01/01 16:10:00")
        assert result == datetime(2024, 1, 1, 16, 10, 0, tzinfo=JST)

    def test_is_timezone_aware(self):
        assert parse_time("2024/01/01 16:10:00").utcoffset().total_seconds() == 9 * 3600

    @pytest.mark.parametrize("value", [None, "", "yesterday", 12345, "2024-01-01T16:10:00"])
    def test_unparseable_returns_none(self, value):
        assert parse_time(value) is None


class TestParseHypocenter:
    """Tests for parse_hypocenter() function."""

    def test_none_for_missing(self):
        assert parse_hypocenter(None) is None
        assert parse_hypocenter({}) is None

    def test_keeps_unknown_sentinels(self):
        result = parse_hypocenter({"name": "", "magnitude": -1, "depth": -1})
        assert result.name is None
        assert result.magnitude == -1
        assert result.depth_km == -1

    def test_absent_fields_are_none(self):
        result = parse_hypocenter({"name": "Off Fukushima"})
        assert result.name == "Off Fukushima"
        assert result.magnitude is None
        assert result.depth_km is None


class TestParseQuake:
    """Tests for parse_quake() function."""

    def test_parses_full_frame(self, quake_frame):
        quake = parse_quake(quake_frame)

        assert quake.id == "65a1b2c3d4e5f60718293a4b"
        assert quake.max_scale == 70
        assert quake.occurred_at == datetime(2024, 1, 1, 16, 10, tzinfo=JST)
        assert quake.hypocenter.name == "石川県能登地方"
        assert quake.hypocenter.magnitude == 7.6
        assert quake.hypocenter.depth_km == 10
        assert quake.domestic_tsunami is DomesticTsunami.WARNING

    def test_points_keep_feed_order(self, quake_frame):
        quake = parse_quake(quake_frame)

        assert [p.addr for p in quake.points] == ["志賀町香能", "七尾市田鶴浜町", "輪島市門前町走出"]
        assert [p.scale for p in quake.points] == [70, 60, 70]
        assert quake.points[0].is_area is False

    def test_missing_sections(self):
        quake = parse_quake({"code": 551, "time": "2024/01/01 16:13:02"})

        assert quake.max_scale == -1
        assert quake.hypocenter is None
        assert quake.domestic_tsunami is None
        assert quake.points == ()

    def test_null_intensities_are_unknown(self, quake_frame):
        quake_frame["earthquake"]["maxScale"] = None
        quake_frame["points"][1]["scale"] = None

        quake = parse_quake(quake_frame)

        assert quake.max_scale == -1
        assert [p.scale for p in quake.points] == [70, -1, 70]

    def test_non_numeric_intensity_is_unknown(self, quake_frame):
        quake_frame["earthquake"]["maxScale"] = "high"
        assert parse_quake(quake_frame).max_scale == -1

    def test_unrecognized_tsunami_value(self, quake_frame):
        quake_frame["earthquake"]["domesticTsunami"] = "Something"
        assert parse_quake(quake_frame).domestic_tsunami is DomesticTsunami.UNKNOWN


class TestParseTsunami:
    """Tests for parse_tsunami() function."""

    def test_parses_areas(self, tsunami_frame):
        tsunami = parse_tsunami(tsunami_frame)

        assert tsunami.cancelled is False
        assert len(tsunami.areas) == 2
        assert tsunami.areas[0].name == "能登"
        assert tsunami.areas[0].grade is TsunamiGrade.MAJOR_WARNING
        assert tsunami.areas[0].immediate is True
        assert tsunami.areas[1].grade is TsunamiGrade.WATCH

    def test_cancelled_without_areas(self):
        tsunami = parse_tsunami({"code": 552, "cancelled": True, "time": "2024/01/02 10:00:00"})
        assert tsunami.cancelled is True
        assert tsunami.areas == ()

    def test_unrecognized_grade(self, tsunami_frame):
        tsunami_frame["areas"][0]["grade"] = "Mystery"
        assert parse_tsunami(tsunami_frame).areas[0].grade is TsunamiGrade.UNKNOWN


class TestParseEEW:
    """Tests for parse_eew() function."""

    def test_parses_full_frame(self, eew_frame):
        eew = parse_eew(eew_frame)

        assert eew.serial == "4"
        assert eew.event_id == "20240101161005"
        assert eew.test is False
        assert eew.cancelled is False
        assert eew.earthquake.origin_time == datetime(2024, 1, 1, 16, 10, 5, tzinfo=JST)
        assert eew.earthquake.hypocenter.magnitude == 7.4
        assert eew.areas[0].scale_from == 55
        assert eew.areas[0].scale_to == 70
        assert eew.areas[0].arrival_time == datetime(2024, 1, 1, 16, 10, 20, tzinfo=JST)
        assert eew.areas[1].arrival_time is None

    def test_without_earthquake(self):
        eew = parse_eew({"code": 556, "cancelled": True, "issue": {"serial": "2"}})
        assert eew.earthquake is None
        assert eew.areas == ()


class TestMaxPredictedIntensity:
    """Tests for EEWEvent.max_predicted_intensity."""

    def _eew(self, *areas):
        return EEWEvent(id="x", time=None, areas=tuple(areas))

    def test_max_of_upper_bounds(self):
        eew = self._eew(
            EEWArea(name="a", scale_from=30, scale_to=40),
            EEWArea(name="b", scale_from=45, scale_to=55),
            EEWArea(name="c", scale_from=40, scale_to=45),
        )
        assert eew.max_predicted_intensity == 55

    def test_zero_without_areas(self):
        assert self._eew().max_predicted_intensity == 0

    def test_missing_upper_bound_counts_as_zero(self):
        eew = self._eew(EEWArea(name="a", scale_from=30, scale_to=None))
        assert eew.max_predicted_intensity == 0

    def test_never_below_zero(self):
        eew = self._eew(EEWArea(name="a", scale_from=-1, scale_to=-1))
        assert eew.max_predicted_intensity == 0
