import pytest

from raws_server.schemas.models import HistoryPoint
from raws_server.utils.weather import (
    assess_fire_weather_severity,
    calculate_dewpoint,
    calculate_heat_index,
    detect_extreme_changes,
    estimate_probability_of_rain,
    estimate_wind_gust,
    format_observation,
    parse_timestamp,
)


class TestRainProbability:
    @pytest.mark.parametrize(
        "humidity,precip,temperature,expected",
        [
            (10, 0.0, 80, 0),
            (65, None, 70, 10),
            (85, None, 70, 40),
            (95, 0.2, 70, 80),
            (75, 0.05, 70, 30),
            (92, None, 20, 50),
        ],
    )
    def test_estimate(self, humidity, precip, temperature, expected):
        assert estimate_probability_of_rain(humidity, precip, temperature) == expected

    def test_never_negative_below_freezing(self):
        assert estimate_probability_of_rain(10, None, 10) == 0


class TestWindGust:
    def test_estimated_from_sustained_speed(self):
        assert estimate_wind_gust(10) == 15
        assert estimate_wind_gust(12.5) == 19
        assert estimate_wind_gust(28.3) == 42

    def test_calm(self):
        assert estimate_wind_gust(0) == 0

    def test_missing(self):
        assert estimate_wind_gust(None) is None


class TestDetectExtremeChanges:
    def test_flags_rapid_changes(self):
        series = [
            HistoryPoint(
                timestamp="2025-08-29T10:00:00Z",
                temperature=70,
                relative_humidity=40,
                wind_speed=5,
            ),
            HistoryPoint(
                timestamp="2025-08-29T11:00:00Z",
                temperature=95,
                relative_humidity=15,
                wind_speed=25,
            ),
        ]

        changes = detect_extreme_changes(series)

        assert [change.parameter for change in changes] == ["wind", "humidity", "temperature"]
        wind = changes[0]
        assert wind.change == "increased by"
        assert wind.magnitude == "20 mph"
        assert wind.time_frame == "60 minutes ending 2025-08-29T11:00:00Z"
        assert changes[1].change == "dropped by"
        assert changes[1].magnitude == "25%"

    def test_sorts_by_time(self):
        series = [
            HistoryPoint(timestamp="2025-08-29T11:00:00Z", wind_speed=25),
            HistoryPoint(timestamp="2025-08-29T10:00:00Z", wind_speed=5),
        ]
        assert len(detect_extreme_changes(series)) == 1

    def test_ignores_pairs_more_than_three_hours_apart(self):
        series = [
            HistoryPoint(timestamp="2025-08-29T06:00:00Z", wind_speed=5),
            HistoryPoint(timestamp="2025-08-29T10:00:00Z", wind_speed=40),
        ]
        assert detect_extreme_changes(series) == []

    def test_skips_pairs_missing_a_value(self):
        series = [
            HistoryPoint(timestamp="2025-08-29T10:00:00Z", wind_speed=None, relative_humidity=50),
            HistoryPoint(timestamp="2025-08-29T11:00:00Z", wind_speed=40, relative_humidity=45),
        ]
        assert detect_extreme_changes(series) == []

    def test_short_series(self):
        assert detect_extreme_changes([]) == []
        assert detect_extreme_changes([HistoryPoint(timestamp="2025-08-29T10:00:00Z")]) == []

    def test_unparseable_timestamps_are_dropped(self):
        series = [
            HistoryPoint(timestamp="not a time", wind_speed=5),
            HistoryPoint(timestamp="2025-08-29T11:00:00Z", wind_speed=40),
        ]
        assert detect_extreme_changes(series) == []


class TestDerivedQuantities:
    def test_parse_timestamp(self):
        parsed = parse_timestamp("2025-08-29T20:00:00Z")
        assert parsed.tzinfo is not None
        assert parse_timestamp("garbage") is None

    def test_dewpoint_at_saturation_equals_temperature(self):
        assert calculate_dewpoint(70, 100) == pytest.approx(70, abs=0.1)

    def test_dewpoint_below_temperature(self):
        assert calculate_dewpoint(90, 20) < 90

    def test_dewpoint_undefined_without_moisture(self):
        assert calculate_dewpoint(90, 0) is None

    def test_heat_index(self):
        assert calculate_heat_index(70, 50) == 70
        assert calculate_heat_index(95, 50) > 95


class TestSeverity:
    def test_critical_conditions(self):
        result = assess_fire_weather_severity(88.2, 12.5, 28.3, wind_gust=42.7, fuel_moisture=4.2)

        assert result["severity"] == "Extreme"
        assert result["score"] == 11
        assert "Dangerous winds" in result["factors"]
        assert "Critically dry fuels" in result["factors"]

    def test_benign_conditions(self):
        result = assess_fire_weather_severity(60, 80, 3)

        assert result == {"severity": "Low", "score": 0, "factors": []}


class TestFormatObservation:
    def test_full_summary(self):
        assert (
            format_observation(88.2, 12.5, 28.3, wind_direction="NW", wind_gust=42.7)
            == "88°F, 13% RH, Wind 28 mph NW, Gusts 43 mph"
        )

    def test_gust_not_above_speed_is_omitted(self):
        assert format_observation(70, 30, 10, wind_gust=8) == "70°F, 30% RH, Wind 10 mph"
