import pytest

from raws_server.errors import UpstreamPayloadError
from raws_server.schemas.adapters import (
    adapt_historical_series,
    adapt_mesowest_data,
    adapt_nws_alerts,
    adapt_nws_forecast,
    adapt_raws_data,
    adapt_station_metadata,
    adapt_synoptic_data,
    extract_time_series,
    extract_value,
)


class TestExtractValue:
    def test_wrapper_with_scalar(self):
        assert extract_value({"value": 88.2, "date_time": "2025-08-29T20:00:00Z"}) == 88.2

    def test_wrapper_with_list(self):
        assert extract_value({"value": [1.0, 2.0]}, 1) == 2.0

    def test_bare_list(self):
        assert extract_value([3.5, 4.5]) == 3.5

    def test_numeric_string(self):
        assert extract_value({"value": "12.5"}) == 12.5

    @pytest.mark.parametrize("entry", [None, {}, {"value": None}, {"value": "n/a"}, []])
    def test_missing_becomes_none(self, entry):
        assert extract_value(entry) is None

    def test_index_out_of_range(self):
        assert extract_value({"value": [1.0]}, 3) is None


class TestSynopticAdapter:
    def test_maps_fixture(self, synoptic_station):
        observation = adapt_synoptic_data(synoptic_station)

        assert observation.station_id == "MCRC2"
        assert observation.station_name == "Monument Creek"
        assert observation.state == "CO"
        assert observation.latitude == pytest.approx(39.1234)
        assert observation.elevation == 6420
        assert observation.temperature == 88.2
        assert observation.relative_humidity == 12.5
        assert observation.wind_speed == 28.3
        assert observation.wind_gust == 42.7
        assert observation.wind_direction == 310
        assert observation.fuel_moisture == 4.2
        assert observation.timestamp == "2025-08-29T20:00:00Z"
        assert observation.source == "synoptic"

    def test_malformed_field_is_payload_error(self, synoptic_station):
        synoptic_station["NAME"] = 12345

        with pytest.raises(UpstreamPayloadError) as excinfo:
            adapt_synoptic_data(synoptic_station)

        assert excinfo.value.details["adapter"] == "adapt_synoptic_data"
        assert excinfo.value.details["errors"][0]["loc"] == ("station_name",)

    def test_absent_sensors_are_none(self, synoptic_station):
        del synoptic_station["OBSERVATIONS"]["wind_gust_value_1"]
        del synoptic_station["OBSERVATIONS"]["fuel_moisture_value_1"]

        observation = adapt_synoptic_data(synoptic_station)

        assert observation.wind_gust is None
        assert observation.fuel_moisture is None
        assert observation.solar_radiation is None

    def test_missing_observations_block(self, synoptic_station):
        del synoptic_station["OBSERVATIONS"]
        with pytest.raises(UpstreamPayloadError):
            adapt_synoptic_data(synoptic_station)

    def test_missing_station_id(self, synoptic_station):
        del synoptic_station["STID"]
        with pytest.raises(UpstreamPayloadError):
            adapt_synoptic_data(synoptic_station)

    def test_not_a_dict(self):
        with pytest.raises(UpstreamPayloadError):
            adapt_synoptic_data(None)

    def test_mesowest_tags_source(self, synoptic_station):
        assert adapt_mesowest_data(synoptic_station).source == "mesowest"

    def test_dispatch_by_source(self, synoptic_station):
        assert adapt_raws_data(synoptic_station, "MesoWest").source == "mesowest"
        assert adapt_raws_data(synoptic_station).source == "synoptic"
        assert adapt_raws_data(synoptic_station, "unknown").source == "synoptic"


class TestStationMetadata:
    def test_maps_station(self, synoptic_station):
        station = adapt_station_metadata(synoptic_station, "synoptic")

        assert station.id == "MCRC2"
        assert station.network == "RAWS"
        assert station.status == "ACTIVE"
        assert station.longitude == pytest.approx(-104.5678)
        assert station.source == "synoptic"

    def test_requires_id(self):
        with pytest.raises(UpstreamPayloadError):
            adapt_station_metadata({"NAME": "No id"})


TIMESERIES_STATION = {
    "STID": "MCRC2",
    "NAME": "Monument Creek",
    "LATITUDE": "39.1234",
    "LONGITUDE": "-104.5678",
    "ELEVATION": "6420",
    "OBSERVATIONS": {
        "date_time": [
            "2025-08-29T18:00:00Z",
            "2025-08-29T19:00:00Z",
            "2025-08-29T20:00:00Z",
        ],
        "air_temp_set_1": [80.1, 84.5, 88.2],
        "relative_humidity_set_1": [25.0, None, 12.5],
        "wind_speed_set_1": [8.0, 12.0, 28.3],
    },
}


class TestTimeSeries:
    def test_one_point_per_timestamp(self):
        points = extract_time_series(TIMESERIES_STATION)

        assert [point.timestamp for point in points] == TIMESERIES_STATION["OBSERVATIONS"]["date_time"]
        assert points[2].temperature == 88.2
        assert points[1].relative_humidity is None
        assert points[0].wind_gust is None

    def test_points_sorted_oldest_first(self):
        station = {
            "STID": "MCRC2",
            "OBSERVATIONS": {
                "date_time": [
                    "2025-08-29T20:00:00Z",
                    "not a time",
                    "2025-08-29T12:00:00-06:00",
                ],
                "air_temp_set_1": [88.2, 70.0, 80.1],
            },
        }

        points = extract_time_series(station)

        assert [point.temperature for point in points] == [80.1, 88.2, 70.0]
        assert points[-1].timestamp == "not a time"

    def test_malformed_timestamp_type(self):
        station = {"STID": "MCRC2", "OBSERVATIONS": {"date_time": [["2025"]]}}

        with pytest.raises(UpstreamPayloadError):
            adapt_historical_series(station, "synoptic")

    def test_no_observations(self):
        assert extract_time_series({"STID": "X"}) == []
        assert extract_time_series(None) == []

    def test_historical_series(self):
        series = adapt_historical_series(TIMESERIES_STATION, "mesowest")

        assert series.station_id == "MCRC2"
        assert series.source == "mesowest"
        assert len(series.points) == 3
        assert series.elevation == 6420


class TestNws:
    def test_alerts(self):
        payload = {
            "features": [
                {
                    "properties": {
                        "event": "Red Flag Warning",
                        "headline": "Red Flag Warning until 8 PM MDT",
                        "onset": "2025-08-29T12:00:00-06:00",
                        "expires": "2025-08-29T20:00:00-06:00",
                        "areaDesc": "Pikes Peak Region",
                    }
                },
                {"properties": {"headline": "no event"}},
            ]
        }

        alerts = adapt_nws_alerts(payload)

        assert len(alerts) == 1
        assert alerts[0].event == "Red Flag Warning"
        assert alerts[0].area_desc == "Pikes Peak Region"

    def test_alert_with_malformed_field(self):
        payload = {"features": [{"properties": {"event": "Red Flag Warning", "onset": 1756490400}}]}

        with pytest.raises(UpstreamPayloadError):
            adapt_nws_alerts(payload)

    def test_alerts_bad_payload(self):
        assert adapt_nws_alerts(None) == []
        assert adapt_nws_alerts({"features": None}) == []

    def test_forecast(self):
        payload = {
            "properties": {
                "updated": "2025-08-29T15:00:00+00:00",
                "periods": [
                    {
                        "number": 1,
                        "name": "This Afternoon",
                        "temperature": 91,
                        "temperatureUnit": "F",
                        "windSpeed": "15 to 25 mph",
                        "windDirection": "SW",
                        "shortForecast": "Sunny",
                        "probabilityOfPrecipitation": {"value": None},
                    }
                ],
            }
        }

        forecast = adapt_nws_forecast(payload)

        assert forecast.updated == "2025-08-29T15:00:00+00:00"
        assert forecast.periods[0].temperature == 91
        assert forecast.periods[0].wind_speed == "15 to 25 mph"
        assert forecast.periods[0].probability_of_precipitation is None

    def test_forecast_without_periods(self):
        assert adapt_nws_forecast({"properties": {"periods": []}}) is None
        assert adapt_nws_forecast(None) is None
