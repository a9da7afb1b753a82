import pytest

from raws_server.utils.calculations import (
    calculate_chandler_burning_index,
    calculate_equilibrium_moisture_content,
    calculate_fire_danger_class,
    calculate_fire_indices,
    calculate_fosberg_ffwi,
    calculate_haines_index,
    estimate_10hour_fuel_moisture,
    estimate_ignition_probability,
    is_red_flag_conditions,
)


class TestEquilibriumMoistureContent:
    def test_mid_humidity_band(self):
        assert calculate_equilibrium_moisture_content(88.2, 12.5) == pytest.approx(2.925, abs=0.01)

    def test_higher_humidity_means_wetter_fuel(self):
        dry = calculate_equilibrium_moisture_content(80, 15)
        wet = calculate_equilibrium_moisture_content(80, 85)
        assert wet > dry

    def test_never_negative(self):
        assert calculate_equilibrium_moisture_content(150, 0) >= 0

    def test_missing_input(self):
        assert calculate_equilibrium_moisture_content(None, 40) is None
        assert calculate_equilibrium_moisture_content(70, None) is None

    def test_fuel_moisture_estimate_matches_emc(self):
        assert estimate_10hour_fuel_moisture(70, 30) == calculate_equilibrium_moisture_content(70, 30)


class TestFosbergFFWI:
    def test_hot_dry_windy_is_high(self):
        assert calculate_fosberg_ffwi(95, 10, 35) > 50

    def test_moderate_conditions(self):
        assert 30 < calculate_fosberg_ffwi(85, 20, 15) < 45

    def test_calm_saturated_air_is_near_zero(self):
        value = calculate_fosberg_ffwi(50, 100, 0)
        assert 0 <= value < 5

    def test_increases_with_wind(self):
        assert calculate_fosberg_ffwi(85, 20, 25) > calculate_fosberg_ffwi(85, 20, 5)

    def test_zero_humidity_is_clamped(self):
        assert calculate_fosberg_ffwi(90, 0, 20) == calculate_fosberg_ffwi(90, 1, 20)

    def test_missing_input(self):
        assert calculate_fosberg_ffwi(None, 20, 10) is None
        assert calculate_fosberg_ffwi(85, 20, None) is None


class TestHainesIndex:
    @pytest.mark.parametrize(
        "temperature,humidity,expected",
        [(95, 10, 6), (80, 30, 4), (60, 80, 2), (75, 40, 4), (90, 41, 4)],
    )
    def test_surface_approximation(self, temperature, humidity, expected):
        assert calculate_haines_index(temperature, humidity) == expected

    def test_range(self):
        for temperature in (40, 80, 100):
            for humidity in (5, 30, 90):
                assert 2 <= calculate_haines_index(temperature, humidity, 5000) <= 6

    def test_missing_input(self):
        assert calculate_haines_index(None, 30) is None


class TestChandlerBurningIndex:
    def test_extreme_conditions(self):
        assert calculate_chandler_burning_index(100, 8, 3) > 90

    def test_cool_humid_is_low(self):
        assert calculate_chandler_burning_index(50, 80) < 25

    def test_dry_fuel_raises_index(self):
        assert calculate_chandler_burning_index(85, 20, 3) > calculate_chandler_burning_index(
            85, 20, 15
        )

    def test_never_negative(self):
        assert calculate_chandler_burning_index(20, 100, 30) == 0

    def test_missing_input(self):
        assert calculate_chandler_burning_index(None, 20) is None


class TestRedFlagConditions:
    def test_strict_criteria(self):
        assert is_red_flag_conditions(14, 26, strict=True) is True
        assert is_red_flag_conditions(15, 30, strict=True) is False
        assert is_red_flag_conditions(10, 25, strict=True) is False

    def test_relaxed_criteria(self):
        assert is_red_flag_conditions(18, 22) is True
        assert is_red_flag_conditions(18, 22, strict=True) is False

    def test_missing_input(self):
        assert is_red_flag_conditions(None, 30) is False
        assert is_red_flag_conditions(10, None) is False


class TestFireDangerClass:
    def test_critically_low_humidity_is_extreme(self):
        assert calculate_fire_danger_class(60, 9, 0) == "Extreme"

    def test_critically_dry_fuel_is_extreme(self):
        assert calculate_fire_danger_class(60, 50, 0, fuel_moisture=4) == "Extreme"

    def test_red_flag_is_extreme(self):
        assert calculate_fire_danger_class(70, 14, 30) == "Extreme"

    def test_relaxed_red_flag_alone_is_not_extreme(self):
        # 18% RH with 22 mph meets only the relaxed test
        assert calculate_fire_danger_class(50, 18, 22, fuel_moisture=30) != "Extreme"

    def test_cool_humid_is_low(self):
        assert calculate_fire_danger_class(50, 80, 0) == "Low"

    def test_mild_conditions_are_moderate(self):
        assert calculate_fire_danger_class(65, 60, 5) == "Moderate"

    def test_missing_input(self):
        assert calculate_fire_danger_class(None, 30, 10) is None
        assert calculate_fire_danger_class(80, 30, None) is None


class TestIgnitionProbability:
    def test_hot_dry_windy(self):
        assert estimate_ignition_probability(95, 10, 20) == 90

    def test_cool_humid_calm(self):
        assert estimate_ignition_probability(60, 80, 0) == 0

    def test_capped_at_100(self):
        assert estimate_ignition_probability(120, 1, 80) <= 100

    def test_missing_input(self):
        assert estimate_ignition_probability(90, None, 10) is None


class TestCalculateFireIndices:
    def test_critical_conditions(self):
        result = calculate_fire_indices(88.2, 12.5, 28.3, fuel_moisture=4.2, elevation=6420)

        assert result.fosberg_ffwi > 50
        assert result.haines_index == 5
        assert result.chandler_burning_index > 90
        assert result.fire_danger_class == "Extreme"
        assert result.red_flag_conditions is True
        assert result.ignition_probability == 70

    def test_missing_inputs_yield_nones(self):
        result = calculate_fire_indices(None, None, None)

        assert result.fosberg_ffwi is None
        assert result.haines_index is None
        assert result.chandler_burning_index is None
        assert result.fire_danger_class is None
        assert result.red_flag_conditions is False
