"""Tests for display formatting helpers."""

from datetime import datetime

import pytest

from healthgest.utils.formatters import (
    display_value,
    format_birth_weight,
    format_camel_label,
    format_date,
    format_delivery_mode,
    format_number,
    format_one_decimal,
    iso_date,
    percent,
    round_half_up,
    sortable_date,
)


class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(69.5) == 70
        assert round_half_up(0.5) == 1

    def test_below_half_rounds_down(self):
        assert round_half_up(69.49) == 69

    @pytest.mark.parametrize(
        "probability,expected",
        [(0.7, 70), (0.125, 13), (0.0, 0), (1.0, 100), (0.004, 0)],
    )
    def test_percent(self, probability, expected):
        assert percent(probability) == expected


class TestDisplayValue:
    def test_missing_values_are_not_available(self):
        assert display_value(None) == "N/A"
        assert display_value("") == "N/A"

    def test_integral_float_has_no_trailing_zero(self):
        assert display_value(70.0) == "70"
        assert format_number(70.0) == "70"

    def test_fractional_number_kept(self):
        assert display_value(11.8) == "11.8"

    def test_zero_is_shown(self):
        assert display_value(0) == "0"

    def test_strings_pass_through(self):
        assert display_value("120/80") == "120/80"

    def test_format_number_rejects_non_numbers(self):
        assert format_number("abc") == "N/A"
        assert format_number(True) == "N/A"


class TestOneDecimal:
    def test_formats_one_decimal(self):
        assert format_one_decimal(39.44) == "39.4"
        assert format_one_decimal(39) == "39.0"

    def test_zero_and_missing_are_not_available(self):
        assert format_one_decimal(0) == "N/A"
        assert format_one_decimal(None) == "N/A"
        assert format_one_decimal("39") == "N/A"


class TestCamelLabel:
    def test_splits_and_capitalizes(self):
        assert format_camel_label("gestationalDiabetes") == "Gestational Diabetes"

    def test_single_word(self):
        assert format_camel_label("preeclampsia") == "Preeclampsia"


class TestDates:
    def test_format_date(self):
        assert format_date("2024-07-05") == "Jul 5, 2024"

    def test_format_date_ignores_time_part(self):
        assert format_date("2024-07-20T23:30:00.000Z") == "Jul 20, 2024"

    def test_format_date_missing(self):
        assert format_date(None) == "N/A"
        assert format_date("") == "N/A"

    def test_format_date_unparseable_returns_input(self):
        assert format_date("sometime soon") == "sometime soon"

    def test_iso_date_takes_date_part(self):
        assert iso_date("2024-07-20T00:00:00.000Z") == "2024-07-20"

    def test_iso_date_invalid(self):
        assert iso_date("not a date") is None
        assert iso_date(None) is None

    def test_sortable_date_orders_missing_first(self):
        assert sortable_date(None) == datetime.min
        assert sortable_date("2024-01-10") > sortable_date("garbage")

    def test_sortable_date_is_naive(self):
        assert sortable_date("2024-01-10T10:00:00Z").tzinfo is None


class TestDeliveryFormatting:
    def test_vaginal_shown_as_normal(self):
        assert format_delivery_mode("Vaginal") == "Normal"

    def test_other_modes_pass_through(self):
        assert format_delivery_mode("C-Section") == "C-Section"
        assert format_delivery_mode(None) == "N/A"

    def test_historical_grams_converted(self):
        assert format_birth_weight(3200, is_ongoing=False) == "3.2 kg"

    def test_historical_kilograms_kept(self):
        assert format_birth_weight(3.4, is_ongoing=False) == "3.4 kg"

    def test_predicted_weight_not_converted(self):
        assert format_birth_weight(3.31, is_ongoing=True) == "3.3 kg"

    def test_missing_birth_weight(self):
        assert format_birth_weight(None, is_ongoing=False) == "N/A"
