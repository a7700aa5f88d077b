"""
Tests unitarios para las coerciones de valores de Zoho.
"""
import math

import pytest

from zoho_sync.shared.utils.parsing import (
    capitalize_first,
    clean_city_name,
    clean_text,
    max_int,
    min_positive_int,
    number_text,
    optional_text,
    parse_float,
    parse_int,
    slugify,
    title_case,
)


class TestParseInt:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (12, 12),
            (12.9, 12),
            ("24 meses", 24),
            ("  -3", -3),
            ("abc", 0),
            ("", 0),
            (None, 0),
            (True, 0),
            (float("nan"), 0),
        ],
    )
    def test_prefix_parse(self, value, expected) -> None:
        assert parse_int(value) == expected

    def test_custom_default(self) -> None:
        assert parse_int("n/a", default=-1) == -1


class TestParseFloat:
    def test_numeric_prefix(self) -> None:
        assert parse_float("4.61xyz") == 4.61
        assert parse_float(".5") == 0.5

    def test_never_nan(self) -> None:
        assert parse_float("nan") == 0.0
        assert parse_float(float("inf")) == 0.0
        assert not math.isnan(parse_float(None))


class TestAggregates:
    def test_max_int_of_list(self) -> None:
        assert max_int(["1", "3", "2"]) == 3

    def test_max_int_ignores_non_numeric(self) -> None:
        assert max_int(["x", None]) == 0
        assert max_int([]) == 0

    def test_max_int_scalar(self) -> None:
        assert max_int("2") == 2

    def test_min_positive_ignores_zero_and_negative(self) -> None:
        assert min_positive_int([0, "36", 24, -1, None]) == 24

    def test_min_positive_without_positives(self) -> None:
        assert min_positive_int([0, None]) == 0
        assert min_positive_int([]) == 0


class TestText:
    def test_clean_text(self) -> None:
        assert clean_text("  hola ") == "hola"
        assert clean_text(None, "x") == "x"
        assert clean_text("   ", "x") == "x"

    def test_optional_text(self) -> None:
        assert optional_text("  ") is None
        assert optional_text(" bono ") == "bono"

    def test_title_case_per_word(self) -> None:
        assert title_case("torre NORTE") == "Torre Norte"
        assert title_case("o'neil-park") == "O'neil-park"

    def test_capitalize_first(self) -> None:
        assert capitalize_first("MEDELLÍN") == "Medellín"

    def test_clean_city_name_takes_first_segment(self) -> None:
        assert clean_city_name("bogota / cundinamarca") == "Bogota"
        assert clean_city_name(" / algo") == ""
        assert clean_city_name(None) == ""

    def test_slugify(self) -> None:
        assert slugify("Torre Norte 2") == "torre-norte-2"
        assert slugify("  ") == "sin-nombre"

    def test_number_text(self) -> None:
        assert number_text(4.0) == "4"
        assert number_text(4.61) == "4.61"
        assert number_text(-74.0721) == "-74.0721"
