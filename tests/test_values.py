"""Tests for LadderValue decoding, encoding and display formatting."""

import json

import pytest

from ladderwatch.models.ladder import LadderDatum
from ladderwatch.models.values import LadderValue, ValueKind


class TestDecode:
    def test_integer(self):
        assert LadderValue.decode(7) == LadderValue.of_int(7)

    def test_float(self):
        value = LadderValue.decode(1.25)
        assert value.kind is ValueKind.FLOAT
        assert value.value == 1.25

    def test_integral_float_stays_float(self):
        assert LadderValue.decode(146.0).kind is ValueKind.FLOAT

    def test_text(self):
        assert LadderValue.decode("DNB") == LadderValue.of_text("DNB")

    def test_numeric_text_is_not_coerced(self):
        assert LadderValue.decode("12") == LadderValue.of_text("12")

    @pytest.mark.parametrize("raw", [None, True, False, [1, 2], {"a": 1}])
    def test_unsupported_falls_back_to_zero(self, raw):
        assert LadderValue.decode(raw) == LadderValue.of_int(0)

    def test_integer_outside_i64_becomes_float(self):
        value = LadderValue.decode(2**64)
        assert value.kind is ValueKind.FLOAT
        assert value.value == float(2**64)

    def test_i64_bounds_stay_integer(self):
        assert LadderValue.decode(2**63 - 1).kind is ValueKind.INT
        assert LadderValue.decode(-(2**63)).kind is ValueKind.INT


class TestRoundTrip:
    @pytest.mark.parametrize(
        "value",
        [
            LadderValue.of_int(-3),
            LadderValue.of_float(146.0),
            LadderValue.of_float(0.6667),
            LadderValue.of_text("W/O"),
        ],
    )
    def test_json_round_trip(self, value):
        assert LadderValue.decode(json.loads(json.dumps(value.encode()))) == value

    def test_through_pydantic_model(self):
        datum = LadderDatum.model_validate({"id": "netRunRate", "val": 0.5})
        dumped = datum.model_dump_json(by_alias=True)
        assert json.loads(dumped) == {"id": "netRunRate", "val": 0.5}
        assert LadderDatum.model_validate_json(dumped) == datum

    def test_null_cell_decodes_in_model(self):
        datum = LadderDatum.model_validate({"id": "played", "val": None})
        assert datum.val == LadderValue.of_int(0)


class TestDisplay:
    def test_integer_has_no_separators(self):
        assert LadderValue.of_int(1234567).display() == "1234567"

    def test_integral_float_renders_as_integer(self):
        assert LadderValue.of_float(146.0).display("runsFor") == "146"

    def test_overs_column_uses_one_decimal(self):
        assert LadderValue.of_float(12.3333).display("oversFaced") == "12.3"
        assert LadderValue.of_float(40.5).display("oversBowled") == "40.5"

    def test_other_columns_use_three_decimals(self):
        assert LadderValue.of_float(0.6667).display("netRunRate") == "0.667"
        assert LadderValue.of_float(0.6667).display() == "0.667"

    def test_near_integral_float(self):
        assert LadderValue.of_float(3.0000000001).display("quotient") == "3"
        assert LadderValue.of_float(-2.9999999999).display() == "-3"

    def test_negative_zero(self):
        assert LadderValue.of_float(-0.0).display() == "0"

    def test_large_integral_float_keeps_decimals(self):
        assert LadderValue.of_float(1_000_000.0).display() == "1000000.000"
        assert LadderValue.of_float(2_500_000.0).display("oversFaced") == "2500000.0"

    def test_integral_float_in_overs_column_still_integer(self):
        assert LadderValue.of_float(20.0).display("oversFaced") == "20"

    def test_text_as_is(self):
        assert LadderValue.of_text("  n/a ").display("runsFor") == "  n/a "

    def test_non_finite(self):
        assert LadderValue.of_float(float("inf")).display() == "inf"

    def test_deterministic(self):
        value = LadderValue.of_float(7.12345)
        assert {value.display("netRunRate") for _ in range(5)} == {"7.123"}
