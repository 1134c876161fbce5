"""单位换算测试 — 字节数到 GiB。"""
import pytest

from telemetry_gateway.core.exceptions import ConversionFailure, NotNumeric
from telemetry_gateway.services.units import BYTES_PER_GIB, bytes_to_gib


class TestBytesToGib:
    def test_one_gib(self):
        assert bytes_to_gib("1073741824") == "1.00"

    def test_zero(self):
        assert bytes_to_gib("0") == "0.00"

    def test_two_decimals(self):
        assert bytes_to_gib("1610612736") == "1.50"

    def test_float_input(self):
        assert bytes_to_gib("536870912.0") == "0.50"

    @pytest.mark.parametrize("raw", [
        "0", "1", "1023", "1073741824", "4294967296", "8316461056",
        "16777216000", "499963174912", "1099511627776", "123456789.75",
    ])
    def test_round_trip_within_tolerance(self, raw):
        assert abs(float(bytes_to_gib(raw)) - float(raw) / BYTES_PER_GIB) <= 0.01

    @pytest.mark.parametrize("raw", ["", "abc", "12GB", "N/A", "1,024", None])
    def test_not_numeric(self, raw):
        with pytest.raises(NotNumeric):
            bytes_to_gib(raw)

    @pytest.mark.parametrize("raw", ["-1", "nan", "inf", "-inf"])
    def test_rejects_negative_and_non_finite(self, raw):
        with pytest.raises(ConversionFailure):
            bytes_to_gib(raw)

    def test_not_numeric_is_value_error(self):
        with pytest.raises(ValueError):
            bytes_to_gib("garbage")
