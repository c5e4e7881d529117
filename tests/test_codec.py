"""Tests for the stock image and parameter codecs."""

import logging

import pytest
from PIL import Image

from keyframer import ImageCodec, KeyValueCodec, ParamsCodec, PngCodec


class TestPngCodec:

    def test_is_image_codec(self) -> None:
        assert isinstance(PngCodec(), ImageCodec)

    def test_encode_is_png(self) -> None:
        data = PngCodec().encode(Image.new("RGB", (4, 4), (0, 128, 255)))
        assert data.startswith(b"\x89PNG\r\n\x1a\n")

    def test_decode(self) -> None:
        codec = PngCodec()
        image = codec.decode(codec.encode(Image.new("RGB", (8, 6), (10, 20, 30))))
        assert image.size == (8, 6)
        assert image.getpixel((0, 0)) == (10, 20, 30)

    def test_decode_garbage(self) -> None:
        with pytest.raises(OSError):
            PngCodec().decode(b"not an image")


class TestKeyValueCodec:

    def test_is_params_codec(self) -> None:
        assert isinstance(KeyValueCodec(), ParamsCodec)

    def test_serialize(self) -> None:
        data = KeyValueCodec().serialize({"a": 1.41914, "clamped": False, "fgcolor": "#000000"})
        assert data == b"a = 1.41914\nclamped = 0\nfgcolor = #000000\n"

    def test_deserialize_types(self) -> None:
        params = KeyValueCodec().deserialize(b"a = 1.5\nbgalpha = 65535\nbgcolor = #FFFFFF\n")
        assert params == {"a": 1.5, "bgalpha": 65535, "bgcolor": "#FFFFFF"}

    def test_deserialize_six_decimal_floats(self) -> None:
        params = KeyValueCodec().deserialize(b"a = 1.419140\nzoom = 1.000000\ntileable = 0\n")
        assert params == {"a": pytest.approx(1.41914), "zoom": 1.0, "tileable": 0}

    def test_deserialize_skips_bad_lines(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="keyframer.codec"):
            params = KeyValueCodec().deserialize(b"a = 1\n\nnonsense\nb = 2\n")
        assert params == {"a": 1, "b": 2}
        assert "nonsense" in caplog.text

    def test_float_round_trip(self) -> None:
        codec = KeyValueCodec()
        params = {"a": 0.1 + 0.2, "b": -2.28413}
        assert codec.deserialize(codec.serialize(params)) == params


class TestInterpolate:

    def test_floats(self) -> None:
        result = KeyValueCodec().interpolate_linear(0.25, {"a": 0.0}, {"a": 4.0})
        assert result == {"a": pytest.approx(1.0)}

    def test_ints_stay_ints(self) -> None:
        result = KeyValueCodec().interpolate_linear(0.5, {"n": 0}, {"n": 65535})
        assert result["n"] == 32768
        assert isinstance(result["n"], int)

    def test_colors(self) -> None:
        result = KeyValueCodec().interpolate_linear(0.5, {"c": "#000000"}, {"c": "#FF8040"})
        assert result == {"c": "#804020"}

    def test_other_values_switch_at_half(self) -> None:
        codec = KeyValueCodec()
        assert codec.interpolate_linear(0.4, {"s": "x"}, {"s": "y"}) == {"s": "x"}
        assert codec.interpolate_linear(0.5, {"s": "x"}, {"s": "y"}) == {"s": "y"}

    def test_one_sided_keys(self) -> None:
        result = KeyValueCodec().interpolate_linear(0.5, {"a": 1.0}, {"b": 2.0})
        assert result == {"a": 1.0, "b": 2.0}

    def test_endpoints(self) -> None:
        codec = KeyValueCodec()
        a, b = {"a": 1.0, "c": "#102030"}, {"a": 3.0, "c": "#405060"}
        assert codec.interpolate_linear(0.0, a, b) == a
        assert codec.interpolate_linear(1.0, a, b) == b
