"""Collaborator interfaces used by the animation engine.

The engine never looks inside rendering parameters or thumbnails.  It
talks to the renderer through :class:`ParamsCodec` and
:class:`ThumbnailSource`, and to the image format through
:class:`ImageCodec`.  :class:`PngCodec` and :class:`KeyValueCodec` are the
stock implementations.
"""

from __future__ import annotations

import io
import logging
import re
from typing import Any, Protocol, TypeVar, runtime_checkable

from PIL import Image

log = logging.getLogger(__name__)

Params = TypeVar("Params")
ImageT = TypeVar("ImageT")


@runtime_checkable
class ImageCodec(Protocol[ImageT]):

    def encode(self, image: ImageT) -> bytes: ...

    def decode(self, data: bytes) -> ImageT: ...


@runtime_checkable
class ParamsCodec(Protocol[Params]):

    def serialize(self, params: Params) -> bytes: ...

    def deserialize(self, data: bytes) -> Params: ...

    def interpolate_linear(self, alpha: float, a: Params, b: Params) -> Params: ...


@runtime_checkable
class ThumbnailSource(Protocol[Params]):

    def make_thumbnail(self, params: Params, width: int, height: int) -> Any: ...


class PngCodec:
    """Encode and decode thumbnails as PNG with Pillow."""

    def encode(self, image: Image.Image) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def decode(self, data: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(data), formats=["PNG"])
        # Force decoding now so errors surface here, not on first use
        image.load()
        return image


_COLOR = re.compile(r"#[0-9A-Fa-f]{6}")


def _parse_value(text: str) -> Any:
    for convert in (int, float):
        try:
            return convert(text)
        except ValueError:
            pass
    return text


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float):
        return repr(value)
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _lerp_color(alpha: float, a: str, b: str) -> str:
    channels = []
    for i in (1, 3, 5):
        ca, cb = int(a[i:i + 2], 16), int(b[i:i + 2], 16)
        channels.append(round(ca + (cb - ca) * alpha))
    return "#{:02X}{:02X}{:02X}".format(*channels)


class KeyValueCodec:
    """Parameters as ``key = value`` lines of UTF-8 text.

    >>> codec = KeyValueCodec()
    >>> codec.serialize({"a": 1.5, "fgcolor": "#FF0000"})
    b'a = 1.5\\nfgcolor = #FF0000\\n'
    >>> codec.deserialize(b"a = 1.5\\nclamped = 0\\n")
    {'a': 1.5, 'clamped': 0}
    """

    def serialize(self, params: dict[str, Any]) -> bytes:
        lines = [f"{key} = {_format_value(value)}\n" for key, value in params.items()]
        return "".join(lines).encode("utf-8")

    def deserialize(self, data: bytes) -> dict[str, Any]:
        params: dict[str, Any] = {}
        for lineno, line in enumerate(data.decode("utf-8").splitlines(), 1):
            if not line.strip():
                continue
            key, sep, value = line.partition("=")
            key = key.strip()
            if not sep or not key:
                log.warning("Skipping unparseable parameter line %d: %r", lineno, line)
                continue
            params[key] = _parse_value(value.strip())
        return params

    def interpolate_linear(
        self, alpha: float, a: dict[str, Any], b: dict[str, Any]
    ) -> dict[str, Any]:
        """Blend two parameter sets.

        Numbers are blended linearly (ints stay ints), ``#RRGGBB`` colors per
        channel.  Anything else switches from *a* to *b* at alpha 0.5.  Keys
        present on only one side keep that side's value.
        """
        result: dict[str, Any] = {}
        for key in {**a, **b}:
            if key not in b:
                result[key] = a[key]
                continue
            if key not in a:
                result[key] = b[key]
                continue
            va, vb = a[key], b[key]
            if _is_number(va) and _is_number(vb):
                blended = va + (vb - va) * alpha
                if isinstance(va, int) and isinstance(vb, int):
                    blended = round(blended)
                result[key] = blended
            elif isinstance(va, str) and isinstance(vb, str) and _COLOR.fullmatch(va) and _COLOR.fullmatch(vb):
                result[key] = _lerp_color(alpha, va, vb)
            else:
                result[key] = va if alpha < 0.5 else vb
        return result
