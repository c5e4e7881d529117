"""Ordered keyframe storage with stable handles."""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, field
from typing import Any, Iterator

from .errors import StaleKeyframeRef
from .spline import Spline

DEFAULT_DURATION = 5.0

# Generations are unique across all stores so a ref is never valid in a
# store it did not come from.
_generations = itertools.count()


@dataclass(frozen=True)
class KeyframeRef:
    index: int
    generation: int


def _check_duration(duration: float) -> float:
    duration = float(duration)
    if not math.isfinite(duration) or duration < 0:
        raise ValueError(f"Keyframe duration must be finite and >= 0, got {duration!r}")
    return duration


@dataclass
class Keyframe:
    """One row of the store. ``duration`` is the outgoing transition length."""

    params: bytes | None = None
    thumbnail: Any | None = None
    duration: float = DEFAULT_DURATION
    spline: Spline = field(default_factory=Spline.smooth)

    def __post_init__(self) -> None:
        self.duration = _check_duration(self.duration)


class KeyframeStore:
    """Append-only sequence of keyframes with forward traversal.

    Rows are addressed by :class:`KeyframeRef`.  ``clear()`` starts a new
    generation, so refs handed out before it raise :class:`StaleKeyframeRef`.
    ``revision`` changes on every mutation that can move keyframe start
    times, which lets callers cache derived timing data.
    """

    def __init__(self) -> None:
        self._rows: list[Keyframe] = []
        self._generation = next(_generations)
        self.revision = 0

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[KeyframeRef]:
        return (KeyframeRef(i, self._generation) for i in range(len(self._rows)))

    def _touch(self) -> None:
        self.revision += 1

    def _row(self, ref: KeyframeRef) -> Keyframe:
        if ref.generation != self._generation or not 0 <= ref.index < len(self._rows):
            raise StaleKeyframeRef(f"{ref!r} does not refer to a keyframe in this store")
        return self._rows[ref.index]

    def append(self, keyframe: Keyframe) -> KeyframeRef:
        self._rows.append(keyframe)
        self._touch()
        return KeyframeRef(len(self._rows) - 1, self._generation)

    def append_default(self) -> KeyframeRef:
        return self.append(Keyframe())

    def clear(self) -> None:
        self._rows.clear()
        self._generation = next(_generations)
        self._touch()

    def get(self, ref: KeyframeRef) -> Keyframe:
        return self._row(ref)

    def ref_at(self, index: int) -> KeyframeRef:
        if not 0 <= index < len(self._rows):
            raise IndexError(f"Keyframe index {index} out of range")
        return KeyframeRef(index, self._generation)

    def first(self) -> KeyframeRef | None:
        if not self._rows:
            return None
        return KeyframeRef(0, self._generation)

    def next(self, ref: KeyframeRef) -> KeyframeRef | None:
        self._row(ref)
        if ref.index + 1 >= len(self._rows):
            return None
        return KeyframeRef(ref.index + 1, self._generation)

    def get_params(self, ref: KeyframeRef) -> bytes | None:
        return self._row(ref).params

    def set_params(self, ref: KeyframeRef, params: bytes | None) -> None:
        self._row(ref).params = None if params is None else bytes(params)

    def get_thumbnail(self, ref: KeyframeRef) -> Any | None:
        return self._row(ref).thumbnail

    def set_thumbnail(self, ref: KeyframeRef, thumbnail: Any | None) -> None:
        self._row(ref).thumbnail = thumbnail

    def get_duration(self, ref: KeyframeRef) -> float:
        return self._row(ref).duration

    def set_duration(self, ref: KeyframeRef, duration: float) -> None:
        self._row(ref).duration = _check_duration(duration)
        self._touch()

    def get_spline(self, ref: KeyframeRef) -> Spline:
        return self._row(ref).spline

    def set_spline(self, ref: KeyframeRef, spline: Spline) -> None:
        self._row(ref).spline = spline
