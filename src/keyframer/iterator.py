"""Timeline cursor for seeking and frame-by-frame playback."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .codec import ParamsCodec
from .store import KeyframeRef

# Frame steps of 1/frame_rate drift; arrivals this close to the end count as on it
END_TOLERANCE = 1e-9

if TYPE_CHECKING:
    from .animation import Animation


@dataclass
class FramePair:
    """Parameter states at the beginning and end of one frame."""

    start: Any
    end: Any


class AnimationIterator:
    """A position on an animation's timeline.

    The position is kept as a keyframe plus an offset into that keyframe's
    outgoing transition.  Seeking forward walks keyframes one at a time.
    Keyframes can only be walked forward, so any seek that lands before the
    current keyframe restarts from the beginning of the animation.
    """

    def __init__(self, animation: Animation) -> None:
        self.animation = animation
        self.valid = False
        self.current: KeyframeRef | None = None
        self.time_after_keyframe = 0.0
        self.absolute_time = 0.0

    def __repr__(self) -> str:
        index = None if self.current is None else self.current.index
        return (
            f"AnimationIterator(valid={self.valid}, keyframe={index}, "
            f"time_after_keyframe={self.time_after_keyframe!r})"
        )

    def seek_first(self) -> None:
        self.current = self.animation.store.first()
        self.valid = self.current is not None
        self.time_after_keyframe = 0.0
        self.absolute_time = 0.0

    def seek_absolute(self, absolute_time: float) -> None:
        self.seek_first()
        self.seek_relative(absolute_time)

    def seek_relative(self, delta_time: float) -> None:
        """Move by *delta_time* seconds, then renormalise onto a keyframe."""
        if math.isnan(delta_time):
            raise ValueError("Cannot seek by NaN seconds")
        store = self.animation.store
        self.time_after_keyframe += delta_time
        self.absolute_time += delta_time

        while self.valid:
            duration = store.get_duration(self.current)
            t = self.time_after_keyframe

            # Zero-length keyframes are always passed straight through
            if duration == 0 or t >= duration:
                next_ref = store.next(self.current)
                if next_ref is None:
                    if t >= 0 and (t <= duration or math.isclose(t, duration, abs_tol=END_TOLERANCE)):
                        # On the final frame
                        self.time_after_keyframe = min(t, duration)
                        break
                    if t < 0:
                        self.seek_first()
                        continue
                    self.valid = False
                    self.time_after_keyframe -= duration
                    break
                self.current = next_ref
                self.time_after_keyframe -= duration

            elif t < 0:
                self.seek_first()

            else:
                break

    def linear_alpha(self) -> float:
        """Fraction of the current transition that has elapsed, in [0, 1]."""
        self._check_valid()
        duration = self.animation.store.get_duration(self.current)
        if duration == 0:
            return 1.0
        return min(max(self.time_after_keyframe / duration, 0.0), 1.0)

    def alpha(self) -> float:
        """Blend factor after the keyframe's spline has been applied."""
        linear = self.linear_alpha()
        return self.animation.store.get_spline(self.current).evaluate(linear)

    def load_current(self, codec: ParamsCodec) -> Any:
        """Interpolated parameters at the current position."""
        self._check_valid()
        animation = self.animation
        a = animation.load_params(self.current, codec)
        next_ref = animation.store.next(self.current)
        b = a if next_ref is None else animation.load_params(next_ref, codec)
        return codec.interpolate_linear(self.alpha(), a, b)

    def read_frame(self, frame_rate: float, codec: ParamsCodec) -> FramePair | None:
        """Step over one frame, returning its start and end states.

        Returns ``None`` once the animation has ended.
        """
        if not frame_rate > 0:
            raise ValueError(f"Frame rate must be positive, got {frame_rate!r}")
        if not self.valid:
            return None
        start = self.load_current(codec)
        self.seek_relative(1.0 / frame_rate)
        if not self.valid:
            return None
        return FramePair(start, self.load_current(codec))

    def _check_valid(self) -> None:
        if not self.valid:
            raise ValueError("Iterator is past the end of the animation")
