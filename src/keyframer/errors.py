"""Error types raised and reported by keyframer."""

from __future__ import annotations


class KeyframerError(Exception):
    """Base class for all keyframer errors."""


class FormatError(KeyframerError):
    """Something is wrong with the contents of an animation file.

    Only :class:`BadSignature` and :class:`TruncatedChunk` abort a load.
    The others are recovered from, logged, and returned by
    :meth:`Animation.load <keyframer.animation.Animation.load>`.
    """

    def __init__(self, message: str, *, tag: bytes | None = None) -> None:
        super().__init__(message)
        self.tag = tag


class BadSignature(FormatError):
    """The file does not start with the expected signature."""


class TruncatedChunk(FormatError):
    """A chunk header or payload was cut short by end of file."""


class MalformedChunk(FormatError):
    """A recognized chunk carried a payload that could not be applied."""


class UnknownChunkType(FormatError):
    """A chunk type this version does not understand was skipped."""


class ProtocolViolation(FormatError):
    """A chunk appeared where the keyframe block structure does not allow it."""


class StaleKeyframeRef(KeyframerError, LookupError):
    """A keyframe reference outlived the store contents it pointed into."""
