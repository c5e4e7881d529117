"""Keyframe animations and their chunked file format."""

from __future__ import annotations

import contextlib
import enum
import io
import itertools
import logging
import math
import os
import struct
from typing import Any, BinaryIO, Iterator

from .chunked import ChunkReader, ChunkWriter, chunk_type, describe_type, warn_unknown_type
from .codec import ImageCodec, ParamsCodec, PngCodec, ThumbnailSource
from .errors import FormatError, MalformedChunk, ProtocolViolation
from .iterator import AnimationIterator, FramePair
from .spline import Spline
from .store import Keyframe, KeyframeRef, KeyframeStore

log = logging.getLogger(__name__)

FILE_SIGNATURE = b"de Jong Explorer Animation\n\r\xff\n"

CHUNK_KEYFRAME_START = chunk_type("KfrS")  # begins a keyframe block, empty
CHUNK_KEYFRAME_END = chunk_type("KfrE")  # ends a keyframe block, empty
CHUNK_PARAMS = chunk_type("djPR")  # parameter blob
CHUNK_THUMBNAIL = chunk_type("djTH")  # PNG image
CHUNK_SPLINE = chunk_type("splC")  # spline control points
CHUNK_DURATION = chunk_type("dura")  # transition duration, one double

THUMBNAIL_SIZE = (128, 128)

_DURATION = struct.Struct("<d")

Source = str | os.PathLike | BinaryIO


@contextlib.contextmanager
def _open(target: Source, mode: str) -> Iterator[BinaryIO]:
    """Open a path, or pass a caller-owned stream through unclosed."""
    if isinstance(target, (str, os.PathLike)):
        with open(target, mode) as f:
            yield f
    else:
        yield target


def is_animation_file(source: Source) -> bool:
    """True if *source* starts with the animation file signature."""
    with _open(source, "rb") as f:
        return f.read(len(FILE_SIGNATURE)) == FILE_SIGNATURE


class _State(enum.Enum):
    AWAITING_ROW = enum.auto()
    IN_ROW = enum.auto()


class Animation:
    """An ordered timeline of keyframes.

    Each keyframe's ``duration`` is the length of the transition *out of* it,
    so the animation is as long as the sum of all durations and a keyframe
    starts when every keyframe before it has finished.
    """

    def __init__(self, image_codec: ImageCodec | None = None) -> None:
        self.store = KeyframeStore()
        self.image_codec = image_codec if image_codec is not None else PngCodec()
        self._offsets: list[float] = [0.0]
        self._offsets_revision = -1

    def __len__(self) -> int:
        return len(self.store)

    # -- editing --------------------------------------------------------------

    def append_keyframe(self, params: bytes | None, thumbnail: Any | None = None) -> KeyframeRef:
        ref = self.store.append_default()
        self.store.set_params(ref, params)
        self.store.set_thumbnail(ref, thumbnail)
        return ref

    def store_params(
        self,
        ref: KeyframeRef,
        params: Any,
        codec: ParamsCodec,
        thumbnails: ThumbnailSource | None = None,
    ) -> None:
        """Save renderer parameters, and a fresh thumbnail if possible, into *ref*."""
        self.store.set_params(ref, codec.serialize(params))
        if thumbnails is not None:
            self.store.set_thumbnail(ref, thumbnails.make_thumbnail(params, *THUMBNAIL_SIZE))

    def load_params(self, ref: KeyframeRef, codec: ParamsCodec) -> Any:
        data = self.store.get_params(ref)
        if data is None:
            raise ValueError(f"Keyframe {ref.index} has no parameters")
        return codec.deserialize(data)

    def append_params(
        self,
        params: Any,
        codec: ParamsCodec,
        thumbnails: ThumbnailSource | None = None,
    ) -> KeyframeRef:
        ref = self.store.append_default()
        self.store_params(ref, params, codec, thumbnails)
        return ref

    def clear(self) -> None:
        self.store.clear()

    # -- timing ---------------------------------------------------------------

    def _cumulative(self) -> list[float]:
        """Start time of every keyframe, followed by the total length."""
        if self._offsets_revision != self.store.revision:
            durations = (self.store.get_duration(ref) for ref in self.store)
            self._offsets = list(itertools.accumulate(durations, initial=0.0))
            self._offsets_revision = self.store.revision
        return self._offsets

    def total_length(self) -> float:
        return self._cumulative()[-1]

    def start_time_of(self, ref: KeyframeRef) -> float:
        """Absolute time in seconds at which the keyframe *ref* begins."""
        self.store.get(ref)
        return self._cumulative()[ref.index]

    # -- playback -------------------------------------------------------------

    def iter_first(self) -> AnimationIterator:
        it = AnimationIterator(self)
        it.seek_first()
        return it

    def seek(self, absolute_time: float) -> AnimationIterator:
        it = self.iter_first()
        it.seek_relative(absolute_time)
        return it

    def frames(self, frame_rate: float, codec: ParamsCodec) -> Iterator[FramePair]:
        """Yield every frame of the animation from the beginning."""
        it = self.iter_first()
        while (frame := it.read_frame(frame_rate, codec)) is not None:
            yield frame

    # -- persistence ----------------------------------------------------------

    def load(self, source: Source) -> list[FormatError]:
        """Replace this animation's keyframes with the contents of *source*.

        Raises :class:`~keyframer.errors.BadSignature` or
        :class:`~keyframer.errors.TruncatedChunk` without touching the current
        keyframes.  Problems that only affect a single chunk are logged, the
        chunk is skipped, and the problems are returned.
        """
        with _open(source, "rb") as f:
            reader = ChunkReader(f)
            reader.read_signature(FILE_SIGNATURE)
            rows, problems = self._parse_chunks(reader)

        self.store.clear()
        for row in rows:
            self.store.append(row)
        log.debug("Loaded %d keyframes (%d problems)", len(rows), len(problems))
        return problems

    def _parse_chunks(self, reader: ChunkReader) -> tuple[list[Keyframe], list[FormatError]]:
        rows: list[Keyframe] = []
        problems: list[FormatError] = []
        state = _State.AWAITING_ROW

        def problem(error_cls: type[FormatError], message: str, tag: bytes) -> None:
            log.warning("%s", message)
            problems.append(error_cls(message, tag=tag))

        for chunk in reader:
            tag, payload = chunk.tag, chunk.payload

            if tag == CHUNK_KEYFRAME_START:
                rows.append(Keyframe())
                state = _State.IN_ROW
                continue

            if tag == CHUNK_KEYFRAME_END:
                if state is _State.AWAITING_ROW:
                    problem(ProtocolViolation, "Keyframe end marker without a keyframe", tag)
                state = _State.AWAITING_ROW
                continue

            handler = self._ATTRIBUTE_HANDLERS.get(tag)
            if handler is None:
                problems.append(warn_unknown_type(tag, len(payload)))
                continue

            if state is _State.AWAITING_ROW:
                problem(
                    ProtocolViolation,
                    f"Ignoring {describe_type(tag)!r} chunk outside of a keyframe",
                    tag,
                )
                continue

            try:
                handler(self, rows[-1], payload)
            except ValueError as e:
                problem(MalformedChunk, f"Ignoring malformed {describe_type(tag)!r} chunk: {e}", tag)

        return rows, problems

    def _apply_params(self, row: Keyframe, payload: bytes) -> None:
        row.params = payload

    def _apply_thumbnail(self, row: Keyframe, payload: bytes) -> None:
        try:
            row.thumbnail = self.image_codec.decode(payload)
        except (OSError, SyntaxError) as e:
            raise ValueError(f"undecodable thumbnail ({e})") from e

    def _apply_duration(self, row: Keyframe, payload: bytes) -> None:
        if len(payload) != _DURATION.size:
            raise ValueError(
                f"duration chunk is {len(payload)} bytes instead of {_DURATION.size}"
            )
        (duration,) = _DURATION.unpack(payload)
        if not math.isfinite(duration) or duration < 0:
            raise ValueError(f"invalid duration {duration!r}")
        row.duration = duration

    def _apply_spline(self, row: Keyframe, payload: bytes) -> None:
        row.spline = Spline.deserialize(payload)

    _ATTRIBUTE_HANDLERS = {
        CHUNK_PARAMS: _apply_params,
        CHUNK_THUMBNAIL: _apply_thumbnail,
        CHUNK_DURATION: _apply_duration,
        CHUNK_SPLINE: _apply_spline,
    }

    def save(self, sink: Source) -> None:
        """Write the animation to *sink*.

        The file is assembled in memory first, so a failure while encoding
        leaves an existing file untouched.
        """
        buffer = io.BytesIO()
        writer = ChunkWriter(buffer)
        writer.write_signature(FILE_SIGNATURE)
        for ref in self.store:
            row = self.store.get(ref)
            writer.write_chunk(CHUNK_KEYFRAME_START)
            if row.params is not None:
                writer.write_chunk(CHUNK_PARAMS, row.params)
            if row.thumbnail is not None:
                writer.write_chunk(CHUNK_THUMBNAIL, self.image_codec.encode(row.thumbnail))
            writer.write_chunk(CHUNK_DURATION, _DURATION.pack(row.duration))
            writer.write_chunk(CHUNK_SPLINE, row.spline.serialize())
            writer.write_chunk(CHUNK_KEYFRAME_END)

        with _open(sink, "wb") as f:
            f.write(buffer.getvalue())
        log.debug("Saved %d keyframes", len(self.store))
