"""Self-describing chunked binary container.

A chunked file is a fixed signature followed by a sequence of chunks::

    [4-byte ASCII tag][uint32 little-endian length][payload]

Zero-length chunks are valid and are used as block markers.  Readers
return every chunk in file order, including tags they do not understand;
callers skip those with :func:`warn_unknown_type` so that files written by
newer versions still load.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Iterator

from .errors import BadSignature, TruncatedChunk, UnknownChunkType

log = logging.getLogger(__name__)

_HEADER = struct.Struct("<4sI")
_MAX_LENGTH = 0xFFFFFFFF


def chunk_type(tag: str | bytes) -> bytes:
    """Normalise a chunk tag to its 4-byte form.

    >>> chunk_type("KfrS")
    b'KfrS'
    """
    if isinstance(tag, str):
        tag = tag.encode("ascii")
    if len(tag) != 4:
        raise ValueError(f"Chunk tags are exactly 4 bytes, got {tag!r}")
    return bytes(tag)


def describe_type(tag: bytes) -> str:
    """Printable form of a tag for log messages."""
    return tag.decode("ascii", errors="backslashreplace")


@dataclass(frozen=True)
class Chunk:
    tag: bytes
    payload: bytes


class ChunkWriter:

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def write_signature(self, signature: bytes) -> None:
        self.stream.write(signature)

    def write_chunk(self, tag: str | bytes, payload: bytes | None = None) -> None:
        """Write one chunk. ``None`` writes an empty marker chunk."""
        payload = payload or b""
        if len(payload) > _MAX_LENGTH:
            raise ValueError(f"Chunk payload too large: {len(payload)} bytes")
        self.stream.write(_HEADER.pack(chunk_type(tag), len(payload)))
        if payload:
            self.stream.write(payload)


class ChunkReader:

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def read_signature(self, expected: bytes) -> None:
        """Consume the signature, raising :class:`BadSignature` on mismatch."""
        found = self.stream.read(len(expected))
        if found != expected:
            raise BadSignature(f"Bad file signature: expected {expected!r}, found {found!r}")

    def read_chunk(self) -> Chunk | None:
        """Return the next chunk, or ``None`` at a clean end of file."""
        header = self.stream.read(_HEADER.size)
        if not header:
            return None
        if len(header) < _HEADER.size:
            raise TruncatedChunk(
                f"Chunk header cut short: {len(header)} of {_HEADER.size} bytes"
            )
        tag, length = _HEADER.unpack(header)
        payload = self.stream.read(length) if length else b""
        if len(payload) < length:
            raise TruncatedChunk(
                f"Chunk {describe_type(tag)!r} cut short: {len(payload)} of {length} bytes",
                tag=tag,
            )
        return Chunk(tag, payload)

    def __iter__(self) -> Iterator[Chunk]:
        while (chunk := self.read_chunk()) is not None:
            yield chunk


def warn_unknown_type(tag: bytes, length: int = 0) -> UnknownChunkType:
    """Log and describe a chunk that is being skipped."""
    message = f"Skipping unknown chunk type {describe_type(tag)!r} ({length} bytes)"
    log.warning("%s", message)
    return UnknownChunkType(message, tag=tag)
