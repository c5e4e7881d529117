"""Keyframe animation engine with a chunked binary file format."""

from .animation import (
    FILE_SIGNATURE,
    THUMBNAIL_SIZE,
    Animation,
    is_animation_file,
)
from .chunked import Chunk, ChunkReader, ChunkWriter, chunk_type
from .codec import ImageCodec, KeyValueCodec, ParamsCodec, PngCodec, ThumbnailSource
from .errors import (
    BadSignature,
    FormatError,
    KeyframerError,
    MalformedChunk,
    ProtocolViolation,
    StaleKeyframeRef,
    TruncatedChunk,
    UnknownChunkType,
)
from .iterator import AnimationIterator, FramePair
from .spline import Spline
from .store import DEFAULT_DURATION, Keyframe, KeyframeRef, KeyframeStore

__all__ = [
    "Animation",
    "AnimationIterator",
    "BadSignature",
    "Chunk",
    "chunk_type",
    "ChunkReader",
    "ChunkWriter",
    "DEFAULT_DURATION",
    "FILE_SIGNATURE",
    "FormatError",
    "FramePair",
    "ImageCodec",
    "is_animation_file",
    "Keyframe",
    "KeyframeRef",
    "KeyframerError",
    "KeyframeStore",
    "KeyValueCodec",
    "MalformedChunk",
    "ParamsCodec",
    "PngCodec",
    "ProtocolViolation",
    "Spline",
    "StaleKeyframeRef",
    "THUMBNAIL_SIZE",
    "ThumbnailSource",
    "TruncatedChunk",
    "UnknownChunkType",
]

__version__ = "0.1.0"
