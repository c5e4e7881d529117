"""Shared test fixtures."""

import io
import struct
from dataclasses import dataclass

import pytest
from PIL import Image

from keyframer import FILE_SIGNATURE, Animation, ChunkWriter, KeyValueCodec


@dataclass
class SolidThumbnails:
    """Thumbnail source that paints a solid color."""

    color: tuple[int, int, int] = (255, 0, 0)

    def make_thumbnail(self, params, width, height):
        return Image.new("RGB", (width, height), self.color)


def duration_payload(seconds: float) -> bytes:
    return struct.pack("<d", seconds)


def build_file(chunks, signature=FILE_SIGNATURE) -> io.BytesIO:
    """Assemble an in-memory animation file from (tag, payload) pairs."""
    buffer = io.BytesIO()
    writer = ChunkWriter(buffer)
    writer.write_signature(signature)
    for tag, payload in chunks:
        writer.write_chunk(tag, payload)
    buffer.seek(0)
    return buffer


def make_animation(durations, codec=None) -> Animation:
    """Animation whose keyframe i has params {"value": 10.0 * i} and the given durations."""
    codec = codec or KeyValueCodec()
    animation = Animation()
    for i, duration in enumerate(durations):
        ref = animation.append_params({"value": 10.0 * i}, codec)
        animation.store.set_duration(ref, duration)
    return animation


@pytest.fixture
def codec() -> KeyValueCodec:
    return KeyValueCodec()


@pytest.fixture
def thumbnails() -> SolidThumbnails:
    return SolidThumbnails()


@pytest.fixture
def animation() -> Animation:
    return Animation()


@pytest.fixture
def two_keyframes() -> Animation:
    return make_animation([5.0, 5.0])
