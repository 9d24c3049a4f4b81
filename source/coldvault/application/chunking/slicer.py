"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import io
import typing

from coldvault.application.chunking.archive import (
    calculate_part_size,
    validate_part_size,
)
from coldvault.application.hashing.tree_hash import CHUNK_SIZE, TreeHash
from coldvault.application.model.upload import Part, PayloadSlice

Source = typing.Union[bytes, bytearray, memoryview, typing.BinaryIO]


def slice_payload(source: Source, part_size: int) -> typing.Iterator[PayloadSlice]:
    """
    Partitions the source into parts of exactly part_size bytes, the last one
    possibly shorter. The source is read once, front to back, so it may be a
    non-seekable stream; linear and tree hashes are computed while reading.

    :raises InvalidConfiguration: If the part size is not a power of two within bounds.
    """
    if source is None:
        raise TypeError("A byte source is required, got None.")
    validate_part_size(part_size)
    return _slices(_as_stream(source), part_size)


def _slices(stream: typing.BinaryIO, part_size: int) -> typing.Iterator[PayloadSlice]:
    index = 0
    offset = 0
    while True:
        payload = bytearray()
        tree_hash = TreeHash()
        while len(payload) < part_size:
            data = stream.read(min(CHUNK_SIZE, part_size - len(payload)))
            if not data:
                break
            payload.extend(data)
            tree_hash.update(data)
        if not payload:
            return
        part = Part(
            index=index,
            offset=offset,
            length=len(payload),
            linear_hash=tree_hash.linear_digest(),
            tree_hash=tree_hash.digest(),
        )
        yield PayloadSlice(part, bytes(payload))
        if len(payload) < part_size:
            return
        index += 1
        offset += len(payload)


def _as_stream(source: Source) -> typing.BinaryIO:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(source)
    return source


class SlicingStrategy(typing.Protocol):
    def part_size_for(self, length: typing.Optional[int]) -> int:
        ...

    def slice(self, source: Source, part_size: int) -> typing.Iterator[PayloadSlice]:
        ...


class BaseSlicingStrategy:
    """
    Uses a fixed part size when one is configured, otherwise derives it from
    the content length.
    """

    def __init__(self, part_size: typing.Optional[int] = None) -> None:
        self.part_size = validate_part_size(part_size) if part_size else None

    def part_size_for(self, length: typing.Optional[int]) -> int:
        if self.part_size:
            return self.part_size
        return calculate_part_size(length or 0)

    def slice(self, source: Source, part_size: int) -> typing.Iterator[PayloadSlice]:
        return slice_payload(source, part_size)


def content_length(source: Source) -> typing.Optional[int]:
    if isinstance(source, (bytes, bytearray)):
        return len(source)
    if isinstance(source, memoryview):
        return source.nbytes
    return None
