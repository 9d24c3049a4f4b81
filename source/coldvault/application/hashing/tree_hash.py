"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import hashlib
import typing

CHUNK_SIZE = 2**20


def chunk_digest(chunk: bytes) -> bytes:
    return hashlib.sha256(_require_bytes(chunk)).digest()


def linear_digest(data: bytes) -> bytes:
    return hashlib.sha256(_require_bytes(data)).digest()


def combine(left: bytes, right: typing.Optional[bytes] = None) -> bytes:
    """
    Parent node of the tree-hash. An unpaired node is promoted unchanged,
    so combine(h) == h, and the order of the children matters.
    """
    if right is None:
        return _require_bytes(left)
    return hashlib.sha256(_require_bytes(left) + _require_bytes(right)).digest()


def reduce_hashes(hashes: typing.Iterable[bytes]) -> bytes:
    """
    Folds a layer of digests into the tree root.
    https://docs.aws.amazon.com/amazonglacier/latest/dev/checksum-calculations.html
    """
    level = list(hashes)
    if not level:
        raise ValueError("At least one hash is needed to build a tree-hash.")
    while len(level) > 1:
        level = [
            combine(level[i], level[i + 1] if i + 1 < len(level) else None)
            for i in range(0, len(level), 2)
        ]
    return level[0]


def build_tree_hash_from_parts(
    part_hashes: typing.Union[typing.Mapping[int, bytes], typing.Sequence[bytes]]
) -> bytes:
    """
    Whole-archive tree-hash: every part tree-hash is a leaf one level up,
    combined in part index order.
    """
    if isinstance(part_hashes, typing.Mapping):
        return reduce_hashes(part_hashes[index] for index in sorted(part_hashes))
    return reduce_hashes(part_hashes)


class TreeHash:
    def __init__(self, chunk_size: int = CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("Chunk size has to be positive.")
        self.chunk_size = chunk_size
        self.hashes: typing.List[bytes] = []
        self.size = 0
        self._pending = bytearray()
        self._linear = hashlib.sha256()

    def update(self, data: bytes) -> None:
        _require_bytes(data)
        self._linear.update(data)
        self.size += len(data)
        self._pending.extend(data)
        while len(self._pending) >= self.chunk_size:
            self.hashes.append(chunk_digest(bytes(self._pending[: self.chunk_size])))
            del self._pending[: self.chunk_size]

    def _leaves(self) -> typing.List[bytes]:
        if self._pending:
            return self.hashes + [chunk_digest(bytes(self._pending))]
        return self.hashes

    def digest(self) -> bytes:
        leaves = self._leaves()
        if not leaves:
            return b""
        return reduce_hashes(leaves)

    def hexdigest(self) -> str:
        return self.digest().hex()

    def linear_digest(self) -> bytes:
        return self._linear.digest()


def _require_bytes(data: typing.Any) -> typing.Any:
    if data is None:
        raise TypeError("A byte source is required, got None.")
    return data
