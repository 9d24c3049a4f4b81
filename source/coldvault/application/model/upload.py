"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from dataclasses import dataclass
from enum import Enum

from coldvault.application.util.content_range import ContentRange


class UploadState(Enum):
    OPEN = "Open"
    COMPLETED = "Completed"
    ABORTED = "Aborted"

    @property
    def terminal(self) -> bool:
        return self is not UploadState.OPEN


@dataclass(frozen=True)
class Part:
    index: int
    offset: int
    length: int
    linear_hash: bytes
    tree_hash: bytes

    @property
    def range(self) -> ContentRange:
        return ContentRange(self.offset, self.offset + self.length - 1)

    @property
    def checksum(self) -> str:
        return self.tree_hash.hex()


@dataclass(frozen=True)
class PayloadSlice:
    part: Part
    payload: bytes
