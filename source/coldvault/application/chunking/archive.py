"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import math
from typing import List

from coldvault.application.util.exceptions import InvalidConfiguration

MIN_PART_SIZE = 2**20
MAX_PART_SIZE = 2**32
MAX_NUMBER_OF_PARTS = 10000

# (part size in MiB / number of parts) ratio used when no part size is given
DEFAULT_PART_RATIO = 0.32


def is_power_of_two(n: int) -> bool:
    return (n != 0) and (n & (n - 1) == 0)


def validate_part_size(part_size: int) -> int:
    if not isinstance(part_size, int) or isinstance(part_size, bool):
        raise InvalidConfiguration(f"part size must be an integer, got {part_size!r}")
    if not is_power_of_two(part_size):
        raise InvalidConfiguration(
            f"part size {part_size} should be a power of 2 to be megabyte and treehash aligned"
        )
    if part_size < MIN_PART_SIZE or part_size > MAX_PART_SIZE:
        raise InvalidConfiguration(
            f"part size {part_size} must be between {MIN_PART_SIZE} and {MAX_PART_SIZE} bytes"
        )
    return part_size


def calculate_part_size(archive_size: int, ratio: float = DEFAULT_PART_RATIO) -> int:
    """
    Picks the part size for an archive of the given length so that the part size
    in MiB grows with the square root of the archive size, rounded up to a power of two.
    """
    size_in_mb = archive_size // MIN_PART_SIZE + 1
    target_in_mb = int(math.sqrt(ratio * size_in_mb))
    part_size_in_mb = 1 << max(target_in_mb - 1, 0).bit_length()
    part_size = part_size_in_mb * MIN_PART_SIZE
    while part_size < MAX_PART_SIZE and archive_size > part_size * MAX_NUMBER_OF_PARTS:
        part_size <<= 1
    return max(MIN_PART_SIZE, min(part_size, MAX_PART_SIZE))


def generate_chunk_array(archive_size: int, chunk_size: int) -> List[str]:
    """
    The range to download must be megabyte and treehash aligned
    in order to receive checksum values when downloading.
    https://docs.aws.amazon.com/amazonglacier/latest/dev/checksum-calculations-range.html#tree-hash-algorithm
    """

    if not is_power_of_two(chunk_size):
        raise InvalidConfiguration(
            "chunk size should be a power of 2 to be megabyte and treehash aligned"
        )

    chunks = []
    start_index = 0
    end_index = min(archive_size, chunk_size) - 1
    while end_index < archive_size - 1:
        chunks.append(f"{start_index}-{end_index}")
        start_index = end_index + 1
        end_index = min(start_index + chunk_size - 1, archive_size - 1)
    chunks.append(f"{start_index}-{end_index}")
    return chunks
