"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import pytest
from typing import List

from coldvault.application.chunking.archive import (
    MAX_NUMBER_OF_PARTS,
    MAX_PART_SIZE,
    MIN_PART_SIZE,
    calculate_part_size,
    generate_chunk_array,
    is_power_of_two,
    validate_part_size,
)
from coldvault.application.util.exceptions import InvalidConfiguration


def test_generate_chunk_array_size_is_not_power_of_two() -> None:
    with pytest.raises(InvalidConfiguration):
        generate_chunk_array(100, 10)


@pytest.mark.parametrize(
    "archive_size, chunk_size, expected_chunks",
    [
        (384, 128, ["0-127", "128-255", "256-383"]),
        (100, 128, ["0-99"]),
        (128, 128, ["0-127"]),
        (547, 128, ["0-127", "128-255", "256-383", "384-511", "512-546"]),
    ],
)
def test_generate_chunk_array(
    archive_size: int,
    chunk_size: int,
    expected_chunks: List[str],
) -> None:
    assert expected_chunks == generate_chunk_array(archive_size, chunk_size)


@pytest.mark.parametrize("n, expected", [(1, True), (2**20, True), (0, False), (3, False), (2**20 + 2**19, False)])
def test_is_power_of_two(n: int, expected: bool) -> None:
    assert is_power_of_two(n) is expected


@pytest.mark.parametrize("part_size", [MIN_PART_SIZE, 2**22, MAX_PART_SIZE])
def test_validate_part_size_accepts_bounds(part_size: int) -> None:
    assert validate_part_size(part_size) == part_size


@pytest.mark.parametrize(
    "part_size", [0, 3 * 2**20, MIN_PART_SIZE // 2, MAX_PART_SIZE * 2, -(2**20)]
)
def test_validate_part_size_rejects(part_size: int) -> None:
    with pytest.raises(InvalidConfiguration):
        validate_part_size(part_size)


@pytest.mark.parametrize(
    "archive_size, expected_part_size",
    [
        (0, MIN_PART_SIZE),
        (10 * 2**20, MIN_PART_SIZE),
        (100 * 2**20, 8 * 2**20),
        (2**30, 32 * 2**20),
    ],
)
def test_calculate_part_size(archive_size: int, expected_part_size: int) -> None:
    assert calculate_part_size(archive_size) == expected_part_size


def test_calculate_part_size_respects_part_count_limit() -> None:
    archive_size = 2**40
    part_size = calculate_part_size(archive_size)
    assert is_power_of_two(part_size)
    assert archive_size / part_size <= MAX_NUMBER_OF_PARTS
