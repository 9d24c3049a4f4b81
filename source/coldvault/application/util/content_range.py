"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import re
from dataclasses import dataclass

RANGE_PATTERN = re.compile(r"^(\d+)-(\d+)$")


@dataclass(frozen=True)
class ContentRange:
    """Inclusive byte range, as used by the Content-Range header of an upload part."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError("The start of a range cannot be negative.")
        if self.end < self.start:
            raise ValueError("The end of a range cannot be lower than its start.")

    @classmethod
    def from_string(cls, content_range: str) -> "ContentRange":
        match = RANGE_PATTERN.match(content_range or "")
        if match is None:
            raise ValueError(
                "The range should be two numbers separated by a hyphen (start-end)."
            )
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def from_part_number(cls, part_number: int, part_size: int) -> "ContentRange":
        if part_number < 0:
            raise ValueError("The part number cannot be negative.")
        if part_size <= 0:
            raise ValueError("The part size has to be positive.")
        start = part_number * part_size
        return cls(start, start + part_size - 1)

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def header(self) -> str:
        return f"bytes {self.start}-{self.end}/*"

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"
