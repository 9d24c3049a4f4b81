"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

from coldvault.application.chunking.archive import validate_part_size
from coldvault.application.util.exceptions import InvalidConfiguration

T = TypeVar("T")

DEFAULT_POLL_INTERVAL_IN_SEC = 15 * 60
DEFAULT_POLL_BACKOFF_MULTIPLIER = 2.0
DEFAULT_POLL_MAX_INTERVAL_IN_SEC = 60 * 60
DEFAULT_POLL_DEADLINE_IN_SEC = 24 * 60 * 60


def _read(
    environ: Mapping[str, str], name: str, parse: Callable[[str], T], default: T
) -> T:
    value = environ.get(name)
    if value is None or value == "":
        return default
    try:
        return parse(value)
    except ValueError:
        raise InvalidConfiguration(f"{name}={value!r} could not be parsed")


@dataclass(frozen=True)
class Settings:
    account_id: str = "-"
    part_size: Optional[int] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL_IN_SEC
    poll_backoff_multiplier: float = DEFAULT_POLL_BACKOFF_MULTIPLIER
    poll_max_interval: float = DEFAULT_POLL_MAX_INTERVAL_IN_SEC
    poll_deadline: float = DEFAULT_POLL_DEADLINE_IN_SEC
    upload_workers: int = 1
    mock_glacier: bool = False

    def __post_init__(self) -> None:
        if self.part_size is not None:
            validate_part_size(self.part_size)
        if self.upload_workers < 1:
            raise InvalidConfiguration("upload workers must be at least 1")
        if self.poll_interval <= 0:
            raise InvalidConfiguration("poll interval must be positive")
        if self.poll_backoff_multiplier < 1:
            raise InvalidConfiguration("poll backoff multiplier must be at least 1")
        if self.poll_max_interval < self.poll_interval:
            raise InvalidConfiguration(
                f"poll max interval {self.poll_max_interval} is below the poll interval {self.poll_interval}"
            )
        if self.poll_deadline <= 0:
            raise InvalidConfiguration("poll deadline must be positive")

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        environ = os.environ if environ is None else environ
        return cls(
            account_id=environ.get("COLDVAULT_ACCOUNT_ID") or "-",
            part_size=_read(environ, "COLDVAULT_PART_SIZE", int, None),
            poll_interval=_read(
                environ,
                "COLDVAULT_POLL_INTERVAL_IN_SEC",
                float,
                DEFAULT_POLL_INTERVAL_IN_SEC,
            ),
            poll_backoff_multiplier=_read(
                environ,
                "COLDVAULT_POLL_BACKOFF_MULTIPLIER",
                float,
                DEFAULT_POLL_BACKOFF_MULTIPLIER,
            ),
            poll_max_interval=_read(
                environ,
                "COLDVAULT_POLL_MAX_INTERVAL_IN_SEC",
                float,
                DEFAULT_POLL_MAX_INTERVAL_IN_SEC,
            ),
            poll_deadline=_read(
                environ,
                "COLDVAULT_POLL_DEADLINE_IN_SEC",
                float,
                DEFAULT_POLL_DEADLINE_IN_SEC,
            ),
            upload_workers=_read(environ, "COLDVAULT_UPLOAD_WORKERS", int, 1),
            mock_glacier=environ.get("COLDVAULT_MOCK_GLACIER", "").lower() == "true",
        )
