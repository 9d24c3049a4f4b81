"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import pytest

from coldvault.application.config import (
    DEFAULT_POLL_DEADLINE_IN_SEC,
    DEFAULT_POLL_INTERVAL_IN_SEC,
    Settings,
)
from coldvault.application.util.exceptions import InvalidConfiguration


def test_defaults() -> None:
    settings = Settings.from_environment({})
    assert settings == Settings()
    assert settings.account_id == "-"
    assert settings.part_size is None
    assert settings.poll_interval == DEFAULT_POLL_INTERVAL_IN_SEC
    assert settings.poll_deadline == DEFAULT_POLL_DEADLINE_IN_SEC
    assert settings.upload_workers == 1
    assert settings.mock_glacier is False


def test_from_environment() -> None:
    settings = Settings.from_environment(
        {
            "COLDVAULT_ACCOUNT_ID": "123456789012",
            "COLDVAULT_PART_SIZE": str(8 * 2**20),
            "COLDVAULT_POLL_INTERVAL_IN_SEC": "1",
            "COLDVAULT_POLL_BACKOFF_MULTIPLIER": "2",
            "COLDVAULT_POLL_MAX_INTERVAL_IN_SEC": "8",
            "COLDVAULT_POLL_DEADLINE_IN_SEC": "20",
            "COLDVAULT_UPLOAD_WORKERS": "2",
            "COLDVAULT_MOCK_GLACIER": "True",
        }
    )
    assert settings == Settings(
        account_id="123456789012",
        part_size=8 * 2**20,
        poll_interval=1,
        poll_backoff_multiplier=2,
        poll_max_interval=8,
        poll_deadline=20,
        upload_workers=2,
        mock_glacier=True,
    )


def test_empty_values_fall_back_to_defaults() -> None:
    assert Settings.from_environment({"COLDVAULT_PART_SIZE": ""}) == Settings()


@pytest.mark.parametrize(
    "environ",
    [
        {"COLDVAULT_PART_SIZE": "big"},
        {"COLDVAULT_PART_SIZE": str(3 * 2**20)},
        {"COLDVAULT_PART_SIZE": str(2**19)},
        {"COLDVAULT_POLL_INTERVAL_IN_SEC": "soon"},
        {"COLDVAULT_UPLOAD_WORKERS": "0"},
        {"COLDVAULT_POLL_INTERVAL_IN_SEC": "0"},
        {"COLDVAULT_POLL_INTERVAL_IN_SEC": "-5"},
        {"COLDVAULT_POLL_BACKOFF_MULTIPLIER": "0.5"},
        {"COLDVAULT_POLL_MAX_INTERVAL_IN_SEC": "60"},
        {"COLDVAULT_POLL_DEADLINE_IN_SEC": "0"},
    ],
)
def test_invalid_environment(environ: dict) -> None:
    with pytest.raises(InvalidConfiguration):
        Settings.from_environment(environ)


def test_settings_are_validated_on_construction() -> None:
    with pytest.raises(InvalidConfiguration):
        Settings(poll_interval=120, poll_max_interval=60)
    with pytest.raises(InvalidConfiguration):
        Settings(upload_workers=0)
    assert Settings(poll_interval=60, poll_max_interval=60).poll_max_interval == 60
