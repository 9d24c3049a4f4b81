"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import pytest

from coldvault.application.util.exceptions import InvalidConfiguration
from coldvault.application.util.validators import (
    validate_description,
    validate_payload_size,
    validate_vault_name,
)


@pytest.mark.parametrize("name", ["vault1", "a", "My-Vault_2.backup", "x" * 255])
def test_valid_vault_names(name: str) -> None:
    assert validate_vault_name(name) == name


@pytest.mark.parametrize("name", ["", "x" * 256, "vault/1", "vault 1", "vaült"])
def test_invalid_vault_names(name: str) -> None:
    with pytest.raises(InvalidConfiguration):
        validate_vault_name(name)


@pytest.mark.parametrize("description", [None, "", "test.txt", "~" * 1024])
def test_valid_descriptions(description: str) -> None:
    assert validate_description(description) == description


@pytest.mark.parametrize("description", ["a" * 1025, "tab\tseparated", "naïve"])
def test_invalid_descriptions(description: str) -> None:
    with pytest.raises(InvalidConfiguration):
        validate_description(description)


def test_payload_size() -> None:
    assert validate_payload_size(2**32) == 2**32
    with pytest.raises(InvalidConfiguration):
        validate_payload_size(2**32 + 1)
    with pytest.raises(InvalidConfiguration):
        validate_payload_size(None)
