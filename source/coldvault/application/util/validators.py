"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import re
from typing import Optional

from coldvault.application.util.exceptions import InvalidConfiguration

MAX_VAULT_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1024
MAX_SINGLE_UPLOAD_SIZE = 2**32

VAULT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")
DESCRIPTION_PATTERN = re.compile(r"^[\x20-\x7e]*$")


def validate_vault_name(vault_name: str) -> str:
    if not vault_name or len(vault_name) > MAX_VAULT_NAME_LENGTH:
        raise InvalidConfiguration(
            f"vault name can't be empty and must be 1 to {MAX_VAULT_NAME_LENGTH} characters long"
        )
    if not VAULT_NAME_PATTERN.match(vault_name):
        raise InvalidConfiguration(
            "vault name should contain only ASCII letters and numbers, underscores, hyphens, or periods"
        )
    return vault_name


def validate_description(description: Optional[str]) -> Optional[str]:
    if not description:
        return description
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidConfiguration(
            f"description can't be longer than {MAX_DESCRIPTION_LENGTH} characters but was {len(description)}"
        )
    if not DESCRIPTION_PATTERN.match(description):
        raise InvalidConfiguration(
            "description should have ASCII values between 32 and 126"
        )
    return description


def validate_payload_size(size: Optional[int]) -> int:
    if size is None:
        raise InvalidConfiguration("content length must be set")
    if size > MAX_SINGLE_UPLOAD_SIZE:
        raise InvalidConfiguration(
            f"max content size is {MAX_SINGLE_UPLOAD_SIZE} bytes but was {size}"
        )
    return size
