"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import json
from typing import List

from coldvault.application.model.vault import ArchiveMetadata


def parse_inventory(body: bytes) -> List[ArchiveMetadata]:
    """Reads the archive list out of a JSON inventory retrieval output."""
    inventory = json.loads(body.decode("utf-8"))
    return [
        ArchiveMetadata.from_inventory_record(record)
        for record in inventory.get("ArchiveList", [])
    ]
