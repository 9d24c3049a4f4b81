"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Vault:
    name: str
    arn: str
    creation_date: str
    size_in_bytes: int
    number_of_archives: int
    last_inventory_date: Optional[str] = None

    @classmethod
    def from_description(cls, description: Dict[str, Any]) -> "Vault":
        return cls(
            name=description["VaultName"],
            arn=description["VaultARN"],
            creation_date=str(description["CreationDate"]),
            size_in_bytes=int(description.get("SizeInBytes") or 0),
            number_of_archives=int(description.get("NumberOfArchives") or 0),
            last_inventory_date=description.get("LastInventoryDate"),
        )


@dataclass(frozen=True)
class ArchiveMetadata:
    archive_id: str
    description: str
    creation_date: str
    size: int
    sha256_tree_hash: str

    @classmethod
    def from_inventory_record(cls, record: Dict[str, Any]) -> "ArchiveMetadata":
        return cls(
            archive_id=record["ArchiveId"],
            description=record.get("ArchiveDescription") or "",
            creation_date=record["CreationDate"],
            size=int(record["Size"]),
            sha256_tree_hash=record["SHA256TreeHash"],
        )
