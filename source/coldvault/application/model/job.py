"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

logger = logging.getLogger()


class JobStatus(Enum):
    IN_PROGRESS = "InProgress"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    @property
    def terminal(self) -> bool:
        return self is not JobStatus.IN_PROGRESS


class JobKind(Enum):
    ARCHIVE_RETRIEVAL = "ArchiveRetrieval"
    INVENTORY_RETRIEVAL = "InventoryRetrieval"

    @property
    def job_type(self) -> str:
        return {
            JobKind.ARCHIVE_RETRIEVAL: "archive-retrieval",
            JobKind.INVENTORY_RETRIEVAL: "inventory-retrieval",
        }[self]


@dataclass(frozen=True)
class PollAttempt:
    attempt: int
    elapsed: float
    next_delay: Optional[float]


@dataclass
class Job:
    job_id: str
    vault_name: str
    kind: JobKind
    status: JobStatus = JobStatus.IN_PROGRESS
    status_message: Optional[str] = None
    archive_id: Optional[str] = None
    completion_date: Optional[str] = None
    result: Dict[str, Any] = field(default_factory=dict)
    # polls of the await_completion call that produced this record
    attempts: List[PollAttempt] = field(default_factory=list)

    @classmethod
    def from_description(cls, vault_name: str, description: Dict[str, Any]) -> "Job":
        return cls(
            job_id=description["JobId"],
            vault_name=vault_name,
            kind=JobKind(description["Action"]),
            status=JobStatus(description["StatusCode"]),
            status_message=description.get("StatusMessage"),
            archive_id=description.get("ArchiveId"),
            completion_date=description.get("CompletionDate"),
            result={
                key: description[key]
                for key in (
                    "ArchiveSizeInBytes",
                    "ArchiveSHA256TreeHash",
                    "InventorySizeInBytes",
                    "RetrievalByteRange",
                    "SHA256TreeHash",
                )
                if description.get(key) is not None
            },
        )

    def check_job_success_status(self) -> bool:
        result = self.status is JobStatus.SUCCEEDED
        result_str = "succeeded" if result else "has not succeeded"
        getattr(logger, "debug" if result else "error")(
            f"The job with job-id {self.job_id} {result_str}"
        )
        return result

    def check_still_in_progress(self) -> bool:
        if self.status is JobStatus.IN_PROGRESS:
            logger.info(f"The job with job-id {self.job_id} is still in progress")
            return True
        return False


@dataclass(frozen=True)
class ArchiveRetrievalJobRequest:
    archive_id: str
    description: Optional[str] = None
    byte_range: Optional[str] = None
    tier: Optional[str] = None
    sns_topic: Optional[str] = None

    kind: ClassVar[JobKind] = JobKind.ARCHIVE_RETRIEVAL

    def job_parameters(self) -> Dict[str, Any]:
        parameters: Dict[str, Any] = {
            "Type": self.kind.job_type,
            "ArchiveId": self.archive_id,
        }
        if self.description:
            parameters["Description"] = self.description
        if self.byte_range:
            parameters["RetrievalByteRange"] = self.byte_range
        if self.tier:
            parameters["Tier"] = self.tier
        if self.sns_topic:
            parameters["SNSTopic"] = self.sns_topic
        return parameters


@dataclass(frozen=True)
class InventoryRetrievalJobRequest:
    format: str = "JSON"
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    limit: Optional[int] = None
    marker: Optional[str] = None
    description: Optional[str] = None
    sns_topic: Optional[str] = None

    kind: ClassVar[JobKind] = JobKind.INVENTORY_RETRIEVAL

    def job_parameters(self) -> Dict[str, Any]:
        parameters: Dict[str, Any] = {
            "Type": self.kind.job_type,
            "Format": self.format,
        }
        retrieval: Dict[str, str] = {}
        if self.start_date:
            retrieval["StartDate"] = self.start_date
        if self.end_date:
            retrieval["EndDate"] = self.end_date
        if self.limit is not None:
            retrieval["Limit"] = str(self.limit)
        if self.marker:
            retrieval["Marker"] = self.marker
        if retrieval:
            parameters["InventoryRetrievalParameters"] = retrieval
        if self.description:
            parameters["Description"] = self.description
        if self.sns_topic:
            parameters["SNSTopic"] = self.sns_topic
        return parameters
