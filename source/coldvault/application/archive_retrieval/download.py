"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import threading
from typing import TYPE_CHECKING, Optional

from coldvault.application.config import Settings
from coldvault.application.glacier_service.glacier_apis import GlacierAPIs
from coldvault.application.hashing.tree_hash import TreeHash
from coldvault.application.job_polling.poller import JobPoller
from coldvault.application.model.job import ArchiveRetrievalJobRequest, Job, JobStatus
from coldvault.application.util.content_range import ContentRange
from coldvault.application.util.exceptions import (
    AccessViolation,
    IntegrityMismatch,
    JobFailed,
)

if TYPE_CHECKING:
    from mypy_boto3_glacier.type_defs import GetJobOutputOutputTypeDef
else:
    GetJobOutputOutputTypeDef = object


class GlacierDownload:
    def __init__(
        self,
        glacier: GlacierAPIs,
        job: Job,
        byte_range: Optional[ContentRange] = None,
    ) -> None:
        self.job = job
        self.byte_range = byte_range
        self.response: GetJobOutputOutputTypeDef = glacier.get_job_output(
            job.vault_name, job.job_id, byte_range
        )
        self.accessed = False

    def read(self) -> bytes:
        if self.accessed:
            raise AccessViolation()
        self.accessed = True
        return self.response["body"].read()

    def checksum(self) -> Optional[str]:
        return self.response.get("checksum")

    def read_verified(self) -> bytes:
        """
        Reads the job output and checks it against the tree-hash reported by
        the store. Ranges that are not tree-hash aligned come without a
        checksum and are returned unchecked.

        :raises IntegrityMismatch: If the tree-hash of the data differs from the checksum.
        """
        data = self.read()
        expected = self.checksum()
        if expected is None:
            return data
        tree_hash = TreeHash()
        tree_hash.update(data)
        if tree_hash.hexdigest() != expected:
            raise IntegrityMismatch(
                f"downloaded data hashes to {tree_hash.hexdigest()} but the store reported {expected}",
                {"vault": self.job.vault_name, "job": self.job.job_id, "range": self.byte_range},
            )
        return data


def retrieve_archive(
    poller: JobPoller,
    vault_name: str,
    archive_id: str,
    settings: Settings,
    cancel_event: Optional[threading.Event] = None,
) -> bytes:
    """
    Submits an archive retrieval job, waits for it, and returns the verified
    archive content.

    :raises JobFailed: If the retrieval job ends in the FAILED status.
    """
    job = poller.submit(vault_name, ArchiveRetrievalJobRequest(archive_id))
    job = poller.await_with_settings(job, settings, cancel_event)
    if job.status is not JobStatus.SUCCEEDED:
        raise JobFailed(job.job_id, job.status_message)
    return GlacierDownload(poller.glacier, job).read_verified()
