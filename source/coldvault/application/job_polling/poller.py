"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import logging
import threading
import time
from typing import Callable, List, Optional, Union

from coldvault.application.config import Settings
from coldvault.application.glacier_service.fallbacks import ErrorClass, classify
from coldvault.application.glacier_service.glacier_apis import GlacierAPIs
from coldvault.application.model.job import (
    ArchiveRetrievalJobRequest,
    InventoryRetrievalJobRequest,
    Job,
    JobStatus,
    PollAttempt,
)
from coldvault.application.util.exceptions import (
    PollCancelled,
    PollTimeout,
    TransportError,
    VaultNotFound,
)

logger = logging.getLogger()

MIN_POLL_INTERVAL_IN_SEC = 1.0

JobRequest = Union[ArchiveRetrievalJobRequest, InventoryRetrievalJobRequest]


class JobPoller:
    """
    Submits retrieval jobs and waits for them to reach a terminal status.

    Usage example:
        poller = JobPoller(GlacierAPIsFactory.create_apis())
        job = poller.submit("vault1", InventoryRetrievalJobRequest())
        job = poller.await_completion(job, 900, 2, 3600, 86400)

    The clock and sleep callables are injectable so that the waiting can be
    driven by a fake clock. Without an injected sleep, waiting happens on the
    cancel event when one is given, so cancellation wakes the poller at once.
    """

    def __init__(
        self,
        glacier: GlacierAPIs,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.glacier = glacier
        self.clock = clock
        self.sleep = sleep

    def submit(self, vault_name: str, job_request: JobRequest) -> Job:
        try:
            job_id = self.glacier.initiate_job(vault_name, job_request.job_parameters())
        except TransportError as error:
            if classify(error) is ErrorClass.NOT_FOUND and not getattr(
                job_request, "archive_id", None
            ):
                raise VaultNotFound(vault_name) from error
            raise
        logger.info(
            f"Submitted {job_request.kind.value} job {job_id} in vault {vault_name}"
        )
        return Job(job_id=job_id, vault_name=vault_name, kind=job_request.kind)

    def describe(self, job: Job) -> Job:
        description = self.glacier.describe_job(job.vault_name, job.job_id)
        if description is None:
            raise TransportError(
                404,
                "ResourceNotFoundException",
                {"Message": f"Job {job.job_id} is not known to the store"},
                "describe_job",
                {"vault": job.vault_name, "job": job.job_id},
            )
        return Job.from_description(job.vault_name, description)

    def _wait(self, delay: float, cancel_event: Optional[threading.Event]) -> None:
        if self.sleep is not None:
            self.sleep(delay)
        elif cancel_event is not None:
            cancel_event.wait(delay)
        else:
            time.sleep(delay)

    def await_completion(
        self,
        job: Job,
        poll_interval: float,
        backoff_multiplier: float,
        max_interval: float,
        deadline: float,
        cancel_event: Optional[threading.Event] = None,
    ) -> Job:
        """
        Waits the current interval, then queries the job, growing the interval
        by backoff_multiplier up to max_interval after every wait. Returns the
        job once it has SUCCEEDED or FAILED, with the polls of this call in
        its attempts.

        :raises PollTimeout: If the job is still in progress once deadline seconds
            have elapsed. The job itself is left running on the store.
        :raises PollCancelled: If cancel_event is set. The job is left running.
        """
        interval = max(poll_interval, MIN_POLL_INTERVAL_IN_SEC)
        multiplier = max(backoff_multiplier, 1.0)
        max_interval = max(max_interval, interval)
        attempts: List[PollAttempt] = []
        start = self.clock()
        while True:
            self._wait(interval, cancel_event)
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Stopped polling job {job.job_id}")
                raise PollCancelled(job.job_id, len(attempts))
            job = self.describe(job)
            elapsed = self.clock() - start
            if job.status.terminal:
                attempts.append(PollAttempt(len(attempts) + 1, elapsed, None))
                job.attempts = attempts
                job.check_job_success_status()
                return job
            if elapsed >= deadline:
                attempts.append(PollAttempt(len(attempts) + 1, elapsed, None))
                raise PollTimeout(job.job_id, len(attempts), elapsed)
            interval = min(interval * multiplier, max_interval)
            attempts.append(PollAttempt(len(attempts) + 1, elapsed, interval))
            job.check_still_in_progress()

    def await_with_settings(
        self,
        job: Job,
        settings: Settings,
        cancel_event: Optional[threading.Event] = None,
    ) -> Job:
        return self.await_completion(
            job,
            settings.poll_interval,
            settings.poll_backoff_multiplier,
            settings.poll_max_interval,
            settings.poll_deadline,
            cancel_event,
        )

    def wait_for_success(
        self,
        job: Job,
        settings: Settings,
        cancel_event: Optional[threading.Event] = None,
    ) -> bool:
        # Avoid waiting if the job doesn't exist
        if self.glacier.describe_job(job.vault_name, job.job_id) is None:
            logger.info(f"Cannot find the job {job.job_id} in vault {job.vault_name}")
            return False
        job = self.await_with_settings(job, settings, cancel_event)
        return job.status is JobStatus.SUCCEEDED
