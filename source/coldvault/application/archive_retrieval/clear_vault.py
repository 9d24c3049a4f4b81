"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import logging
import threading
from typing import Optional

from coldvault.application.archive_retrieval.download import GlacierDownload
from coldvault.application.archive_retrieval.inventory import parse_inventory
from coldvault.application.config import Settings
from coldvault.application.glacier_service.glacier_apis import GlacierAPIs
from coldvault.application.job_polling.poller import JobPoller
from coldvault.application.model.job import InventoryRetrievalJobRequest

logger = logging.getLogger()


class ClearVaultStrategy:
    """
    Deletes every archive listed in a fresh inventory of the vault. Archives
    that are already gone are skipped.
    """

    def __init__(self, glacier: GlacierAPIs, poller: JobPoller, settings: Settings) -> None:
        self.glacier = glacier
        self.poller = poller
        self.settings = settings

    def execute(
        self, vault_name: str, cancel_event: Optional[threading.Event] = None
    ) -> int:
        job = self.poller.submit(vault_name, InventoryRetrievalJobRequest())
        if not self.poller.wait_for_success(job, self.settings, cancel_event):
            logger.error(f"Inventory job {job.job_id} of vault {vault_name} did not succeed")
            return 0
        archives = parse_inventory(GlacierDownload(self.glacier, job).read())
        deleted = 0
        for archive in archives:
            if self.glacier.delete_archive(vault_name, archive.archive_id):
                deleted += 1
            else:
                logger.info(f"Archive {archive.archive_id} was already deleted")
        logger.info(f"Deleted {deleted} archives from vault {vault_name}")
        return deleted
