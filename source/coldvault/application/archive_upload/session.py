"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import logging
import threading
from typing import Dict, List, Optional

from coldvault.application.chunking.archive import validate_part_size
from coldvault.application.glacier_service.fallbacks import ErrorClass, classify
from coldvault.application.glacier_service.glacier_apis import GlacierAPIs
from coldvault.application.hashing.tree_hash import build_tree_hash_from_parts
from coldvault.application.model.upload import Part, PayloadSlice, UploadState
from coldvault.application.util.exceptions import (
    IntegrityMismatch,
    InvalidState,
    SizeMismatch,
    TransportError,
    VaultNotFound,
)
from coldvault.application.util.validators import (
    validate_description,
    validate_vault_name,
)

logger = logging.getLogger()


def _rejected_for(error: TransportError, keyword: str) -> bool:
    return (
        classify(error) is ErrorClass.BAD_REQUEST
        and keyword in error.body.get("Message", "").lower()
    )


class MultipartUploadSession:
    """
    OPEN -> COMPLETED or OPEN -> ABORTED. Parts are recorded only once the
    store has acknowledged them, keyed by part index, so the whole-archive
    tree-hash is always assembled in index order.
    """

    def __init__(
        self,
        glacier: GlacierAPIs,
        vault_name: str,
        upload_id: str,
        part_size: int,
    ) -> None:
        self.glacier = glacier
        self.vault_name = vault_name
        self.upload_id = upload_id
        self.part_size = part_size
        self.state = UploadState.OPEN
        self.archive_id: Optional[str] = None
        self._parts: Dict[int, Part] = {}
        self._released = False
        self._lock = threading.Lock()

    @classmethod
    def initiate(
        cls,
        glacier: GlacierAPIs,
        vault_name: str,
        part_size: int,
        description: Optional[str] = None,
    ) -> "MultipartUploadSession":
        validate_part_size(part_size)
        validate_vault_name(vault_name)
        validate_description(description)
        try:
            upload_id = glacier.initiate_multipart_upload(
                vault_name, part_size, description
            )
        except TransportError as error:
            if classify(error) is ErrorClass.NOT_FOUND:
                raise VaultNotFound(vault_name) from error
            raise
        logger.info(
            f"Initiated multipart upload {upload_id} in vault {vault_name} with part size {part_size}"
        )
        return cls(glacier, vault_name, upload_id, part_size)

    @property
    def parts(self) -> List[Part]:
        with self._lock:
            return [self._parts[index] for index in sorted(self._parts)]

    @property
    def size(self) -> int:
        return sum(part.length for part in self.parts)

    def _context(self, part: Optional[Part] = None) -> Dict[str, object]:
        context: Dict[str, object] = {
            "vault": self.vault_name,
            "upload": self.upload_id,
        }
        if part is not None:
            context["part"] = part.index
            context["range"] = str(part.range)
        return context

    def _require_open(self, operation: str) -> None:
        if self.state is not UploadState.OPEN:
            raise InvalidState(self.upload_id, self.state.value, operation)

    def upload_part(self, payload_slice: PayloadSlice) -> Optional[Part]:
        """
        Sends one part with its range and tree-hash headers.

        Returns the recorded part, or None when the session was aborted while
        the request was in flight; such a result is discarded.

        :raises IntegrityMismatch: If the store computed a different tree-hash. The
            session stays OPEN and the part can be sent again.
        :raises TransportError: For any other failure reported by the store.
        """
        part = payload_slice.part
        with self._lock:
            self._require_open("upload part to")
        if len(payload_slice.payload) != part.length:
            raise IntegrityMismatch(
                f"payload has {len(payload_slice.payload)} bytes but the part records {part.length}",
                self._context(part),
            )
        try:
            checksum = self.glacier.upload_multipart_part(
                self.vault_name,
                self.upload_id,
                part.range,
                part.checksum,
                payload_slice.payload,
            )
        except TransportError as error:
            if self._discard_if_aborted(part):
                return None
            if _rejected_for(error, "checksum"):
                raise IntegrityMismatch(
                    "the store rejected the part tree-hash", self._context(part)
                ) from error
            error.add_context(part=part.index)
            raise
        with self._lock:
            if self.state is UploadState.ABORTED:
                logger.warning(
                    f"Discarding part {part.index} of upload {self.upload_id}: the upload was aborted"
                )
                return None
            if checksum is not None and checksum != part.checksum:
                raise IntegrityMismatch(
                    f"the store computed {checksum} but the part hash is {part.checksum}",
                    self._context(part),
                )
            self._parts[part.index] = part
        logger.info(
            f"Uploaded part {part.index} ({part.range}) of upload {self.upload_id}"
        )
        return part

    def _discard_if_aborted(self, part: Part) -> bool:
        with self._lock:
            if self.state is UploadState.ABORTED:
                logger.warning(
                    f"Discarding failed part {part.index} of upload {self.upload_id}: the upload was aborted"
                )
                return True
        return False

    def verify_parts(self) -> bytes:
        """
        Checks that the recorded parts tile the archive: contiguous indices from
        zero, contiguous offsets, every part but the last exactly the part size.
        Returns the whole-archive tree-hash.
        """
        parts = self.parts
        offset = 0
        for position, part in enumerate(parts):
            if part.index != position:
                raise IntegrityMismatch(
                    f"part {position} is missing", self._context()
                )
            if part.offset != offset:
                raise IntegrityMismatch(
                    f"part {part.index} starts at {part.offset} instead of {offset}",
                    self._context(part),
                )
            last = position == len(parts) - 1
            if part.length <= 0 or part.length > self.part_size or (
                not last and part.length != self.part_size
            ):
                raise IntegrityMismatch(
                    f"part {part.index} has length {part.length} for part size {self.part_size}",
                    self._context(part),
                )
            offset += part.length
        return build_tree_hash_from_parts([part.tree_hash for part in parts])

    def complete(self, total_size: int, whole_tree_hash: bytes) -> str:
        """
        Finalizes the upload. The part records, the tree-hash and the size are
        all checked locally before anything is sent.

        :raises InvalidState: If the session is not OPEN or has no parts.
        :raises IntegrityMismatch: If the tree-hash disagrees, locally or remotely.
        :raises SizeMismatch: If the archive size disagrees, locally or remotely.
        """
        with self._lock:
            self._require_open("complete")
            if not self._parts:
                raise InvalidState(self.upload_id, "empty", "complete")
        tree_hash = self.verify_parts()
        if tree_hash != whole_tree_hash:
            raise IntegrityMismatch(
                f"parts hash to {tree_hash.hex()} but {whole_tree_hash.hex()} was given",
                self._context(),
            )
        size = self.size
        if size != total_size:
            raise SizeMismatch(total_size, size, self._context())
        try:
            response = self.glacier.complete_multipart_upload(
                self.vault_name, self.upload_id, total_size, tree_hash.hex()
            )
        except TransportError as error:
            if _rejected_for(error, "size"):
                raise SizeMismatch(total_size, size, self._context()) from error
            if _rejected_for(error, "checksum"):
                raise IntegrityMismatch(
                    "the store rejected the archive tree-hash", self._context()
                ) from error
            raise
        returned = response.get("checksum")
        if returned is not None and returned != tree_hash.hex():
            raise IntegrityMismatch(
                f"the store computed {returned} for the archive", self._context()
            )
        with self._lock:
            self.state = UploadState.COMPLETED
            self.archive_id = response["archiveId"]
        logger.info(
            f"Completed upload {self.upload_id} as archive {self.archive_id} ({total_size} bytes)"
        )
        return response["archiveId"]

    def abort(self) -> None:
        """
        Moves the session to ABORTED, then releases the upload on the store.
        ABORTED is final: parts racing the abort are discarded even when the
        release fails. Aborting twice is a no-op once the store has released
        the upload; after a failed release, aborting again retries it.

        :raises InvalidState: If the session is COMPLETED.
        :raises TransportError: If the store failed to release the upload. The
            session stays ABORTED.
        """
        with self._lock:
            if self.state is UploadState.ABORTED and self._released:
                return
            if self.state is UploadState.COMPLETED:
                raise InvalidState(self.upload_id, self.state.value, "abort")
            self.state = UploadState.ABORTED
        try:
            released = self.glacier.abort_multipart_upload(
                self.vault_name, self.upload_id
            )
        except TransportError:
            logger.error(
                f"Upload {self.upload_id} is aborted but the store did not release it"
            )
            raise
        with self._lock:
            self._released = True
        if not released:
            logger.info(f"Upload {self.upload_id} was already released by the store")
        logger.info(f"Aborted upload {self.upload_id} in vault {self.vault_name}")
