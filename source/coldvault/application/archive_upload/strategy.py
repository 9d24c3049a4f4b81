"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import logging
import typing
from concurrent import futures

from coldvault.application.archive_upload.session import MultipartUploadSession
from coldvault.application.chunking.slicer import (
    BaseSlicingStrategy,
    SlicingStrategy,
    Source,
    content_length,
)
from coldvault.application.config import Settings
from coldvault.application.glacier_service.glacier_apis import GlacierAPIs
from coldvault.application.hashing.tree_hash import build_tree_hash_from_parts
from coldvault.application.model.upload import Part
from coldvault.application.util.exceptions import InvalidState, TransportError

logger = logging.getLogger()

MAX_UPLOAD_WORKERS = 2

PartHashes = typing.Dict[int, typing.Tuple[int, bytes]]


class MultipartUploadStrategy(typing.Protocol):
    def execute(
        self, vault_name: str, source: Source, description: typing.Optional[str] = None
    ) -> str:
        ...


class SequentialMultipartUploadStrategy:
    """
    Uploads one part at a time, in index order, with a single request in
    flight. Any failure aborts the upload before it is re-raised.
    """

    def __init__(
        self,
        glacier: GlacierAPIs,
        slicing: typing.Optional[SlicingStrategy] = None,
    ) -> None:
        self.glacier = glacier
        self.slicing = slicing or BaseSlicingStrategy()

    def execute(
        self, vault_name: str, source: Source, description: typing.Optional[str] = None
    ) -> str:
        part_size = self.slicing.part_size_for(content_length(source))
        slices = self.slicing.slice(source, part_size)
        session = MultipartUploadSession.initiate(
            self.glacier, vault_name, part_size, description
        )
        hashes: PartHashes = {}
        try:
            for payload_slice in slices:
                _record(hashes, session.upload_part(payload_slice))
            return _complete(session, hashes)
        except BaseException:
            _abort(session)
            raise


class ConcurrentMultipartUploadStrategy:
    """
    Keeps up to max_workers parts in flight. Parts may be acknowledged out of
    order; the session records them by index, so the archive tree-hash is
    still assembled in index order.
    """

    def __init__(
        self,
        glacier: GlacierAPIs,
        slicing: typing.Optional[SlicingStrategy] = None,
        max_workers: int = MAX_UPLOAD_WORKERS,
    ) -> None:
        if max_workers < 1:
            raise ValueError("At least one upload worker is required.")
        self.glacier = glacier
        self.slicing = slicing or BaseSlicingStrategy()
        self.max_workers = max_workers

    def execute(
        self, vault_name: str, source: Source, description: typing.Optional[str] = None
    ) -> str:
        part_size = self.slicing.part_size_for(content_length(source))
        slices = self.slicing.slice(source, part_size)
        session = MultipartUploadSession.initiate(
            self.glacier, vault_name, part_size, description
        )
        hashes: PartHashes = {}
        try:
            with futures.ThreadPoolExecutor(
                max_workers=self.max_workers
            ) as upload_executor:
                upload_futures: typing.Set[futures.Future] = set()
                for payload_slice in slices:
                    upload_futures.add(
                        upload_executor.submit(session.upload_part, payload_slice)
                    )
                    if len(upload_futures) >= self.max_workers:
                        completed, upload_futures = futures.wait(
                            upload_futures, return_when=futures.FIRST_COMPLETED
                        )
                        for future in completed:
                            _record(hashes, future.result())
                for future in futures.as_completed(upload_futures):
                    _record(hashes, future.result())
            return _complete(session, hashes)
        except BaseException:
            _abort(session)
            raise


def _abort(session: MultipartUploadSession) -> None:
    # The failure that triggered the abort is the one the caller sees.
    try:
        session.abort()
    except TransportError:
        logger.exception(f"Failed to release upload {session.upload_id} after an error")


def _record(hashes: PartHashes, part: typing.Optional[Part]) -> None:
    if part is not None:
        hashes[part.index] = (part.length, part.tree_hash)


def _complete(session: MultipartUploadSession, hashes: PartHashes) -> str:
    if not hashes:
        raise InvalidState(session.upload_id, "empty", "complete")
    return session.complete(
        sum(length for length, _ in hashes.values()),
        build_tree_hash_from_parts({index: h for index, (_, h) in hashes.items()}),
    )


def create_upload_strategy(
    glacier: GlacierAPIs, settings: Settings
) -> MultipartUploadStrategy:
    slicing = BaseSlicingStrategy(settings.part_size)
    if settings.upload_workers > 1:
        logger.info(
            f"Uploading parts with {settings.upload_workers} concurrent workers"
        )
        return ConcurrentMultipartUploadStrategy(
            glacier, slicing, settings.upload_workers
        )
    return SequentialMultipartUploadStrategy(glacier, slicing)
