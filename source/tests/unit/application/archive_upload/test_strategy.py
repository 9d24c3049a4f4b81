"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import io
import logging
import os
import threading
import time
from typing import Any

import pytest
from botocore.exceptions import ClientError

from coldvault.application.archive_upload.strategy import (
    ConcurrentMultipartUploadStrategy,
    SequentialMultipartUploadStrategy,
    create_upload_strategy,
)
from coldvault.application.chunking.slicer import BaseSlicingStrategy
from coldvault.application.config import Settings
from coldvault.application.glacier_service.glacier_apis import GlacierAPIs
from coldvault.application.mocking.mock_glacier_apis import MockGlacierAPIs
from coldvault.application.util.exceptions import (
    IntegrityMismatch,
    InvalidState,
    TransportError,
    VaultNotFound,
)

MiB = 2**20


def test_sequential_upload(glacier: GlacierAPIs, mock_glacier: MockGlacierAPIs) -> None:
    data = os.urandom(3 * MiB + MiB // 2)
    strategy = SequentialMultipartUploadStrategy(glacier, BaseSlicingStrategy(MiB))
    archive_id = strategy.execute("vault1", data, "backup.tar")
    archive = mock_glacier.vaults["vault1"]["archives"][archive_id]
    assert archive["body"] == data
    assert archive["ArchiveDescription"] == "backup.tar"
    assert mock_glacier.calls.count("upload_multipart_part") == 4
    assert mock_glacier.uploads == {}


def test_sequential_upload_from_stream(
    glacier: GlacierAPIs, mock_glacier: MockGlacierAPIs
) -> None:
    data = os.urandom(2 * MiB + 1)
    strategy = SequentialMultipartUploadStrategy(glacier, BaseSlicingStrategy(MiB))
    archive_id = strategy.execute("vault1", io.BytesIO(data))
    assert mock_glacier.vaults["vault1"]["archives"][archive_id]["body"] == data


def test_sequential_upload_calculates_part_size(
    glacier: GlacierAPIs, mock_glacier: MockGlacierAPIs
) -> None:
    archive_id = SequentialMultipartUploadStrategy(glacier).execute("vault1", b"abc")
    assert mock_glacier.vaults["vault1"]["archives"][archive_id]["Size"] == 3


def test_failed_part_aborts_upload(mock_glacier: MockGlacierAPIs) -> None:
    uploads = []
    original = mock_glacier.upload_multipart_part

    def failing_second_part(**kwargs: Any) -> Any:
        uploads.append(kwargs["range"])
        if len(uploads) == 2:
            return original(**{**kwargs, "checksum": "0" * 64})
        return original(**kwargs)

    mock_glacier.upload_multipart_part = failing_second_part  # type: ignore
    strategy = SequentialMultipartUploadStrategy(
        GlacierAPIs(mock_glacier), BaseSlicingStrategy(MiB)
    )
    with pytest.raises(Exception):
        strategy.execute("vault1", os.urandom(3 * MiB))
    assert uploads == ["bytes 0-1048575/*", "bytes 1048576-2097151/*"]
    assert mock_glacier.uploads == {}
    assert "abort_multipart_upload" in mock_glacier.calls


@pytest.mark.parametrize(
    "strategy_class",
    [SequentialMultipartUploadStrategy, ConcurrentMultipartUploadStrategy],
)
def test_failed_release_does_not_hide_upload_error(
    strategy_class: Any,
    mock_glacier: MockGlacierAPIs,
    caplog: pytest.LogCaptureFixture,
) -> None:
    original = mock_glacier.upload_multipart_part

    def corrupted_part(**kwargs: Any) -> Any:
        return original(**{**kwargs, "checksum": "0" * 64})

    def unavailable(**kwargs: Any) -> Any:
        raise ClientError(
            {
                "Error": {"Code": "ServiceUnavailableException", "Message": "try later"},
                "ResponseMetadata": {"HTTPStatusCode": 500},
            },
            "AbortMultipartUpload",
        )

    mock_glacier.upload_multipart_part = corrupted_part  # type: ignore
    mock_glacier.abort_multipart_upload = unavailable  # type: ignore
    strategy = strategy_class(GlacierAPIs(mock_glacier), BaseSlicingStrategy(MiB))
    with caplog.at_level(logging.INFO):
        with pytest.raises(IntegrityMismatch):
            strategy.execute("vault1", os.urandom(MiB))
    assert "Failed to release upload" in caplog.text


def test_empty_source_aborts_upload(
    glacier: GlacierAPIs, mock_glacier: MockGlacierAPIs
) -> None:
    with pytest.raises(InvalidState):
        SequentialMultipartUploadStrategy(glacier).execute("vault1", b"")
    assert mock_glacier.uploads == {}


def test_unknown_vault(glacier: GlacierAPIs) -> None:
    with pytest.raises(VaultNotFound):
        SequentialMultipartUploadStrategy(glacier).execute("missing", b"abc")


class SlowFirstPartGlacier(MockGlacierAPIs):
    def __init__(self) -> None:
        super().__init__()
        self.in_flight = 0
        self.max_in_flight = 0
        self.counter_lock = threading.Lock()

    def upload_multipart_part(self, **kwargs: Any) -> Any:
        with self.counter_lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        if kwargs["range"].startswith("bytes 0-"):
            time.sleep(0.2)
        try:
            return super().upload_multipart_part(**kwargs)
        finally:
            with self.counter_lock:
                self.in_flight -= 1


def test_concurrent_upload() -> None:
    mock_glacier = SlowFirstPartGlacier()
    data = os.urandom(5 * MiB + 7)
    strategy = ConcurrentMultipartUploadStrategy(
        GlacierAPIs(mock_glacier), BaseSlicingStrategy(MiB), max_workers=3
    )
    archive_id = strategy.execute("vault1", data)
    assert mock_glacier.vaults["vault1"]["archives"][archive_id]["body"] == data
    assert mock_glacier.max_in_flight <= 3
    assert mock_glacier.calls.count("upload_multipart_part") == 6


def test_concurrent_upload_failure_aborts() -> None:
    mock_glacier = MockGlacierAPIs()

    def unavailable(**kwargs: Any) -> Any:
        raise ClientError(
            {
                "Error": {"Code": "ServiceUnavailableException", "Message": "down"},
                "ResponseMetadata": {"HTTPStatusCode": 500},
            },
            "UploadMultipartPart",
        )

    mock_glacier.upload_multipart_part = unavailable  # type: ignore
    strategy = ConcurrentMultipartUploadStrategy(
        GlacierAPIs(mock_glacier), BaseSlicingStrategy(MiB), max_workers=2
    )
    with pytest.raises(TransportError):
        strategy.execute("vault1", os.urandom(3 * MiB))
    assert mock_glacier.uploads == {}


def test_concurrent_strategy_requires_a_worker(glacier: GlacierAPIs) -> None:
    with pytest.raises(ValueError):
        ConcurrentMultipartUploadStrategy(glacier, max_workers=0)


def test_create_upload_strategy(glacier: GlacierAPIs) -> None:
    assert isinstance(
        create_upload_strategy(glacier, Settings()), SequentialMultipartUploadStrategy
    )
    concurrent = create_upload_strategy(glacier, Settings(upload_workers=4, part_size=MiB))
    assert isinstance(concurrent, ConcurrentMultipartUploadStrategy)
    assert concurrent.max_workers == 4
