"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import io
import json
import logging
import re
import threading
import uuid
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from botocore.exceptions import ClientError
from botocore.response import StreamingBody

from coldvault.application.hashing.tree_hash import (
    TreeHash,
    build_tree_hash_from_parts,
)
from coldvault.application.mocking.mock_glacier_data import (
    DEFAULT_POLLS_UNTIL_COMPLETE,
    MOCK_DATA,
)

if TYPE_CHECKING:
    from mypy_boto3_glacier.client import GlacierClient
    from mypy_boto3_glacier.type_defs import JobParametersTypeDef
else:
    GlacierClient = object
    JobParametersTypeDef = object

logger = logging.getLogger()

UPLOAD_RANGE_PATTERN = re.compile(r"^bytes (\d+)-(\d+)/\*$")
MOCK_DATE = "2023-04-11T15:18:41.000Z"


def _client_error(status: int, code: str, message: str, operation: str) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": message, "Type": "Client"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


def _body(data: bytes) -> StreamingBody:
    return StreamingBody(io.BytesIO(data), len(data))


class MockGlacierAPIs(GlacierClient):
    """
    In-memory stand-in for the boto3 Glacier client. Verifies part and archive
    tree-hashes the way the service does, and answers describe_job with
    InProgress a scripted number of times before the job completes.
    """

    def __init__(
        self,
        polls_until_complete: int = DEFAULT_POLLS_UNTIL_COMPLETE,
        seed: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.polls_until_complete = polls_until_complete
        self.vaults: Dict[str, Dict[str, Any]] = {}
        self.uploads: Dict[str, Dict[str, Any]] = {}
        self.jobs: Dict[str, Dict[str, Any]] = {}
        self.failing_jobs: set = set()
        self.calls: List[str] = []
        self._lock = threading.Lock()
        for vault_name, vault in (MOCK_DATA if seed is None else seed).items():
            self.create_vault(vaultName=vault_name)
            for archive_id, archive in vault["archives"].items():
                self._store_archive(
                    vault_name,
                    archive["body"],
                    archive["description"],
                    archive_id,
                    archive["creation-date"],
                )
        self.calls.clear()

    def _vault(self, vault_name: str, operation: str) -> Dict[str, Any]:
        if vault_name not in self.vaults:
            raise _client_error(
                404,
                "ResourceNotFoundException",
                f"Vault not found for ARN: arn:aws:glacier:us-east-1:-:vaults/{vault_name}",
                operation,
            )
        return self.vaults[vault_name]

    def _upload(self, vault_name: str, upload_id: str, operation: str) -> Dict[str, Any]:
        self._vault(vault_name, operation)
        upload = self.uploads.get(upload_id)
        if upload is None or upload["vault"] != vault_name:
            raise _client_error(
                404,
                "ResourceNotFoundException",
                f"Multipart upload not found: {upload_id}",
                operation,
            )
        return upload

    def _store_archive(
        self,
        vault_name: str,
        body: bytes,
        description: str,
        archive_id: Optional[str] = None,
        creation_date: str = MOCK_DATE,
    ) -> Dict[str, Any]:
        tree_hash = TreeHash()
        tree_hash.update(body)
        archive = {
            "ArchiveId": archive_id or uuid.uuid4().hex,
            "ArchiveDescription": description,
            "CreationDate": creation_date,
            "Size": len(body),
            "SHA256TreeHash": tree_hash.hexdigest(),
            "body": body,
        }
        self.vaults[vault_name]["archives"][archive["ArchiveId"]] = archive
        return archive

    def create_vault(self, *, vaultName: str, accountId: str = "-") -> Dict[str, Any]:
        self.calls.append("create_vault")
        self.vaults.setdefault(
            vaultName,
            {
                "VaultName": vaultName,
                "VaultARN": f"arn:aws:glacier:us-east-1:{accountId}:vaults/{vaultName}",
                "CreationDate": MOCK_DATE,
                "archives": {},
            },
        )
        return {"location": f"/{accountId}/vaults/{vaultName}"}

    def describe_vault(self, *, vaultName: str, accountId: str = "-") -> Dict[str, Any]:
        self.calls.append("describe_vault")
        vault = self._vault(vaultName, "DescribeVault")
        archives = vault["archives"].values()
        return {
            "VaultName": vault["VaultName"],
            "VaultARN": vault["VaultARN"],
            "CreationDate": vault["CreationDate"],
            "NumberOfArchives": len(archives),
            "SizeInBytes": sum(archive["Size"] for archive in archives),
        }

    def list_vaults(
        self, *, accountId: str = "-", marker: str = "", limit: str = ""
    ) -> Dict[str, Any]:
        self.calls.append("list_vaults")
        return {
            "VaultList": [
                self.describe_vault(vaultName=name) for name in sorted(self.vaults)
            ]
        }

    def delete_vault(self, *, vaultName: str, accountId: str = "-") -> Dict[str, Any]:
        self.calls.append("delete_vault")
        vault = self._vault(vaultName, "DeleteVault")
        if vault["archives"]:
            raise _client_error(
                400,
                "InvalidParameterValueException",
                f"Vault not empty or recently written to: {vaultName}",
                "DeleteVault",
            )
        del self.vaults[vaultName]
        return {}

    def upload_archive(
        self,
        *,
        vaultName: str,
        accountId: str = "-",
        archiveDescription: str = "",
        checksum: str = "",
        body: bytes = b"",
    ) -> Dict[str, Any]:
        self.calls.append("upload_archive")
        self._vault(vaultName, "UploadArchive")
        archive = self._store_archive(vaultName, body, archiveDescription)
        if checksum and checksum != archive["SHA256TreeHash"]:
            del self.vaults[vaultName]["archives"][archive["ArchiveId"]]
            raise _client_error(
                400,
                "InvalidParameterValueException",
                "Checksum mismatch: expected " + archive["SHA256TreeHash"],
                "UploadArchive",
            )
        return {
            "location": f"/{accountId}/vaults/{vaultName}/archives/{archive['ArchiveId']}",
            "checksum": archive["SHA256TreeHash"],
            "archiveId": archive["ArchiveId"],
        }

    def delete_archive(
        self, *, vaultName: str, archiveId: str, accountId: str = "-"
    ) -> Dict[str, Any]:
        self.calls.append("delete_archive")
        vault = self._vault(vaultName, "DeleteArchive")
        if archiveId not in vault["archives"]:
            raise _client_error(
                404,
                "ResourceNotFoundException",
                f"Archive not found: {archiveId}",
                "DeleteArchive",
            )
        del vault["archives"][archiveId]
        return {}

    def initiate_multipart_upload(
        self,
        *,
        vaultName: str,
        accountId: str = "-",
        archiveDescription: str = "",
        partSize: str = "",
    ) -> Dict[str, Any]:
        self.calls.append("initiate_multipart_upload")
        self._vault(vaultName, "InitiateMultipartUpload")
        upload_id = uuid.uuid4().hex
        self.uploads[upload_id] = {
            "vault": vaultName,
            "description": archiveDescription,
            "part_size": int(partSize),
            "parts": {},
        }
        return {
            "location": f"/{accountId}/vaults/{vaultName}/multipart-uploads/{upload_id}",
            "uploadId": upload_id,
        }

    def upload_multipart_part(
        self,
        *,
        vaultName: str,
        uploadId: str,
        accountId: str = "-",
        checksum: str = "",
        range: str = "",
        body: bytes = b"",
    ) -> Dict[str, Any]:
        self.calls.append("upload_multipart_part")
        with self._lock:
            upload = self._upload(vaultName, uploadId, "UploadMultipartPart")
            match = UPLOAD_RANGE_PATTERN.match(range)
            if match is None:
                raise _client_error(
                    400,
                    "InvalidParameterValueException",
                    f"Invalid Content-Range: {range}",
                    "UploadMultipartPart",
                )
            start, end = int(match.group(1)), int(match.group(2))
            if end - start + 1 != len(body) or start % upload["part_size"] != 0:
                raise _client_error(
                    400,
                    "InvalidParameterValueException",
                    f"Content-Range: {range} is incompatible with the part size and the body",
                    "UploadMultipartPart",
                )
            tree_hash = TreeHash()
            tree_hash.update(body)
            if checksum != tree_hash.hexdigest():
                raise _client_error(
                    400,
                    "InvalidParameterValueException",
                    f"Checksum mismatch: expected {tree_hash.hexdigest()} but was {checksum}",
                    "UploadMultipartPart",
                )
            upload["parts"][start] = {"body": body, "tree_hash": tree_hash.digest()}
            return {"checksum": tree_hash.hexdigest()}

    def complete_multipart_upload(
        self,
        *,
        vaultName: str,
        uploadId: str,
        accountId: str = "-",
        archiveSize: str = "",
        checksum: str = "",
    ) -> Dict[str, Any]:
        self.calls.append("complete_multipart_upload")
        with self._lock:
            upload = self._upload(vaultName, uploadId, "CompleteMultipartUpload")
            offsets = sorted(upload["parts"])
            body = b"".join(upload["parts"][offset]["body"] for offset in offsets)
            if len(body) != int(archiveSize):
                raise _client_error(
                    400,
                    "InvalidParameterValueException",
                    f"The total size of the uploaded parts {len(body)} does not match archive size {archiveSize}",
                    "CompleteMultipartUpload",
                )
            tree_hash = build_tree_hash_from_parts(
                [upload["parts"][offset]["tree_hash"] for offset in offsets]
            ).hex()
            if checksum != tree_hash:
                raise _client_error(
                    400,
                    "InvalidParameterValueException",
                    f"Checksum mismatch: expected {tree_hash} but was {checksum}",
                    "CompleteMultipartUpload",
                )
            del self.uploads[uploadId]
            archive = self._store_archive(vaultName, body, upload["description"])
        return {
            "location": f"/{accountId}/vaults/{vaultName}/archives/{archive['ArchiveId']}",
            "checksum": archive["SHA256TreeHash"],
            "archiveId": archive["ArchiveId"],
        }

    def abort_multipart_upload(
        self, *, vaultName: str, uploadId: str, accountId: str = "-"
    ) -> Dict[str, Any]:
        self.calls.append("abort_multipart_upload")
        with self._lock:
            self._upload(vaultName, uploadId, "AbortMultipartUpload")
            del self.uploads[uploadId]
        return {}

    def initiate_job(
        self,
        *,
        vaultName: str,
        accountId: str = "-",
        jobParameters: Optional[JobParametersTypeDef] = None,
    ) -> Dict[str, Any]:
        self.calls.append("initiate_job")
        if jobParameters is None:
            raise _client_error(
                400,
                "MissingParameterValueException",
                "Required parameter missing: jobParameters",
                "InitiateJob",
            )
        vault = self._vault(vaultName, "InitiateJob")
        job_id = uuid.uuid4().hex
        job: Dict[str, Any] = {
            "JobId": job_id,
            "JobDescription": jobParameters.get("Description"),
            "CreationDate": MOCK_DATE,
            "VaultARN": vault["VaultARN"],
            "StatusCode": "InProgress",
            "Completed": False,
            "polls": 0,
        }
        if jobParameters["Type"] == "archive-retrieval":
            archive = vault["archives"].get(jobParameters.get("ArchiveId"))
            if archive is None:
                raise _client_error(
                    404,
                    "ResourceNotFoundException",
                    f"Archive not found: {jobParameters.get('ArchiveId')}",
                    "InitiateJob",
                )
            job.update(
                {
                    "Action": "ArchiveRetrieval",
                    "ArchiveId": archive["ArchiveId"],
                    "ArchiveSizeInBytes": archive["Size"],
                    "ArchiveSHA256TreeHash": archive["SHA256TreeHash"],
                    "SHA256TreeHash": archive["SHA256TreeHash"],
                    "output": archive["body"],
                }
            )
        else:
            inventory = json.dumps(
                {
                    "VaultARN": vault["VaultARN"],
                    "InventoryDate": MOCK_DATE,
                    "ArchiveList": [
                        {k: v for k, v in archive.items() if k != "body"}
                        for archive in vault["archives"].values()
                    ],
                }
            ).encode("utf-8")
            job.update(
                {
                    "Action": "InventoryRetrieval",
                    "InventorySizeInBytes": len(inventory),
                    "output": inventory,
                }
            )
        self.jobs[job_id] = job
        return {"location": f"/{accountId}/vaults/{vaultName}/jobs/{job_id}", "jobId": job_id}

    def describe_job(
        self, *, vaultName: str, jobId: str, accountId: str = "-"
    ) -> Dict[str, Any]:
        self.calls.append("describe_job")
        self._vault(vaultName, "DescribeJob")
        job = self.jobs.get(jobId)
        if job is None:
            raise _client_error(
                404, "ResourceNotFoundException", f"Job not found: {jobId}", "DescribeJob"
            )
        if job["StatusCode"] == "InProgress":
            if job["polls"] >= self.polls_until_complete:
                failed = jobId in self.failing_jobs
                job["StatusCode"] = "Failed" if failed else "Succeeded"
                job["StatusMessage"] = "Failed" if failed else "Succeeded"
                job["Completed"] = True
                job["CompletionDate"] = MOCK_DATE
            job["polls"] += 1
        return {k: v for k, v in job.items() if k not in ("output", "polls")}

    def get_job_output(
        self, *, vaultName: str, jobId: str, accountId: str = "-", range: str = ""
    ) -> Any:
        self.calls.append("get_job_output")
        self._vault(vaultName, "GetJobOutput")
        job = self.jobs.get(jobId)
        if job is None or job["StatusCode"] != "Succeeded":
            raise _client_error(
                404,
                "ResourceNotFoundException",
                f"Job output not available: {jobId}",
                "GetJobOutput",
            )
        output: bytes = job["output"]
        status = 200
        if range != "":
            start_byte, end_byte = range.split("=")[1].split("-")
            output = output[int(start_byte) : int(end_byte) + 1]
            status = 206
        response: Dict[str, Any] = {
            "status": status,
            "contentType": "application/json"
            if job["Action"] == "InventoryRetrieval"
            else "application/octet-stream",
            "body": _body(output),
        }
        if job["Action"] == "ArchiveRetrieval":
            tree_hash = TreeHash()
            tree_hash.update(output)
            response["checksum"] = tree_hash.hexdigest()
        return response
