"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from botocore.exceptions import ClientError

from coldvault.application.glacier_service.fallbacks import (
    FALSE_IF_VAULT_NOT_EMPTY,
    FALSE_ON_NOT_FOUND,
    NULL_ON_NOT_FOUND,
)
from coldvault.application.model.vault import Vault
from coldvault.application.util.content_range import ContentRange
from coldvault.application.util.exceptions import TransportError
from coldvault.application.util.validators import (
    validate_description,
    validate_payload_size,
    validate_vault_name,
)

if TYPE_CHECKING:
    from mypy_boto3_glacier.client import GlacierClient
    from mypy_boto3_glacier.type_defs import (
        ArchiveCreationOutputTypeDef,
        GetJobOutputOutputTypeDef,
    )
else:
    GlacierClient = object
    ArchiveCreationOutputTypeDef = object
    GetJobOutputOutputTypeDef = object

logger = logging.getLogger()


class GlacierAPIs:
    """
    Glacier endpoints used by the upload and polling engines. Every botocore
    ClientError leaves this class as a TransportError carrying the operation
    and the identifiers involved, with the ClientError as its cause.
    """

    def __init__(self, client: GlacierClient, account_id: str = "-") -> None:
        self.client = client
        self.account_id = account_id

    def _invoke(self, operation: str, context: Dict[str, Any], **params: Any) -> Any:
        try:
            return getattr(self.client, operation)(accountId=self.account_id, **params)
        except ClientError as error:
            raise TransportError(
                status=error.response.get("ResponseMetadata", {}).get("HTTPStatusCode"),
                code=error.response.get("Error", {}).get("Code", ""),
                body=error.response.get("Error", {}),
                operation=operation,
                context=context,
            ) from error

    @NULL_ON_NOT_FOUND
    def describe_vault(self, vault_name: str) -> Optional[Vault]:
        response = self._invoke(
            "describe_vault", {"vault": vault_name}, vaultName=vault_name
        )
        return Vault.from_description(response)

    def list_vaults(self) -> List[Vault]:
        vaults: List[Vault] = []
        params: Dict[str, Any] = {}
        while True:
            response = self._invoke("list_vaults", {}, **params)
            vaults.extend(Vault.from_description(v) for v in response["VaultList"])
            if not response.get("Marker"):
                return vaults
            params["marker"] = response["Marker"]

    @FALSE_IF_VAULT_NOT_EMPTY
    def delete_vault(self, vault_name: str) -> bool:
        self._invoke("delete_vault", {"vault": vault_name}, vaultName=validate_vault_name(vault_name))
        return True

    def upload_archive(
        self, vault_name: str, body: bytes, description: Optional[str] = None
    ) -> str:
        validate_payload_size(len(body))
        params: Dict[str, Any] = {"vaultName": validate_vault_name(vault_name), "body": body}
        if validate_description(description):
            params["archiveDescription"] = description
        response: ArchiveCreationOutputTypeDef = self._invoke(
            "upload_archive", {"vault": vault_name}, **params
        )
        return response["archiveId"]

    @FALSE_ON_NOT_FOUND
    def delete_archive(self, vault_name: str, archive_id: str) -> bool:
        self._invoke(
            "delete_archive",
            {"vault": vault_name, "archive": archive_id},
            vaultName=vault_name,
            archiveId=archive_id,
        )
        return True

    def initiate_multipart_upload(
        self, vault_name: str, part_size: int, description: Optional[str] = None
    ) -> str:
        params: Dict[str, Any] = {"vaultName": vault_name, "partSize": str(part_size)}
        if description:
            params["archiveDescription"] = description
        response = self._invoke(
            "initiate_multipart_upload", {"vault": vault_name}, **params
        )
        return response["uploadId"]

    def upload_multipart_part(
        self,
        vault_name: str,
        upload_id: str,
        content_range: ContentRange,
        checksum: str,
        body: bytes,
    ) -> Optional[str]:
        response = self._invoke(
            "upload_multipart_part",
            {"vault": vault_name, "upload": upload_id, "range": str(content_range)},
            vaultName=vault_name,
            uploadId=upload_id,
            range=content_range.header(),
            checksum=checksum,
            body=body,
        )
        return response.get("checksum")

    def complete_multipart_upload(
        self, vault_name: str, upload_id: str, archive_size: int, checksum: str
    ) -> Dict[str, Any]:
        return self._invoke(
            "complete_multipart_upload",
            {"vault": vault_name, "upload": upload_id},
            vaultName=vault_name,
            uploadId=upload_id,
            archiveSize=str(archive_size),
            checksum=checksum,
        )

    @FALSE_ON_NOT_FOUND
    def abort_multipart_upload(self, vault_name: str, upload_id: str) -> bool:
        self._invoke(
            "abort_multipart_upload",
            {"vault": vault_name, "upload": upload_id},
            vaultName=vault_name,
            uploadId=upload_id,
        )
        return True

    def initiate_job(self, vault_name: str, job_parameters: Dict[str, Any]) -> str:
        response = self._invoke(
            "initiate_job",
            {"vault": vault_name, "type": job_parameters.get("Type")},
            vaultName=vault_name,
            jobParameters=job_parameters,
        )
        return response["jobId"]

    @NULL_ON_NOT_FOUND
    def describe_job(self, vault_name: str, job_id: str) -> Optional[Dict[str, Any]]:
        return self._invoke(
            "describe_job",
            {"vault": vault_name, "job": job_id},
            vaultName=vault_name,
            jobId=job_id,
        )

    def get_job_output(
        self, vault_name: str, job_id: str, byte_range: Optional[ContentRange] = None
    ) -> GetJobOutputOutputTypeDef:
        params: Dict[str, Any] = {"vaultName": vault_name, "jobId": job_id}
        if byte_range is not None:
            params["range"] = f"bytes={byte_range}"
        return self._invoke(
            "get_job_output",
            {"vault": vault_name, "job": job_id, "range": byte_range},
            **params,
        )
