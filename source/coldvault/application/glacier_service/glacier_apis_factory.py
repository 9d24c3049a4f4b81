"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from typing import Optional
import boto3
from mypy_boto3_glacier.client import GlacierClient
from coldvault.application.config import Settings
from coldvault.application.glacier_service.glacier_apis import GlacierAPIs
from coldvault.application.mocking.mock_glacier_apis import MockGlacierAPIs


class GlacierAPIsFactory:
    """
    This class is used to create an instance from either the actual Glacier
    or the mock APIs, depending on the passed parameter 'mock'

    Usage example:
    - For real Glacier APIs
        glacier = GlacierAPIsFactory.create_instance()
        glacier.initiate_multipart_upload(vaultName="vault1", partSize=str(2**20))
    - For Mock Glacier APIs
        mockGlacier = GlacierAPIsFactory.create_instance(mock=True)
        mockGlacier.initiate_multipart_upload(vaultName="vault1", partSize=str(2**20))
    """

    @staticmethod
    def create_instance(mock: bool = False) -> GlacierClient:
        if mock:
            return MockGlacierAPIs()
        client: GlacierClient = boto3.client("glacier")
        return client

    @staticmethod
    def create_apis(settings: Optional[Settings] = None) -> GlacierAPIs:
        settings = settings or Settings.from_environment()
        return GlacierAPIs(
            GlacierAPIsFactory.create_instance(settings.mock_glacier),
            settings.account_id,
        )
