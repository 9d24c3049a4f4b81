"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import os
import typing

import boto3
import pytest

from moto import mock_aws  # type: ignore

from coldvault.application.glacier_service.glacier_apis import GlacierAPIs
from coldvault.application.mocking.mock_glacier_apis import MockGlacierAPIs

if typing.TYPE_CHECKING:
    from mypy_boto3_glacier import GlacierClient
else:
    GlacierClient = object


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.delays: typing.List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, delay: float) -> None:
        self.delays.append(delay)
        self.now += delay


@pytest.fixture(scope="module")
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto"""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
    os.environ["AWS_REGION"] = "us-east-1"


@pytest.fixture
def glacier_client(aws_credentials: None) -> typing.Iterator[GlacierClient]:
    with mock_aws():
        connection: GlacierClient = boto3.client("glacier", region_name="us-east-1")
        yield connection


@pytest.fixture
def mock_glacier() -> MockGlacierAPIs:
    return MockGlacierAPIs()


@pytest.fixture
def glacier(mock_glacier: MockGlacierAPIs) -> GlacierAPIs:
    return GlacierAPIs(mock_glacier)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
