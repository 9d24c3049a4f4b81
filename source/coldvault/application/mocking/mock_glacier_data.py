"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""
MOCK_DATA = {
    "vault1": {
        "archives": {
            "098f6bcd4621d373cade4e832627b4f6": {
                "description": "test.txt",
                "creation-date": "2023-04-11T15:18:41.000Z",
                "body": b"test",
            },
        },
    },
}

# Number of describe_job calls answered with InProgress before a job completes.
DEFAULT_POLLS_UNTIL_COMPLETE = 2
