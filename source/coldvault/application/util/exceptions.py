"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from typing import Any, Dict, Optional


def _describe(context: Optional[Dict[str, Any]]) -> str:
    if not context:
        return ""
    details = ", ".join(f"{key}={value}" for key, value in context.items())
    return f" ({details})"


class InvalidConfiguration(ValueError):
    def __init__(self, reason: str) -> None:
        self.message = f"Invalid configuration: {reason}"
        super().__init__(self.message)


class VaultNotFound(Exception):
    def __init__(self, vault_name: str) -> None:
        self.vault_name = vault_name
        self.message = f"Vault: {vault_name} could not be found."
        super().__init__(self.message)


class IntegrityMismatch(Exception):
    def __init__(
        self, reason: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.context = context or {}
        self.message = f"Integrity check failed: {reason}{_describe(context)}"
        super().__init__(self.message)


class SizeMismatch(IntegrityMismatch):
    def __init__(
        self, expected: int, actual: int, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"archive size {actual} does not match expected size {expected}",
            context,
        )


class PollTimeout(Exception):
    def __init__(self, job_id: str, attempts: int, elapsed: float) -> None:
        self.job_id = job_id
        self.attempts = attempts
        self.elapsed = elapsed
        self.message = f"Job: {job_id} still in progress after {attempts} polls and {elapsed:.1f} seconds."
        super().__init__(self.message)


class PollCancelled(Exception):
    def __init__(self, job_id: str, attempts: int) -> None:
        self.job_id = job_id
        self.attempts = attempts
        self.message = f"Polling of job: {job_id} was cancelled after {attempts} polls."
        super().__init__(self.message)


class InvalidState(Exception):
    def __init__(self, resource_id: str, state: str, operation: str) -> None:
        self.message = (
            f"Cannot {operation} resource with id: {resource_id} in state {state}."
        )
        super().__init__(self.message)


class TransportError(Exception):
    def __init__(
        self,
        status: Optional[int],
        code: str,
        body: Dict[str, Any],
        operation: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.status = status
        self.code = code
        self.body = body
        self.operation = operation
        self.context = context or {}
        self.message = self._format()
        super().__init__(self.message)

    def _format(self) -> str:
        error_message = self.body.get("Message", "")
        return f"{self.operation} failed with status {self.status} {self.code}: {error_message}{_describe(self.context)}"

    def add_context(self, **details: Any) -> None:
        self.context.update(details)
        self.message = self._format()
        self.args = (self.message,)


class AccessViolation(Exception):
    def __init__(self) -> None:
        self.message = "Resource was accessed inappropriately."
        super().__init__(self.message)


class JobFailed(Exception):
    def __init__(self, job_id: str, status_message: Optional[str]) -> None:
        self.job_id = job_id
        self.message = f"Job: {job_id} failed with status message: {status_message}"
        super().__init__(self.message)
