"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import functools
import logging
from enum import Enum
from typing import Any, Callable, Dict, Generic, Mapping, Optional, TypeVar

from coldvault.application.util.exceptions import TransportError

logger = logging.getLogger()

T = TypeVar("T")


class ErrorClass(Enum):
    NOT_FOUND = "NotFound"
    BAD_REQUEST = "BadRequest"
    PRECONDITION_FAILED = "PreconditionFailed"


ERROR_CODES: Dict[str, ErrorClass] = {
    "ResourceNotFoundException": ErrorClass.NOT_FOUND,
    "InvalidParameterValueException": ErrorClass.BAD_REQUEST,
    "MissingParameterValueException": ErrorClass.BAD_REQUEST,
    "PreconditionFailed": ErrorClass.PRECONDITION_FAILED,
}

HTTP_STATUSES: Dict[int, ErrorClass] = {
    404: ErrorClass.NOT_FOUND,
    400: ErrorClass.BAD_REQUEST,
    412: ErrorClass.PRECONDITION_FAILED,
}


def classify(error: BaseException) -> Optional[ErrorClass]:
    """
    Classifies the first TransportError found in the cause chain of the error.
    The error code reported by the store wins over the HTTP status.
    """
    current: Optional[BaseException] = error
    while current is not None:
        if isinstance(current, TransportError):
            if current.code in ERROR_CODES:
                return ERROR_CODES[current.code]
            if current.status is not None:
                return HTTP_STATUSES.get(current.status)
            return None
        current = current.__cause__
    return None


class ResultFallback(Generic[T]):
    """
    Substitutes a value for an enumerated set of transport errors. Anything
    else is re-raised as the very same exception object.

    Usage example:
        EMPTY_SET_ON_NOT_FOUND.call(glacier.list_archive_ids, "vault1")

        @NULL_ON_NOT_FOUND
        def describe_vault(...): ...
    """

    def __init__(self, name: str, substitutes: Mapping[ErrorClass, Callable[[], T]]) -> None:
        self.name = name
        self.substitutes = dict(substitutes)

    def create_or_propagate(self, error: BaseException) -> T:
        if error is None:
            raise TypeError("An error is required to create a fallback value.")
        error_class = classify(error)
        if error_class is not None and error_class in self.substitutes:
            logger.info(f"Fallback {self.name} applied for {error_class.value}: {error}")
            return self.substitutes[error_class]()
        raise error

    def call(self, function: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return function(*args, **kwargs)
        except TransportError as error:
            return self.create_or_propagate(error)

    def __call__(self, function: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(function)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return self.call(function, *args, **kwargs)

        return wrapper


NULL_ON_NOT_FOUND: ResultFallback[Any] = ResultFallback(
    "NullOnNotFound", {ErrorClass.NOT_FOUND: lambda: None}
)
EMPTY_SET_ON_NOT_FOUND: ResultFallback[Any] = ResultFallback(
    "EmptySetOnNotFound", {ErrorClass.NOT_FOUND: set}
)
EMPTY_LIST_ON_NOT_FOUND: ResultFallback[Any] = ResultFallback(
    "EmptyListOnNotFound", {ErrorClass.NOT_FOUND: list}
)
FALSE_ON_NOT_FOUND: ResultFallback[bool] = ResultFallback(
    "FalseOnNotFound", {ErrorClass.NOT_FOUND: lambda: False}
)
FALSE_ON_BAD_REQUEST: ResultFallback[bool] = ResultFallback(
    "FalseOnBadRequest", {ErrorClass.BAD_REQUEST: lambda: False}
)
FALSE_ON_PRECONDITION_FAILED: ResultFallback[bool] = ResultFallback(
    "FalseOnPreconditionFailed", {ErrorClass.PRECONDITION_FAILED: lambda: False}
)
FALSE_IF_VAULT_NOT_EMPTY: ResultFallback[bool] = ResultFallback(
    "FalseIfVaultNotEmpty",
    {
        ErrorClass.BAD_REQUEST: lambda: False,
        ErrorClass.PRECONDITION_FAILED: lambda: False,
    },
)
