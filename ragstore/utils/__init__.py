"""
Utilities module for the File Search store client.
"""

from .error_handlers import (
    RagStoreBaseError,
    ConfigurationError,
    BackendUnavailableError,
    TransportError,
    InvalidResponseError,
    IngestionFailedError,
    OperationTimeoutError,
    ValidationError,
    format_error_for_user,
)

__all__ = [
    "RagStoreBaseError",
    "ConfigurationError",
    "BackendUnavailableError",
    "TransportError",
    "InvalidResponseError",
    "IngestionFailedError",
    "OperationTimeoutError",
    "ValidationError",
    "format_error_for_user",
]
