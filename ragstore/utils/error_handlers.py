"""
Custom exception classes and error handling utilities.
Maps backend and transport failures onto a small error taxonomy with recovery suggestions.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional, Dict, Any, List

import aiohttp
import httpx
import structlog
from google.genai import errors as genai_errors

logger = structlog.get_logger(__name__)

# google-genai talks to the API through httpx, or through aiohttp when it is installed
NETWORK_ERRORS = (httpx.HTTPError, aiohttp.ClientError, asyncio.TimeoutError, OSError)

# Raised by the SDK when reading a local upload file; not a transport failure
LOCAL_FILE_ERRORS = (FileNotFoundError, IsADirectoryError, NotADirectoryError, PermissionError)


class RagStoreBaseError(Exception):
    """Base exception class for the store client."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        recovery_suggestions: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize base error.

        Args:
            message: Error message
            error_code: Unique error code for identification
            recovery_suggestions: List of recovery suggestions for the user
            context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.recovery_suggestions = recovery_suggestions or []
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code,
            'recovery_suggestions': self.recovery_suggestions,
            'context': self.context
        }

    def get_user_friendly_message(self) -> str:
        """Get user-friendly error message."""
        return self.message


class ConfigurationError(RagStoreBaseError):
    """Raised when there are configuration-related errors."""

    def __init__(
        self,
        message: str,
        missing_config: Optional[str] = None,
        config_file: Optional[str] = None
    ):
        recovery_suggestions = [
            "Check your .env file for missing or incorrect configuration",
            "Verify that all required environment variables are set"
        ]

        if missing_config:
            recovery_suggestions.insert(0, f"Set the {missing_config} configuration value")

        super().__init__(
            message=message,
            error_code="CONFIG_ERROR",
            recovery_suggestions=recovery_suggestions,
            context={
                'missing_config': missing_config,
                'config_file': config_file
            }
        )


class BackendUnavailableError(RagStoreBaseError):
    """Raised when an operation is attempted before the backend client is initialized."""

    def __init__(self, message: str = "Gemini client not initialized", operation: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="BACKEND_UNAVAILABLE",
            recovery_suggestions=[
                "Call initialize() before issuing store or query operations",
                "Check that GEMINI_API_KEY is configured"
            ],
            context={'operation': operation}
        )


class TransportError(RagStoreBaseError):
    """Raised when talking to the backend fails at the network or protocol level."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        status: Optional[str] = None,
        operation: Optional[str] = None
    ):
        recovery_suggestions = []

        if status_code in (401, 403):
            recovery_suggestions.extend([
                "Check your Gemini API key",
                "Verify that the key has access to the File Search API"
            ])
        elif status_code == 404:
            recovery_suggestions.extend([
                "Verify that the store or document name is correct",
                "Refresh the store listing, the resource may have been deleted"
            ])
        elif status_code == 429:
            recovery_suggestions.extend([
                "Wait a few moments before retrying",
                "Check your rate limits and quota"
            ])
        elif status_code is not None and status_code >= 500:
            recovery_suggestions.extend([
                "The Gemini API may be temporarily unavailable",
                "Wait a few minutes and try again"
            ])
        else:
            recovery_suggestions.extend([
                "Check your internet connection",
                "Try again in a few moments"
            ])

        super().__init__(
            message=message,
            error_code=f"TRANSPORT_ERROR_{status_code}" if status_code else "TRANSPORT_ERROR",
            recovery_suggestions=recovery_suggestions,
            context={
                'status_code': status_code,
                'status': status,
                'operation': operation
            }
        )


class ValidationError(RagStoreBaseError):
    """Raised when caller input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected_type: Optional[str] = None
    ):
        recovery_suggestions = [
            "Check your input format"
        ]

        if field:
            recovery_suggestions.insert(0, f"Check the '{field}' field")

        if expected_type:
            recovery_suggestions.append(f"Expected type: {expected_type}")

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            recovery_suggestions=recovery_suggestions,
            context={
                'field': field,
                'value': str(value) if value is not None else None,
                'expected_type': expected_type
            }
        )


class InvalidResponseError(RagStoreBaseError):
    """Raised when the backend replies but omits a required field."""

    def __init__(
        self,
        message: str,
        missing_field: Optional[str] = None,
        operation: Optional[str] = None
    ):
        super().__init__(
            message=message,
            error_code="INVALID_RESPONSE",
            recovery_suggestions=[
                "Try the operation again",
                "Check whether the installed google-genai version matches the API"
            ],
            context={
                'missing_field': missing_field,
                'operation': operation
            }
        )


class IngestionFailedError(RagStoreBaseError):
    """Raised when an ingestion operation reaches a terminal failure state."""

    def __init__(
        self,
        message: str,
        operation_name: Optional[str] = None,
        store_name: Optional[str] = None,
        detail: Optional[Any] = None
    ):
        super().__init__(
            message=message,
            error_code="INGESTION_FAILED",
            recovery_suggestions=[
                "Check that the file type is supported by File Search",
                "Verify the file is not empty or corrupted",
                "Upload the document again"
            ],
            context={
                'operation_name': operation_name,
                'store_name': store_name,
                'detail': detail
            }
        )


class OperationTimeoutError(RagStoreBaseError):
    """Raised when an operation is still running after the configured number of status checks."""

    def __init__(
        self,
        message: str,
        operation_name: Optional[str] = None,
        attempts: Optional[int] = None
    ):
        super().__init__(
            message=message,
            error_code="OPERATION_TIMEOUT",
            recovery_suggestions=[
                "The document may still be processing, refresh the document list later",
                "Increase POLL_MAX_ATTEMPTS or leave it unset for unbounded polling"
            ],
            context={
                'operation_name': operation_name,
                'attempts': attempts
            }
        )


def handle_error(
    error: Exception,
    operation: Optional[str] = None,
    log_error: bool = True
) -> RagStoreBaseError:
    """
    Convert backend and transport exceptions to store client errors.

    Args:
        error: The original exception
        operation: Name of the backend operation that failed
        log_error: Whether to log the error

    Returns:
        RagStoreBaseError instance
    """
    if isinstance(error, RagStoreBaseError):
        if log_error:
            logger.error(
                "Store client error occurred",
                error_type=error.__class__.__name__,
                message=error.message,
                error_code=error.error_code,
                context=error.context
            )
        return error

    if isinstance(error, genai_errors.APIError):
        converted_error = TransportError(
            message=f"Gemini API error: {error.message or str(error)}",
            status_code=error.code,
            status=error.status,
            operation=operation
        )
    elif isinstance(error, asyncio.TimeoutError):
        converted_error = TransportError(
            message=f"Request timed out: {str(error) or type(error).__name__}",
            operation=operation
        )
    elif isinstance(error, aiohttp.ClientResponseError):
        converted_error = TransportError(
            message=f"HTTP error: {error.message}",
            status_code=error.status,
            operation=operation
        )
    elif isinstance(error, NETWORK_ERRORS) and not isinstance(error, LOCAL_FILE_ERRORS):
        converted_error = TransportError(
            message=f"Network error: {str(error) or type(error).__name__}",
            operation=operation
        )
    else:
        converted_error = RagStoreBaseError(
            message=f"Unexpected error: {str(error)}",
            error_code="GENERIC_ERROR",
            recovery_suggestions=[
                "Try the operation again",
                "Check the application logs for more details"
            ],
            context={'operation': operation}
        )

    if log_error:
        logger.error(
            "Error handled and converted",
            original_error_type=type(error).__name__,
            original_error=str(error),
            converted_error_type=converted_error.__class__.__name__,
            error_code=converted_error.error_code,
            context=converted_error.context
        )

    return converted_error


@asynccontextmanager
async def translate_backend_errors(operation: str):
    """
    Re-raise SDK and network failures inside the block as TransportError.

    Store client errors raised inside the block pass through unchanged.

    Args:
        operation: Name of the backend operation, recorded in the error context
    """
    try:
        yield
    except (RagStoreBaseError, *LOCAL_FILE_ERRORS):
        raise
    except (genai_errors.APIError, *NETWORK_ERRORS) as e:
        raise handle_error(e, operation=operation) from e


def format_error_for_user(error: RagStoreBaseError) -> str:
    """
    Format error for user display.

    Args:
        error: RagStoreBaseError instance

    Returns:
        Formatted error message for user
    """
    lines = [
        f"Error: {error.get_user_friendly_message()}"
    ]

    if error.recovery_suggestions:
        lines.append("\nSuggestions:")
        for i, suggestion in enumerate(error.recovery_suggestions, 1):
            lines.append(f"  {i}. {suggestion}")

    if error.error_code:
        lines.append(f"\nError Code: {error.error_code}")

    return "\n".join(lines)
