"""
Error taxonomy for the refine flow.

Every failure of a refine request ends up as one of three classes, each
carrying the HTTP status and the public message the API returns:

- ValidationError: the caller sent an unusable idea (400)
- ConfigurationError: the provider credential is missing or rejected (500)
- TransientProviderError: any other upstream failure (500)

Provider exceptions are mapped onto these by classify_provider_error(),
which prefers structured signals (exception types, HTTP status codes,
error codes) and only falls back to matching the message text.
"""
from enum import Enum
from typing import Optional

import anthropic
import httpx


class ErrorKind(Enum):
    """Classification tags for refine failures"""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    TRANSIENT = "transient"


class RefineError(Exception):
    """Base class for errors surfaced by the refine API"""
    kind: ErrorKind = ErrorKind.TRANSIENT
    status_code: int = 500
    public_message: str = "Failed to refine your idea. Please try again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        if message:
            self.public_message = message


class ValidationError(RefineError):
    """Idea missing, not text, or too short"""
    kind = ErrorKind.VALIDATION
    status_code = 400
    public_message = "Please provide a more detailed idea (more than 10 characters)"


class ConfigurationError(RefineError):
    """Provider credential missing or invalid; needs an operator"""
    kind = ErrorKind.CONFIGURATION
    status_code = 500
    public_message = "API configuration error. Please check server setup."


class TransientProviderError(RefineError):
    """Network, rate limit or malformed upstream response"""
    kind = ErrorKind.TRANSIENT
    status_code = 500
    public_message = "Failed to refine your idea. Please try again."


class ProviderNotConfiguredError(Exception):
    """Raised by a provider that holds no credential"""


class MalformedProviderResponse(Exception):
    """Provider answered 2xx but without usable completion text"""


# Status codes the chat completions API uses for credential problems
AUTH_STATUS_CODES = {401, 403}

# Structured error codes in the chat completions error body
AUTH_ERROR_CODES = {"invalid_api_key", "missing_api_key", "invalid_organization"}

# Last resort when nothing structured is available
API_KEY_MARKERS = ("api key", "api_key", "apikey")


def _error_code_from_response(response: httpx.Response) -> Optional[str]:
    """Read error.code from a chat completions error body, if any"""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        code = error.get("code")
        return code if isinstance(code, str) else None
    return None


def classify_provider_error(exc: BaseException) -> ErrorKind:
    """
    Map a provider failure to a classification tag.

    Args:
        exc: Exception raised while calling the provider

    Returns:
        ErrorKind.CONFIGURATION for credential problems, otherwise
        ErrorKind.TRANSIENT
    """
    if isinstance(exc, RefineError):
        return exc.kind

    if isinstance(exc, ProviderNotConfiguredError):
        return ErrorKind.CONFIGURATION

    if isinstance(exc, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        return ErrorKind.CONFIGURATION

    if isinstance(exc, httpx.HTTPStatusError):
        if exc.response.status_code in AUTH_STATUS_CODES:
            return ErrorKind.CONFIGURATION
        if _error_code_from_response(exc.response) in AUTH_ERROR_CODES:
            return ErrorKind.CONFIGURATION

    message = str(exc).lower()
    if any(marker in message for marker in API_KEY_MARKERS):
        return ErrorKind.CONFIGURATION

    return ErrorKind.TRANSIENT


def to_refine_error(exc: BaseException) -> RefineError:
    """Wrap a provider failure in its public error class"""
    if isinstance(exc, RefineError):
        return exc

    kind = classify_provider_error(exc)
    if kind is ErrorKind.CONFIGURATION:
        error: RefineError = ConfigurationError()
    else:
        error = TransientProviderError()
    error.__cause__ = exc
    return error
