"""
Custom exceptions for the cloudinary client package.

This module provides specific exception types for better error handling
and more informative error messages.
"""

from typing import Optional, Dict, Any, List

import httpx


class CloudinaryError(Exception):
    """Base exception for all cloudinary client errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(CloudinaryError):
    """Raised when there's a configuration issue."""
    pass


class MissingCredentialsError(ConfigurationError):
    """Raised when a request needs credentials that are not configured."""

    def __init__(self, missing: List[str]):
        message = f"Missing Cloudinary credentials: {', '.join(missing)}"
        super().__init__(message, {"missing": missing})
        self.missing = missing


class ValidationError(CloudinaryError):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for field '{field}': {reason}"
        details = {"field": field, "value": value, "reason": reason}
        super().__init__(message, details)


class InvalidSourceError(CloudinaryError):
    """Raised when the asset to upload cannot be used."""

    def __init__(self, source: Any, reason: str = "Invalid file"):
        message = f"Invalid upload source: {reason}"
        details = {"source": str(source), "reason": reason}
        super().__init__(message, details)


class UnsupportedSourceError(CloudinaryError):
    """Raised for upload sources this client does not handle yet."""

    def __init__(self, source: str, kind: str):
        message = f"Uploading from {kind} is not supported"
        details = {"source": source, "kind": kind}
        super().__init__(message, details)


class UploadPresetRequiredError(ValidationError):
    """Raised when an unsigned upload has no upload preset."""

    def __init__(self, value: Any = None):
        super().__init__("upload_preset", value, "upload_preset is required for unsigned uploading")


class APIError(CloudinaryError):
    """Raised when the Cloudinary API returns an error."""

    def __init__(self, url: str, api_response: Dict[str, Any], status_code: Optional[int] = None):
        reason = api_response.get('message', 'Unknown error')
        message = f"Cloudinary API error: {reason}"
        details = {"url": url, "status_code": status_code, "api_response": api_response}
        super().__init__(message, details)
        self.api_response = api_response
        self.status_code = status_code


class AuthenticationError(APIError):
    """Raised when the API rejects the credentials or the signature."""
    pass


class NotFoundError(APIError):
    """Raised when the requested resource does not exist."""
    pass


class RateLimitExceededError(APIError):
    """Raised when API rate limit is exceeded."""

    def __init__(self, url: str, retry_after: Optional[int] = None, status_code: int = 429):
        api_response = {"message": "Rate limit exceeded"}
        if retry_after:
            api_response["retry_after"] = retry_after
        super().__init__(url, api_response, status_code)
        self.retry_after = retry_after


class NetworkError(CloudinaryError):
    """Raised when there's a network connectivity issue."""

    def __init__(self, url: str, reason: str):
        message = f"Network error accessing {url}: {reason}"
        details = {"url": url, "reason": reason}
        super().__init__(message, details)


class TimeoutError(NetworkError):
    """Raised when a request times out."""

    def __init__(self, url: str, timeout_seconds: float):
        reason = f"Request timed out after {timeout_seconds} seconds"
        super().__init__(url, reason)
        self.timeout_seconds = timeout_seconds


def _api_error_message(response: httpx.Response) -> str:
    # Cloudinary error bodies look like {"error": {"message": "..."}}
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return response.text


def wrap_http_error(error: Exception, url: str, context: str = "", timeout: float = 30.0) -> CloudinaryError:
    """
    Convert HTTP errors to more specific CloudinaryError types.

    Args:
        error: The original HTTP error
        url: The URL that caused the error
        context: Additional context about the operation
        timeout: Timeout in effect for the request

    Returns:
        An appropriate CloudinaryError subclass
    """
    if isinstance(error, httpx.TimeoutException):
        return TimeoutError(url, timeout)

    elif isinstance(error, httpx.TransportError):
        return NetworkError(url, f"Connection failed: {str(error)}")

    elif isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        message = _api_error_message(error.response)

        if status in (420, 429):
            retry_after = error.response.headers.get("Retry-After")
            retry_after_int = int(retry_after) if retry_after and retry_after.isdigit() else None
            return RateLimitExceededError(url, retry_after_int, status)

        elif status in (401, 403):
            return AuthenticationError(url, {"message": message}, status)

        elif status == 404:
            return NotFoundError(url, {"message": message}, status)

        return APIError(url, {"message": message}, status)

    # Default fallback
    return CloudinaryError(f"HTTP error in {context}: {str(error)}", {"url": url, "original_error": str(error)})


def create_user_friendly_error(error: Exception) -> str:
    """
    Create a user-friendly error message from any exception.

    Args:
        error: The exception to convert

    Returns:
        A user-friendly error message
    """
    if isinstance(error, MissingCredentialsError):
        return f"Cloudinary is not configured. Please set {', '.join(error.missing)} in your environment variables."

    elif isinstance(error, UploadPresetRequiredError):
        return "An upload preset is required for unsigned uploads."

    elif isinstance(error, UnsupportedSourceError):
        return f"Uploading from {error.details.get('kind', 'this source')} is not supported yet."

    elif isinstance(error, InvalidSourceError):
        return f"Invalid file: {error.details.get('reason', 'please check the path or URL')}"

    elif isinstance(error, RateLimitExceededError):
        if error.retry_after:
            return f"Rate limit exceeded. Please try again in {error.retry_after} seconds."
        return "Rate limit exceeded. Please try again later."

    elif isinstance(error, AuthenticationError):
        return "Cloudinary rejected the credentials. Check the API key and secret."

    elif isinstance(error, NotFoundError):
        return "The requested resource was not found."

    elif isinstance(error, TimeoutError):
        return f"Request timed out after {error.timeout_seconds} seconds. Please try again."

    elif isinstance(error, NetworkError):
        return f"Network error: {error.details.get('reason', 'Please check your internet connection')}"

    elif isinstance(error, APIError):
        return f"Cloudinary API error: {error.api_response.get('message', 'Service temporarily unavailable')}"

    elif isinstance(error, ConfigurationError):
        return f"Configuration error: {error.message}"

    elif isinstance(error, ValidationError):
        field = error.details.get("field", "input")
        reason = error.details.get("reason", "invalid value")
        return f"Invalid {field}: {reason}"

    elif isinstance(error, CloudinaryError):
        return error.message

    else:
        return f"An unexpected error occurred: {str(error)}"
