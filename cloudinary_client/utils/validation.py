"""
Validation utilities for the cloudinary client package.

This module provides validation functions for URLs, cloud names and
option dictionaries with detailed error messages.
"""

import re
from typing import Optional, List, Dict, Any
from urllib.parse import urlparse

from ..exceptions import ValidationError, InvalidSourceError

CLOUD_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9_-]*$')


def validate_url(url: str, allow_schemes: Optional[List[str]] = None) -> bool:
    """
    Validate a remote asset URL.

    Args:
        url: The URL to validate
        allow_schemes: Optional list of allowed schemes (default: ['http', 'https'])

    Returns:
        True if URL is valid

    Raises:
        InvalidSourceError: If URL is invalid
    """
    if not url or not isinstance(url, str):
        raise InvalidSourceError(url, "URL cannot be empty or non-string")

    url = url.strip()
    if not url:
        raise InvalidSourceError(url, "URL cannot be empty after trimming whitespace")

    parsed = urlparse(url)

    allowed_schemes = allow_schemes or ['http', 'https']
    if not parsed.scheme:
        raise InvalidSourceError(url, "URL must include a scheme (http:// or https://)")

    if parsed.scheme not in allowed_schemes:
        raise InvalidSourceError(url, f"URL scheme must be one of: {', '.join(allowed_schemes)}")

    if not parsed.netloc:
        raise InvalidSourceError(url, "URL must include a domain name")

    domain_pattern = r'^[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*(:\d+)?$'
    if not re.match(domain_pattern, parsed.netloc):
        raise InvalidSourceError(url, "Invalid domain name format")

    return True


def sanitize_url(url: str) -> str:
    """
    Strip whitespace and control characters from a URL, then validate it.

    Raises:
        InvalidSourceError: If URL cannot be sanitized
    """
    if not url:
        raise InvalidSourceError(url, "Cannot sanitize empty URL")

    url = url.strip()
    url = ''.join(char for char in url if ord(char) >= 32)

    validate_url(url)

    return url


def validate_cloud_name(cloud_name: str) -> bool:
    """
    Validate a cloud name as it appears in API paths.

    Raises:
        ValidationError: If the cloud name is empty or has illegal characters
    """
    if not cloud_name or not isinstance(cloud_name, str) or not cloud_name.strip():
        raise ValidationError("cloud_name", cloud_name, "cloud name cannot be empty")

    if not CLOUD_NAME_PATTERN.match(cloud_name):
        raise ValidationError(
            "cloud_name", cloud_name,
            "cloud name may only contain letters, digits, '-' and '_'"
        )

    return True


def validate_upload_options(options: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate an options dictionary received from outside, e.g. a JSON body.

    Args:
        options: Mapping of upload parameter names to values

    Returns:
        The options with whitespace trimmed from string values

    Raises:
        ValidationError: If options are not a mapping or a value has a bad type
    """
    if options is None:
        return {}

    if not isinstance(options, dict):
        raise ValidationError("options", options, "Options must be a dictionary")

    validated = {}
    for name, value in options.items():
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
        elif isinstance(value, list):
            if not all(isinstance(item, str) for item in value):
                raise ValidationError(name, value, "List values must contain only strings")
        elif not isinstance(value, (bool, int, float)):
            raise ValidationError(name, value, "Values must be strings, numbers, booleans or lists")
        validated[name] = value

    if 'auto_tagging' in validated:
        confidence = validated['auto_tagging']
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or not 0 <= confidence <= 1:
            raise ValidationError("auto_tagging", confidence, "auto_tagging must be a number between 0 and 1")

    return validated
