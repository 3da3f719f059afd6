"""
Request signing.

Signed API calls carry a ``signature`` parameter: the hex digest of the
sorted ``key=value`` pairs joined with ``&``, immediately followed by the
API secret.
"""

import hashlib
import hmac
from typing import Any, Mapping

from ..exceptions import ValidationError

# Never part of the string to sign
EXCLUDED_PARAMS = frozenset({"file", "api_key", "resource_type", "cloud_name", "signature"})

_ALGORITHMS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
}


def serialize_param(value: Any) -> str:
    """String form of a parameter, identical in the form body and the signature."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(serialize_param(item) for item in value)
    return str(value)


def string_to_sign(params: Mapping[str, Any]) -> str:
    """
    Serialize parameters for signing.

    Excluded and empty parameters are dropped, the rest sorted by name.
    """
    pairs = []
    for key in sorted(params):
        if key in EXCLUDED_PARAMS:
            continue
        value = params[key]
        if value is None:
            continue
        serialized = serialize_param(value)
        if serialized == "":
            continue
        pairs.append(f"{key}={serialized}")
    return "&".join(pairs)


def compute_signature(params: Mapping[str, Any], api_secret: str, algorithm: str = "sha1") -> str:
    """
    Compute the request signature.

    Args:
        params: Parameters to be sent with the request
        api_secret: Account API secret
        algorithm: ``sha1`` or ``sha256``

    Returns:
        Lowercase hex digest

    Raises:
        ValidationError: If the secret is empty or the algorithm unknown
    """
    if not api_secret:
        raise ValidationError("api_secret", None, "API secret is required to sign a request")

    hash_factory = _ALGORITHMS.get(algorithm.lower())
    if hash_factory is None:
        raise ValidationError(
            "signature_algorithm", algorithm,
            f"Signature algorithm must be one of: {', '.join(_ALGORITHMS)}"
        )

    payload = string_to_sign(params) + api_secret
    return hash_factory(payload.encode("utf-8")).hexdigest()


def verify_signature(params: Mapping[str, Any], api_secret: str, signature: str, algorithm: str = "sha1") -> bool:
    """Check a signature against the parameters it claims to cover."""
    expected = compute_signature(params, api_secret, algorithm)
    return hmac.compare_digest(expected, signature or "")


def verify_upload_response_signature(
    public_id: str,
    version: Any,
    signature: str,
    api_secret: str,
    algorithm: str = "sha1",
) -> bool:
    """Validate the signature returned in an upload response."""
    return verify_signature(
        {"public_id": public_id, "version": version}, api_secret, signature, algorithm
    )
