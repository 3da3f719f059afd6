"""
Multipart form construction for upload requests.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..exceptions import MissingCredentialsError, UploadPresetRequiredError, ValidationError
from ..options import Options
from .signature import compute_signature
from .sources import FileValue

# Parameters an unsigned upload may carry; the rest must live in the preset
UNSIGNED_ALLOWED_PARAMS = frozenset({
    "public_id",
    "folder",
    "callback",
    "tags",
    "context",
    "face_coordinates",
    "custom_coordinates",
    "upload_preset",
})


@dataclass
class UploadForm:
    """Fields and file part of a multipart upload body."""
    fields: Dict[str, str] = field(default_factory=dict)
    file: Optional[FileValue] = None

    @property
    def signed(self) -> bool:
        return "signature" in self.fields

    def files(self) -> Dict[str, Tuple[Any, ...]]:
        """Multipart parts in the shape httpx expects for ``files=``."""
        parts: Dict[str, Tuple[Any, ...]] = {}
        if isinstance(self.file, str):
            # A remote URL travels as a plain form field without a filename
            parts["file"] = (None, self.file)
        elif self.file is not None:
            parts["file"] = self.file
        for name, value in self.fields.items():
            parts[name] = (None, value)
        return parts


def current_timestamp() -> str:
    """Unix time in seconds, as the API expects it."""
    return str(int(time.time()))


def _check_unsigned(options: Options, params: Dict[str, str]) -> None:
    if not options.upload_preset or not options.upload_preset.strip():
        raise UploadPresetRequiredError(options.upload_preset)

    if options.overwrite:
        raise ValidationError("overwrite", True, "overwrite is always false for unsigned uploads")
    # false is already what the API assumes and it may not be sent unsigned
    params.pop("overwrite", None)

    disallowed = sorted(name for name in params if name not in UNSIGNED_ALLOWED_PARAMS)
    if disallowed:
        raise ValidationError(
            "options", disallowed,
            f"Unsigned uploads only accept: {', '.join(sorted(UNSIGNED_ALLOWED_PARAMS))}"
        )


def build_upload_form(
    file_value: Optional[FileValue],
    options: Options,
    *,
    signed: bool,
    api_key: Optional[str] = None,
    api_secret: Optional[str] = None,
    timestamp: Optional[str] = None,
    algorithm: str = "sha1",
) -> UploadForm:
    """
    Assemble the multipart form for an upload.

    Args:
        file_value: Value for the ``file`` part (URL string or file tuple)
        options: Upload options
        signed: Whether to authenticate the request with a signature
        api_key: Account API key, required when signed
        api_secret: Account API secret, required when signed
        timestamp: Signing time; defaults to ``options.timestamp`` or now
        algorithm: Signature hash algorithm

    Returns:
        UploadForm ready to hand to the HTTP client

    Raises:
        UploadPresetRequiredError: Unsigned upload without a preset
        ValidationError: Unsigned upload with parameters it may not set
        MissingCredentialsError: Signed upload without key or secret
    """
    params = options.upload_params()

    if not signed:
        _check_unsigned(options, params)
        return UploadForm(fields=params, file=file_value)

    missing = [name for name, value in (("CLOUDINARY_API_KEY", api_key),
                                        ("CLOUDINARY_API_SECRET", api_secret)) if not value]
    if missing:
        raise MissingCredentialsError(missing)

    params["timestamp"] = timestamp or options.timestamp or current_timestamp()
    signature = compute_signature(params, api_secret, algorithm)

    fields = {"api_key": api_key}
    fields.update(params)
    fields["signature"] = signature
    return UploadForm(fields=fields, file=file_value)
