"""
Upload source resolution.

Decides whether the asset to upload is a local file, a remote URL, a
cloud-storage reference or an already opened stream, and yields the value
to put in the ``file`` form field.
"""

import logging
import mimetypes
import os
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Iterator, Tuple, Union

from ..exceptions import InvalidSourceError, UnsupportedSourceError

logger = logging.getLogger(__name__)

UploadSource = Union[str, os.PathLike, bytes, BinaryIO]

# Either the literal string for remote sources or an httpx file tuple
FileValue = Union[str, Tuple[str, Any, str]]


class SourceKind(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"
    S3 = "s3"
    GCS = "gcs"
    STREAM = "stream"


def resolve_source(file: UploadSource) -> SourceKind:
    """
    Classify an upload source.

    Raises:
        InvalidSourceError: If the source is empty or of an unknown type
    """
    if isinstance(file, (bytes, bytearray)) or hasattr(file, "read"):
        return SourceKind.STREAM

    if isinstance(file, os.PathLike):
        return SourceKind.LOCAL

    if not isinstance(file, str) or not file.strip():
        raise InvalidSourceError(file, "invalid file")

    value = file.strip()
    lowered = value.lower()
    if lowered.startswith("s3://"):
        return SourceKind.S3
    if lowered.startswith("gs://"):
        return SourceKind.GCS
    if "://" in value or lowered.startswith("data:"):
        return SourceKind.REMOTE
    return SourceKind.LOCAL


def _guess_content_type(filename: str) -> str:
    return mimetypes.guess_type(filename)[0] or "application/octet-stream"


def local_file(path: Union[str, os.PathLike]) -> Path:
    """
    Validate a local path for upload.

    Raises:
        InvalidSourceError: If the path is missing or a directory
    """
    resolved = Path(path).expanduser()
    if not resolved.exists():
        raise InvalidSourceError(path, "file does not exist")
    if resolved.is_dir():
        raise InvalidSourceError(path, "the asset to upload can't be a directory")
    return resolved


@contextmanager
def open_source(file: UploadSource) -> Iterator[FileValue]:
    """
    Yield the ``file`` form value for a source.

    Local files are opened in binary mode for streaming and closed on exit.

    Raises:
        InvalidSourceError: If the source cannot be used
        UnsupportedSourceError: For S3 and Google Storage references
    """
    kind = resolve_source(file)
    logger.debug(f"Resolved upload source as {kind.value}")

    if kind is SourceKind.S3:
        raise UnsupportedSourceError(str(file), "Amazon S3")

    if kind is SourceKind.GCS:
        raise UnsupportedSourceError(str(file), "Google Storage")

    if kind is SourceKind.REMOTE:
        yield file.strip()
        return

    if kind is SourceKind.STREAM:
        filename = Path(str(getattr(file, "name", "file"))).name
        if isinstance(file, bytearray):
            file = bytes(file)
        yield (filename, file, _guess_content_type(filename))
        return

    path = local_file(file)
    with path.open("rb") as handle:
        yield (path.name, handle, _guess_content_type(path.name))
