"""
Cloudinary Client - A client library for uploading and deleting media assets.
"""

from .client import CloudinaryClient
from .config import Config, get_config, set_config, reset_config
from .models import DeleteResponse, UploadResponse
from .options import Options, apply_options

__version__ = "0.1.0"
__all__ = [
    "CloudinaryClient",
    "Config",
    "DeleteResponse",
    "Options",
    "UploadResponse",
    "apply_options",
    "get_config",
    "reset_config",
    "set_config",
]
