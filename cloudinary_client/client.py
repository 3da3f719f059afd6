# client.py
import copy
import logging
from typing import Optional

import httpx

from .config import Config, get_config
from .services import AdminService, UploadService
from .utils.http_client import RateLimitedHTTPClient

logger = logging.getLogger(__name__)


class CloudinaryClient:
    """
    Entry point for the upload and admin APIs of one cloud.

    Credentials passed here override the configured ones::

        async with CloudinaryClient("demo", "key", "secret") as client:
            result = await client.upload.upload_image("photos/cat.jpg", with_folder("pets"))
            await client.admin.delete_resources([result.public_id])
    """

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        config: Optional[Config] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        base = config or get_config()
        overrides = {
            name: value
            for name, value in (("cloud_name", cloud_name), ("api_key", api_key), ("api_secret", api_secret))
            if value is not None
        }
        if overrides:
            # The base config, often the global one, is never mutated
            self.config = copy.deepcopy(base)
            for name, value in overrides.items():
                setattr(self.config, name, value)
        else:
            self.config = base
        self.config.validate()

        self.http = RateLimitedHTTPClient.from_config(self.config, transport=transport)
        self.upload = UploadService(self)
        self.admin = AdminService(self)
        logger.debug(f"Cloudinary client ready for cloud '{self.config.cloud_name}'")

    @property
    def api_root(self) -> str:
        base_url = self.config.api_base_url.rstrip('/')
        return f"{base_url}/{self.config.api_version}/{self.config.cloud_name}"

    def api_url(self, path: str) -> str:
        """Absolute URL of an API path under this cloud."""
        return f"{self.api_root}/{path.lstrip('/')}"

    async def close(self) -> None:
        await self.http.close()

    async def __aenter__(self) -> 'CloudinaryClient':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
