import logging
from typing import TYPE_CHECKING, Any, Dict

import httpx

from ..exceptions import APIError, wrap_http_error

if TYPE_CHECKING:
    from ..client import CloudinaryClient

logger = logging.getLogger(__name__)


class BaseService:
    """Base class for the API services hanging off a CloudinaryClient"""

    def __init__(self, client: 'CloudinaryClient'):
        self.client = client

    @property
    def config(self):
        return self.client.config

    async def _send(self, method: str, path: str, context: str, **kwargs) -> Dict[str, Any]:
        """Send a request to ``path`` under the cloud's API root and decode the JSON body."""
        url = self.client.api_url(path)
        try:
            response = await self.client.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            error = wrap_http_error(e, url, context, self.client.http.timeout)
            logger.warning(f"{context} failed: {error.message}")
            raise error from e

        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                url, {"message": f"Invalid JSON response: {response.text[:200]}"}, response.status_code
            ) from e
