"""
Admin API delete operations.

Requests are described by an ``AdminRequest`` first so the mapping from
options to path and query parameters can be inspected without sending
anything. Admin calls authenticate with HTTP Basic using the API key and
secret.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple
from urllib.parse import quote

import httpx

from .base import BaseService
from ..exceptions import ValidationError
from ..models import DeleteResponse
from ..options import Options, SetOption, apply_options

logger = logging.getLogger(__name__)

MAX_PUBLIC_IDS = 100


@dataclass
class AdminRequest:
    method: str
    path: str
    params: List[Tuple[str, str]] = field(default_factory=list)


def _check_ids(name: str, ids: Sequence[str]) -> List[str]:
    if isinstance(ids, str):
        ids = [ids]
    cleaned = [value for value in (ids or []) if value and value.strip()]
    if not cleaned:
        raise ValidationError(name, ids, f"At least one of {name} is required")
    if len(cleaned) > MAX_PUBLIC_IDS:
        raise ValidationError(name, len(cleaned), f"At most {MAX_PUBLIC_IDS} {name} per request")
    return cleaned


def _resources_path(options: Options) -> str:
    return f"resources/{options.resource_type_or_default()}/{options.storage_type_or_default()}"


def build_delete_request(public_ids: Sequence[str], options: Options) -> AdminRequest:
    """
    Describe a delete-by-public-ID request.

    ``public_ids[]`` is repeated once per ID; resource and storage types
    default to ``image`` and ``upload``.
    """
    ids = _check_ids("public_ids", public_ids)
    params = [("public_ids[]", public_id) for public_id in ids]
    params.extend(options.admin_params().items())
    return AdminRequest("DELETE", _resources_path(options), params)


def build_delete_by_prefix_request(prefix: str, options: Options) -> AdminRequest:
    if not prefix or not prefix.strip():
        raise ValidationError("prefix", prefix, "prefix cannot be empty")
    params = [("prefix", prefix)]
    params.extend(options.admin_params().items())
    return AdminRequest("DELETE", _resources_path(options), params)


def build_delete_all_request(options: Options) -> AdminRequest:
    params = [("all", "true")]
    params.extend(options.admin_params().items())
    return AdminRequest("DELETE", _resources_path(options), params)


def build_delete_by_tag_request(tag: str, options: Options) -> AdminRequest:
    if not tag or not tag.strip():
        raise ValidationError("tag", tag, "tag cannot be empty")
    path = f"resources/{options.resource_type_or_default()}/tags/{quote(tag, safe='')}"
    return AdminRequest("DELETE", path, list(options.admin_params().items()))


def build_delete_derived_request(derived_resource_ids: Sequence[str]) -> AdminRequest:
    ids = _check_ids("derived_resource_ids", derived_resource_ids)
    params = [("derived_resource_ids[]", derived_id) for derived_id in ids]
    return AdminRequest("DELETE", "derived_resources", params)


def build_delete_derived_by_transformation_request(
    public_ids: Sequence[str], transformations: Sequence[str], options: Options
) -> AdminRequest:
    ids = _check_ids("public_ids", public_ids)
    if isinstance(transformations, str):
        transformations = [transformations]
    transformations = [t for t in (transformations or []) if t and t.strip()]
    if not transformations:
        raise ValidationError("transformations", transformations, "At least one transformation is required")

    params = [("public_ids[]", public_id) for public_id in ids]
    params.append(("transformations", "|".join(transformations)))
    # Only the derived assets go; the originals stay
    params.append(("keep_original", "true"))
    if options.invalidate is not None:
        params.append(("invalidate", "true" if options.invalidate else "false"))
    return AdminRequest("DELETE", _resources_path(options), params)


class AdminService(BaseService):
    """Administrative delete requests."""

    def _auth(self) -> httpx.BasicAuth:
        self.config.require_credentials(signed=True)
        return httpx.BasicAuth(self.config.api_key, self.config.api_secret)

    async def execute(self, request: AdminRequest, context: str) -> DeleteResponse:
        auth = self._auth()
        logger.info(f"{context}: {request.method} {request.path}")
        data = await self._send(request.method, request.path, context, params=request.params, auth=auth)
        result = DeleteResponse.model_validate(data)
        if result.partial:
            logger.info(f"{context} was partial, continue with next_cursor={result.next_cursor}")
        return result

    async def delete_resources(self, public_ids: Sequence[str], *setters: SetOption) -> DeleteResponse:
        """
        Delete up to 100 resources by public ID.

        Documentation: https://cloudinary.com/documentation/admin_api#delete_resources
        """
        request = build_delete_request(public_ids, apply_options(*setters))
        return await self.execute(request, "delete_resources")

    async def delete_resources_by_prefix(self, prefix: str, *setters: SetOption) -> DeleteResponse:
        request = build_delete_by_prefix_request(prefix, apply_options(*setters))
        return await self.execute(request, "delete_resources_by_prefix")

    async def delete_all_resources(self, *setters: SetOption) -> DeleteResponse:
        """Delete every resource of the resource and storage type (paged via next_cursor)."""
        request = build_delete_all_request(apply_options(*setters))
        return await self.execute(request, "delete_all_resources")

    async def delete_resources_by_tag(self, tag: str, *setters: SetOption) -> DeleteResponse:
        request = build_delete_by_tag_request(tag, apply_options(*setters))
        return await self.execute(request, "delete_resources_by_tag")

    async def delete_derived_resources(self, derived_resource_ids: Sequence[str]) -> DeleteResponse:
        request = build_delete_derived_request(derived_resource_ids)
        return await self.execute(request, "delete_derived_resources")

    async def delete_derived_by_transformation(
        self, public_ids: Sequence[str], transformations: Sequence[str], *setters: SetOption
    ) -> DeleteResponse:
        request = build_delete_derived_by_transformation_request(
            public_ids, transformations, apply_options(*setters)
        )
        return await self.execute(request, "delete_derived_by_transformation")
