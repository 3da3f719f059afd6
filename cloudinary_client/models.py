"""
Response models for the upload and admin APIs.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class UploadResponse(BaseModel):
    """Asset description returned by an upload request."""

    model_config = ConfigDict(extra="allow")

    public_id: str = ""
    version: int = 0
    signature: str = ""
    width: int = 0
    height: int = 0
    format: str = ""
    resource_type: str = ""
    created_at: str = ""
    tags: List[str] = []
    bytes: int = 0
    type: str = ""
    etag: str = ""
    placeholder: bool = False
    url: str = ""
    secure_url: str = ""
    access_mode: str = ""
    original_filename: str = ""


class DeleteResponse(BaseModel):
    """Outcome of an admin delete request."""

    model_config = ConfigDict(extra="allow")

    deleted: Dict[str, str] = {}
    partial: bool = False
    next_cursor: Optional[str] = None
    deleted_counts: Optional[Dict[str, Dict[str, int]]] = None

    @property
    def deleted_ids(self) -> List[str]:
        return [public_id for public_id, status in self.deleted.items() if status == "deleted"]
