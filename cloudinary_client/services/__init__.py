from .admin import AdminService
from .upload import UploadService

__all__ = ["AdminService", "UploadService"]
