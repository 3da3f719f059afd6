"""
Typed request options and their functional setters.

Options are collected into an ``Options`` model by applying setters::

    options = apply_options(with_public_id("avatars/42"), with_overwrite(True))

Every field starts unset (``None``) and unset fields never reach the wire.
"""

from typing import Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .utils.signature import serialize_param

# Routed through the URL path rather than sent as a parameter
PATH_FIELDS = frozenset({"resource_type"})

# Only meaningful to the admin API
ADMIN_FIELDS = frozenset({"keep_original", "next_cursor"})

DEFAULT_RESOURCE_TYPE = "image"
DEFAULT_STORAGE_TYPE = "upload"


class Options(BaseModel):
    """Optional parameters shared by the upload and admin APIs."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True, extra="forbid")

    access_mode: Optional[str] = None
    allowed_formats: Optional[str] = None
    async_: Optional[bool] = Field(default=None, alias="async")
    auto_tagging: Optional[float] = None

    background_removal: Optional[str] = None
    backup: Optional[bool] = None

    callback: Optional[str] = None
    categorization: Optional[str] = None
    colors: Optional[bool] = None
    context: Optional[str] = None
    custom_coordinates: Optional[str] = None

    detection: Optional[str] = None
    discard_original_filename: Optional[bool] = None

    eager: Optional[str] = None
    eager_async: Optional[bool] = None
    eager_notification_url: Optional[str] = None
    exif: Optional[bool] = None

    face_coordinates: Optional[str] = None
    faces: Optional[bool] = None
    folder: Optional[str] = None
    format: Optional[str] = None

    headers: Optional[str] = None

    image_metadata: Optional[bool] = None
    invalidate: Optional[bool] = None

    keep_original: Optional[bool] = None

    moderation: Optional[str] = None

    next_cursor: Optional[str] = None
    notification_url: Optional[str] = None

    ocr: Optional[str] = None
    overwrite: Optional[bool] = None

    phash: Optional[bool] = None
    proxy: Optional[str] = None
    public_id: Optional[str] = None

    quality_analysis: Optional[bool] = None

    raw_convert: Optional[str] = None
    return_delete_token: Optional[bool] = None
    resource_type: Optional[str] = None

    tags: Optional[Union[str, List[str]]] = None
    timestamp: Optional[str] = None
    transformation: Optional[str] = None
    type: Optional[str] = None

    unique_filename: Optional[bool] = None
    # Required for unsigned uploading, optional for signed uploading
    upload_preset: Optional[str] = None
    use_filename: Optional[bool] = None

    def set_fields(self) -> Dict[str, object]:
        """Fields that were given a value, keyed by their API name."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def upload_params(self) -> Dict[str, str]:
        """Form parameters for an upload request.

        Values that serialize to an empty string are dropped, as they are
        when signing.
        """
        params = {}
        for name, value in self.set_fields().items():
            if name in PATH_FIELDS or name in ADMIN_FIELDS or name == "timestamp":
                continue
            serialized = serialize_param(value)
            if serialized != "":
                params[name] = serialized
        return params

    def admin_params(self) -> Dict[str, str]:
        """Query parameters understood by the admin delete endpoints."""
        fields = self.set_fields()
        return {
            name: serialize_param(fields[name])
            for name in ("keep_original", "invalidate", "next_cursor")
            if name in fields
        }

    def resource_type_or_default(self) -> str:
        return self.resource_type or DEFAULT_RESOURCE_TYPE

    def storage_type_or_default(self) -> str:
        return self.type or DEFAULT_STORAGE_TYPE


SetOption = Callable[[Options], None]


def apply_options(*setters: SetOption) -> Options:
    """Build a fresh Options and apply setters in order; the last write wins."""
    options = Options()
    for setter in setters:
        setter(options)
    return options


def _setter(field_name: str, value) -> SetOption:
    def apply(options: Options) -> None:
        setattr(options, field_name, value)
    return apply


def with_upload_preset(upload_preset: str) -> SetOption:
    return _setter("upload_preset", upload_preset)


def with_public_id(public_id: str) -> SetOption:
    return _setter("public_id", public_id)


def with_folder(folder: str) -> SetOption:
    return _setter("folder", folder)


def with_use_filename(use_filename: bool) -> SetOption:
    return _setter("use_filename", use_filename)


def with_unique_filename(unique_filename: bool) -> SetOption:
    return _setter("unique_filename", unique_filename)


def with_resource_type(resource_type: str) -> SetOption:
    """Resource type to route the request to: image, video, raw or auto."""
    return _setter("resource_type", resource_type)


def with_type(storage_type: str) -> SetOption:
    """Storage type: upload, private or authenticated."""
    return _setter("type", storage_type)


def with_access_mode(access_mode: str) -> SetOption:
    return _setter("access_mode", access_mode)


def with_discard_original_filename(discard: bool) -> SetOption:
    return _setter("discard_original_filename", discard)


def with_overwrite(overwrite: bool) -> SetOption:
    return _setter("overwrite", overwrite)


def with_tags(tags: Union[str, List[str]]) -> SetOption:
    """Tags as a comma separated string or a list."""
    return _setter("tags", tags)


def with_context(context: str) -> SetOption:
    """Key-value pairs separated by ``|``, e.g. ``alt=Logo|caption=Home``."""
    return _setter("context", context)


def with_colors(colors: bool) -> SetOption:
    return _setter("colors", colors)


def with_faces(faces: bool) -> SetOption:
    return _setter("faces", faces)


def with_quality_analysis(quality_analysis: bool) -> SetOption:
    return _setter("quality_analysis", quality_analysis)


def with_image_metadata(image_metadata: bool) -> SetOption:
    return _setter("image_metadata", image_metadata)


def with_phash(phash: bool) -> SetOption:
    return _setter("phash", phash)


def with_auto_tagging(confidence: float) -> SetOption:
    return _setter("auto_tagging", confidence)


def with_categorization(categorization: str) -> SetOption:
    return _setter("categorization", categorization)


def with_detection(detection: str) -> SetOption:
    return _setter("detection", detection)


def with_ocr(ocr: str) -> SetOption:
    return _setter("ocr", ocr)


def with_exif(exif: bool) -> SetOption:
    return _setter("exif", exif)


def with_keep_original(keep_original: bool) -> SetOption:
    return _setter("keep_original", keep_original)


def with_invalidate(invalidate: bool) -> SetOption:
    return _setter("invalidate", invalidate)


def with_next_cursor(next_cursor: str) -> SetOption:
    return _setter("next_cursor", next_cursor)


def with_timestamp(timestamp: Union[int, str]) -> SetOption:
    """Pin the signing timestamp instead of using the current time."""
    return _setter("timestamp", str(timestamp))


def with_transformation(transformation: str) -> SetOption:
    return _setter("transformation", transformation)


def with_eager(eager: str) -> SetOption:
    return _setter("eager", eager)


def with_notification_url(url: str) -> SetOption:
    return _setter("notification_url", url)


def with_callback(callback: str) -> SetOption:
    return _setter("callback", callback)


def with_moderation(moderation: str) -> SetOption:
    return _setter("moderation", moderation)


def with_format(fmt: str) -> SetOption:
    return _setter("format", fmt)


def with_backup(backup: bool) -> SetOption:
    return _setter("backup", backup)
