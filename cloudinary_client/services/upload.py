import logging

from .base import BaseService
from ..exceptions import InvalidSourceError, UploadPresetRequiredError
from ..models import UploadResponse
from ..options import Options, SetOption, apply_options
from ..utils.multipart import build_upload_form
from ..utils.sources import UploadSource, open_source

logger = logging.getLogger(__name__)


def _check_file(file: UploadSource) -> None:
    if file is None or (isinstance(file, str) and not file.strip()):
        raise InvalidSourceError(file, "invalid file")


class UploadService(BaseService):
    """Signed and unsigned asset uploads."""

    async def upload_image(self, file: UploadSource, *setters: SetOption) -> UploadResponse:
        """
        Upload an asset with a signed request.

        Args:
            file: Local path, remote URL, data URI, bytes or binary file object
            *setters: Option setters such as ``with_public_id``

        Returns:
            UploadResponse describing the stored asset

        Raises:
            InvalidSourceError: If the file is empty, missing or a directory
            UnsupportedSourceError: For S3 and Google Storage references
            MissingCredentialsError: If the cloud name, key or secret is unset
            APIError: If the API rejects the upload
        """
        _check_file(file)
        options = apply_options(*setters)
        self.config.require_credentials(signed=True)
        return await self._upload(file, options, signed=True)

    async def unsigned_upload_image(
        self, file: UploadSource, upload_preset: str, *setters: SetOption
    ) -> UploadResponse:
        """
        Upload an asset authorized by an unsigned upload preset.

        Unsigned requests may only set ``public_id``, ``folder``, ``callback``,
        ``tags``, ``context``, ``face_coordinates``, ``custom_coordinates`` and
        ``upload_preset``; everything else belongs in the preset. ``overwrite``
        is always false for unsigned uploads.
        """
        _check_file(file)
        if not upload_preset or not upload_preset.strip():
            raise UploadPresetRequiredError(upload_preset)

        options = apply_options(*setters)
        options.upload_preset = upload_preset
        self.config.require_credentials(signed=False)
        return await self._upload(file, options, signed=False)

    async def _upload(self, file: UploadSource, options: Options, signed: bool) -> UploadResponse:
        path = f"{options.resource_type_or_default()}/upload"

        with open_source(file) as file_value:
            form = build_upload_form(
                file_value,
                options,
                signed=signed,
                api_key=self.config.api_key,
                api_secret=self.config.api_secret,
                algorithm=self.config.signature_algorithm,
            )
            logger.info(f"Uploading {'signed' if signed else 'unsigned'} asset to {path}")
            data = await self._send("POST", path, "upload", files=form.files())

        result = UploadResponse.model_validate(data)
        logger.info(f"Uploaded {result.public_id} ({result.bytes} bytes)")
        return result
