import pytest

from cloudinary_client import Config, UploadResponse
from cloudinary_client.exceptions import (
    APIError, AuthenticationError, InvalidSourceError, MissingCredentialsError,
    RateLimitExceededError, UnsupportedSourceError, UploadPresetRequiredError, ValidationError
)
from cloudinary_client.options import with_public_id, with_folder, with_resource_type, with_colors, with_tags
from cloudinary_client.utils.signature import verify_signature


@pytest.mark.unit
@pytest.mark.asyncio
async def test_signed_remote_upload(make_client, form_fields, sample_upload_response):
    """Test a signed upload of a remote URL"""
    client, handler = make_client(payload=sample_upload_response)

    async with client:
        result = await client.upload.upload_image(
            "https://example.com/cat.jpg", with_public_id("cat"), with_folder("pets")
        )

    assert isinstance(result, UploadResponse)
    assert result.public_id == "pets/cat"
    assert result.version == 1312461204
    assert result.tags == ["animal", "cat"]

    request = handler.last
    assert request.method == "POST"
    assert str(request.url) == "https://api.cloudinary.com/v1_1/demo/image/upload"
    assert request.headers["content-type"].startswith("multipart/form-data")

    fields = form_fields(request)
    assert fields["file"] == "https://example.com/cat.jpg"
    assert fields["api_key"] == "987654321098765"
    assert fields["public_id"] == "cat"
    assert fields["folder"] == "pets"

    signed = {k: v for k, v in fields.items() if k not in ("signature", "file", "api_key")}
    assert verify_signature(signed, "abcd", fields["signature"])


@pytest.mark.unit
@pytest.mark.asyncio
async def test_signed_local_upload(make_client, form_fields, image_file, sample_upload_response):
    """Test a local file is streamed as a file part"""
    client, handler = make_client(payload=sample_upload_response)

    async with client:
        await client.upload.upload_image(str(image_file), with_tags(["cat"]))

    body = handler.last.content
    assert b'filename="cat.jpg"' in body
    assert image_file.read_bytes() in body
    assert form_fields(handler.last)["tags"] == "cat"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_upload_bytes(make_client, sample_upload_response):
    """Test raw bytes are uploaded as a file part"""
    client, handler = make_client(payload=sample_upload_response)

    async with client:
        await client.upload.upload_image(b"raw-image-bytes")

    assert b"raw-image-bytes" in handler.last.content


@pytest.mark.unit
@pytest.mark.asyncio
async def test_resource_type_in_path(make_client, form_fields, sample_upload_response):
    """Test resource_type selects the endpoint and is not sent as a field"""
    client, handler = make_client(payload=sample_upload_response)

    async with client:
        await client.upload.upload_image("https://example.com/clip.mp4", with_resource_type("video"))

    assert str(handler.last.url) == "https://api.cloudinary.com/v1_1/demo/video/upload"
    assert "resource_type" not in form_fields(handler.last)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unsigned_upload(make_client, form_fields, sample_upload_response):
    """Test unsigned uploads send the preset and no credentials"""
    client, handler = make_client(payload=sample_upload_response)

    async with client:
        await client.upload.unsigned_upload_image(
            "https://example.com/cat.jpg", "unsigned_avatars", with_public_id("cat")
        )

    fields = form_fields(handler.last)
    assert fields["upload_preset"] == "unsigned_avatars"
    assert fields["public_id"] == "cat"
    assert "api_key" not in fields
    assert "signature" not in fields
    assert "timestamp" not in fields


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unsigned_upload_needs_only_cloud_name(make_client, form_fields, sample_upload_response):
    """Test unsigned uploads work without key and secret"""
    config = Config(cloud_name="demo", api_key="", api_secret="")
    client, handler = make_client(payload=sample_upload_response, client_config=config)

    async with client:
        await client.upload.unsigned_upload_image("https://example.com/cat.jpg", "preset")

    assert form_fields(handler.last)["upload_preset"] == "preset"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unsigned_upload_validation(make_client):
    """Test preset and parameter checks happen before any request"""
    client, handler = make_client()

    async with client:
        with pytest.raises(UploadPresetRequiredError):
            await client.upload.unsigned_upload_image("https://example.com/cat.jpg", " ")

        with pytest.raises(ValidationError):
            await client.upload.unsigned_upload_image("https://example.com/cat.jpg", "p", with_colors(True))

    assert handler.requests == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invalid_sources(make_client, tmp_path):
    """Test empty, missing and cloud-storage sources are rejected locally"""
    client, handler = make_client()

    async with client:
        for source in [None, "", "   ", str(tmp_path / "missing.jpg"), str(tmp_path)]:
            with pytest.raises(InvalidSourceError):
                await client.upload.upload_image(source)

        with pytest.raises(UnsupportedSourceError):
            await client.upload.upload_image("s3://bucket/cat.jpg")

    assert handler.requests == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_signed_upload_requires_credentials(make_client):
    """Test signed uploads fail without a secret"""
    config = Config(cloud_name="demo", api_key="key", api_secret="")
    client, handler = make_client(client_config=config)

    async with client:
        with pytest.raises(MissingCredentialsError) as exc_info:
            await client.upload.upload_image("https://example.com/cat.jpg")

    assert exc_info.value.missing == ["CLOUDINARY_API_SECRET"]
    assert handler.requests == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_upload_api_errors(make_client):
    """Test HTTP error statuses map to client exceptions"""
    error_body = {"error": {"message": "Invalid Signature"}}

    client, _ = make_client(status_code=401, payload=error_body)
    async with client:
        with pytest.raises(AuthenticationError) as exc_info:
            await client.upload.upload_image("https://example.com/cat.jpg")
    assert exc_info.value.status_code == 401
    assert exc_info.value.api_response["message"] == "Invalid Signature"

    client, _ = make_client(status_code=420, payload={}, headers={"Retry-After": "30"})
    async with client:
        with pytest.raises(RateLimitExceededError) as exc_info:
            await client.upload.upload_image("https://example.com/cat.jpg")
    assert exc_info.value.retry_after == 30

    client, _ = make_client(status_code=400, payload={"error": {"message": "Invalid image file"}})
    async with client:
        with pytest.raises(APIError) as exc_info:
            await client.upload.upload_image("https://example.com/cat.jpg")
    assert exc_info.value.status_code == 400
    assert "Invalid image file" in exc_info.value.message


@pytest.mark.unit
@pytest.mark.asyncio
async def test_upload_invalid_json(make_client):
    """Test a non-JSON success body raises APIError"""
    client, _ = make_client(payload="<html>oops</html>")

    async with client:
        with pytest.raises(APIError) as exc_info:
            await client.upload.upload_image("https://example.com/cat.jpg")

    assert "Invalid JSON response" in exc_info.value.message


@pytest.mark.unit
@pytest.mark.asyncio
async def test_upload_response_keeps_unknown_fields(make_client, sample_upload_response):
    """Test fields not modelled explicitly are preserved"""
    client, _ = make_client(payload=sample_upload_response)

    async with client:
        result = await client.upload.upload_image("https://example.com/cat.jpg")

    assert result.model_extra["asset_id"] == "b5e6d2b39ba3e0869d67141ba7dba6cf"
