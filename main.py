# main.py
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional, Dict, List, Any
import logging

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError as PydanticValidationError

from cloudinary_client import CloudinaryClient, Options
from cloudinary_client.config import get_config
from cloudinary_client.exceptions import (
    CloudinaryError,
    ConfigurationError,
    InvalidSourceError,
    UnsupportedSourceError,
    ValidationError,
    APIError,
    AuthenticationError,
    NotFoundError,
    RateLimitExceededError,
    NetworkError,
    create_user_friendly_error
)
from cloudinary_client.models import UploadResponse, DeleteResponse
from cloudinary_client.utils.multipart import current_timestamp
from cloudinary_client.utils.signature import compute_signature
from cloudinary_client.utils.validation import sanitize_url, validate_upload_options

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

try:
    config = get_config()
    logger.info("Configuration loaded successfully")
except Exception as e:
    logger.error(f"Failed to initialize application: {e}")
    raise

_client: Optional[CloudinaryClient] = None


def get_client() -> CloudinaryClient:
    """Shared client, created on first use."""
    global _client
    if _client is None:
        _client = CloudinaryClient(config=config)
        logger.info(f"Cloudinary client created for cloud '{config.cloud_name}'")
    return _client


def set_client(client: Optional[CloudinaryClient]) -> None:
    global _client
    _client = client


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _client is not None:
        await _client.close()


app = FastAPI(
    title="Cloudinary Upload Gateway",
    description="Server-side signed uploads and asset deletion for Cloudinary",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class UploadRequest(BaseModel):
    url: str
    options: Optional[Dict[str, Any]] = {}


class UnsignedUploadRequest(UploadRequest):
    upload_preset: str


class SignatureRequest(BaseModel):
    params: Dict[str, Any] = {}


class SignatureResponse(BaseModel):
    signature: str
    timestamp: str
    api_key: str
    cloud_name: str


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[Dict] = {}
    user_message: str


def _options_from(payload: Optional[Dict[str, Any]]) -> List:
    """Turn a JSON options object into setters for the upload service."""
    fields = Options.model_validate(validate_upload_options(payload)).model_dump(exclude_none=True)

    def apply(options: Options) -> None:
        for name, value in fields.items():
            setattr(options, name, value)

    return [apply]


def _status_for(exc: CloudinaryError) -> int:
    if isinstance(exc, ConfigurationError):
        return 503  # Service Unavailable
    if isinstance(exc, UnsupportedSourceError):
        return 400
    if isinstance(exc, (InvalidSourceError, ValidationError)):
        return 422  # Unprocessable Entity
    if isinstance(exc, RateLimitExceededError):
        return 429
    if isinstance(exc, AuthenticationError):
        return 502  # our credentials, not the caller's
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (APIError, NetworkError)):
        return 502
    return 400


# Exception handlers
@app.exception_handler(CloudinaryError)
async def cloudinary_error_handler(request: Request, exc: CloudinaryError):
    logger.warning(f"CloudinaryError: {exc.message}", extra={"details": exc.details})

    return JSONResponse(
        status_code=_status_for(exc),
        content={
            "error": exc.__class__.__name__,
            "message": exc.message,
            "details": {k: v for k, v in exc.details.items() if k != "api_response"},
            "user_message": create_user_friendly_error(exc)
        }
    )


@app.exception_handler(PydanticValidationError)
async def validation_error_handler(request: Request, exc: PydanticValidationError):
    logger.warning(f"Validation error: {exc}")

    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append(f"{field}: {error['msg']}")

    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Input validation failed",
            "details": {"validation_errors": errors},
            "user_message": f"Invalid input: {'; '.join(errors)}"
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "InternalServerError",
            "message": "An unexpected error occurred",
            "details": {"error_type": exc.__class__.__name__},
            "user_message": "An unexpected error occurred. Please try again later."
        }
    )


@app.post("/upload", response_model=UploadResponse, responses={
    422: {"model": ErrorResponse, "description": "Invalid URL or options"},
    502: {"model": ErrorResponse, "description": "Cloudinary rejected the request"},
    503: {"model": ErrorResponse, "description": "Credentials not configured"},
})
async def upload(request: UploadRequest):
    """
    Upload a remote asset with a signed request.

    The API secret never leaves the server; callers only pass the asset URL
    and upload options.
    """
    url = sanitize_url(request.url)
    setters = _options_from(request.options)
    logger.info(f"Signed upload from: {url}")
    return await get_client().upload.upload_image(url, *setters)


@app.post("/upload/unsigned", response_model=UploadResponse, responses={
    422: {"model": ErrorResponse, "description": "Invalid URL, preset or options"},
})
async def unsigned_upload(request: UnsignedUploadRequest):
    """Upload a remote asset through an unsigned upload preset."""
    url = sanitize_url(request.url)
    setters = _options_from(request.options)
    logger.info(f"Unsigned upload from: {url} (preset {request.upload_preset})")
    return await get_client().upload.unsigned_upload_image(url, request.upload_preset, *setters)


@app.post("/signature", response_model=SignatureResponse)
async def sign(request: SignatureRequest):
    """
    Sign upload parameters for a direct browser-to-Cloudinary upload.

    The browser posts the returned signature, timestamp and api_key together
    with exactly the parameters that were signed.
    """
    config.require_credentials(signed=True)
    params = validate_upload_options(request.params)
    params["timestamp"] = str(params.get("timestamp") or current_timestamp())
    signature = compute_signature(params, config.api_secret, config.signature_algorithm)
    return SignatureResponse(
        signature=signature,
        timestamp=params["timestamp"],
        api_key=config.api_key,
        cloud_name=config.cloud_name,
    )


@app.delete("/resources/{resource_type}/{storage_type}", response_model=DeleteResponse)
async def delete_resources(
    resource_type: str,
    storage_type: str,
    public_ids: List[str] = Query(...),
    keep_original: Optional[bool] = None,
    invalidate: Optional[bool] = None,
):
    """Delete up to 100 assets by public ID."""
    def apply(o: Options) -> None:
        o.resource_type = resource_type
        o.type = storage_type
        o.keep_original = keep_original
        o.invalidate = invalidate

    logger.info(f"Deleting {len(public_ids)} {resource_type}/{storage_type} resources")
    return await get_client().admin.delete_resources(public_ids, apply)


@app.get("/health")
async def health_check():
    """
    Health check endpoint with configuration status.
    """
    try:
        config.validate()
        missing = config.missing_credentials(signed=True)

        health_status = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": "1.0.0",
            "configuration": {
                "valid": True,
                "cloud_name": config.cloud_name,
                "signed_requests": not missing,
            },
        }

        if missing:
            health_status["status"] = "degraded"
            health_status["warnings"] = [f"Missing credentials: {', '.join(missing)}"]

        return health_status

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "error": str(e),
                "user_message": create_user_friendly_error(e)
            }
        )
