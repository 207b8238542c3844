"""
Signed Cloudinary upload client with eager background removal.

Uploads an image to the Cloudinary upload API together with an eager
``e_background_removal`` transformation, authenticated by a SHA-1 request
signature, and turns the response into the URL of the processed image or a
classified error from :mod:`bgremove.errors`. No retries are performed; retry
policy belongs to the caller.

Example usage:
    >>> from bgremove.credentials import parse_connection_string
    >>> from bgremove.uploader import load_image, remove_background
    >>> credentials = parse_connection_string(os.environ["CLOUDINARY_URL"])
    >>> image = load_image("./photos/cat.png")
    >>> url = asyncio.run(remove_background(image, credentials))
"""

import asyncio
import mimetypes
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, AsyncIterator, List, Optional, Sequence

import httpx

from bgremove.credentials import Credentials
from bgremove.errors import (
    AuthenticationError,
    BackgroundRemovalError,
    ErrorKind,
    FeatureUnavailableError,
    NetworkError,
    ResponseShapeError,
    UploadError,
)
from bgremove.signing import sign_parameters
from bgremove.utils.config import RemoverConfig, get_config
from bgremove.utils.logging import get_logger, log_function_call
from bgremove.utils.metrics import get_metrics

# Module logger
logger = get_logger(__name__)

# Eager transformation requested with every upload
EAGER_TRANSFORMATION = "e_background_removal"

# Input checks applied by callers before uploading
SUPPORTED_EXTENSIONS = [".png", ".jpg", ".jpeg", ".webp"]
MIN_FILE_SIZE_BYTES = 1


@dataclass
class ImageFile:
    """
    An image to upload.

    Attributes:
        filename: Name sent with the multipart file part
        content: Raw image bytes (excluded from repr)
        content_type: MIME type of the image
    """

    filename: str
    content: bytes = field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass
class UploadOutcome:
    """
    Settled result of a background removal upload.

    Exactly one of ``result_url`` (success) or ``error_kind`` with
    ``error_message`` (failure) is set.

    Attributes:
        success: Whether a processed image URL was obtained
        filename: Name of the uploaded image
        result_url: Secure URL of the processed image
        error_kind: Classification of the failure
        error_message: User-facing failure description
        file_size_bytes: Size of the uploaded image
        duration_seconds: Time spent on the request
    """

    success: bool
    filename: str
    result_url: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    file_size_bytes: int = 0
    duration_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.success and (self.result_url is None or self.error_kind is not None):
            raise ValueError("Successful outcome needs a result_url and no error_kind")
        if not self.success and (self.result_url is not None or self.error_kind is None):
            raise ValueError("Failed outcome needs an error_kind and no result_url")


@log_function_call
def validate_image_path(path: str, max_size_mb: Optional[int] = None) -> bool:
    """
    Check that a local path is an uploadable image.

    Args:
        path: Path to the image file
        max_size_mb: Size limit in megabytes (defaults to configuration)

    Returns:
        True if the file exists, is a PNG/JPEG/WEBP image and is within the
        size limit, False otherwise
    """
    path_obj = Path(path)
    if max_size_mb is None:
        max_size_mb = get_config().max_upload_size_mb

    if not path_obj.exists():
        logger.error(f"File not found: {path}")
        return False

    if not path_obj.is_file():
        logger.error(f"Path is not a file: {path}")
        return False

    if path_obj.suffix.lower() not in SUPPORTED_EXTENSIONS:
        logger.error(
            f"Unsupported image type '{path_obj.suffix}'. "
            f"Supported: {SUPPORTED_EXTENSIONS}"
        )
        return False

    file_size = path_obj.stat().st_size
    if file_size < MIN_FILE_SIZE_BYTES:
        logger.error(f"File is empty: {path}")
        return False

    max_size_bytes = max_size_mb * 1024 * 1024
    if file_size > max_size_bytes:
        logger.error(f"File too large: {file_size} > {max_size_bytes} bytes ({max_size_mb}MB)")
        return False

    return True


def load_image(path: str) -> ImageFile:
    """
    Read an image from disk.

    Args:
        path: Path to the image file

    Returns:
        ImageFile with the file name, bytes and guessed MIME type

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path_obj = Path(path)
    content_type, _ = mimetypes.guess_type(path_obj.name)
    return ImageFile(
        filename=path_obj.name,
        content=path_obj.read_bytes(),
        content_type=content_type or "application/octet-stream",
    )


def classify_service_error(message: Optional[str]) -> BackgroundRemovalError:
    """
    Map an error message reported by the service onto the error taxonomy.

    Args:
        message: ``error.message`` from the response body, if any

    Returns:
        The classified (not yet raised) error
    """
    if message and "Invalid signature" in message:
        return AuthenticationError()
    if message and "add-on" in message:
        return FeatureUnavailableError()
    return UploadError(message or "")


def extract_result_url(body: Any) -> str:
    """
    Pull the processed image URL out of a successful upload response.

    Only the first eager result is consulted since a single transformation
    is requested.

    Raises:
        ResponseShapeError: If ``eager[0].secure_url`` is missing
    """
    eager = body.get("eager") if isinstance(body, dict) else None
    if not isinstance(eager, list) or not eager:
        raise ResponseShapeError()

    first = eager[0]
    secure_url = first.get("secure_url") if isinstance(first, dict) else None
    if not isinstance(secure_url, str) or not secure_url:
        raise ResponseShapeError()
    return secure_url


def _service_error_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return None


@asynccontextmanager
async def _http_client(
    client: Optional[httpx.AsyncClient], timeout_seconds: float
) -> AsyncIterator[httpx.AsyncClient]:
    # Caller-owned clients are left open
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout_seconds) as owned:
        yield owned


@log_function_call
async def remove_background(
    image: ImageFile,
    credentials: Credentials,
    *,
    client: Optional[httpx.AsyncClient] = None,
    config: Optional[RemoverConfig] = None,
    timestamp: Optional[int] = None,
) -> str:
    """
    Upload an image and return the URL of its background-removed version.

    Args:
        image: Image to upload
        credentials: Parsed credentials for this call
        client: Optional shared HTTP client (not closed by this function)
        config: Endpoint and timeout settings (defaults to environment config)
        timestamp: Unix timestamp to sign (defaults to now)

    Returns:
        Secure URL of the processed image

    Raises:
        AuthenticationError: The service rejected the signature
        FeatureUnavailableError: Background removal is not enabled
        UploadError: Any other error reported by the service
        ResponseShapeError: No eager result in a successful response
        NetworkError: Transport failure or unreadable response
    """
    config = config or get_config()
    if timestamp is None:
        timestamp = round(time.time())

    signed_params = {"eager": EAGER_TRANSFORMATION, "timestamp": timestamp}
    signature = sign_parameters(signed_params, credentials.secret)

    data = {
        "api_key": credentials.key,
        "timestamp": str(timestamp),
        "signature": signature,
        "eager": EAGER_TRANSFORMATION,
    }
    files = {"file": (image.filename, image.content, image.content_type)}
    upload_url = config.upload_url(credentials.account)

    logger.info(
        f"Uploading {image.filename} ({image.size_bytes} bytes) to "
        f"account {credentials.account} with eager={EAGER_TRANSFORMATION}"
    )

    try:
        async with _http_client(client, config.request_timeout_seconds) as http:
            response = await http.post(upload_url, data=data, files=files)
        body = response.json()

        if not response.is_success or _service_error_message(body) is not None:
            message = _service_error_message(body)
            logger.error(f"Cloudinary returned HTTP {response.status_code}: {message}")
            raise classify_service_error(message)

        result_url = extract_result_url(body)

    except BackgroundRemovalError:
        raise
    except Exception as e:
        logger.error(f"Cloudinary upload error: {type(e).__name__}: {e}")
        raise NetworkError() from e

    logger.info(f"Background removed: {image.filename} -> {result_url}")
    return result_url


@log_function_call
async def upload_image(
    image: ImageFile,
    credentials: Credentials,
    *,
    client: Optional[httpx.AsyncClient] = None,
    config: Optional[RemoverConfig] = None,
    timestamp: Optional[int] = None,
) -> UploadOutcome:
    """
    Run :func:`remove_background` and settle the result.

    Classified failures are returned as a failed :class:`UploadOutcome`
    instead of being raised.

    Returns:
        UploadOutcome with either the result URL or the error kind and message
    """
    metrics = get_metrics()
    start_time = time.time()

    try:
        with metrics.track_removal():
            result_url = await remove_background(
                image, credentials, client=client, config=config, timestamp=timestamp
            )
    except BackgroundRemovalError as e:
        metrics.record_removal_failure(kind=e.kind.value)
        return UploadOutcome(
            success=False,
            filename=image.filename,
            error_kind=e.kind,
            error_message=e.message,
            file_size_bytes=image.size_bytes,
            duration_seconds=time.time() - start_time,
        )

    metrics.record_removal_success(bytes_uploaded=image.size_bytes)
    return UploadOutcome(
        success=True,
        filename=image.filename,
        result_url=result_url,
        file_size_bytes=image.size_bytes,
        duration_seconds=time.time() - start_time,
    )


async def remove_background_batch(
    images: Sequence[ImageFile],
    credentials: Credentials,
    *,
    client: Optional[httpx.AsyncClient] = None,
    config: Optional[RemoverConfig] = None,
) -> List[UploadOutcome]:
    """
    Remove backgrounds from several images concurrently.

    Each image is an independent upload; one failing does not affect the
    others. All uploads share a single HTTP client.

    Returns:
        One UploadOutcome per image, in input order
    """
    config = config or get_config()
    logger.info(f"Starting batch background removal: {len(images)} images")

    async with _http_client(client, config.request_timeout_seconds) as http:
        outcomes = await asyncio.gather(
            *(upload_image(image, credentials, client=http, config=config) for image in images)
        )

    successful = sum(1 for outcome in outcomes if outcome.success)
    logger.info(f"Batch background removal complete: {successful}/{len(outcomes)} successful")
    return list(outcomes)
