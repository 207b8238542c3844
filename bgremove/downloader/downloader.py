"""
Downloader for background-removed images.

The upload client only returns the URL of the processed image; this module
fetches the bytes and writes them next to the original, named
``<original stem>-no-bg.png``.

Example usage:
    >>> name = result_filename("holiday.photo.jpg")
    >>> name
    'holiday.photo-no-bg.png'
    >>> result = asyncio.run(download_result(url, f"./out/{name}"))
    >>> if result.success:
    ...     print(f"Saved {result.file_size_bytes} bytes to {result.file_path}")
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import httpx

from bgremove.errors import DownloadError
from bgremove.utils.config import RemoverConfig, get_config
from bgremove.utils.logging import get_logger, log_function_call
from bgremove.utils.metrics import get_metrics

# Module logger
logger = get_logger(__name__)

RESULT_SUFFIX = "-no-bg.png"
DEFAULT_STEM = "image"


@dataclass
class DownloadResult:
    """
    Result of a download operation.

    Attributes:
        success: Whether the image was saved
        file_path: Absolute path of the saved file (None if failed)
        source_url: URL the image was fetched from
        error_message: Error description if the download failed
        file_size_bytes: Size of the saved file in bytes
        duration_seconds: Time taken for the download
    """

    success: bool
    file_path: Optional[str]
    source_url: str
    error_message: Optional[str] = None
    file_size_bytes: Optional[int] = None
    duration_seconds: Optional[float] = None


def result_filename(original_name: Optional[str]) -> str:
    """
    Name for the processed copy of an image.

    The last extension is dropped; names without one fall back to "image".

    Example:
        >>> result_filename("cat.jpg")
        'cat-no-bg.png'
        >>> result_filename("README")
        'image-no-bg.png'
    """
    stem = ".".join((original_name or "").split(".")[:-1]) or DEFAULT_STEM
    return f"{stem}{RESULT_SUFFIX}"


def result_filenames(original_names: Sequence[Optional[str]]) -> List[str]:
    """
    Result names for a batch, unique within the batch.

    Names that would collide (``cat.png`` and ``cat.jpg`` both map to
    ``cat-no-bg.png``) get a numeric suffix in input order. Comparison is
    case-insensitive so the names stay distinct on case-folding filesystems.

    Example:
        >>> result_filenames(["cat.png", "cat.jpg", "dog.png"])
        ['cat-no-bg.png', 'cat-no-bg-2.png', 'dog-no-bg.png']
    """
    names: List[str] = []
    taken = set()
    for original_name in original_names:
        name = result_filename(original_name)
        base = name[: -len(".png")]
        counter = 2
        while name.lower() in taken:
            name = f"{base}-{counter}.png"
            counter += 1
        taken.add(name.lower())
        names.append(name)
    return names


@log_function_call
async def download_result(
    url: str,
    output_path: str,
    overwrite: bool = False,
    *,
    client: Optional[httpx.AsyncClient] = None,
    config: Optional[RemoverConfig] = None,
) -> DownloadResult:
    """
    Fetch a processed image and write it to disk.

    Args:
        url: Result URL returned by the upload client
        output_path: Local file path to write
        overwrite: Whether to replace an existing file (default: False)
        client: Optional shared HTTP client (not closed by this function)
        config: Timeout settings (defaults to environment config)

    Returns:
        DownloadResult with the saved path or an error message

    Raises:
        ValueError: If url or output_path is empty
    """
    if not url or not url.strip():
        raise ValueError("url cannot be empty")
    if not output_path or not output_path.strip():
        raise ValueError("output_path cannot be empty")

    config = config or get_config()
    start_time = time.time()
    output_path_obj = Path(output_path)

    if output_path_obj.exists() and not overwrite:
        logger.warning(f"File already exists and overwrite=False: {output_path}. Skipping download.")
        return DownloadResult(
            success=True,
            file_path=str(output_path_obj.absolute()),
            source_url=url,
            file_size_bytes=output_path_obj.stat().st_size,
            duration_seconds=time.time() - start_time,
        )

    logger.info(f"Downloading {url} -> {output_path}")

    try:
        if client is not None:
            response = await client.get(url)
        else:
            async with httpx.AsyncClient(
                timeout=config.download_timeout_seconds, follow_redirects=True
            ) as owned:
                response = await owned.get(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Download failed: {type(e).__name__}: {e}")
        get_metrics().record_download(success=False)
        return DownloadResult(
            success=False,
            file_path=None,
            source_url=url,
            error_message=DownloadError().message,
            duration_seconds=time.time() - start_time,
        )

    try:
        output_path_obj.parent.mkdir(parents=True, exist_ok=True)
        output_path_obj.write_bytes(response.content)
    except OSError as e:
        logger.error(f"Could not save download to {output_path}: {type(e).__name__}: {e}")
        get_metrics().record_download(success=False)
        return DownloadResult(
            success=False,
            file_path=None,
            source_url=url,
            error_message=DownloadError().message,
            duration_seconds=time.time() - start_time,
        )

    duration = time.time() - start_time
    file_size = len(response.content)
    logger.info(f"Saved {file_size} bytes to {output_path} in {duration:.2f}s")
    get_metrics().record_download(success=True)

    return DownloadResult(
        success=True,
        file_path=str(output_path_obj.absolute()),
        source_url=url,
        file_size_bytes=file_size,
        duration_seconds=duration,
    )
