"""
Result downloader.

Fetches the processed image from its result URL and saves it locally.
"""

from .downloader import (
    RESULT_SUFFIX,
    DownloadResult,
    download_result,
    result_filename,
    result_filenames,
)

__all__ = [
    "RESULT_SUFFIX",
    "DownloadResult",
    "download_result",
    "result_filename",
    "result_filenames",
]
