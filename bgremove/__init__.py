"""
bgremove

Client for Cloudinary's AI background removal: parses a connection string,
signs an upload request with an eager ``e_background_removal``
transformation, and returns the URL of the processed image.

This package provides modular components:
- credentials: Connection-string parsing
- signing: Canonical parameter string and SHA-1 request signature
- uploader: Signed multipart upload and response classification
- downloader: Saving processed images locally
- state: Application state reducer for interactive front ends
- utils: Logging, configuration and metrics
"""

__version__ = "0.1.0"

from bgremove.utils.logging import setup_logging

# Initialize default logging configuration
setup_logging()

from bgremove.credentials import Credentials, parse_connection_string  # noqa: E402
from bgremove.errors import BackgroundRemovalError, ErrorKind  # noqa: E402
from bgremove.uploader import ImageFile, UploadOutcome, remove_background, upload_image  # noqa: E402

__all__ = [
    "BackgroundRemovalError",
    "Credentials",
    "ErrorKind",
    "ImageFile",
    "UploadOutcome",
    "parse_connection_string",
    "remove_background",
    "upload_image",
]
