"""
Signed Cloudinary upload client.

Uploads images with an eager background-removal transformation and returns
the processed image URL or a classified error.
"""

from .uploader import (
    EAGER_TRANSFORMATION,
    ImageFile,
    UploadOutcome,
    classify_service_error,
    extract_result_url,
    load_image,
    remove_background,
    remove_background_batch,
    upload_image,
    validate_image_path,
)

__all__ = [
    "EAGER_TRANSFORMATION",
    "ImageFile",
    "UploadOutcome",
    "classify_service_error",
    "extract_result_url",
    "load_image",
    "remove_background",
    "remove_background_batch",
    "upload_image",
    "validate_image_path",
]
