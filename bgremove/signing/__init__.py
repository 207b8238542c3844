"""
Request signing for the Cloudinary upload API.
"""

from .signing import (
    UNSIGNED_PARAMETERS,
    build_signable_string,
    sign_parameters,
)

__all__ = [
    "UNSIGNED_PARAMETERS",
    "build_signable_string",
    "sign_parameters",
]
