"""
Signature computation for authenticated Cloudinary uploads.

The service authenticates a subset of the request parameters: every field
except ``file``, ``api_key`` and ``signature``. The signed parameters are
sorted by name, serialized as ``name=value`` pairs joined by ``&``, and the
API secret is appended with no separator. The signature is the lowercase hex
SHA-1 digest of that string's UTF-8 encoding.

Example:
    >>> build_signable_string({"timestamp": 1700000000, "eager": "e_background_removal"}, "s3cr3t")
    'eager=e_background_removal&timestamp=1700000000s3cr3t'
"""

import hashlib
from typing import Any, Mapping

UNSIGNED_PARAMETERS = frozenset(["file", "api_key", "signature"])


def build_signable_string(params: Mapping[str, Any], secret: str) -> str:
    """
    Build the canonical string covered by the signature.

    Args:
        params: Request parameters; unsigned fields are ignored
        secret: API secret appended to the serialized parameters

    Returns:
        Canonical signable string
    """
    signed = sorted(
        (name, value) for name, value in params.items() if name not in UNSIGNED_PARAMETERS
    )
    serialized = "&".join(f"{name}={value}" for name, value in signed)
    return f"{serialized}{secret}"


def sign_parameters(params: Mapping[str, Any], secret: str) -> str:
    """
    Compute the request signature.

    Args:
        params: Request parameters to sign
        secret: API secret

    Returns:
        40-character lowercase hex SHA-1 digest
    """
    canonical = build_signable_string(params, secret)
    return hashlib.sha1(canonical.encode("utf-8")).hexdigest()
