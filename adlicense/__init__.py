"""
License key verification.

Decodes V1 and V2 (``PC2``) license keys, checks their RSA signature against
the embedded public key and exposes the licensed attributes.
"""

from adlicense.config import LicenseSettings
from adlicense.errors import (
    FailureReason,
    LicenseError,
    LicenseValidationError,
    MalformedLicenseError,
    MissingLicenseError,
    SignatureInvalidError,
    UnsupportedFormatError,
)
from adlicense.license import License, VerificationResult, verify_license_key
from adlicense.models import LicenseAttributes, LicenseFormat
from adlicense.provider import LicenseInfoSource, LicenseProvider
from adlicense.signature import SignatureVerifier

__all__ = [
    "FailureReason",
    "License",
    "LicenseAttributes",
    "LicenseError",
    "LicenseFormat",
    "LicenseInfoSource",
    "LicenseProvider",
    "LicenseSettings",
    "LicenseValidationError",
    "MalformedLicenseError",
    "MissingLicenseError",
    "SignatureInvalidError",
    "SignatureVerifier",
    "UnsupportedFormatError",
    "VerificationResult",
    "verify_license_key",
]
