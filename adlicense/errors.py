"""
Error types raised while decoding and verifying license keys.

Every internal failure carries a :class:`FailureReason` so the cause can be
logged and reported through :class:`~adlicense.license.VerificationResult`.
Callers that construct a :class:`~adlicense.license.License` only ever see
:class:`LicenseValidationError`.
"""

from __future__ import annotations

from enum import Enum


class FailureReason(str, Enum):
    """Why a license key was rejected."""

    MISSING_LICENSE = "missing_license"
    MALFORMED_LICENSE = "malformed_license"
    SIGNATURE_INVALID = "signature_invalid"
    UNSUPPORTED_FORMAT = "unsupported_format"


class LicenseError(Exception):
    """Base class for every license failure."""

    reason: FailureReason = FailureReason.MALFORMED_LICENSE


class MissingLicenseError(LicenseError):
    """No license key was supplied."""

    reason = FailureReason.MISSING_LICENSE


class MalformedLicenseError(LicenseError):
    """The key could not be decoded into a payload and signature."""

    reason = FailureReason.MALFORMED_LICENSE


class SignatureInvalidError(LicenseError):
    """The payload decoded but its signature does not verify."""

    reason = FailureReason.SIGNATURE_INVALID


class UnsupportedFormatError(LicenseError):
    """The key announces a format this version cannot decode."""

    reason = FailureReason.UNSUPPORTED_FORMAT


class LicenseValidationError(LicenseError):
    """
    Public failure raised by :class:`~adlicense.license.License`.

    The message never says more than whether a key was provided at all; the
    underlying cause is only logged.
    """

    NO_LICENSE_MESSAGE = "No license has been provided"
    INVALID_MESSAGE = "the license couldn't validate"

    def __init__(self, reason: FailureReason) -> None:
        self.reason = reason
        if reason is FailureReason.MISSING_LICENSE:
            message = self.NO_LICENSE_MESSAGE
        else:
            message = self.INVALID_MESSAGE
        super().__init__(message)
