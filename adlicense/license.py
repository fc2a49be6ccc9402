"""
License key validation.

``verify_license_key`` runs the whole pipeline -- format detection, decoding,
signature verification, post-processing -- and reports the outcome as a
:class:`VerificationResult` without raising. :class:`License` is the strict
wrapper: constructing one either yields a verified, read-only license or
raises :class:`~adlicense.errors.LicenseValidationError`.

Usage::

    license = License(settings.license, settings=settings)
    if license.is_expired():
        ...
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from adlicense.codec import decode_attributes, decode_license_key
from adlicense.config import LicenseSettings
from adlicense.errors import FailureReason, LicenseError, LicenseValidationError
from adlicense.models import LicenseAttributes, LicenseFormat
from adlicense.signature import SignatureVerifier

logger = logging.getLogger(__name__)

DEBUG_LICENSE_KEY = "debug"

# Edition whose keys carry no domain limitation but are limited to one domain.
PRO_EDITION = "Pro"


def _describe_key(license_key: Optional[str]) -> str:
    """Short, log-safe description of a key."""
    if not license_key:
        return "<empty>"
    return f"{license_key[:8]}... ({len(license_key)} chars)"


def _debug_attributes() -> LicenseAttributes:
    return LicenseAttributes(
        end_time=datetime.max.replace(tzinfo=timezone.utc),
        domain_limitation=None,
        customer_notice="debug version",
    )


def apply_edition_defaults(attributes: LicenseAttributes) -> LicenseAttributes:
    """Pro keys without a domain limitation are limited to a single domain."""
    if attributes.edition == PRO_EDITION and attributes.domain_limitation is None:
        return dataclasses.replace(attributes, domain_number_limit=1)
    return attributes


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying one license key."""

    license_key: Optional[str]
    attributes: Optional[LicenseAttributes] = None
    reason: Optional[FailureReason] = None
    format: Optional[LicenseFormat] = None

    @property
    def valid(self) -> bool:
        return self.attributes is not None

    @classmethod
    def success(
        cls,
        license_key: str,
        attributes: LicenseAttributes,
        key_format: Optional[LicenseFormat] = None,
    ) -> "VerificationResult":
        return cls(license_key=license_key, attributes=attributes, format=key_format)

    @classmethod
    def failure(
        cls, license_key: Optional[str], reason: FailureReason
    ) -> "VerificationResult":
        return cls(license_key=license_key, reason=reason)


# ---------------------------------------------------------------------------
# Core validation
# ---------------------------------------------------------------------------


def verify_license_key(
    license_key: Optional[str],
    settings: Optional[LicenseSettings] = None,
    verifier: Optional[SignatureVerifier] = None,
) -> VerificationResult:
    """
    Decode and verify *license_key*.

    Never raises for a bad key: the result is either valid, carrying the
    attributes, or invalid, carrying the :class:`FailureReason`.
    """
    logger.debug("Starting license analysis for %s", _describe_key(license_key))

    if (
        settings is not None
        and settings.allow_debug_key
        and license_key
        and license_key.lower() == DEBUG_LICENSE_KEY
    ):
        logger.warning("Debug license key accepted")
        return VerificationResult.success(license_key, _debug_attributes())

    try:
        decoded = decode_license_key(license_key)
        logger.debug("Decoded %s license, verifying signature", decoded.format.value)
        if verifier is None:
            verifier = SignatureVerifier()
        verifier.verify(decoded.payload, decoded.signature)
        attributes = decode_attributes(decoded)
    except LicenseError as exc:
        logger.warning("License rejected (%s): %s", exc.reason.value, exc)
        return VerificationResult.failure(license_key, exc.reason)
    except Exception as exc:
        logger.error("Unexpected error while validating license: %s", exc)
        return VerificationResult.failure(license_key, FailureReason.MALFORMED_LICENSE)

    if decoded.format is LicenseFormat.V2:
        attributes = apply_edition_defaults(attributes)
    logger.info("License verified (%s)", decoded.format.value)
    return VerificationResult.success(license_key, attributes, decoded.format)


class License:
    """
    A verified license.

    The constructor does all the work; there is no way to obtain a
    ``License`` whose signature has not been checked. Instances are
    read-only.
    """

    __slots__ = ("_license_key", "_attributes", "_format")

    def __init__(
        self,
        license_key: Optional[str],
        settings: Optional[LicenseSettings] = None,
        verifier: Optional[SignatureVerifier] = None,
    ) -> None:
        result = verify_license_key(license_key, settings=settings, verifier=verifier)
        if not result.valid:
            raise LicenseValidationError(result.reason)
        object.__setattr__(self, "_license_key", license_key)
        object.__setattr__(self, "_attributes", result.attributes)
        object.__setattr__(self, "_format", result.format)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __repr__(self) -> str:
        return (
            f"License(edition={self.edition!r}, end_time={self.end_time.isoformat()}, "
            f"domain_limitation={self.domain_limitation!r})"
        )

    # ----- accessors ------------------------------------------------------

    @property
    def license_key(self) -> str:
        """The key string this license was built from."""
        return self._license_key

    @property
    def format(self) -> Optional[LicenseFormat]:
        """Wire format of the key (``None`` for the debug key)."""
        return self._format

    @property
    def attributes(self) -> LicenseAttributes:
        return self._attributes

    @property
    def end_time(self) -> datetime:
        return self._attributes.end_time

    @property
    def domain_limitation(self) -> Optional[str]:
        return self._attributes.domain_limitation

    @property
    def customer_notice(self) -> Optional[str]:
        return self._attributes.customer_notice

    @property
    def edition(self) -> Optional[str]:
        return self._attributes.edition

    @property
    def domain_number_limit(self) -> Optional[int]:
        return self._attributes.domain_number_limit

    # ----- helpers --------------------------------------------------------

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Return ``True`` once *now* (default: current UTC time) is past the end time."""
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now > self.end_time

    def to_dict(self) -> Dict[str, Any]:
        """Return the license attributes as a JSON-friendly dict."""
        data = self._attributes.to_dict()
        data["format"] = self._format.value if self._format is not None else None
        return data
