"""
Hands licenses to components that need one.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from adlicense.config import LicenseSettings
from adlicense.errors import FailureReason, LicenseValidationError
from adlicense.license import License
from adlicense.signature import SignatureVerifier

logger = logging.getLogger(__name__)


class LicenseInfoSource(Protocol):
    """Anything that can report the license key it was given."""

    def get_serial_number(self) -> str:
        ...


class LicenseProvider:
    """Builds :class:`License` objects with one set of settings."""

    def __init__(
        self,
        settings: Optional[LicenseSettings] = None,
        verifier: Optional[SignatureVerifier] = None,
    ) -> None:
        self._settings = settings if settings is not None else LicenseSettings()
        self._verifier = verifier

    @property
    def settings(self) -> LicenseSettings:
        return self._settings

    def get_license(self, source: LicenseInfoSource) -> License:
        """Return the license for *source*'s serial number."""
        return License(
            source.get_serial_number(),
            settings=self._settings,
            verifier=self._verifier,
        )

    def get_configured_license(self) -> License:
        """Return the license configured in the settings."""
        if not self._settings.license:
            logger.warning("No license configured")
            raise LicenseValidationError(FailureReason.MISSING_LICENSE)
        return License(
            self._settings.license,
            settings=self._settings,
            verifier=self._verifier,
        )
