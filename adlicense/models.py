"""
Data carried through the decode and verify pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

# Value of an end time that was never set by the key.
UNSET_END_TIME = datetime.min.replace(tzinfo=timezone.utc)


class LicenseFormat(str, Enum):
    """Wire formats a license key can use."""

    V1 = "v1"
    V2 = "v2"


@dataclass(frozen=True)
class LicenseAttributes:
    """Attributes read from a license key."""

    end_time: datetime = UNSET_END_TIME
    domain_limitation: Optional[str] = None
    customer_notice: Optional[str] = None
    edition: Optional[str] = None
    domain_number_limit: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the attributes as a JSON-friendly dict."""
        return {
            "end_time": self.end_time.isoformat(),
            "domain_limitation": self.domain_limitation,
            "customer_notice": self.customer_notice,
            "edition": self.edition,
            "domain_number_limit": self.domain_number_limit,
        }


@dataclass(frozen=True)
class DecodedLicense:
    """
    Output of a decoder: raw attribute fields plus the exact bytes to verify.

    ``fields`` holds (attribute name, raw value) pairs in read order; they are
    only interpreted once ``signature`` has been checked against ``payload``.
    """

    format: LicenseFormat
    fields: Tuple[Tuple[str, bytes], ...] = field(repr=False)
    payload: bytes = field(repr=False)
    signature: bytes = field(repr=False)
