"""
License key decoding.

Two formats are in circulation:

* **V1** -- plain base64. Four little-endian int32 lengths (date, domain
  limitation, notice, signature) followed by the four blocks. The signed
  payload is ``date + limitation + notice``.
* **V2** -- ``"PC2"`` followed by base64 of a gzip stream of TLV records
  (int32 type, int32 length, value). Record type 0 holds the signature and
  ends decoding; every record read before it, known or not, is part of the
  signed payload.

The decoders only split a key into raw fields, payload and signature.
:func:`decode_attributes` interprets the fields once the signature checks out.
"""

from __future__ import annotations

import base64
import gzip
import io
import logging
import struct
import zlib
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import IO, Any, Callable, Dict, List, Tuple

from adlicense.errors import (
    MalformedLicenseError,
    MissingLicenseError,
    UnsupportedFormatError,
)
from adlicense.models import DecodedLicense, LicenseAttributes, LicenseFormat

logger = logging.getLogger(__name__)

V2_PREFIX = "PC2"

FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)

_INT32 = struct.Struct("<i")
_INT64 = struct.Struct("<q")
_RECORD_HEADER = struct.Struct("<ii")


class RecordType(IntEnum):
    """V2 record types."""

    SIGNATURE = 0
    END_TIME = 1
    DOMAIN_LIMITATION = 2
    CUSTOMER_NOTICE = 3
    EDITION = 4
    DOMAIN_NUMBER_LIMIT = 5


# ---------------------------------------------------------------------------
# Field decoding
# ---------------------------------------------------------------------------


def filetime_to_datetime(value: int) -> datetime:
    """Convert a Windows file time (100ns ticks since 1601) to UTC."""
    if value < 0:
        raise MalformedLicenseError(f"negative file time {value}")
    try:
        return FILETIME_EPOCH + timedelta(microseconds=value // 10)
    except OverflowError as exc:
        raise MalformedLicenseError(f"file time {value} is out of range") from exc


def _unpack_first(fmt: struct.Struct, data: bytes, what: str) -> int:
    if len(data) < fmt.size:
        raise MalformedLicenseError(
            f"{what} needs {fmt.size} bytes, got {len(data)}"
        )
    return fmt.unpack_from(data, 0)[0]


def _decode_filetime(data: bytes) -> datetime:
    return filetime_to_datetime(_unpack_first(_INT64, data, "end time"))

def _decode_text(data: bytes) -> str:
    return data.decode("utf-16-le", errors="replace")


def _decode_int32(data: bytes) -> int:
    return _unpack_first(_INT32, data, "domain number limit")


_FIELD_DECODERS: Dict[str, Callable[[bytes], Any]] = {
    "end_time": _decode_filetime,
    "domain_limitation": _decode_text,
    "customer_notice": _decode_text,
    "edition": _decode_text,
    "domain_number_limit": _decode_int32,
}

_RECORD_FIELDS: Dict[int, str] = {
    RecordType.END_TIME: "end_time",
    RecordType.DOMAIN_LIMITATION: "domain_limitation",
    RecordType.CUSTOMER_NOTICE: "customer_notice",
    RecordType.EDITION: "edition",
    RecordType.DOMAIN_NUMBER_LIMIT: "domain_number_limit",
}


def decode_attributes(decoded: DecodedLicense) -> LicenseAttributes:
    """
    Interpret the raw fields of a decoded key.

    Call this only after the signature has been verified. A field that
    appears more than once keeps its last value.
    """
    values = {name: _FIELD_DECODERS[name](raw) for name, raw in decoded.fields}
    return LicenseAttributes(**values)


# ---------------------------------------------------------------------------
# Stream helpers
# ---------------------------------------------------------------------------

# Values are read in chunks so a forged length cannot reserve more memory
# than the stream actually holds.
_READ_CHUNK_SIZE = 64 * 1024


def _b64decode(text: str) -> bytes:
    # Whitespace is tolerated the way config files tend to wrap long keys.
    try:
        return base64.b64decode("".join(text.split()), validate=True)
    except ValueError as exc:
        raise MalformedLicenseError(f"license key is not valid base64: {exc}") from exc


def _read_exact(stream: IO[bytes], size: int, what: str) -> bytes:
    if size < 0:
        raise MalformedLicenseError(f"negative length {size} for {what}")
    data = bytearray()
    while len(data) < size:
        chunk = stream.read(min(size - len(data), _READ_CHUNK_SIZE))
        if not chunk:
            raise MalformedLicenseError(
                f"truncated {what}: expected {size} bytes, got {len(data)}"
            )
        data += chunk
    return bytes(data)


def _read_int32(stream: IO[bytes], what: str) -> int:
    return _INT32.unpack(_read_exact(stream, _INT32.size, what))[0]


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def detect_format(license_key: str) -> LicenseFormat:
    """Pick the decoder for *license_key* from its prefix."""
    if not license_key:
        raise MissingLicenseError("no license key provided")
    if license_key.startswith(V2_PREFIX):
        return LicenseFormat.V2
    return LicenseFormat.V1


def decode_v1(license_key: str) -> DecodedLicense:
    """Decode a fixed-field V1 key."""
    raw = _b64decode(license_key)
    with io.BytesIO(raw) as stream:
        lengths = [
            _read_int32(stream, f"{name} length")
            for name in ("date", "limitation", "notice", "signature")
        ]
        logger.debug("V1 block lengths: %s", lengths)
        date = _read_exact(stream, lengths[0], "date")
        limitation = _read_exact(stream, lengths[1], "limitation")
        notice = _read_exact(stream, lengths[2], "notice")
        signature = _read_exact(stream, lengths[3], "signature")

    return DecodedLicense(
        format=LicenseFormat.V1,
        fields=(
            ("end_time", date),
            ("domain_limitation", limitation),
            ("customer_notice", notice),
        ),
        payload=date + limitation + notice,
        signature=signature,
    )


def decode_v2(license_key: str) -> DecodedLicense:
    """Decode a ``PC2`` tagged key, stopping at the signature record."""
    raw = _b64decode(license_key[len(V2_PREFIX):])
    try:
        with io.BytesIO(raw) as buffer, gzip.GzipFile(fileobj=buffer, mode="rb") as stream:
            return _read_records(stream)
    except (OSError, EOFError, zlib.error) as exc:
        raise MalformedLicenseError(f"cannot decompress license data: {exc}") from exc


def _read_records(stream: IO[bytes]) -> DecodedLicense:
    fields: List[Tuple[str, bytes]] = []
    payload = bytearray()
    while True:
        header = stream.read(_RECORD_HEADER.size)
        if not header:
            raise MalformedLicenseError("license data ended without a signature record")
        if len(header) != _RECORD_HEADER.size:
            raise MalformedLicenseError("truncated record header")
        record_type, length = _RECORD_HEADER.unpack(header)
        value = _read_exact(stream, length, f"record {record_type}")
        logger.debug("V2 record type=%d length=%d", record_type, length)

        if record_type == RecordType.SIGNATURE:
            return DecodedLicense(
                format=LicenseFormat.V2,
                fields=tuple(fields),
                payload=bytes(payload),
                signature=value,
            )

        name = _RECORD_FIELDS.get(record_type)
        if name is None:
            logger.debug("Skipping unknown record type %d", record_type)
        else:
            fields.append((name, value))
        payload += header
        payload += value


_DECODERS: Dict[LicenseFormat, Callable[[str], DecodedLicense]] = {
    LicenseFormat.V1: decode_v1,
    LicenseFormat.V2: decode_v2,
}


def decode_license_key(license_key: str) -> DecodedLicense:
    """Detect the format of *license_key* and decode it."""
    key_format = detect_format(license_key)
    # A detected format may have no decoder registered in _DECODERS.
    decoder = _DECODERS.get(key_format)
    if decoder is None:
        raise UnsupportedFormatError(f"no decoder for format {key_format.value}")
    return decoder(license_key)
