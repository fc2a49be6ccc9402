#!/usr/bin/env python3
"""
License Key Checker

Verifies a license key and prints the attributes it grants. The key is taken
from the command line or, when omitted, from the ``ADLICENSE_LICENSE``
environment variable / ``.env`` file.

Usage:
    adlicense PC2H4sIAAAAAAAEAO29B2AcSZY... --json
    ADLICENSE_LICENSE=... python -m adlicense
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from adlicense.config import LicenseSettings
from adlicense.errors import LicenseValidationError
from adlicense.license import License
from adlicense.signature import SignatureVerifier

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adlicense",
        description="Verify a license key and show what it grants.",
    )
    parser.add_argument(
        "license_key",
        nargs="?",
        default=None,
        help="License key to verify (defaults to the configured key).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the license attributes as JSON.",
    )
    parser.add_argument(
        "--allow-debug-key",
        action="store_true",
        default=None,
        help="Accept the 'debug' development key.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: from settings, INFO).",
    )
    return parser


def _print_license(license: License) -> None:
    print("=" * 60)
    print("  License Verified")
    print("=" * 60)
    print(f"  Format            : {license.format.value if license.format else 'debug'}")
    print(f"  End time          : {license.end_time.isoformat()}")
    print(f"  Domain limitation : {license.domain_limitation or '(none)'}")
    print(f"  Customer notice   : {license.customer_notice or '(none)'}")
    print(f"  Edition           : {license.edition or '(none)'}")
    limit = license.domain_number_limit
    print(f"  Domain limit      : {limit if limit is not None else '(unlimited)'}")
    if license.is_expired():
        print("  Status            : EXPIRED")
    print("=" * 60)


def main(
    argv: Optional[List[str]] = None,
    settings: Optional[LicenseSettings] = None,
    verifier: Optional[SignatureVerifier] = None,
) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.allow_debug_key is not None:
        overrides["allow_debug_key"] = True
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    try:
        if settings is None:
            settings = LicenseSettings(**overrides)
        elif overrides:
            settings = LicenseSettings(**{**settings.model_dump(), **overrides})
    except ValidationError as exc:
        print(f"ERROR: invalid settings: {exc}", file=sys.stderr)
        return EXIT_USAGE

    logging.basicConfig(level=settings.log_level_value, format=LOG_FORMAT)

    license_key = args.license_key or settings.license
    if not license_key:
        print(
            "ERROR: No license key given.\n"
            "Pass one as an argument or set ADLICENSE_LICENSE.",
            file=sys.stderr,
        )
        return EXIT_USAGE

    try:
        license = License(license_key, settings=settings, verifier=verifier)
    except LicenseValidationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_INVALID

    if args.json:
        print(json.dumps(license.to_dict(), indent=2))
    else:
        _print_license(license)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
