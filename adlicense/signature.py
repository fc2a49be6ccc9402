"""
RSA signature verification for license payloads.

Keys are signed with RSA PKCS#1 v1.5 over a SHA-1 digest of the payload. The
public half of the signing key is embedded below; it must stay byte for byte
identical to the key used by the issuing tool or every key in the field stops
validating.
"""

from __future__ import annotations

import base64
import logging
from typing import Optional

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa, utils

from adlicense.errors import SignatureInvalidError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Trust anchor (big-endian, base64)
# ---------------------------------------------------------------------------

TRUST_ANCHOR_MODULUS = (
    "wNtlwFv+zo0lrShHnSi5VLT6Sbfx3ZXhtefSJfYs3YjWyPHv3ihLjXlBjMlGI5ziXrjcriNN"
    "Z5zn2P2qvv3VdX02zsIuGuAYZi0c4WBhiqtKgTo7USxsAaGxpqiWTkW3NQylw27p3jqICO7c"
    "bLXsr3aEZJJUgqkNay/l4S3pYIs="
)
TRUST_ANCHOR_EXPONENT = "AQAB"


def _b64_to_int(value: str) -> int:
    return int.from_bytes(base64.b64decode(value), "big")


def load_trust_anchor() -> rsa.RSAPublicKey:
    """Build the embedded RSA public key."""
    numbers = rsa.RSAPublicNumbers(
        e=_b64_to_int(TRUST_ANCHOR_EXPONENT),
        n=_b64_to_int(TRUST_ANCHOR_MODULUS),
    )
    return numbers.public_key()


def sha1_digest(payload: bytes) -> bytes:
    """Return the SHA-1 digest of *payload*."""
    digest = hashes.Hash(hashes.SHA1())
    digest.update(payload)
    return digest.finalize()


class SignatureVerifier:
    """
    Checks license payload signatures against one RSA public key.

    The embedded trust anchor is used unless another key is injected, which
    is how tests exercise keys signed with a throwaway key pair.
    """

    def __init__(self, public_key: Optional[rsa.RSAPublicKey] = None) -> None:
        self._public_key = public_key if public_key is not None else load_trust_anchor()

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        return self._public_key

    def verify(self, payload: bytes, signature: bytes) -> None:
        """
        Verify *signature* over *payload*.

        Raises :class:`SignatureInvalidError` on any mismatch; returns
        ``None`` when the signature is good.
        """
        logger.debug("Hashing %d payload bytes", len(payload))
        digest = sha1_digest(payload)
        try:
            self._public_key.verify(
                signature,
                digest,
                padding.PKCS1v15(),
                utils.Prehashed(hashes.SHA1()),
            )
        except InvalidSignature as exc:
            raise SignatureInvalidError("license signature does not match") from exc
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise SignatureInvalidError(f"license signature rejected: {exc}") from exc
        logger.debug("Signature ok")
