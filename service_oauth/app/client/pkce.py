"""
PKCE (RFC 7636) verifier and S256 challenge helpers.
"""

import base64
import hashlib
import hmac
import secrets
from dataclasses import dataclass

MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128


@dataclass(frozen=True)
class PKCEChallenge:
    verifier: str
    challenge: str
    method: str = "S256"


def s256_challenge(verifier: str) -> str:
    """Derive the S256 code challenge for a verifier."""
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def generate_pkce(length: int = 64) -> PKCEChallenge:
    """Generate a random verifier and its S256 challenge."""
    if not MIN_VERIFIER_LENGTH <= length <= MAX_VERIFIER_LENGTH:
        raise ValueError(
            f"PKCE verifier length must be between {MIN_VERIFIER_LENGTH} and {MAX_VERIFIER_LENGTH}"
        )

    verifier = secrets.token_urlsafe(MAX_VERIFIER_LENGTH)[:length]
    return PKCEChallenge(verifier=verifier, challenge=s256_challenge(verifier))


def validate_pkce(verifier: str, challenge: str, method: str = "S256") -> bool:
    """Check a presented verifier against a stored challenge."""
    if method != "S256" or not verifier:
        return False
    return hmac.compare_digest(s256_challenge(verifier), challenge)
