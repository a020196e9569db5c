"""
Verification key set built from an issuer's JWKS document.
"""

from typing import Any, Dict, List, Optional

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

SUPPORTED_ALGORITHMS = [
    "RS256", "RS384", "RS512",
    "PS256", "PS384", "PS512",
    "ES256", "ES384", "ES512",
    "HS256", "HS384", "HS512",
]


class KeySet:
    """Signing keys published by one issuer."""

    def __init__(self, jwks: Dict[str, Any]):
        keys = jwks.get("keys") if isinstance(jwks, dict) else None
        if not isinstance(keys, list):
            raise ValueError("JWKS response missing 'keys' array")
        self.keys: List[Dict[str, Any]] = [key for key in keys if isinstance(key, dict)]

    def __len__(self) -> int:
        return len(self.keys)

    def select(self, kid: Optional[str]) -> List[Dict[str, Any]]:
        """Return the keys a token with this key id may be signed with."""
        if kid is None:
            return list(self.keys)
        return [key for key in self.keys if key.get("kid") == kid]

    def verify(self, token: str, *, issuer: str, audience: Optional[str] = None) -> Dict[str, Any]:
        """Verify signature and registered claims, returning the payload.

        Raises ``jose.exceptions.ExpiredSignatureError`` only when ``exp`` is
        the sole fault, so callers can treat it as refreshable. Every other
        failure, including an expired token with a wrong issuer or audience,
        raises ``JWTError``.
        """
        header = jwt.get_unverified_header(token)

        algorithm = header.get("alg")
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise JWTError(f"Unsupported signing algorithm: {algorithm}")

        candidates = self.select(header.get("kid"))
        if not candidates:
            raise JWTError(f"Signing key not found: {header.get('kid')}")

        try:
            return self._decode(token, candidates, algorithm, issuer, audience)
        except ExpiredSignatureError:
            # jose checks exp before iss and aud
            self._decode(token, candidates, algorithm, issuer, audience, verify_exp=False)
            raise

    @staticmethod
    def _decode(
        token: str,
        candidates: List[Dict[str, Any]],
        algorithm: str,
        issuer: str,
        audience: Optional[str],
        verify_exp: bool = True,
    ) -> Dict[str, Any]:
        return jwt.decode(
            token,
            {"keys": candidates},
            algorithms=[algorithm],
            audience=audience,
            issuer=issuer,
            options={"verify_aud": audience is not None, "verify_exp": verify_exp},
        )
