"""
Unit tests for PKCE helpers.
"""

import pytest

from service_oauth.app.client.pkce import generate_pkce, s256_challenge, validate_pkce


class TestPKCE:
    """Test cases for verifier/challenge generation."""

    def test_rfc7636_example(self):
        # Appendix B of RFC 7636
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert s256_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_generate(self):
        pkce = generate_pkce()

        assert len(pkce.verifier) == 64
        assert pkce.method == "S256"
        assert pkce.challenge == s256_challenge(pkce.verifier)
        assert "=" not in pkce.challenge

    def test_generate_is_random(self):
        assert generate_pkce().verifier != generate_pkce().verifier

    @pytest.mark.parametrize("length", [42, 129])
    def test_generate_rejects_bad_length(self, length):
        with pytest.raises(ValueError):
            generate_pkce(length)

    def test_validate(self):
        pkce = generate_pkce()

        assert validate_pkce(pkce.verifier, pkce.challenge)
        assert not validate_pkce("wrong", pkce.challenge)
        assert not validate_pkce("", pkce.challenge)
        assert not validate_pkce(pkce.verifier, pkce.challenge, method="plain")
