"""
Unit tests for code generation and hashing.
"""

from consent_portal.core.security import generate_numeric_code, hash_secret, verify_secret


class TestGenerateNumericCode:
    """Tests for generate_numeric_code."""

    def test_code_has_requested_length(self):
        for _ in range(200):
            code = generate_numeric_code(6)
            assert len(code) == 6
            assert code.isdigit()

    def test_code_never_starts_with_zero(self):
        assert all(generate_numeric_code(6)[0] != "0" for _ in range(200))

    def test_codes_vary(self):
        codes = {generate_numeric_code(6) for _ in range(50)}
        assert len(codes) > 1


class TestHashSecret:
    """Tests for bcrypt hashing."""

    def test_hash_is_not_plaintext(self):
        hashed = hash_secret("123456", rounds=4)
        assert "123456" not in hashed
        assert hashed.startswith("$2")

    def test_hash_is_salted(self):
        """Same code hashed twice gives different hashes."""
        assert hash_secret("123456", rounds=4) != hash_secret("123456", rounds=4)

    def test_verify_matching_secret(self):
        hashed = hash_secret("654321", rounds=4)
        assert verify_secret("654321", hashed) is True

    def test_verify_wrong_secret(self):
        hashed = hash_secret("654321", rounds=4)
        assert verify_secret("654320", hashed) is False

    def test_verify_malformed_hash_returns_false(self):
        assert verify_secret("654321", "not-a-bcrypt-hash") is False
