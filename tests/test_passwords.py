"""Tests for password hashing."""

from src.domain.services.passwords import hash_password, verify_password


class TestHashPassword:
    def test_hash_is_salted(self):
        """Two hashes of one password differ."""
        assert hash_password("pw1") != hash_password("pw1")

    def test_hash_never_contains_plaintext(self):
        assert "supersecret" not in hash_password("supersecret")

    def test_uses_bcrypt_cost_ten(self):
        assert hash_password("pw1").startswith("$2b$10$")


class TestVerifyPassword:
    def test_verify_matching_password(self):
        digest = hash_password("pw1")
        assert verify_password("pw1", digest) is True

    def test_verify_wrong_password(self):
        digest = hash_password("pw1")
        assert verify_password("pw2", digest) is False

    def test_unknown_hash_format_is_a_mismatch(self):
        assert verify_password("pw1", "not-a-hash") is False

    def test_corrupt_bcrypt_hash_is_a_mismatch(self):
        assert verify_password("pw1", "$2b$10$garbage") is False

    def test_empty_hash_is_a_mismatch(self):
        assert verify_password("pw1", "") is False


class TestLongPasswords:
    def test_password_over_72_bytes_hashes_and_verifies(self):
        digest = hash_password("p" * 100)
        assert verify_password("p" * 100, digest) is True

    def test_only_first_72_bytes_count(self):
        digest = hash_password("p" * 72 + "tail-one")
        assert verify_password("p" * 72 + "tail-two", digest) is True
        assert verify_password("p" * 71, digest) is False

    def test_multibyte_password_over_limit(self):
        password = "é" * 50  # 100 bytes in UTF-8
        digest = hash_password(password)
        assert verify_password(password, digest) is True
