"""Tests for bcrypt password hashing and length validation."""

from backend.auth.passwords import PasswordHasher, validate_password_length


class TestPasswordHasher:
    def test_hash_is_bcrypt_with_configured_cost(self):
        hasher = PasswordHasher(rounds=4)
        hashed = hasher.hash("secret123")
        assert hashed.startswith("$2b$04$")
        assert "secret123" not in hashed

    def test_same_password_gets_fresh_salt(self):
        hasher = PasswordHasher(rounds=4)
        assert hasher.hash("secret123") != hasher.hash("secret123")

    def test_verify_matches_only_exact_password(self):
        hasher = PasswordHasher(rounds=4)
        hashed = hasher.hash("secret123")
        assert hasher.verify("secret123", hashed) is True
        assert hasher.verify("wrong", hashed) is False
        assert hasher.verify("Secret123", hashed) is False

    def test_malformed_hash_is_false_not_error(self):
        assert PasswordHasher(rounds=4).verify("secret123", "not-a-bcrypt-hash") is False

    def test_default_cost_factor(self):
        assert PasswordHasher().rounds == 10


class TestValidatePasswordLength:
    def test_within_bounds(self):
        assert validate_password_length("secret123", 8, 72) == (True, "")

    def test_too_short(self):
        ok, message = validate_password_length("short", 8, 72)
        assert ok is False
        assert "at least 8" in message

    def test_max_counts_utf8_bytes(self):
        # 25 three-byte characters = 75 bytes
        ok, message = validate_password_length("€" * 25, 6, 72)
        assert ok is False
        assert "72 bytes" in message
