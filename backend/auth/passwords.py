"""
Password hashing, verification, and validation.

Handles:
- Password hashing (bcrypt, cost factor from AuthSettings.bcrypt_rounds)
- Password verification (bcrypt's constant-time comparison)
- Password length validation per principal kind
"""
import bcrypt

__all__ = [
    "PasswordHasher",
    "validate_password_length",
]


class PasswordHasher:
    """bcrypt hasher with a fixed cost factor."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt.

        Args:
            password: Plain text password

        Returns:
            bcrypt hash of the password
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash.

        Returns False for malformed hashes rather than propagating a ValueError.

        Args:
            password: Plain text password
            password_hash: bcrypt hash to check against

        Returns:
            True if password matches, False otherwise
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False


def validate_password_length(password: str, min_length: int, max_length: int) -> tuple[bool, str]:
    """Validate password length bounds.

    Args:
        password: Password to validate
        min_length: Minimum number of characters
        max_length: Maximum number of UTF-8 bytes (bcrypt ignores the rest)

    Returns:
        (is_valid, error_message) tuple
    """
    if len(password) < min_length:
        return False, f"Password must be at least {min_length} characters"

    if len(password.encode("utf-8")) > max_length:
        return False, f"Password must be at most {max_length} bytes"

    return True, ""
