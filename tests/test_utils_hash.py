"""
Unit tests for password hashing utilities.
"""

from worklog.utils.hash import hash_password, truncate_password, verify_password


class TestPasswordHashing:
    """Test password hashing functionality."""

    def test_hash_password(self):
        password = "TestPassword123"
        hashed = hash_password(password)

        assert hashed != password
        assert hashed.startswith("$2")

    def test_verify_correct_password(self):
        hashed = hash_password("TestPassword123")
        assert verify_password("TestPassword123", hashed) is True

    def test_verify_incorrect_password(self):
        hashed = hash_password("TestPassword123")
        assert verify_password("WrongPassword1", hashed) is False

    def test_verify_without_hash(self):
        assert verify_password("TestPassword123", None) is False

    def test_truncate_long_password(self):
        """Test truncating password exceeding bcrypt limit."""
        truncated = truncate_password("a" * 100)
        assert len(truncated.encode("utf-8")) <= 72

    def test_truncate_multibyte_password(self):
        """Truncation never splits a multi-byte character."""
        truncated = truncate_password("é" * 50)
        assert len(truncated.encode("utf-8")) <= 72
        assert truncated == "é" * 36
