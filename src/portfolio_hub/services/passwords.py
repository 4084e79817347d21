"""Password hashing and password policy.

Passwords are stored as salted PBKDF2-SHA256 hashes in the form
``<salt_hex>:<hash_hex>``.
"""

from __future__ import annotations

import hashlib
import hmac
import os

from portfolio_hub.constants.auth import (
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    PASSWORD_MIN_UNIQUE_CHARS,
)

_PBKDF2_ITERATIONS = 100_000
_SALT_BYTES = 16

COMMON_PASSWORDS = frozenset(
    {
        "password", "123456", "123456789", "qwerty", "abc123", "password123",
        "admin", "letmein", "welcome", "monkey", "1234567890", "password1",
        "123123", "admin123", "root", "toor", "pass", "test", "guest", "user",
        "demo", "sample", "temp", "default", "changeme",
    }
)  # fmt: skip


def hash_password(password: str) -> str:
    """Return a salted PBKDF2 hash for the given password."""
    salt = os.urandom(_SALT_BYTES)
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    return f"{salt.hex()}:{derived.hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Verify a password against a stored ``salt:hash`` string."""
    try:
        salt_hex, hash_hex = stored_hash.split(":", 1)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False

    candidate = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        _PBKDF2_ITERATIONS,
    )
    return hmac.compare_digest(candidate, expected)


def password_policy_errors(
    password: str, username: str | None = None, email: str | None = None
) -> list[str]:
    """Return every policy violation for ``password``; empty when it is acceptable."""
    errors: list[str] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long.")
    if len(password) > PASSWORD_MAX_LENGTH:
        errors.append(f"Password cannot exceed {PASSWORD_MAX_LENGTH} characters.")
    if not any(ch.isdigit() for ch in password):
        errors.append("Password must contain at least one digit (0-9).")
    if not any(ch.islower() for ch in password):
        errors.append("Password must contain at least one lowercase letter (a-z).")
    if not any(ch.isupper() for ch in password):
        errors.append("Password must contain at least one uppercase letter (A-Z).")
    if all(ch.isalnum() for ch in password):
        errors.append("Password must contain at least one special character (!@#$%^&*).")
    if len(set(password)) < PASSWORD_MIN_UNIQUE_CHARS:
        errors.append(
            f"Password must contain at least {PASSWORD_MIN_UNIQUE_CHARS} unique characters."
        )
    if password.lower() in COMMON_PASSWORDS:
        errors.append("This password is too common. Please choose a more secure password.")

    lowered = password.lower()
    email_prefix = email.split("@", 1)[0].lower() if email else ""
    if (username and username.lower() in lowered) or (email_prefix and email_prefix in lowered):
        errors.append("Password cannot contain parts of your username or email.")
    return errors
