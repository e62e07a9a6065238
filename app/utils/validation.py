"""Input validation utilities."""

import re
import secrets

REFERRAL_CODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]{6,20}$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def generate_referral_code(length: int = 10) -> str:
    """
    Generate a URL-safe referral code.

    Args:
        length: Code length

    Returns:
        Random code of exactly ``length`` characters
    """
    # token_urlsafe yields ~1.3 chars per byte
    return secrets.token_urlsafe(length)[:length]


def validate_referral_code(code: str) -> bool:
    """
    Validate referral code format.

    Args:
        code: Referral code

    Returns:
        True if valid
    """
    if not code or not isinstance(code, str):
        return False
    return bool(REFERRAL_CODE_PATTERN.match(code))


def validate_username(username: str) -> bool:
    """
    Validate username format.

    Args:
        username: Username

    Returns:
        True if valid
    """
    if not username:
        return False

    # Must be 3-30 chars
    if len(username) < 3 or len(username) > 30:
        return False

    return bool(USERNAME_PATTERN.match(username))


def normalize_email(email: str) -> str:
    """
    Normalize email address.

    Raises:
        ValueError: If invalid email
    """
    email = sanitize_input(email, max_length=255).lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError(f"Invalid email: {email}")
    return email


def sanitize_input(text: str, max_length: int = 500) -> str:
    """
    Sanitize user input.

    Args:
        text: User input
        max_length: Maximum length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Trim whitespace
    text = text.strip()

    # Limit length
    if len(text) > max_length:
        text = text[:max_length]

    # Remove null bytes
    text = text.replace("\x00", "")

    return text
