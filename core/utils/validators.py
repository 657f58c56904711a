"""Validation utilities for user-supplied values."""

import re
from typing import Optional

USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9_-]{3,20}$')


def validate_username(username: str) -> tuple[bool, Optional[str]]:
    """
    Validate username format.

    Args:
        username: Username to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not USERNAME_PATTERN.match(username):
        return False, (
            "Username must be 3-20 characters and contain only letters, "
            "numbers, underscores, or hyphens"
        )
    return True, None


def validate_password_strength(password: str) -> tuple[bool, list[str]]:
    """
    Validate password strength.

    Args:
        password: Password to validate

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    if len(password) < 8:
        errors.append("Password must be at least 8 characters")

    if len(password) > 128:
        errors.append("Password must be at most 128 characters")

    return len(errors) == 0, errors


def validate_rating(rating: Optional[int]) -> tuple[bool, Optional[str]]:
    """Ratings are optional, but when present must be 1-5."""
    if rating is not None and not 1 <= rating <= 5:
        return False, "Rating must be between 1 and 5"
    return True, None
