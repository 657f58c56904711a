"""Formatting utilities for common data types."""

from typing import Optional
import re


def format_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """
    Format full name from first and last names.

    Args:
        first_name: First name
        last_name: Last name

    Returns:
        Formatted full name
    """
    parts = []
    if first_name:
        parts.append(first_name.strip())
    if last_name:
        parts.append(last_name.strip())
    return ' '.join(parts)


def split_full_name(name: str) -> tuple[str, Optional[str]]:
    """Split "Ada King Lovelace" into ("Ada", "King Lovelace")."""
    parts = name.strip().split(' ')
    first_name = parts[0]
    last_name = ' '.join(parts[1:]) if len(parts) > 1 else None
    return first_name, last_name


def slugify(text: str) -> str:
    """
    Convert text to URL-safe slug.

    Runs of anything other than lowercase letters and digits collapse into a
    single hyphen.

    Args:
        text: Text to convert

    Returns:
        URL-safe slug
    """
    text = text.lower()
    text = re.sub(r'[^a-z0-9]+', '-', text)
    return text.strip('-')


def mask_email(email: str) -> str:
    """
    Mask email address for privacy.

    Args:
        email: Email address to mask

    Returns:
        Masked email (e.g., "j***@example.com")
    """
    if '@' not in email:
        return email

    local, domain = email.split('@', 1)

    if len(local) <= 2:
        masked_local = local[0] + '*'
    else:
        masked_local = local[0] + '*' * (len(local) - 2) + local[-1]

    return f"{masked_local}@{domain}"
