"""Email normalisation and format validation."""

import re
from typing import Tuple

# Regex pattern for basic email format validation
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> Tuple[bool, str]:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email:
        return False, "Email address is required."

    email = normalize_email(email)

    if len(email) > 255:
        return False, "Email address is too long."

    if not EMAIL_PATTERN.match(email):
        return False, "Please enter a valid email address format."

    local_part, domain = email.split("@", 1)
    if len(local_part) > 64:
        return False, "Invalid email address format."
    if ".." in domain or domain.startswith(".") or domain.startswith("-"):
        return False, "Invalid email address format."

    return True, ""


def validate_email_format(email: str) -> str:
    """Return an error message, or an empty string when the address is valid."""
    _, error_message = is_valid_email(email)
    return error_message
