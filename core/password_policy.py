"""
Password Policy Validation

Requirements:
- Minimum 6 characters
- Maximum 72 characters (bcrypt limit)
- Not blank
"""
from typing import Tuple, List

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 72


def validate_password(password: str) -> Tuple[bool, List[str]]:
    """
    Validate password against security policy.

    Args:
        password: The password to validate

    Returns:
        Tuple of (is_valid, list_of_error_messages)
    """
    errors = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    # bcrypt only looks at the first 72 bytes
    if len(password.encode("utf-8")) > MAX_PASSWORD_LENGTH:
        errors.append(f"Password must not exceed {MAX_PASSWORD_LENGTH} bytes (bcrypt limit)")

    if password and not password.strip():
        errors.append("Password must not be blank")

    is_valid = len(errors) == 0
    return is_valid, errors
