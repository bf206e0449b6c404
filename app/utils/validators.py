"""Validators."""

import re
from typing import List

from fastapi import HTTPException, status


def validate_password_strength(password: str) -> tuple[bool, List[str]]:
    """Validate password strength."""
    errors = []

    if len(password) < 6:
        errors.append("Password must be at least 6 characters long")

    if not re.search(r'[A-Za-z]', password):
        errors.append("Password must contain at least one letter")

    return len(errors) == 0, errors


def validate_file_extension(filename: str, allowed_extensions: List[str]) -> bool:
    """Validate file extension."""
    if not filename or '.' not in filename:
        return False

    extension = filename.rsplit('.', 1)[-1].lower()
    return extension in [ext.lower() for ext in allowed_extensions]


def validate_status_filter(value: str, allowed_statuses: List[str]) -> None:
    """Reject a status filter outside ``allowed_statuses`` with a 400."""
    if value not in allowed_statuses:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status filter. Must be one of: {', '.join(allowed_statuses)}",
        )
