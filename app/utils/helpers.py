"""Helper utilities."""

import re
from typing import Any, Dict, Iterable


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for storage."""
    # Remove special characters
    sanitized = re.sub(r'[^\w\s.-]', '', filename)
    # Replace spaces with underscores
    sanitized = re.sub(r'\s+', '_', sanitized)
    return sanitized[:255]  # Limit length


def payment_status_label(is_paid: bool) -> str:
    """Human-facing payment state of an application."""
    return "paid" if is_paid else "pending"


def index_by(items: Iterable[Any], attr: str) -> Dict[Any, Any]:
    """Map each item by one of its attributes (last one wins)."""
    return {getattr(item, attr): item for item in items}
