"""Conventions for values recorded in node_data."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sample_workflows.core.types import NodeData

__all__ = [
    "DISPLAY_DATE_FORMAT",
    "IMAGE_URI_PREFIXES",
    "format_display_date",
    "image_fields",
    "is_image_like",
    "parse_display_date",
]

DISPLAY_DATE_FORMAT = "%d-%m-%Y"
"""Dates are exchanged as ``DD-MM-YYYY`` strings."""

IMAGE_URI_PREFIXES = ("file://", "data:image", "content://", "blob:")

_IMAGE_EXTENSION = re.compile(r"\.(jpg|jpeg|png|gif|webp|bmp)$", re.IGNORECASE)
_DISPLAY_DATE = re.compile(r"^\d{1,2}-\d{1,2}-\d{4}$")


def is_image_like(value: Any) -> bool:
    """Decide from its content whether a recorded value refers to an image.

    Field names are never consulted.

    Example:
        >>> is_image_like("file:///tmp/a.jpg")
        True
        >>> is_image_like("John Doe")
        False
    """
    if not isinstance(value, str):
        return False
    return value.startswith(IMAGE_URI_PREFIXES) or _IMAGE_EXTENSION.search(value) is not None


def image_fields(node_data: NodeData | None) -> list[str]:
    """Return the keys of ``node_data`` whose values are image-like, in order."""
    if not node_data:
        return []
    return [key for key, value in node_data.items() if is_image_like(value)]


def parse_display_date(value: Any) -> date | None:
    """Parse a ``DD-MM-YYYY`` string.

    Args:
        value: The recorded value.

    Returns:
        The parsed date, or None when the value is not a valid display date.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _DISPLAY_DATE.match(text):
        return None
    try:
        return datetime.strptime(text, DISPLAY_DATE_FORMAT).date()
    except ValueError:
        return None


def format_display_date(value: date | datetime | None) -> str | None:
    """Format a date or datetime as ``DD-MM-YYYY``."""
    if value is None:
        return None
    return value.strftime(DISPLAY_DATE_FORMAT)
