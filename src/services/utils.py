"""Utility functions for service layer operations."""

# Escape character passed explicitly so SQLite honours it too
LIKE_ESCAPE = "\\"


def escape_ilike(value: str) -> str:
    r"""
    Escape special LIKE/ILIKE characters so they match literally.

    % matches any sequence, _ matches any single character, and \ is the
    escape character itself.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
