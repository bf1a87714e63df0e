"""
Shared validation functions for Pydantic schemas.

Required prompt fields are stored as given; blank-only values are rejected
so that a prompt never ends up with an empty name, category, or content.
"""


def validate_required_text(value: str | None, field_name: str) -> str:
    """
    Validate that a required text field has non-whitespace content.

    Args:
        value: The submitted value.
        field_name: Field name used in the error message.

    Returns:
        The value unchanged.

    Raises:
        ValueError: If the value is None, empty, or whitespace only.
    """
    if value is None or not value.strip():
        raise ValueError(f"{field_name} is required")
    return value


def normalize_optional_text(value: str | None) -> str | None:
    """Treat blank optional values (e.g. an empty model selector) as unset."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def validate_max_length(value: str | None, field_name: str, max_length: int) -> str | None:
    """Validate that a text field fits its database column."""
    if value is not None and len(value) > max_length:
        raise ValueError(
            f"{field_name} exceeds maximum length of {max_length:,} characters "
            f"(got {len(value):,} characters).",
        )
    return value
