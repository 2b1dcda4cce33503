"""Shared validation functions for Pydantic schemas."""


def require_text(value: str, field_name: str, *, strip: bool = True) -> str:
    """
    Reject empty or whitespace-only text.

    Args:
        value: The submitted value.
        field_name: Field name used in the error message.
        strip: If True, surrounding whitespace is removed from the returned value.
            Prompt content keeps its whitespace since it is sent to the model verbatim.

    Returns:
        The (optionally stripped) value.

    Raises:
        ValueError: If the value is empty after stripping.
    """
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} cannot be empty")
    return stripped if strip else value
