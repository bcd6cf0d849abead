from typing import Optional

from core.exceptions import ValidationError


def clean_text(value, label: str, max_length: Optional[int] = None, default: str = "") -> str:
    """
    Strip a free-text payload field. Missing values fall back to default;
    non-strings and values longer than the column are rejected.
    """
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string")

    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{label} must be at most {max_length} characters")
    return value
