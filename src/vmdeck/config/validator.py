"""Validation utilities for vmdeck configuration."""

from pydantic import ValidationError as PydanticValidationError


def flatten_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    """Return one ``Field '<dotted.path>': <message>`` line per validation error."""
    return [
        f"Field '{'.'.join(str(part) for part in error['loc']) or 'root'}': "
        f"{error['msg']}"
        for error in exc.errors()
    ]
