"""
Bookshelf API — Validation Message Formatting
==============================================

What:  Turns Pydantic error lists into the `field → [messages]` map returned
       in every 422 response.
Why:   Pydantic's messages ("String should have at least 3 characters") are
       written for developers. API clients get one stable sentence per rule,
       naming the field, whether the error came from the book validator, a
       register/login body, or a malformed query string.
Who:   BookValidator, CredentialService and the RequestValidationError handler.
"""

from typing import Any, Dict, List, Mapping, Sequence

# Location prefixes FastAPI adds to RequestValidationError entries
_REQUEST_SOURCES = {"body", "query", "path", "header", "cookie"}


def _field_name(loc: Sequence[Any]) -> str:
    parts = list(loc)
    if len(parts) > 1 and parts[0] in _REQUEST_SOURCES:
        parts = parts[1:]
    return ".".join(str(part) for part in parts) or "body"


def format_error(field: str, error: Mapping[str, Any]) -> str:
    """One user-facing sentence for a single Pydantic error entry."""
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}

    if kind == "missing" or (kind == "string_type" and error.get("input") is None):
        return f"The {field} field is required."
    if kind == "string_type":
        return f"The {field} field must be a string."
    if kind == "string_too_short":
        if ctx.get("min_length") == 1:
            return f"The {field} field is required."
        return f"The {field} field must be at least {ctx.get('min_length')} characters."
    if kind == "string_too_long":
        return f"The {field} field must not be greater than {ctx.get('max_length')} characters."
    if kind in ("int_parsing", "int_type", "int_from_float"):
        return f"The {field} field must be an integer."
    if kind == "greater_than_equal":
        return f"The {field} field must be at least {ctx.get('ge')}."
    if kind == "less_than_equal":
        return f"The {field} field must not be greater than {ctx.get('le')}."
    if kind == "greater_than":
        return f"The {field} field must be greater than {ctx.get('gt')}."
    if kind == "json_invalid":
        return "The request body must be valid JSON."
    if kind == "model_attributes_type" or kind == "dict_type":
        return "The request body must be a JSON object."

    # Custom errors (PydanticCustomError) already carry a complete sentence
    return str(error.get("msg", f"The {field} field is invalid."))


def field_errors(errors: Sequence[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """
    Groups Pydantic errors by field, preserving the order they were reported.

    Example:
        [{"type": "missing", "loc": ("body", "title"), ...}]
        → {"title": ["The title field is required."]}
    """
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        if error.get("type") == "json_invalid":
            field = "body"
        else:
            field = _field_name(error.get("loc", ()))
        message = format_error(field, error)
        messages = grouped.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return grouped
