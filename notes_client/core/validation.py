from __future__ import annotations

from notes_client.core.errors import ValidationError
from notes_client.settings import CONTENT_MAX_LEN, TITLE_MAX_LEN


def _check(value: object, *, label: str, max_len: int) -> str | None:
    if not isinstance(value, str):
        return f"{label} must be text"
    # only the empty string is missing; whitespace is stored as typed
    if not value:
        return f"{label} is required"
    if len(value) > max_len:
        return f"{label} must be at most {max_len} characters (got {len(value)})"
    return None


def collect_errors(title: object, content: object) -> dict[str, str]:
    errors: dict[str, str] = {}
    if (msg := _check(title, label="Title", max_len=TITLE_MAX_LEN)) is not None:
        errors["title"] = msg
    if (msg := _check(content, label="Content", max_len=CONTENT_MAX_LEN)) is not None:
        errors["content"] = msg
    return errors


def validate_note_fields(title: object, content: object) -> None:
    """Raise ValidationError listing every offending field."""
    errors = collect_errors(title, content)
    if errors:
        raise ValidationError(errors)
