from __future__ import annotations

from enum import Enum
from typing import Optional, TypeVar

from ..core.constants import MAX_EMAIL_LENGTH
from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def _as_text(value: object, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string", field=field_name)
    return value


def _check_max_length(text: str, field_name: str, max_length: Optional[int]) -> str:
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters", field=field_name)
    return text


def require_non_empty(value: object, field_name: str, *, max_length: Optional[int] = None) -> str:
    text = (_as_text(value, field_name) or "").strip()
    if not text:
        raise ValidationError(f"{field_name} is required", field=field_name)
    return _check_max_length(text, field_name, max_length)


def require_min_length(value: object, field_name: str, min_len: int) -> str:
    text = _as_text(value, field_name)
    if text is None or len(text) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters", field=field_name)
    return text


def optional_text(value: object, field_name: str, *, max_length: Optional[int] = None) -> Optional[str]:
    """Stripped text, or None when blank."""
    text = (_as_text(value, field_name) or "").strip()
    if not text:
        return None
    return _check_max_length(text, field_name, max_length)


def require_enum(enum_cls: type[E], value: object, field_name: str) -> E:
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}", field=field_name)


def require_int_range(
    value: object,
    field_name: str,
    *,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{field_name} must be an integer", field=field_name)
    try:
        number = int(value.strip()) if isinstance(value, str) else int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field_name} must be an integer", field=field_name)
    if min_value is not None and number < min_value:
        raise ValidationError(f"{field_name} must be >= {min_value}", field=field_name)
    if max_value is not None and number > max_value:
        raise ValidationError(f"{field_name} must be <= {max_value}", field=field_name)
    return number


def normalize_email(value: object) -> str:
    email = require_non_empty(value, "email", max_length=MAX_EMAIL_LENGTH).lower()
    local, sep, domain = email.partition("@")
    if not sep or not local or "." not in domain:
        raise ValidationError("email is not a valid address", field="email")
    return email
