from __future__ import annotations

from datetime import date, datetime

from ..core.exceptions import ValidationError


def parse_iso_date(value: object, field_name: str = "date") -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        if not isinstance(value, str):
            raise ValueError(value)
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format", field=field_name)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now()


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat(timespec="seconds") if value else None
