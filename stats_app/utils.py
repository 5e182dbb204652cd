from datetime import datetime, timedelta

from flask import jsonify

from balance_model.types import DateRange
from balance_model.utils import as_naive_utc, utc_now


def ok(payload: dict | None = None, status: int = 200):
    data = payload or {}
    return jsonify({"ok": True, **data}), status


def err(message: str, status: int = 400, **extra):
    return jsonify({"ok": False, "error": message, **extra}), status


def now_utc() -> datetime:
    return utc_now()


def parse_datetime(value, end_of_day: bool = False) -> datetime | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return as_naive_utc(value)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError("invalid_datetime")
    if end_of_day and len(text) == 10:
        # a bare date as an upper bound covers that whole day
        parsed += timedelta(days=1, microseconds=-1)
    return as_naive_utc(parsed)


def isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def parse_date_range(data) -> DateRange | None:
    start = parse_datetime(data.get("date_from"))
    end = parse_datetime(data.get("date_to"), end_of_day=True)
    if start is None and end is None:
        return None
    return DateRange(start=start, end=end)
