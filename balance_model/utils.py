from datetime import datetime, timezone
from itertools import combinations
from typing import Iterable, Iterator, Sequence, TypeVar

T = TypeVar("T")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def pairs(items: Sequence[T]) -> Iterator[tuple[T, T]]:
    return combinations(items, 2)


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def days_between(earlier: datetime, later: datetime) -> int:
    return (later - earlier).days
