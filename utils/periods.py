"""
Month-period identity and date-range helpers.

A billing period is identified by the first day of its month. All ranges
are half-open: [start, end).
"""
from datetime import date, datetime, timezone
from typing import Iterator, Union

PeriodLike = Union[date, str]


def period_key(d: date) -> date:
     """Return the canonical first-of-month key for the month containing `d`."""
     return date(d.year, d.month, 1)


def parse_period(value: PeriodLike) -> date:
     """
     Parse a period from "YYYY-MM", "YYYY-MM-DD" or a date.

     Any day within the month maps to the same key.

     Raises:
          ValueError: If the value is not a recognisable month.
     """
     if isinstance(value, datetime):
          return period_key(value.date())
     if isinstance(value, date):
          return period_key(value)
     text = str(value).strip()
     parts = text.split("-")
     if len(parts) not in (2, 3):
          raise ValueError(f"Invalid period: {value!r}")
     try:
          year, month = int(parts[0]), int(parts[1])
          day = int(parts[2]) if len(parts) == 3 else 1
          return period_key(date(year, month, day))
     except ValueError:
          raise ValueError(f"Invalid period: {value!r}") from None


def format_period(d: date) -> str:
     """Format a period as its canonical "YYYY-MM-01" string."""
     return period_key(d).isoformat()


def add_months(d: date, months: int) -> date:
     """Shift a period key by a number of months."""
     index = d.year * 12 + (d.month - 1) + months
     return date(index // 12, index % 12 + 1, 1)


def next_period(d: date) -> date:
     return add_months(period_key(d), 1)


def iter_periods(start: date, end: date) -> Iterator[date]:
     """Yield every period key whose month overlaps [start, end)."""
     current = period_key(start)
     while current < end:
          yield current
          current = add_months(current, 1)


def months_between(start: date, end: date) -> int:
     """
     Number of billable months in [start, end).

     A started month counts as a whole month and the result is never below 1.
     """
     months = (end.year - start.year) * 12 + (end.month - start.month)
     if end.day > start.day:
          months += 1
     return max(months, 1)


def utcnow() -> datetime:
     """Current UTC time as a naive datetime, matching how columns are stored."""
     return datetime.now(timezone.utc).replace(tzinfo=None)
