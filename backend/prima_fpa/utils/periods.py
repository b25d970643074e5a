from __future__ import annotations

from dataclasses import dataclass
import re


_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")
_QUARTER_RE = re.compile(r"^(\d{4})-Q([1-4])$", re.IGNORECASE)
_WEEK_RE = re.compile(r"^(\d{4})-W(\d{1,2})$", re.IGNORECASE)


@dataclass(frozen=True)
class PeriodKey:
    year: int
    month: int | None = None
    quarter: int | None = None
    week: int | None = None

    @property
    def key(self) -> str:
        if self.month is not None:
            return f"{self.year:04d}-{self.month:02d}"
        if self.quarter is not None:
            return f"{self.year:04d}-Q{self.quarter}"
        if self.week is not None:
            return f"{self.year:04d}-W{self.week:02d}"
        return f"{self.year:04d}"


def parse_period(text: str) -> PeriodKey:
    value = (text or "").strip()
    match = _QUARTER_RE.match(value)
    if match:
        return PeriodKey(year=int(match.group(1)), quarter=int(match.group(2)))
    match = _WEEK_RE.match(value)
    if match:
        week = int(match.group(2))
        if week < 1 or week > 53:
            raise ValueError(f"Week must be 01..53, got {value!r}.")
        return PeriodKey(year=int(match.group(1)), week=week)
    match = _MONTH_RE.match(value)
    if match:
        month = int(match.group(2))
        if month < 1 or month > 12:
            raise ValueError(f"Month must be 01..12, got {value!r}.")
        return PeriodKey(year=int(match.group(1)), month=month)
    raise ValueError(f"Unrecognised period {value!r}; expected YYYY-MM, YYYY-Qn or YYYY-Www.")


def quarter_periods(year: int, quarter: int) -> list[str]:
    if quarter < 1 or quarter > 4:
        raise ValueError("quarter must be 1..4.")
    first = (quarter - 1) * 3 + 1
    return [f"{year:04d}-{month:02d}" for month in range(first, first + 3)]


def quarter_of(period: str) -> PeriodKey:
    parsed = parse_period(period)
    if parsed.month is None:
        raise ValueError(f"{period!r} is not a monthly period.")
    return PeriodKey(year=parsed.year, quarter=(parsed.month - 1) // 3 + 1)


def next_periods(start: str, count: int) -> list[str]:
    """Monthly keys following ``start`` (exclusive)."""
    parsed = parse_period(start)
    if parsed.month is None:
        raise ValueError("Projection labels need a monthly start period (YYYY-MM).")
    rows: list[str] = []
    index = parsed.year * 12 + (parsed.month - 1)
    for _ in range(max(count, 0)):
        index += 1
        rows.append(f"{index // 12:04d}-{index % 12 + 1:02d}")
    return rows


def month_range(first: str, last: str) -> list[str]:
    """Every monthly key from ``first`` to ``last`` inclusive."""
    start = parse_period(first)
    end = parse_period(last)
    if start.month is None or end.month is None:
        raise ValueError("month_range needs monthly keys (YYYY-MM).")
    span = (end.year * 12 + end.month) - (start.year * 12 + start.month)
    if span < 0:
        return []
    return [start.key] + next_periods(start.key, span)
