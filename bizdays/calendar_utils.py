"""Business-day calendar: strict date parsing and holiday-aware day counts."""

from __future__ import annotations

import calendar
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

import numpy as np
import pandas as pd

from bizdays.errors import InvalidDateError


ISO_DATE_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def parse_iso_date(value: Any) -> date:
    """Parse a strict ``YYYY-MM-DD`` string into a calendar date.

    Anything else, including impossible dates such as ``2025-02-30``, raises
    :class:`InvalidDateError` instead of being rolled over.
    """
    if not isinstance(value, str):
        raise InvalidDateError(value, "expected a YYYY-MM-DD string")
    m = ISO_DATE_RE.fullmatch(value)
    if not m:
        raise InvalidDateError(value)
    year, month, day = (int(part) for part in m.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise InvalidDateError(value, str(exc)) from exc


def is_iso_date(value: Any) -> bool:
    try:
        parse_iso_date(value)
    except InvalidDateError:
        return False
    return True


def month_bounds(day: date) -> tuple[date, date]:
    """Return the first and last calendar day of ``day``'s month."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def _holiday_keys(holidays: Any) -> list[str]:
    if not isinstance(holidays, Mapping):
        return []
    return sorted(k for k in holidays.keys() if is_iso_date(k))


def count_business_days(start: date, end: date, holidays: Mapping[str, str] | None = None) -> int:
    """Count Mon-Fri days in ``[start, end]`` that are not keys of ``holidays``."""
    if end < start:
        return 0
    stop = np.datetime64(end, "D") + np.timedelta64(1, "D")
    return int(
        np.busday_count(
            np.datetime64(start, "D"),
            stop,
            holidays=np.array(_holiday_keys(holidays), dtype="datetime64[D]"),
        )
    )


@dataclass(frozen=True)
class BusinessDayReport:
    """Month-to-date and whole-month business-day counts for one reference date."""

    start_of_month: date
    end_of_month: date
    today: date
    holidays: Any
    business_days_to_today: int
    business_days_total: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "startOfMonth": self.start_of_month.isoformat(),
            "endOfMonth": self.end_of_month.isoformat(),
            "today": self.today.isoformat(),
            "holidays": dict(self.holidays) if isinstance(self.holidays, Mapping) else self.holidays,
            "businessDaysToToday": self.business_days_to_today,
            "businessDaysTotal": self.business_days_total,
        }


def compute(reference_date: str, holidays: Mapping[str, str] | None = None) -> BusinessDayReport:
    """Compute the business-day report for ``reference_date``.

    ``holidays`` is passed through to the report untouched. Values that are
    not mappings count as "no holidays".
    """
    today = parse_iso_date(reference_date)
    start, end = month_bounds(today)
    return BusinessDayReport(
        start_of_month=start,
        end_of_month=end,
        today=today,
        holidays=holidays,
        business_days_to_today=count_business_days(start, today, holidays),
        business_days_total=count_business_days(start, end, holidays),
    )


def business_day_frame(start: date, end: date, holidays: Mapping[str, str] | None = None) -> pd.DataFrame:
    """Return one row per calendar day in ``[start, end]`` with business-day flags."""
    names = dict(holidays) if isinstance(holidays, Mapping) else {}
    columns = ["Date", "Weekday", "Weekend", "Holiday", "Business Day", "Running Business Days"]
    if end < start:
        return pd.DataFrame(columns=columns)

    dates = pd.date_range(start=start, end=end, freq="D")
    iso = dates.strftime("%Y-%m-%d")
    weekend = dates.weekday >= 5
    holiday_names = [names.get(d, "") for d in iso]
    is_holiday = np.array([d in names for d in iso], dtype=bool)
    business = ~np.asarray(weekend, dtype=bool) & ~is_holiday

    return pd.DataFrame(
        {
            "Date": list(iso),
            "Weekday": [WEEKDAY_NAMES[d] for d in dates.weekday],
            "Weekend": np.asarray(weekend, dtype=bool),
            "Holiday": holiday_names,
            "Business Day": business,
            "Running Business Days": np.cumsum(business).astype(int),
        },
        columns=columns,
    )
