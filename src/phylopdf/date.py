from __future__ import annotations

import calendar
import datetime
import re
from dataclasses import dataclass

from .errors import DateFormatError

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})(?:-(\d{2}))?$")


@dataclass(frozen=True, order=True)
class Date:
    """Calendar date with month precision allowed.

    ``year == 0`` is the empty date. A month-precision date has ``day == 0`` and
    is displayed as ``YYYY-MM``.
    """

    year: int = 0
    month: int = 0
    day: int = 0

    @classmethod
    def parse(cls, text: str) -> "Date":
        if not isinstance(text, str) or len(text) not in (7, 10):
            raise DateFormatError(f"cannot parse date from {text!r}")
        match = _DATE_RE.match(text)
        if match is None:
            raise DateFormatError(f"cannot parse date from {text!r}")
        year, month = int(match.group(1)), int(match.group(2))
        day = int(match.group(3)) if match.group(3) is not None else 0
        try:
            datetime.date(year, month, day or 1)
        except ValueError as err:
            raise DateFormatError(f"cannot parse date from {text!r}: {err}") from err
        return cls(year, month, day)

    def empty(self) -> bool:
        return self.year == 0

    def __bool__(self) -> bool:
        return not self.empty()

    def display(self) -> str:
        if self.empty():
            return ""
        if self.day == 0:
            return f"{self.year:04d}-{self.month:02d}"
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def __str__(self) -> str:
        return self.display()

    def month_3(self) -> str:
        return calendar.month_abbr[self.month]

    def year_2(self) -> str:
        return f"{self.year % 100:02d}"

    def without_day(self) -> "Date":
        """Same month, day forced to 1."""
        if self.empty():
            return self
        return Date(self.year, self.month, 1)

    def add_months(self, months: int) -> "Date":
        """Shift by ``months`` (may be negative), keeping the day."""
        index = self.year * 12 + (self.month - 1) + months
        return Date(index // 12, index % 12 + 1, self.day)

    def increment_month(self) -> "Date":
        return self.add_months(1)


def months_between(a: Date, b: Date) -> int:
    """Whole months from ``a`` to ``b``, negative if ``b`` is earlier than ``a``."""
    if b < a:
        return -months_between(b, a)
    return 12 * (b.year - a.year) + (b.month - a.month)
