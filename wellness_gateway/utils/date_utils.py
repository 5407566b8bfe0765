"""Date manipulation utilities"""

import calendar
import math
from datetime import date, timedelta
from typing import List


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def add_months(from_date: date, months: int) -> date:
    """Shift by calendar months, clamping the day to the target month's length"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def months_span(start: date, end: date) -> int:
    """Number of 30-day months covered by a range, at least 1"""
    return max(math.ceil((end - start).days / 30), 1)


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"
