"""Period helpers for the budget pages.

Month boundaries, the income preference key, the spent-vs-target
percentage and the long date format used in page subtitles.
"""
import calendar
import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Union

from budgets.config import budget_config

Number = Union[int, float, Decimal, str]


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def parse_month(value: str) -> date:
    """Parse a 'YYYY-MM' value into the first day of that month.

    Raises ValueError for anything else.
    """
    try:
        return datetime.strptime((value or '').strip(), '%Y-%m').date()
    except ValueError:
        raise ValueError('Select a month in the format YYYY-MM.') from None


def income_preference_key(start: date) -> str:
    """Preference name for the income target of the month containing start.

    Example: budgetIncomeTotalMarch2024
    """
    return f'{budget_config.INCOME_PREFERENCE_PREFIX}{calendar.month_name[start.month]}{start.year}'


def _to_decimal(value: Number) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError):
        return Decimal('0')


def spent_percentage(spent: Number, target: Number) -> int:
    """Share of the income target used by spending, rounded up.

    When spending exceeds the target the ratio is inverted (target/spent)
    so the bar shows how much of the spending the target covers.
    Returns 0 when the divisor would be zero.
    """
    spent = _to_decimal(spent)
    target = _to_decimal(target)
    if spent > target:
        if spent <= 0:
            return 0
        return max(0, math.ceil(target / spent * 100))
    if target <= 0:
        return 0
    return math.ceil(spent / target * 100)


def ordinal(n: int) -> str:
    """1 -> 1st, 2 -> 2nd, 11 -> 11th, 23 -> 23rd."""
    if 11 <= n % 100 <= 13:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(n % 10, 'th')
    return f'{n}{suffix}'


def long_date(day: date) -> str:
    """1st March 2024"""
    return f'{ordinal(day.day)} {calendar.month_name[day.month]} {day.year}'


def month_label(day: date) -> str:
    """March 2024"""
    return f'{calendar.month_name[day.month]} {day.year}'
