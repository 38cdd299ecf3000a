"""Calendar-month arithmetic"""

import calendar
from datetime import date

MONTH_ABBREVIATIONS = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"]


def month_start(day: date) -> date:
    """First day of the month containing `day`"""
    return day.replace(day=1)


def month_end(day: date) -> date:
    """Last day of the month containing `day`"""
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def add_months(day: date, months: int) -> date:
    """Shift to the first day of the month `months` away (negative goes back)"""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def months_between(start: date, target: date) -> int:
    """Whole calendar months from `start`'s month to `target`'s month (days ignored)"""
    return (target.year - start.year) * 12 + (target.month - start.month)


def month_key(day: date) -> str:
    """YYYY-MM"""
    return f"{day.year:04d}-{day.month:02d}"


def month_label(day: date) -> str:
    """Short display label, e.g. 'Jun/25'"""
    return f"{MONTH_ABBREVIATIONS[day.month - 1]}/{day.year % 100:02d}"
