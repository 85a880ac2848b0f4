import calendar
from datetime import date

from .constants import MONTHS_PER_QUARTER


def quarter_number_for(day):
    """Quarter (1-3) of the SACCO year that ``day`` falls in."""
    return (day.month - 1) // MONTHS_PER_QUARTER + 1


def period_bounds(year, quarter_number):
    """First and last calendar day of a quarter."""
    first_month = (quarter_number - 1) * MONTHS_PER_QUARTER + 1
    last_month = quarter_number * MONTHS_PER_QUARTER
    last_day = calendar.monthrange(year, last_month)[1]
    return date(year, first_month, 1), date(year, last_month, last_day)


def quarter_name(year, quarter_number):
    return f"Q{quarter_number} {year}"
