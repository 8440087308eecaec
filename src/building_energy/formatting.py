"""Presentation formatting for human-readable insight text.

Names are spelled out here rather than taken from the C library locale
so that generated text is the same on every machine.
"""

from datetime import datetime
from decimal import Decimal

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


class DateFormatter:
    """Formats dates and hours for recommendation text.

    Subclass to change the wording or calendar conventions.
    """

    def long_date(self, timestamp: datetime) -> str:
        """e.g. 'Monday, January 15'."""
        weekday = WEEKDAY_NAMES[timestamp.weekday()]
        month = MONTH_NAMES[timestamp.month - 1]
        return f"{weekday}, {month} {timestamp.day}"

    def hour_label(self, hour: int) -> str:
        """12-hour clock label, e.g. '12am', '9am', '12pm', '3pm'."""
        if hour == 0:
            return "12am"
        if hour < 12:
            return f"{hour}am"
        if hour == 12:
            return "12pm"
        return f"{hour - 12}pm"


def format_number(value: float) -> str:
    """Format a number in plain decimal, without a trailing '.0' for whole values."""
    if value == int(value):
        return str(int(value))
    return format(Decimal(repr(value)), "f")


DEFAULT_FORMATTER = DateFormatter()
