"""School year helpers.

A school year is written ``YYYY-YYYY`` and starts on the first day of a
configurable month (June in the Philippine calendar).
"""

from datetime import date, datetime
import re

_SCHOOL_YEAR_RE = re.compile(r"^(\d{4})-(\d{4})$")


def school_year_for(moment: date | datetime, start_month: int = 6) -> str:
    """Return the school year containing ``moment``.

    >>> school_year_for(date(2024, 6, 1))
    '2024-2025'
    >>> school_year_for(date(2025, 5, 31))
    '2024-2025'
    """
    first_year = moment.year if moment.month >= start_month else moment.year - 1
    return f"{first_year}-{first_year + 1}"


def validate_school_year(value: str) -> str:
    """Check the ``YYYY-YYYY`` form with consecutive years.

    Raises:
        ValueError: If the value is malformed
    """
    value = value.strip()
    match = _SCHOOL_YEAR_RE.match(value)
    if match is None or int(match.group(2)) != int(match.group(1)) + 1:
        raise ValueError(f"Invalid school year '{value}'. Expected the form 2024-2025")
    return value
