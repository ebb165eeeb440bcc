import calendar
import re
from datetime import date
from typing import Tuple

from backoffice.core.exceptions import DomainValidationError

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def resolve_salary_month(salary_month: str) -> Tuple[date, date]:
    """
    Resolve a 'YYYY-MM' pay period to its first and last calendar day (both inclusive).
    """
    match = _MONTH_RE.match(salary_month or "")
    if not match:
        raise DomainValidationError(
            "Salary month must use the YYYY-MM format",
            details={"salary_month": salary_month}
        )
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise DomainValidationError(
            "Salary month is out of range",
            details={"salary_month": salary_month}
        )
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
