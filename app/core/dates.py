from datetime import date, datetime, timezone
from .config import settings

def years_before(d: date, years: int) -> date:
    """Return the calendar date ``years`` years before ``d``.

    Feb 29 maps to Feb 28 when the target year is not a leap year.
    """
    try:
        return d.replace(year=d.year - years)
    except ValueError:
        return d.replace(year=d.year - years, day=28)

def is_underage(birthdate: date | datetime, today: date | None = None, adult_age: int | None = None) -> bool:
    """True when fewer than ``adult_age`` years have passed since ``birthdate``."""
    if isinstance(birthdate, datetime):
        birthdate = birthdate.date()
    today = today or datetime.now(timezone.utc).date()
    age = settings.ADULT_AGE if adult_age is None else adult_age
    return years_before(today, age) < birthdate
