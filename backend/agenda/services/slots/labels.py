# backend/agenda/services/slots/labels.py
"""
Day metadata for the availability grid.

Labels follow the store's display locale:
  pt-BR → "seg", "20", "segunda-feira, 20 de outubro"
  en-US → "Mon", "20", "Monday, October 20"
"""

from datetime import date, time
from zoneinfo import ZoneInfo

from .models import AvailabilityDay
from .zones import day_key, local_to_instant

# Indexed by date.weekday() (0 = Monday)
_WEEKDAYS_SHORT = {
    "pt-BR": ["seg", "ter", "qua", "qui", "sex", "sáb", "dom"],
    "en-US": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
}

_WEEKDAYS_FULL = {
    "pt-BR": [
        "segunda-feira", "terça-feira", "quarta-feira", "quinta-feira",
        "sexta-feira", "sábado", "domingo",
    ],
    "en-US": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
}

_MONTHS = {
    "pt-BR": [
        "janeiro", "fevereiro", "março", "abril", "maio", "junho",
        "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
    ],
    "en-US": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
}

DEFAULT_LOCALE = "pt-BR"


def _locale(locale: str | None) -> str:
    return locale if locale in _WEEKDAYS_SHORT else DEFAULT_LOCALE


def weekday_label(day: date, locale: str | None = None) -> str:
    return _WEEKDAYS_SHORT[_locale(locale)][day.weekday()]


def full_label(day: date, locale: str | None = None) -> str:
    loc = _locale(locale)
    weekday = _WEEKDAYS_FULL[loc][day.weekday()]
    month = _MONTHS[loc][day.month - 1]
    if loc == "en-US":
        return f"{weekday}, {month} {day.day}"
    return f"{weekday}, {day.day} de {month}"


def build_day(
    day: date,
    zone: ZoneInfo,
    has_slots: bool,
    locale: str | None = None,
) -> AvailabilityDay:
    """Metadata for one horizon day; `date` is the instant of local midnight."""
    return AvailabilityDay(
        key=day_key(day),
        date=local_to_instant(day, time(0, 0), zone),
        weekday=weekday_label(day, locale),
        day_number=str(day.day),
        full_label=full_label(day, locale),
        has_slots=has_slots,
    )
