"""
French display helpers for durations, weekdays and reservations.

Display only: other logic depends on the numeric minutes, never on labels.
"""

from typing import Iterable, List

from .models import TimeRange

# ISO numbering, 1=Monday
WEEKDAY_NAMES = {
    1: "lundi",
    2: "mardi",
    3: "mercredi",
    4: "jeudi",
    5: "vendredi",
    6: "samedi",
    7: "dimanche",
}


def format_duration(minutes: int) -> str:
    """
    Render a duration for humans.

    Examples: 45 -> "45 minutes", 60 -> "1 heure", 120 -> "2 heures", 90 -> "1h30".
    """
    hours, mins = divmod(minutes, 60)

    if hours == 0:
        return f"{minutes} minutes"

    if mins == 0:
        return f"{hours} heure" if hours == 1 else f"{hours} heures"

    return f"{hours}h{mins:02d}"


def _join_french(items: List[str]) -> str:
    if len(items) == 1:
        return items[0]
    return ", ".join(items[:-1]) + " et " + items[-1]


def describe_open_days(weekdays: Iterable[int]) -> str:
    """
    Describe a set of ISO weekdays.

    A contiguous run reads "du lundi au samedi", anything else is enumerated
    ("le lundi", "les lundi, mercredi et vendredi").
    """
    days = sorted(set(weekdays))
    if not days:
        return "aucun jour"

    names = [WEEKDAY_NAMES[day] for day in days]

    if len(days) == 1:
        return f"le {names[0]}"

    if len(days) > 2 and days == list(range(days[0], days[-1] + 1)):
        return f"du {names[0]} au {names[-1]}"

    return f"les {_join_french(names)}"


def format_reservation(time_range: TimeRange) -> str:
    """
    Format a reserved range for display.
    Format: jour DD/MM/YYYY de HH:mm à HH:mm
    """
    start = time_range.start
    weekday = WEEKDAY_NAMES[start.isoweekday()]
    return (
        f"{weekday} {start.format('DD/MM/YYYY')} "
        f"de {start.format('HH:mm')} à {time_range.end.format('HH:mm')}"
    )
