"""Jersey taxi tariff schedules and their activation rules.

Schedules are evaluated in priority order: the Christmas/New Year
override first, then evenings and Sundays, then the daytime default.
"""

from datetime import datetime, tzinfo
from typing import Optional, Tuple

from ..domain.models import RateTable, ScheduleKind, TariffSchedule

# Mon=0 .. Sun=6
SUNDAY = 6
DAY_START_HOUR = 7
NIGHT_START_HOUR = 23


def _is_standard(moment: datetime) -> bool:
    return moment.weekday() != SUNDAY and DAY_START_HOUR <= moment.hour < NIGHT_START_HOUR


def _is_off_peak(moment: datetime) -> bool:
    is_night = moment.hour < DAY_START_HOUR or moment.hour >= NIGHT_START_HOUR
    return moment.weekday() == SUNDAY or is_night


def _holiday_windows(year: int) -> Tuple[Tuple[datetime, datetime], ...]:
    christmas = (datetime(year, 12, 24, 23), datetime(year, 12, 26, 7))
    new_year = (datetime(year, 12, 31, 19), datetime(year + 1, 1, 2, 7))
    return christmas, new_year


def _is_holiday(moment: datetime) -> bool:
    # Early January belongs to the window opened on Dec 31 of the previous year.
    windows = _holiday_windows(moment.year - 1) + _holiday_windows(moment.year)
    return any(start <= moment <= end for start, end in windows)


STANDARD = TariffSchedule(
    kind=ScheduleKind.STANDARD,
    name="Tariff 1 - Daytime",
    prebooked=RateTable(initial_charge=4.94, per_unit_charge=0.38, seconds_per_unit=51),
    flagged_down=RateTable(initial_charge=3.95, per_unit_charge=0.30, seconds_per_unit=51),
    predicate=_is_standard,
)

OFF_PEAK = TariffSchedule(
    kind=ScheduleKind.OFF_PEAK,
    name="Tariff 2 - Evenings & Sundays",
    prebooked=RateTable(initial_charge=5.06, per_unit_charge=0.52, seconds_per_unit=45),
    flagged_down=RateTable(initial_charge=4.05, per_unit_charge=0.42, seconds_per_unit=45),
    predicate=_is_off_peak,
)

HOLIDAY = TariffSchedule(
    kind=ScheduleKind.HOLIDAY,
    name="Tariff 3 - Christmas & New Year",
    prebooked=RateTable(initial_charge=8.69, per_unit_charge=0.56, seconds_per_unit=28),
    flagged_down=RateTable(initial_charge=6.95, per_unit_charge=0.45, seconds_per_unit=28),
    predicate=_is_holiday,
)

# Priority order: most specific calendar override first.
SCHEDULES: Tuple[TariffSchedule, ...] = (HOLIDAY, OFF_PEAK, STANDARD)


def to_local(timestamp: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Return the naive local wall-clock time the predicates work on.

    Naive timestamps are taken as local already. Aware timestamps are
    converted to ``tz`` when given, otherwise their own offset is kept.
    """
    if timestamp.tzinfo is None:
        return timestamp
    if tz is not None:
        timestamp = timestamp.astimezone(tz)
    return timestamp.replace(tzinfo=None)


def select_schedule(timestamp: datetime, tz: Optional[tzinfo] = None) -> TariffSchedule:
    """Select the tariff schedule in force at ``timestamp``.

    Parameters
    ----------
    timestamp:
        Moment of the ride.
    tz:
        Zone whose wall clock decides the tariff, used for aware
        timestamps only.

    Returns
    -------
    TariffSchedule
        The first schedule in ``SCHEDULES`` whose predicate matches,
        falling back to the daytime schedule.
    """
    moment = to_local(timestamp, tz)
    for schedule in SCHEDULES:
        if schedule.is_active(moment):
            return schedule
    return STANDARD
