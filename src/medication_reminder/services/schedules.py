"""Dose-schedule resolution.

The resolver is a pure function of its arguments: it reads no clock, keeps no
state and performs no I/O. Every schedule mode is handled by a ``ScheduleRule``
registered against it, so new modes plug in without touching callers.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from medication_reminder.domain.errors import InvalidRangeError, InvalidScheduleError
from medication_reminder.domain.intake import IntakeLog, IntakeStatus
from medication_reminder.domain.schedules import (
    LOCAL_TIMEZONE,
    DoseStatus,
    Occurrence,
    Schedule,
    ScheduleMode,
)

DEFAULT_GRACE_WINDOW = timedelta(hours=2)
# nextDue gives up after the last horizon; a resource bound, not a domain rule.
SEARCH_HORIZONS = (
    timedelta(days=1),
    timedelta(days=7),
    timedelta(days=31),
    timedelta(days=366),
)
ISO_WEEKDAYS = frozenset(range(1, 8))

_CLOCK_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class ScheduleRule(Protocol):
    """Produces dose instants for one schedule mode."""

    def occurrences(
        self, schedule: Schedule, tz: ZoneInfo, start: datetime, end: datetime
    ) -> list[datetime]:
        """Return UTC instants in ``[start, end)``; bounds are pre-clipped."""


class FixedTimesRule:
    """Explicit wall-clock times on active weekdays."""

    def occurrences(
        self, schedule: Schedule, tz: ZoneInfo, start: datetime, end: datetime
    ) -> list[datetime]:
        clocks = [parse_clock(value) for value in schedule.times or ()]
        instants: list[datetime] = []
        # One day of padding each side covers offsets that move the local date.
        day = start.astimezone(tz).date() - timedelta(days=1)
        last_day = end.astimezone(tz).date() + timedelta(days=1)
        while day <= last_day:
            if day.isoweekday() in schedule.days_of_week:
                for clock in clocks:
                    instant = wall_time_to_utc(day, clock, tz)
                    if instant is not None and start <= instant < end:
                        instants.append(instant)
            day += timedelta(days=1)
        return instants


class IntervalRule:
    """Every N hours of absolute time from the first active midnight."""

    def occurrences(
        self, schedule: Schedule, tz: ZoneInfo, start: datetime, end: datetime
    ) -> list[datetime]:
        anchor = _interval_anchor(schedule, tz)
        if anchor is None or anchor >= end:
            return []
        step = timedelta(hours=schedule.every_hours or 0)
        current = anchor
        if start > anchor:
            current = anchor + step * -((anchor - start) // step)
        instants: list[datetime] = []
        while current < end:
            if current.astimezone(tz).isoweekday() in schedule.days_of_week:
                instants.append(current)
            current += step
        return instants


class AsNeededRule:
    """PRN medications are taken on demand and never fall due."""

    def occurrences(
        self, schedule: Schedule, tz: ZoneInfo, start: datetime, end: datetime
    ) -> list[datetime]:
        return []


def default_rules() -> dict[ScheduleMode, ScheduleRule]:
    """Return the rule registry for the built-in schedule modes."""
    return {
        ScheduleMode.FIXED: FixedTimesRule(),
        ScheduleMode.INTERVAL: IntervalRule(),
        ScheduleMode.AS_NEEDED: AsNeededRule(),
    }


@dataclass(frozen=True)
class ScheduleResolver:
    """Resolves schedules into occurrences and adherence status."""

    default_timezone: str = "UTC"
    rules: dict[ScheduleMode, ScheduleRule] = field(default_factory=default_rules)

    def validate(self, schedule: Schedule) -> None:
        """Raise ``InvalidScheduleError`` when the schedule is malformed."""
        try:
            mode = ScheduleMode(schedule.mode)
        except ValueError as exc:
            raise InvalidScheduleError(
                f"Unknown schedule mode: {schedule.mode!r}"
            ) from exc
        if mode not in self.rules:
            raise InvalidScheduleError(f"No rule registered for mode {mode.value}")
        if not schedule.days_of_week:
            raise InvalidScheduleError("daysOfWeek must not be empty")
        for weekday in schedule.days_of_week:
            if not _is_int(weekday) or weekday not in ISO_WEEKDAYS:
                raise InvalidScheduleError(f"Invalid weekday: {weekday!r}")
        has_times = bool(schedule.times)
        has_interval = schedule.every_hours is not None
        if mode is ScheduleMode.FIXED:
            if not has_times or has_interval:
                raise InvalidScheduleError(
                    "times mode requires times and no everyHours"
                )
            for value in schedule.times or ():
                parse_clock(value)
        elif mode is ScheduleMode.INTERVAL:
            if has_times or not has_interval:
                raise InvalidScheduleError(
                    "interval mode requires everyHours and no times"
                )
            if not _is_int(schedule.every_hours) or schedule.every_hours <= 0:
                raise InvalidScheduleError(
                    f"everyHours must be a positive integer: {schedule.every_hours!r}"
                )
        elif has_times or has_interval:
            raise InvalidScheduleError("as-needed schedules carry no dose times")
        if schedule.end_date is not None and schedule.end_date < schedule.start_date:
            raise InvalidScheduleError("endDate is before startDate")
        self.zone_for(schedule)

    def zone_named(self, name: str | None) -> ZoneInfo:
        """Return a zone by IANA name; ``"local"`` or empty means the default.

        Raises ``ZoneInfoNotFoundError`` or ``ValueError`` for unknown names.
        """
        if not name or name == LOCAL_TIMEZONE:
            name = self.default_timezone
        return ZoneInfo(name)

    def zone_for(self, schedule: Schedule) -> ZoneInfo:
        """Return the zone the schedule's wall-clock times are read in."""
        try:
            return self.zone_named(schedule.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise InvalidScheduleError(
                f"Unknown timezone: {schedule.timezone!r}"
            ) from exc

    def occurrences_in_range(
        self,
        schedule: Schedule,
        range_start: datetime,
        range_end: datetime,
        medication_id: UUID | None = None,
    ) -> list[Occurrence]:
        """Return occurrences in ``[range_start, range_end)``, ascending."""
        self.validate(schedule)
        require_aware(range_start, "range start")
        require_aware(range_end, "range end")
        if range_start > range_end:
            raise InvalidRangeError("range start is after range end")

        tz = self.zone_for(schedule)
        lower = max(
            range_start.astimezone(UTC), start_of_day(schedule.start_date, tz)
        )
        upper = range_end.astimezone(UTC)
        if schedule.end_date is not None:
            day_after_end = schedule.end_date + timedelta(days=1)
            upper = min(upper, start_of_day(day_after_end, tz))
        if lower >= upper:
            return []

        rule = self.rules[ScheduleMode(schedule.mode)]
        instants = sorted(set(rule.occurrences(schedule, tz, lower, upper)))
        return [
            Occurrence(due_at=instant, medication_id=medication_id)
            for instant in instants
        ]

    def next_due(
        self,
        schedule: Schedule,
        as_of: datetime,
        medication_id: UUID | None = None,
    ) -> Occurrence | None:
        """Return the first occurrence strictly after ``as_of``, if any."""
        searched_to = as_of
        for horizon in SEARCH_HORIZONS:
            window_end = as_of + horizon
            for occurrence in self.occurrences_in_range(
                schedule, searched_to, window_end, medication_id
            ):
                if occurrence.due_at > as_of:
                    return occurrence
            searched_to = window_end
        return None

    def classify(
        self,
        occurrence: Occurrence,
        logs: Iterable[IntakeLog],
        now: datetime,
        grace_window: timedelta = DEFAULT_GRACE_WINDOW,
    ) -> DoseStatus:
        """Return the display status of an occurrence given its intake logs.

        Any matching ``taken`` log wins. Otherwise the latest matching log
        decides: a snooze gives ``SNOOZED`` and an explicit ``missed`` gives
        ``MISSED`` even while the grace window is still open. Without a
        matching log the occurrence is ``MISSED`` once ``due_at + grace`` has
        passed and ``UPCOMING`` before that.
        """
        require_aware(now, "now")
        if grace_window < timedelta(0):
            raise InvalidRangeError("grace window must not be negative")
        matching = sorted(
            (log for log in logs if _log_matches(occurrence, log, grace_window)),
            key=lambda log: log.ts,
        )
        if any(log.status == IntakeStatus.TAKEN for log in matching):
            return DoseStatus.TAKEN
        if matching:
            latest = matching[-1].status
            if latest == IntakeStatus.SNOOZED:
                return DoseStatus.SNOOZED
            if latest == IntakeStatus.MISSED:
                return DoseStatus.MISSED
        if occurrence.due_at + grace_window < now:
            return DoseStatus.MISSED
        return DoseStatus.UPCOMING

    def occurrence_for(
        self,
        schedule: Schedule,
        at: datetime,
        grace_window: timedelta = DEFAULT_GRACE_WINDOW,
        medication_id: UUID | None = None,
    ) -> Occurrence | None:
        """Return the occurrence an action at ``at`` applies to, if any."""
        candidates = self.occurrences_in_range(
            schedule,
            at - grace_window,
            at + grace_window + timedelta(microseconds=1),
            medication_id,
        )
        if not candidates:
            return None
        return min(candidates, key=lambda item: (abs(item.due_at - at), item.due_at))

    def is_due_on(self, schedule: Schedule, day: date) -> bool:
        """Return True when the schedule has an occurrence on the local day."""
        tz = self.zone_for(schedule)
        start, end = local_day_bounds(day, tz)
        return bool(self.occurrences_in_range(schedule, start, end))


def parse_clock(value: object) -> time:
    """Parse an ``HH:MM`` wall-clock string."""
    match = _CLOCK_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        raise InvalidScheduleError(f"Invalid clock time: {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def wall_time_to_utc(day: date, clock: time, tz: ZoneInfo) -> datetime | None:
    """Resolve a local wall time to UTC.

    Returns None for wall times skipped by a DST gap. Ambiguous wall times
    resolve to the earlier instant (``fold=0``).
    """
    local = datetime.combine(day, clock, tzinfo=tz)
    instant = local.astimezone(UTC)
    if instant.astimezone(tz).replace(tzinfo=None) != local.replace(tzinfo=None):
        return None
    return instant


def start_of_day(day: date, tz: ZoneInfo) -> datetime:
    """Return the first instant of a local calendar day, in UTC."""
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(UTC)


def local_day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return ``[start, end)`` UTC bounds of a local calendar day."""
    return start_of_day(day, tz), start_of_day(day + timedelta(days=1), tz)


def _interval_anchor(schedule: Schedule, tz: ZoneInfo) -> datetime | None:
    for offset in range(len(ISO_WEEKDAYS)):
        day = schedule.start_date + timedelta(days=offset)
        if schedule.end_date is not None and day > schedule.end_date:
            return None
        if day.isoweekday() in schedule.days_of_week:
            return start_of_day(day, tz)
    return None


def _log_matches(occurrence: Occurrence, log: IntakeLog, grace: timedelta) -> bool:
    if occurrence.medication_id is not None and log.medication_id != (
        occurrence.medication_id
    ):
        return False
    return abs(log.ts - occurrence.due_at) <= grace


def require_aware(value: datetime, label: str) -> None:
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidRangeError(f"{label} must be timezone-aware")


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
