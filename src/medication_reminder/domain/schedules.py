"""Domain models for dosing schedules."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from medication_reminder.domain.errors import InvalidScheduleError

LOCAL_TIMEZONE = "local"


class ScheduleMode(str, Enum):
    """How a schedule produces dose times."""

    FIXED = "times"
    INTERVAL = "interval"
    AS_NEEDED = "prn"


class DoseStatus(str, Enum):
    """Display status of a single occurrence."""

    TAKEN = "taken"
    MISSED = "missed"
    SNOOZED = "snoozed"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class Schedule:
    """Dosing schedule as stored on a medication record.

    Clock times are kept as the persisted ``HH:MM`` strings; they are parsed
    and validated when the schedule is resolved.
    """

    mode: ScheduleMode
    days_of_week: frozenset[int]
    start_date: date
    times: tuple[str, ...] | None = None
    every_hours: int | None = None
    end_date: date | None = None
    timezone: str = LOCAL_TIMEZONE

    @classmethod
    def from_record(cls, record: dict[str, object]) -> "Schedule":
        """Build a schedule from the persisted camelCase JSON shape."""
        try:
            mode = ScheduleMode(record.get("mode"))
        except ValueError as exc:
            raise InvalidScheduleError(
                f"Unknown schedule mode: {record.get('mode')!r}"
            ) from exc
        raw_times = record.get("times")
        if raw_times is not None and not isinstance(raw_times, list | tuple):
            raise InvalidScheduleError("times must be a list of HH:MM strings")
        raw_days = record.get("daysOfWeek")
        if not isinstance(raw_days, list | tuple | set | frozenset):
            raise InvalidScheduleError("daysOfWeek must be a list of weekdays")
        try:
            days_of_week = frozenset(raw_days)
        except TypeError as exc:
            raise InvalidScheduleError("daysOfWeek must hold weekday numbers") from exc
        return cls(
            mode=mode,
            days_of_week=days_of_week,
            start_date=_parse_date(record.get("startDate"), "startDate"),
            times=tuple(str(value) for value in raw_times)
            if raw_times is not None
            else None,
            every_hours=record.get("everyHours"),  # type: ignore[arg-type]
            end_date=_parse_date(record["endDate"], "endDate")
            if record.get("endDate")
            else None,
            timezone=str(record.get("timezone") or LOCAL_TIMEZONE),
        )

    def to_record(self) -> dict[str, object]:
        """Return the persisted representation, omitting absent fields."""
        record: dict[str, object] = {
            "mode": self.mode.value,
            "daysOfWeek": sorted(self.days_of_week),
            "startDate": self.start_date.isoformat(),
            "timezone": self.timezone,
        }
        if self.times is not None:
            record["times"] = list(self.times)
        if self.every_hours is not None:
            record["everyHours"] = self.every_hours
        if self.end_date is not None:
            record["endDate"] = self.end_date.isoformat()
        return record


@dataclass(frozen=True)
class Occurrence:
    """A single instant at which a dose is due."""

    due_at: datetime
    medication_id: UUID | None = None


def _parse_date(value: object, field_name: str) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(value).date()
        except ValueError as exc:
            raise InvalidScheduleError(f"Invalid {field_name}: {value!r}") from exc
    raise InvalidScheduleError(f"Missing {field_name}")
