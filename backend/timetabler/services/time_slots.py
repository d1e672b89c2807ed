"""Time-slot universe for the schedule search.

Lectures meet on one of three two-day patterns (MW, MF, WF); laboratories meet
on Tuesday/Thursday. A slot is one weekly meeting: a day plus a start/end time
drawn from a ladder of half-hour starts between 07:00 and 17:30.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from timetabler.models.schedule import SessionType
from timetabler.schemas.common import TIME_PATTERN, parse_time_to_minutes

LECTURE_DAY_PATTERNS: tuple[tuple[str, ...], ...] = (
    ("Monday", "Wednesday"),
    ("Monday", "Friday"),
    ("Wednesday", "Friday"),
)

LAB_DAY_PATTERNS: tuple[tuple[str, ...], ...] = (
    ("Tuesday", "Thursday"),
)

STANDARD_START_TIMES: tuple[str, ...] = tuple(
    f"{minutes // 60:02d}:{minutes % 60:02d}" for minutes in range(7 * 60, 17 * 60 + 31, 30)
)

DEFAULT_SESSION_HOURS = 1.5

DAY_ABBREVIATIONS = {
    "Monday": "M",
    "Tuesday": "T",
    "Wednesday": "W",
    "Thursday": "Th",
    "Friday": "F",
    "Saturday": "S",
    "Sunday": "Su",
}


def minutes_to_time(value: int) -> str:
    hours = value // 60
    minutes = value % 60
    return f"{hours:02d}:{minutes:02d}"


def hours_to_time_string(hours: float) -> str:
    return minutes_to_time(round(hours * 60))


def calculate_end_time(start_time: str, duration_hours: float) -> str:
    return minutes_to_time(parse_time_to_minutes(start_time) + round(duration_hours * 60))


def is_valid_time_range(start_time: str, end_time: str) -> bool:
    return parse_time_to_minutes(start_time) < parse_time_to_minutes(end_time)


@dataclass(frozen=True)
class TimeSlot:
    day: str
    start_time: str
    end_time: str

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end_time)

    def overlaps(self, other: "TimeSlot") -> bool:
        # Touching boundaries (10:00 end vs 10:00 start) do not overlap.
        if self.day != other.day:
            return False
        return self.start_minutes < other.end_minutes and self.end_minutes > other.start_minutes

    def label(self) -> str:
        return f"{self.day} {self.start_time}-{self.end_time}"


def slots_overlap(first: TimeSlot, second: TimeSlot) -> bool:
    return first.overlaps(second)


def has_overlapping_windows(windows: Iterable[TimeSlot]) -> bool:
    by_day: dict[str, list[TimeSlot]] = {}
    for window in windows:
        by_day.setdefault(window.day, []).append(window)
    for day_windows in by_day.values():
        ordered = sorted(day_windows, key=lambda item: item.start_minutes)
        for previous, current in zip(ordered, ordered[1:]):
            if previous.overlaps(current):
                return True
    return False


def day_patterns_for(session_type: SessionType) -> tuple[tuple[str, ...], ...]:
    if session_type == SessionType.laboratory:
        return LAB_DAY_PATTERNS
    return LECTURE_DAY_PATTERNS


class TimeSlotGenerator:
    """Enumerates candidate slots per session type.

    Output is a pure function of the policy constants: pattern order, then start
    time, then day within the pattern. Slots ending after ``closing_time`` are
    skipped, as are days outside ``allowed_days`` when given.
    """

    def __init__(
        self,
        *,
        session_hours: float = DEFAULT_SESSION_HOURS,
        closing_time: str | None = None,
        start_times: tuple[str, ...] = STANDARD_START_TIMES,
    ) -> None:
        if session_hours <= 0:
            raise ValueError("session_hours must be positive")
        if closing_time is not None and not TIME_PATTERN.match(closing_time):
            raise ValueError("closing_time must be in HH:MM 24-hour format")
        self.session_hours = session_hours
        self.closing_time = closing_time
        self.start_times = start_times

    def generate(
        self,
        session_type: SessionType,
        *,
        allowed_days: Iterable[str] | None = None,
    ) -> list[TimeSlot]:
        allowed = set(allowed_days) if allowed_days is not None else None
        closing_minutes = parse_time_to_minutes(self.closing_time) if self.closing_time else None
        duration_minutes = round(self.session_hours * 60)

        slots: list[TimeSlot] = []
        for pattern in day_patterns_for(session_type):
            for start_time in self.start_times:
                end_minutes = parse_time_to_minutes(start_time) + duration_minutes
                if end_minutes >= 24 * 60:
                    continue
                if closing_minutes is not None and end_minutes > closing_minutes:
                    continue
                end_time = minutes_to_time(end_minutes)
                for day in pattern:
                    if allowed is not None and day not in allowed:
                        continue
                    slots.append(TimeSlot(day=day, start_time=start_time, end_time=end_time))
        return slots


def day_pattern_for(day: str) -> tuple[SessionType, tuple[str, ...]] | None:
    """Return the first pattern containing ``day`` with its session type."""
    for pattern in LECTURE_DAY_PATTERNS:
        if day in pattern:
            return SessionType.lecture, pattern
    for pattern in LAB_DAY_PATTERNS:
        if day in pattern:
            return SessionType.laboratory, pattern
    return None


def day_pattern_label(day: str) -> str:
    match = day_pattern_for(day)
    if match is None:
        return DAY_ABBREVIATIONS.get(day, day[:1].upper())
    _, pattern = match
    return "".join(DAY_ABBREVIATIONS[item] for item in pattern)


def is_same_day_pattern(first: TimeSlot, second: TimeSlot) -> bool:
    for pattern in (*LECTURE_DAY_PATTERNS, *LAB_DAY_PATTERNS):
        if first.day in pattern and second.day in pattern:
            return True
    return False


def is_valid_day_pattern(day: str, session_type: SessionType) -> bool:
    return any(day in pattern for pattern in day_patterns_for(session_type))


def sessions_per_week(teaching_hours: float, session_hours: float = DEFAULT_SESSION_HOURS) -> int:
    return math.ceil(teaching_hours / session_hours)
