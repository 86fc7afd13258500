"""Minute-of-day and day-of-week arithmetic.

Times are naive "HH:MM" strings; "24:00" only ever appears as an end boundary
and is read as minute 1440 (the next day's 00:00).
"""
from __future__ import annotations

from .const import (
    DAY_INDEX,
    DAYS_IN_WEEK,
    DAYS_OF_WEEK,
    END_OF_DAY,
    MIDNIGHT,
    MINUTES_PER_DAY,
)


def to_minutes(time_str: str) -> int:
    """'HH:MM' -> minutes since midnight ('24:00' -> 1440)."""
    hours, minutes = time_str.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def format_minutes(minutes: int) -> str:
    """Minutes since midnight -> 'HH:MM'. 1440 renders as '24:00'."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def end_minutes(time_str: str) -> int:
    """Read an end boundary: both '00:00' and '24:00' mean end of day."""
    if time_str in (MIDNIGHT, END_OF_DAY):
        return MINUTES_PER_DAY
    return to_minutes(time_str)


def normalize_end_time(time_str: str) -> str:
    """'24:00' -> '00:00' for anything sent to the service."""
    return MIDNIGHT if time_str == END_OF_DAY else time_str


def display_end_time(time_str: str) -> str:
    """'00:00' -> '24:00' so an end boundary reads as 'through end of day'."""
    return END_OF_DAY if time_str == MIDNIGHT else time_str


def previous_day(day: int) -> int:
    return (day + DAYS_IN_WEEK - 1) % DAYS_IN_WEEK


def next_day(day: int) -> int:
    return (day + 1) % DAYS_IN_WEEK


def day_name(day: int) -> str:
    return DAYS_OF_WEEK[day % DAYS_IN_WEEK]


def day_index(day: str | int) -> int:
    """Accept a canonical day name ('Monday'), its lowercase form or an index."""
    if isinstance(day, int):
        if not 0 <= day < DAYS_IN_WEEK:
            raise ValueError(f"Day index out of range: {day}")
        return day
    text = str(day).strip()
    if text.isdigit():
        return day_index(int(text))
    try:
        return DAY_INDEX[text.capitalize()]
    except KeyError as err:
        raise ValueError(f"Unknown day: {day!r}") from err
