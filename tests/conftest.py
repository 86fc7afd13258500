"""Shared fixtures for the intuis_schedule tests.

Zone catalog mirrors a real Intuis schedule: Comfort, Night, Day, Eco.
`SimulatedIntuis` stands in for the intuis_connect integration: it stores the
timetable as absolute week offsets (minutes from Monday 00:00), applies
`set_schedule_slot` calls in both protocols and re-exports a weekly timetable
the way the summary sensor does, with a 00:00 entry on every day.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pytest

from intuis_schedule.const import DAYS_OF_WEEK, MINUTES_PER_DAY
from intuis_schedule.models import ScheduleSummary, TimetableEntry, Zone
from intuis_schedule.timetable import expand_day, find_zone, find_zone_by_id
from intuis_schedule.timeutil import end_minutes, format_minutes, to_minutes

MINUTES_PER_WEEK = 7 * MINUTES_PER_DAY

COMFORT = Zone(id=0, name="Comfort", type=0, room_temperatures={"r1": 20.0, "r2": 21.0})
NIGHT = Zone(id=1, name="Night", type=1, room_temperatures={"r1": 17.0, "r2": 16.0})
DAY = Zone(id=2, name="Day", type=4, room_temperatures={"r1": 19.0, "r2": 19.0})
ECO = Zone(id=3, name="Eco", type=5, room_temperatures={"r1": 16.0})
ZONES = [COMFORT, NIGHT, DAY, ECO]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
def tt(**days: Sequence[tuple[str, str]]) -> Dict[str, List[TimetableEntry]]:
    """Weekly timetable from ``Monday=[("07:00", "Day"), ...]`` keyword args."""
    timetable: Dict[str, List[TimetableEntry]] = {day: [] for day in DAYS_OF_WEEK}
    for day, entries in days.items():
        timetable[day] = [TimetableEntry(time=t, zone=z) for t, z in entries]
    return timetable


def uniform(zone: str = "Comfort") -> Dict[str, List[TimetableEntry]]:
    return {day: [TimetableEntry("00:00", zone)] for day in DAYS_OF_WEEK}


def workweek() -> Dict[str, List[TimetableEntry]]:
    """Day 07:00-22:00, Night otherwise; weekend Comfort from 09:00 to 23:00."""
    week = {
        day: [TimetableEntry("07:00", "Day"), TimetableEntry("22:00", "Night")]
        for day in DAYS_OF_WEEK[:5]
    }
    for day in DAYS_OF_WEEK[5:]:
        week[day] = [TimetableEntry("09:00", "Comfort"), TimetableEntry("23:00", "Night")]
    return week


def summary_for(timetable, zones=ZONES, name: str = "Maison") -> ScheduleSummary:
    return ScheduleSummary(name=name, schedule_id="s1", zones=list(zones), weekly_timetable=timetable)


def week_grid(timetable, zones=ZONES) -> List[Optional[str]]:
    """Zone name for every minute of the week, from the expanded blocks."""
    grid: List[Optional[str]] = [None] * MINUTES_PER_WEEK
    for idx in range(7):
        for block in expand_day(timetable, zones, idx):
            base = idx * MINUTES_PER_DAY
            for m in range(block.start_minutes, block.end_minutes):
                grid[base + m] = block.zone.name
    return grid


def span_minutes(start_day: int, start_time: str, end_day: int, end_time: str) -> range:
    """Absolute minutes covered by a span; may run past the end of the week."""
    start = start_day * MINUTES_PER_DAY + to_minutes(start_time)
    end = end_day * MINUTES_PER_DAY + end_minutes(end_time)
    if end <= start:
        end += MINUTES_PER_WEEK
    return range(start, end)


def expected_after(before: List[Optional[str]], minutes: range, zone: str) -> List[Optional[str]]:
    after = list(before)
    for m in minutes:
        after[m % MINUTES_PER_WEEK] = zone
    return after


# ---------------------------------------------------------------------------
# Simulated intuis_connect backend
# ---------------------------------------------------------------------------
class SimulatedIntuis:
    def __init__(self, timetable, zones=ZONES, *, fail_on_call: Optional[int] = None) -> None:
        self.zones = list(zones)
        self.offsets: Dict[int, str] = {}
        for idx, day in enumerate(DAYS_OF_WEEK):
            for entry in timetable.get(day) or []:
                self.offsets[idx * MINUTES_PER_DAY + to_minutes(entry.time)] = entry.zone
        self.calls: List[Dict[str, Any]] = []
        self.refreshes = 0
        self.fail_on_call = fail_on_call

    def zone_at_offset(self, offset: int) -> Optional[str]:
        if not self.offsets:
            return None
        ordered = sorted(self.offsets)
        current = self.offsets[ordered[-1]]
        for key in ordered:
            if key > offset % MINUTES_PER_WEEK:
                break
            current = self.offsets[key]
        return current

    def weekly_timetable(self) -> Dict[str, List[TimetableEntry]]:
        week: Dict[str, List[TimetableEntry]] = {}
        for idx, day in enumerate(DAYS_OF_WEEK):
            base = idx * MINUTES_PER_DAY
            own = sorted(k for k in self.offsets if base <= k < base + MINUTES_PER_DAY)
            entries = [TimetableEntry(format_minutes(k - base), self.offsets[k]) for k in own]
            if self.offsets and (not own or own[0] != base):
                entries.insert(0, TimetableEntry("00:00", self.zone_at_offset(base)))
            week[day] = entries
        return week

    def summary(self) -> ScheduleSummary:
        return summary_for(self.weekly_timetable(), self.zones)

    async def async_set_schedule_slot(self, data: Dict[str, Any]) -> None:
        self.calls.append(dict(data))
        if self.fail_on_call is not None and len(self.calls) - 1 == self.fail_on_call:
            raise RuntimeError("Intuis API error: 500")
        if "day" in data:
            zone = find_zone_by_id(self.zones, data["zone_id"])
            self.offsets[data["day"] * MINUTES_PER_DAY + to_minutes(data["start_time"])] = zone.name
            return
        zone = find_zone(self.zones, data["zone_name"])
        minutes = span_minutes(int(data["start_day"]), data["start_time"], int(data["end_day"]), data["end_time"])
        start, end = minutes.start, minutes.stop
        restore = self.zone_at_offset(end)
        for key in list(self.offsets):
            if any(key + shift in minutes for shift in (0, MINUTES_PER_WEEK)):
                del self.offsets[key]
        self.offsets[start % MINUTES_PER_WEEK] = zone.name
        if end - start < MINUTES_PER_WEEK and restore is not None:
            self.offsets.setdefault(end % MINUTES_PER_WEEK, restore)

    async def async_refresh_schedules(self) -> None:
        self.refreshes += 1


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def zones() -> List[Zone]:
    return list(ZONES)


@pytest.fixture
def week():
    return workweek()
