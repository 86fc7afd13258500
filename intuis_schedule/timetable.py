"""Expansion of the sparse weekly timetable into per-day zone blocks.

A day's entries only say "switch to zone X at HH:MM". The zone in force at
00:00 is inherited from the previous day's last entry (carry-over), so each
day expands to blocks covering [00:00, 24:00) without gaps.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .const import DAYS_OF_WEEK, MINUTES_PER_DAY
from .models import Block, TimetableEntry, Zone
from .timeutil import day_index, day_name, previous_day, to_minutes

_LOGGER = logging.getLogger(__name__)


def find_zone(zones: Sequence[Zone], name: str) -> Optional[Zone]:
    """Exact name match against the zone catalog."""
    for zone in zones:
        if zone.name == name:
            return zone
    return None


def find_zone_by_id(zones: Sequence[Zone], zone_id: int) -> Optional[Zone]:
    for zone in zones:
        if zone.id == zone_id:
            return zone
    return None


def sorted_entries(entries: Sequence[TimetableEntry]) -> List[TimetableEntry]:
    # sorted() est stable : à minute égale, l'ordre de la liste est conservé
    return sorted(entries, key=lambda e: to_minutes(e.time))


def _day_entries(timetable: Mapping[str, Sequence[TimetableEntry]], day: int) -> List[TimetableEntry]:
    return sorted_entries(timetable.get(day_name(day)) or [])


def carry_over_zone(timetable: Mapping[str, Sequence[TimetableEntry]], day: int) -> Optional[str]:
    """Name of the zone in force entering `day` at 00:00.

    Previous day's chronologically last entry; when the previous day is empty,
    this day's own first entry. None when neither day has entries.
    """
    prev_entries = _day_entries(timetable, previous_day(day))
    if prev_entries:
        return prev_entries[-1].zone
    entries = _day_entries(timetable, day)
    if entries:
        return entries[0].zone
    return None


def expand_day(
    timetable: Mapping[str, Sequence[TimetableEntry]],
    zones: Sequence[Zone],
    day: int | str,
) -> List[Block]:
    """Expand one day of the weekly timetable into contiguous zone blocks."""
    idx = day_index(day)
    entries = _day_entries(timetable, idx)

    transitions: List[tuple[int, str]] = []
    if not entries or to_minutes(entries[0].time) != 0:
        carried = carry_over_zone(timetable, idx)
        if carried is not None:
            transitions.append((0, carried))
    transitions.extend((to_minutes(e.time), e.zone) for e in entries)
    transitions.sort(key=lambda t: t[0])

    blocks: List[Block] = []
    for i, (start, zone_name) in enumerate(transitions):
        end = transitions[i + 1][0] if i + 1 < len(transitions) else MINUTES_PER_DAY
        if end <= start:
            # plusieurs entrées à la même minute : la dernière l'emporte
            continue
        zone = find_zone(zones, zone_name)
        if zone is None:
            _LOGGER.debug("%s %02d:%02d: zone %r not in catalog, block dropped",
                          day_name(idx), start // 60, start % 60, zone_name)
            continue
        if blocks and blocks[-1].zone.id == zone.id and blocks[-1].end_minutes == start:
            blocks[-1] = Block(zone=zone, start_minutes=blocks[-1].start_minutes, end_minutes=end)
            continue
        blocks.append(Block(zone=zone, start_minutes=start, end_minutes=end))
    return blocks


def expand_week(
    timetable: Mapping[str, Sequence[TimetableEntry]],
    zones: Sequence[Zone],
) -> Dict[str, List[Block]]:
    return {day: expand_day(timetable, zones, idx) for idx, day in enumerate(DAYS_OF_WEEK)}


def block_at(blocks: Sequence[Block], minute: int) -> Optional[Block]:
    """Block covering `minute`, if any.

    Blocks whose start exceeds their end are not matched here; a run that
    continues past midnight is found with the span detector instead.
    """
    for block in blocks:
        if block.start_minutes <= block.end_minutes and block.start_minutes <= minute < block.end_minutes:
            return block
    return None


def active_zone_at(blocks: Sequence[Block], minute: int) -> Optional[Zone]:
    block = block_at(blocks, minute)
    return block.zone if block is not None else None


def zone_at(
    timetable: Mapping[str, Sequence[TimetableEntry]],
    zones: Sequence[Zone],
    day: int | str,
    minute: int,
) -> Optional[Zone]:
    return active_zone_at(expand_day(timetable, zones, day), minute)
