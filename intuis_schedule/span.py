"""Detection of a zone run that continues across midnight.

Selecting a block that touches 00:00 or 24:00 selects the whole run of that
zone over the neighbouring days, so it can be edited as one span.
"""
from __future__ import annotations

import logging
from typing import Mapping, Sequence

from .const import DAYS_IN_WEEK, END_OF_DAY, MIDNIGHT, MINUTES_PER_DAY
from .models import Block, Span, TimetableEntry, Zone
from .timetable import block_at, expand_day
from .timeutil import day_index, display_end_time, format_minutes, next_day, previous_day, to_minutes

_LOGGER = logging.getLogger(__name__)


def _whole_week(zone_id: int) -> Span:
    return Span(start_day=0, start_time=MIDNIGHT, end_day=DAYS_IN_WEEK - 1, end_time=END_OF_DAY, zone_id=zone_id)


def detect_span(
    timetable: Mapping[str, Sequence[TimetableEntry]],
    zones: Sequence[Zone],
    day: int | str,
    block: Block,
) -> Span:
    """Maximal contiguous run of `block`'s zone around `block` on `day`.

    Each scan walks at most one week. A week where the zone never changes
    yields Monday 00:00 -> Sunday 24:00 whatever block was picked.
    """
    idx = day_index(day)
    zone_id = block.zone.id
    start_day, start_min = idx, block.start_minutes
    end_day, end_min = idx, block.end_minutes

    if block.start_minutes == 0:
        current = idx
        for _ in range(DAYS_IN_WEEK):
            current = previous_day(current)
            blocks = expand_day(timetable, zones, current)
            if not blocks:
                break
            last = blocks[-1]
            if last.end_minutes != MINUTES_PER_DAY or last.zone.id != zone_id:
                break
            if current == idx and last.start_minutes == 0:
                _LOGGER.debug("Zone %s covers the whole week", block.zone.name)
                return _whole_week(zone_id)
            start_day, start_min = current, last.start_minutes
            if last.start_minutes != 0:
                break

    if block.end_minutes == MINUTES_PER_DAY:
        current = idx
        for _ in range(DAYS_IN_WEEK):
            current = next_day(current)
            blocks = expand_day(timetable, zones, current)
            if not blocks:
                break
            first = blocks[0]
            if first.start_minutes != 0 or first.zone.id != zone_id:
                break
            end_day, end_min = current, first.end_minutes
            if first.end_minutes != MINUTES_PER_DAY:
                break

    return Span(
        start_day=start_day,
        start_time=format_minutes(start_min),
        end_day=end_day,
        end_time=display_end_time(format_minutes(end_min % MINUTES_PER_DAY)),
        zone_id=zone_id,
    )


def detect_span_at(
    timetable: Mapping[str, Sequence[TimetableEntry]],
    zones: Sequence[Zone],
    day: int | str,
    time_str: str,
) -> tuple[Block, Span]:
    """Resolve the block under (day, time) and detect its span."""
    blocks = expand_day(timetable, zones, day)
    block = block_at(blocks, to_minutes(time_str))
    if block is None:
        raise LookupError(f"No schedule block at {day} {time_str}")
    return block, detect_span(timetable, zones, day, block)
