"""Translate an edited span into `intuis_connect.set_schedule_slot` calls.

Two wire protocols are supported:

- multi-call: one ``{day, start_time, zone_id}`` call per boundary touched,
  ending with a call that restores the original zone at the end time;
- single-call: one ``{start_day, end_day, start_time, end_time, zone_name}``
  call describing the whole span.

Calls are awaited one after the other. The backing store applies them in
submission order with no transaction, so a failure stops the sequence and
whatever was already applied stays applied.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from .const import MIDNIGHT, MINUTES_PER_DAY
from .models import Span
from .timeutil import day_name, end_minutes, next_day, normalize_end_time, to_minutes

_LOGGER = logging.getLogger(__name__)


class ReconcileError(Exception):
    """A call of an edit sequence failed; `applied` calls went through."""

    def __init__(self, message: str, *, applied: int, total: int) -> None:
        self.applied = applied
        self.total = total
        super().__init__(message)


@dataclass(frozen=True)
class SlotCall:
    day: int
    start_time: str
    zone_id: int

    def as_service_data(self) -> Dict[str, Any]:
        return {"day": self.day, "start_time": self.start_time, "zone_id": self.zone_id}


@dataclass(frozen=True)
class SpanCall:
    start_day: str        # index encodé en chaîne, ex. "0"
    end_day: str
    start_time: str
    end_time: str
    zone_name: str

    def as_service_data(self) -> Dict[str, Any]:
        return {
            "start_day": self.start_day,
            "end_day": self.end_day,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "zone_name": self.zone_name,
        }


OutgoingCall = Union[SlotCall, SpanCall]


class ScheduleSlotService(Protocol):
    async def async_set_schedule_slot(self, data: Dict[str, Any]) -> None:
        ...


def spans_days(span: Span) -> bool:
    """True when the span leaves its start day.

    On a single day, an end at or before the start wraps around the week.
    """
    if span.start_day != span.end_day:
        return True
    return to_minutes(span.start_time) >= end_minutes(span.end_time)


def _ends_at_end_of_day(span: Span) -> bool:
    return end_minutes(span.end_time) == MINUTES_PER_DAY


def _ensure_not_empty(span: Span) -> None:
    if span.start_day == span.end_day and to_minutes(span.start_time) == end_minutes(span.end_time):
        raise ValueError(f"Empty span on {day_name(span.start_day)} at {span.start_time}")


def build_slot_calls(span: Span, original_zone_id: Optional[int]) -> List[SlotCall]:
    """Multi-call protocol: boundary events for `span`.

    `original_zone_id` is the zone that held the end time before the edit; it
    is put back there unless the span runs to end of day.
    """
    _ensure_not_empty(span)
    calls = [SlotCall(span.start_day, span.start_time, span.zone_id)]
    restore = original_zone_id is not None and not _ends_at_end_of_day(span)

    if not spans_days(span):
        if restore:
            calls.append(SlotCall(span.start_day, span.end_time, original_zone_id))
        return calls

    current = next_day(span.start_day)
    while current != span.end_day:
        calls.append(SlotCall(current, MIDNIGHT, span.zone_id))
        current = next_day(current)
    # un span qui revient sur son jour de départ couvre aussi son 00:00
    calls.append(SlotCall(span.end_day, MIDNIGHT, span.zone_id))
    if restore:
        calls.append(SlotCall(span.end_day, span.end_time, original_zone_id))
    return calls


def build_span_call(span: Span, zone_name: str) -> SpanCall:
    """Single-call protocol: the whole span in one event."""
    _ensure_not_empty(span)
    return SpanCall(
        start_day=str(span.start_day),
        end_day=str(span.end_day),
        start_time=span.start_time,
        end_time=normalize_end_time(span.end_time),
        zone_name=zone_name,
    )


async def async_submit(api: ScheduleSlotService, calls: Sequence[OutgoingCall]) -> int:
    """Send `calls` in order, stopping at the first failure.

    Returns the number of calls applied. No compensating calls are issued for a
    partially applied sequence.
    """
    for applied, call in enumerate(calls):
        data = call.as_service_data()
        _LOGGER.debug("set_schedule_slot %s (%d/%d)", data, applied + 1, len(calls))
        try:
            await api.async_set_schedule_slot(data)
        except Exception as err:
            _LOGGER.error("Schedule update failed after %d/%d calls: %s", applied, len(calls), err)
            raise ReconcileError(str(err) or "Failed to update schedule", applied=applied, total=len(calls)) from err
    return len(calls)
