"""Editing session for one schedule: CLOSED -> OPEN -> CLOSED.

A block pick opens the editor on the span found by the span detector. Zone,
day and time changes only mutate the open span. Apply, apply failure and
cancel all close it.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import List, Literal, Optional

from .const import DEFAULT_PROTOCOL, PROTOCOL_SINGLE
from .models import Block, EditProtocol, EditableSpan, ScheduleSummary
from .reconcile import (
    OutgoingCall,
    ReconcileError,
    ScheduleSlotService,
    async_submit,
    build_slot_calls,
    build_span_call,
)
from .span import detect_span, detect_span_at
from .timetable import find_zone_by_id, zone_at
from .timeutil import day_index, day_name, end_minutes

_LOGGER = logging.getLogger(__name__)


class EditorState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


class ScheduleEditError(Exception):
    pass


class EditInProgressError(ScheduleEditError):
    pass


class ScheduleEditor:
    def __init__(self, api: ScheduleSlotService, *, protocol: EditProtocol = DEFAULT_PROTOCOL) -> None:
        self._api = api
        self.protocol: EditProtocol = protocol
        self.state = EditorState.CLOSED
        self.span: Optional[EditableSpan] = None
        self.last_error: Optional[str] = None
        self._pending = False

    @property
    def is_open(self) -> bool:
        return self.state is EditorState.OPEN

    @property
    def is_pending(self) -> bool:
        return self._pending

    def _require_idle(self) -> None:
        if self._pending:
            raise EditInProgressError("An edit is already being applied")

    def _require_open(self) -> EditableSpan:
        if self.state is not EditorState.OPEN or self.span is None:
            raise ScheduleEditError("Editor is not open")
        return self.span

    # ---- Transitions ---------------------------------------------------------

    def open_block(self, summary: ScheduleSummary, day: int | str, block: Block) -> EditableSpan:
        """Open on `block` of `day`, widened to its whole zone run."""
        self._require_idle()
        span = detect_span(summary.weekly_timetable, summary.zones, day, block)
        self.span = EditableSpan.from_span(span, block)
        self.state = EditorState.OPEN
        self.last_error = None
        _LOGGER.debug("Editor opened on %s", span)
        return self.span

    def open_at(self, summary: ScheduleSummary, day: int | str, time_str: str) -> EditableSpan:
        self._require_idle()
        try:
            block, _ = detect_span_at(summary.weekly_timetable, summary.zones, day, time_str)
        except LookupError as err:
            raise ScheduleEditError(str(err)) from err
        return self.open_block(summary, day, block)

    def select_zone(self, zone_id: int) -> None:
        self._require_idle()
        self._require_open().selected_zone_id = zone_id

    def set_time(self, which: Literal["start", "end"], value: str) -> None:
        self._require_idle()
        span = self._require_open()
        if which == "start":
            span.start_time = value
        else:
            span.end_time = value

    def set_day(self, which: Literal["start", "end"], day: int | str) -> None:
        self._require_idle()
        span = self._require_open()
        idx = day_index(day)
        if which == "start":
            span.start_day, span.start_day_index = day_name(idx), idx
        else:
            span.end_day, span.end_day_index = day_name(idx), idx

    def cancel(self) -> None:
        self._require_idle()
        self._close()

    def _close(self) -> None:
        self.state = EditorState.CLOSED
        self.span = None

    # ---- Apply ---------------------------------------------------------------

    def build_calls(self, summary: ScheduleSummary) -> List[OutgoingCall]:
        """Outgoing calls for the open span under the configured protocol."""
        editable = self._require_open()
        if editable.selected_zone_id is None:
            raise ScheduleEditError("No zone selected")
        span = editable.to_span()
        try:
            if self.protocol == PROTOCOL_SINGLE:
                zone = find_zone_by_id(summary.zones, span.zone_id)
                if zone is None:
                    raise ScheduleEditError(f"Unknown zone id {span.zone_id}")
                return [build_span_call(span, zone.name)]
            return list(build_slot_calls(span, self._restore_zone_id(summary, editable)))
        except ValueError as err:
            raise ScheduleEditError(str(err)) from err

    def _restore_zone_id(self, summary: ScheduleSummary, editable: EditableSpan) -> int:
        """Zone found at the end boundary before the edit.

        Inside the picked run this is the picked block's zone; at the run's
        edge it is the zone that follows, which must not be overwritten.
        """
        zone = zone_at(
            summary.weekly_timetable,
            summary.zones,
            editable.end_day_index,
            end_minutes(editable.end_time),
        )
        return zone.id if zone is not None else editable.block.zone.id

    async def async_apply(self, summary: ScheduleSummary) -> int:
        """Submit the open span. The editor is closed whatever the outcome.

        Invalid spans raise before anything is sent and leave the editor open.
        """
        self._require_idle()
        calls = self.build_calls(summary)
        self._pending = True
        self.last_error = None
        try:
            applied = await async_submit(self._api, calls)
        except ReconcileError as err:
            self.last_error = str(err)
            raise ScheduleEditError(self.last_error) from err
        finally:
            self._pending = False
            self._close()
        _LOGGER.debug("Edit applied with %d call(s)", applied)
        return applied
