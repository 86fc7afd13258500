"""Outgoing calls for both update protocols and their submission."""

from __future__ import annotations

import asyncio

import pytest

from conftest import SimulatedIntuis, tt

from intuis_schedule.models import Span
from intuis_schedule.reconcile import (
    ReconcileError,
    SlotCall,
    SpanCall,
    async_submit,
    build_slot_calls,
    build_span_call,
    spans_days,
)


class TestSpansDays:
    def test_same_day_forward(self):
        assert not spans_days(Span(0, "08:00", 0, "12:00", 1))

    def test_same_day_to_end_of_day(self):
        assert not spans_days(Span(0, "22:00", 0, "24:00", 1))
        assert not spans_days(Span(0, "22:00", 0, "00:00", 1))

    def test_different_days(self):
        assert spans_days(Span(4, "22:00", 0, "07:00", 1))

    def test_same_day_end_before_start_wraps(self):
        assert spans_days(Span(2, "22:00", 2, "06:00", 1))


class TestMultiCall:
    def test_single_day_restores_original_zone(self):
        calls = build_slot_calls(Span(0, "09:00", 0, "12:00", 0), original_zone_id=2)
        assert calls == [SlotCall(0, "09:00", 0), SlotCall(0, "12:00", 2)]

    def test_single_day_to_end_of_day_has_no_restore(self):
        assert build_slot_calls(Span(0, "18:00", 0, "24:00", 0), original_zone_id=2) == [SlotCall(0, "18:00", 0)]

    def test_zone_id_zero_is_restored(self):
        calls = build_slot_calls(Span(1, "09:00", 1, "10:00", 3), original_zone_id=0)
        assert calls[-1] == SlotCall(1, "10:00", 0)

    def test_without_original_zone_nothing_is_restored(self):
        assert build_slot_calls(Span(1, "09:00", 1, "10:00", 3), original_zone_id=None) == [SlotCall(1, "09:00", 3)]

    def test_multi_day_sets_each_day_then_restores(self):
        calls = build_slot_calls(Span(4, "22:00", 0, "07:00", 3), original_zone_id=1)
        assert calls == [
            SlotCall(4, "22:00", 3),
            SlotCall(5, "00:00", 3),
            SlotCall(6, "00:00", 3),
            SlotCall(0, "00:00", 3),
            SlotCall(0, "07:00", 1),
        ]

    def test_multi_day_ending_at_end_of_day(self):
        calls = build_slot_calls(Span(1, "20:00", 2, "24:00", 3), original_zone_id=1)
        assert calls == [SlotCall(1, "20:00", 3), SlotCall(2, "00:00", 3)]

    def test_same_day_wrap_covers_the_week_and_its_own_midnight(self):
        calls = build_slot_calls(Span(2, "22:00", 2, "06:00", 1), original_zone_id=2)
        assert [c.day for c in calls] == [2, 3, 4, 5, 6, 0, 1, 2, 2]
        assert calls[-2] == SlotCall(2, "00:00", 1)
        assert calls[-1] == SlotCall(2, "06:00", 2)

    def test_service_payload(self):
        assert SlotCall(3, "07:30", 2).as_service_data() == {"day": 3, "start_time": "07:30", "zone_id": 2}

    def test_empty_span_is_rejected(self):
        with pytest.raises(ValueError):
            build_slot_calls(Span(0, "08:00", 0, "08:00", 1), original_zone_id=2)


class TestSingleCall:
    def test_end_of_day_is_sent_as_midnight(self):
        call = build_span_call(Span(5, "23:00", 6, "24:00", 1), "Night")
        assert call == SpanCall("5", "6", "23:00", "00:00", "Night")

    def test_payload_encodes_days_as_strings(self):
        data = build_span_call(Span(0, "07:00", 2, "09:30", 2), "Day").as_service_data()
        assert data == {
            "start_day": "0",
            "end_day": "2",
            "start_time": "07:00",
            "end_time": "09:30",
            "zone_name": "Day",
        }

    def test_empty_span_is_rejected(self):
        with pytest.raises(ValueError):
            build_span_call(Span(3, "10:00", 3, "10:00", 1), "Night")


class TestSubmit:
    def test_calls_are_sent_in_order(self):
        api = SimulatedIntuis(tt(Monday=[("00:00", "Comfort")]))
        calls = build_slot_calls(Span(4, "22:00", 0, "07:00", 3), original_zone_id=1)
        assert asyncio.run(async_submit(api, calls)) == 5
        assert [c["day"] for c in api.calls] == [4, 5, 6, 0, 0]

    def test_failure_stops_the_sequence_without_rollback(self):
        api = SimulatedIntuis(tt(Monday=[("00:00", "Comfort")]), fail_on_call=2)
        calls = build_slot_calls(Span(4, "22:00", 0, "07:00", 3), original_zone_id=1)
        with pytest.raises(ReconcileError) as excinfo:
            asyncio.run(async_submit(api, calls))
        assert excinfo.value.applied == 2
        assert excinfo.value.total == 5
        assert "500" in str(excinfo.value)
        # the third call was attempted, nothing after it
        assert len(api.calls) == 3
        # the two accepted calls stay applied
        assert api.offsets[4 * 1440 + 22 * 60] == "Eco"
        assert api.offsets[5 * 1440] == "Eco"
        assert 6 * 1440 not in api.offsets
