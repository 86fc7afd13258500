"""Service-call validation and zone references."""

from __future__ import annotations

import pytest
import voluptuous as vol

from conftest import DAY, ECO, ZONES

from intuis_schedule.models import Zone
from intuis_schedule.services import EDIT_SCHEDULE_SCHEMA, resolve_zone


class TestResolveZone:
    def test_by_id(self):
        assert resolve_zone(ZONES, 3) is ECO

    def test_by_name(self):
        assert resolve_zone(ZONES, "Day") is DAY

    def test_digit_string_is_an_id(self):
        assert resolve_zone(ZONES, "3") is ECO
        assert resolve_zone(ZONES, " 2 ") is DAY

    def test_name_wins_over_id(self):
        zones = ZONES + [Zone(id=9, name="2")]
        assert resolve_zone(zones, "2").id == 9

    def test_unknown(self):
        assert resolve_zone(ZONES, "Ghost") is None
        assert resolve_zone(ZONES, "42") is None


class TestEditSchema:
    def test_day_names_and_zone_string(self):
        data = EDIT_SCHEDULE_SCHEMA({"day": "monday", "time": "23:00", "zone": "3", "end_time": "24:00"})
        assert data["day"] == 0
        assert resolve_zone(ZONES, data["zone"]) is ECO

    def test_bad_time_is_refused(self):
        with pytest.raises(vol.Invalid):
            EDIT_SCHEDULE_SCHEMA({"day": 0, "time": "24:00", "zone": 1})

    def test_bad_protocol_is_refused(self):
        with pytest.raises(vol.Invalid):
            EDIT_SCHEDULE_SCHEMA({"day": 0, "time": "10:00", "zone": 1, "protocol": "batch"})
