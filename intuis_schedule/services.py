"""Services exposing the schedule engine to Home Assistant."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import voluptuous as vol

from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.exceptions import HomeAssistantError

from .api import IntuisScheduleApiError
from .const import (
    CONF_PROTOCOL,
    DAYS_OF_WEEK,
    DOMAIN,
    PROTOCOLS,
    SERVICE_DETECT_SPAN,
    SERVICE_EDIT_SCHEDULE,
    SERVICE_GET_BLOCKS,
    SERVICE_REFRESH,
)
from .editor import ScheduleEditError
from .models import ScheduleSummary, Zone
from .span import detect_span_at
from .timetable import expand_day, find_zone, find_zone_by_id
from .timeutil import day_index, day_name

_LOGGER = logging.getLogger(__name__)

ATTR_ENTRY_ID = "config_entry_id"
ATTR_DAY = "day"
ATTR_TIME = "time"
ATTR_ZONE = "zone"
ATTR_START_DAY = "start_day"
ATTR_START_TIME = "start_time"
ATTR_END_DAY = "end_day"
ATTR_END_TIME = "end_time"

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
END_TIME_PATTERN = r"^(([01]\d|2[0-3]):[0-5]\d|24:00)$"


def _day(value: Any) -> int:
    try:
        return day_index(value)
    except (TypeError, ValueError) as err:
        raise vol.Invalid(f"invalid day {value!r}, expected 0-6 or one of {DAYS_OF_WEEK}") from err


GET_BLOCKS_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_ENTRY_ID): str,
        vol.Optional(ATTR_DAY): _day,
    }
)

DETECT_SPAN_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_ENTRY_ID): str,
        vol.Required(ATTR_DAY): _day,
        vol.Required(ATTR_TIME): vol.Match(TIME_PATTERN),
    }
)

EDIT_SCHEDULE_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_ENTRY_ID): str,
        vol.Required(ATTR_DAY): _day,
        vol.Required(ATTR_TIME): vol.Match(TIME_PATTERN),
        vol.Required(ATTR_ZONE): vol.Any(int, str),
        vol.Optional(ATTR_START_DAY): _day,
        vol.Optional(ATTR_START_TIME): vol.Match(TIME_PATTERN),
        vol.Optional(ATTR_END_DAY): _day,
        vol.Optional(ATTR_END_TIME): vol.Match(END_TIME_PATTERN),
        vol.Optional(CONF_PROTOCOL): vol.In(PROTOCOLS),
    }
)

REFRESH_SCHEMA = vol.Schema({vol.Optional(ATTR_ENTRY_ID): str})


def resolve_zone(zones: List[Zone], ref: Union[int, str]) -> Optional[Zone]:
    """Zone by id or by name; a digit string ("3" from YAML) is also tried as an id."""
    if isinstance(ref, int):
        return find_zone_by_id(zones, ref)
    zone = find_zone(zones, ref)
    if zone is None and ref.strip().isdigit():
        zone = find_zone_by_id(zones, int(ref))
    return zone


def _entry_data(hass: HomeAssistant, call: ServiceCall) -> Dict[str, Any]:
    entries: Dict[str, Dict[str, Any]] = hass.data.get(DOMAIN, {})
    entry_id = call.data.get(ATTR_ENTRY_ID)
    if entry_id:
        if entry_id not in entries:
            raise HomeAssistantError(f"Unknown config entry {entry_id}")
        return entries[entry_id]
    if not entries:
        raise HomeAssistantError("No Intuis schedule configured")
    return next(iter(entries.values()))


def _summary(data: Dict[str, Any]) -> ScheduleSummary:
    summary = data["coordinator"].data
    if summary is None:
        raise HomeAssistantError("Schedule data not available")
    return summary


def async_setup_services(hass: HomeAssistant) -> None:
    if hass.services.has_service(DOMAIN, SERVICE_GET_BLOCKS):
        return

    async def get_blocks(call: ServiceCall) -> ServiceResponse:
        summary = _summary(_entry_data(hass, call))
        days = [call.data[ATTR_DAY]] if ATTR_DAY in call.data else range(len(DAYS_OF_WEEK))
        return {
            "schedule": summary.name,
            "days": {
                day_name(d): [b.as_dict() for b in expand_day(summary.weekly_timetable, summary.zones, d)]
                for d in days
            },
        }

    async def detect_span(call: ServiceCall) -> ServiceResponse:
        summary = _summary(_entry_data(hass, call))
        try:
            block, span = detect_span_at(summary.weekly_timetable, summary.zones, call.data[ATTR_DAY], call.data[ATTR_TIME])
        except LookupError as err:
            raise HomeAssistantError(str(err)) from err
        return {"block": block.as_dict(), "span": span.as_dict()}

    async def edit_schedule(call: ServiceCall) -> None:
        data = _entry_data(hass, call)
        summary = _summary(data)
        editor = data["editor"]

        zone_ref = call.data[ATTR_ZONE]
        zone = resolve_zone(summary.zones, zone_ref)
        if zone is None:
            raise HomeAssistantError(f"Unknown zone {zone_ref!r}")

        try:
            editor.open_at(summary, call.data[ATTR_DAY], call.data[ATTR_TIME])
            editor.protocol = call.data.get(CONF_PROTOCOL, data["protocol"])
            if ATTR_START_DAY in call.data:
                editor.set_day("start", call.data[ATTR_START_DAY])
            if ATTR_END_DAY in call.data:
                editor.set_day("end", call.data[ATTR_END_DAY])
            if ATTR_START_TIME in call.data:
                editor.set_time("start", call.data[ATTR_START_TIME])
            if ATTR_END_TIME in call.data:
                editor.set_time("end", call.data[ATTR_END_TIME])
            editor.select_zone(zone.id)
            await editor.async_apply(summary)
        except ScheduleEditError as err:
            if editor.is_open and not editor.is_pending:
                editor.cancel()
            raise HomeAssistantError(f"Failed to update schedule: {err}") from err
        await data["coordinator"].async_request_refresh()

    async def refresh(call: ServiceCall) -> None:
        data = _entry_data(hass, call)
        try:
            await data["api"].async_refresh_schedules()
        except IntuisScheduleApiError as err:
            raise HomeAssistantError(str(err)) from err
        await data["coordinator"].async_request_refresh()

    hass.services.async_register(
        DOMAIN, SERVICE_GET_BLOCKS, get_blocks, schema=GET_BLOCKS_SCHEMA, supports_response=SupportsResponse.ONLY
    )
    hass.services.async_register(
        DOMAIN, SERVICE_DETECT_SPAN, detect_span, schema=DETECT_SPAN_SCHEMA, supports_response=SupportsResponse.ONLY
    )
    hass.services.async_register(DOMAIN, SERVICE_EDIT_SCHEDULE, edit_schedule, schema=EDIT_SCHEDULE_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_REFRESH, refresh, schema=REFRESH_SCHEMA)


def async_unload_services(hass: HomeAssistant) -> None:
    for service in (SERVICE_GET_BLOCKS, SERVICE_DETECT_SPAN, SERVICE_EDIT_SCHEDULE, SERVICE_REFRESH):
        hass.services.async_remove(DOMAIN, service)
