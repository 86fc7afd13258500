from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
import logging

from homeassistant.components.sensor import SensorEntity
from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.event import async_track_time_change
from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.util import dt as dt_util

from .const import DOMAIN
from .coordinator import IntuisScheduleCoordinator
from .models import Block
from .timetable import block_at, expand_day, expand_week

_LOGGER = logging.getLogger(__name__)

# ---------- Device helpers ----------
def device_info_schedule(entry_id: str, name: str) -> DeviceInfo:
    return DeviceInfo(
        identifiers={(DOMAIN, f"schedule_{entry_id}")},
        name=name,
        manufacturer="Muller/Intuis",
        model="Heating schedule",
    )

# ---------- PLATFORM ENTRYPOINT ----------
async def async_setup_entry(hass, entry, async_add_entities):
    """Set up the active zone sensor from a config entry."""
    data = hass.data.setdefault(DOMAIN, {}).setdefault(entry.entry_id, {})
    coordinator: IntuisScheduleCoordinator = data.get("coordinator")
    if coordinator is None:
        _LOGGER.error("Coordinator not available; cannot create sensors")
        return
    async_add_entities([IntuisActiveZoneSensor(coordinator, entry.entry_id)], True)


def current_block(coordinator: IntuisScheduleCoordinator, now: datetime) -> Optional[Block]:
    summary = coordinator.data
    if summary is None:
        return None
    blocks = expand_day(summary.weekly_timetable, summary.zones, now.weekday())
    return block_at(blocks, now.hour * 60 + now.minute)


class IntuisActiveZoneSensor(CoordinatorEntity[IntuisScheduleCoordinator], SensorEntity):
    """Zone en vigueur maintenant ; l'heure vient d'un tick externe chaque minute."""

    _attr_icon = "mdi:calendar-clock"

    def __init__(self, coordinator: IntuisScheduleCoordinator, entry_id: str) -> None:
        super().__init__(coordinator)
        self._attr_unique_id = f"{DOMAIN}_{entry_id}_active_zone"
        self._attr_name = "Intuis Active Zone"
        summary = coordinator.data
        self._attr_device_info = device_info_schedule(entry_id, summary.name if summary else "Intuis schedule")
        self._now: datetime = dt_util.now()

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(async_track_time_change(self.hass, self._on_tick, second=0))

    @callback
    def _on_tick(self, now: datetime) -> None:
        self._now = dt_util.as_local(now)
        self.async_write_ha_state()

    @property
    def native_value(self) -> Optional[str]:
        block = current_block(self.coordinator, self._now)
        return block.zone.name if block else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        summary = self.coordinator.data
        block = current_block(self.coordinator, self._now)
        attrs: dict[str, Any] = {}
        if summary is None:
            return attrs
        attrs["schedule"] = summary.name
        attrs["available_schedules"] = [s.name for s in summary.available_schedules]
        if block is not None:
            attrs.update(
                {
                    "zone_id": block.zone.id,
                    "zone_type": block.zone.type_name,
                    "average_temperature": block.zone.average_temperature,
                    "block_start": block.start_time,
                    "block_end": block.end_time,
                }
            )
        attrs["week"] = {
            day: [b.as_dict() for b in blocks]
            for day, blocks in expand_week(summary.weekly_timetable, summary.zones).items()
        }
        return attrs
