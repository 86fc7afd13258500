from __future__ import annotations

from homeassistant.components.select import SelectEntity
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import CONF_SCHEDULE_SELECT_ENTITY, DOMAIN
from .coordinator import IntuisScheduleCoordinator
from .api import IntuisScheduleApi

async def async_setup_entry(hass, entry, async_add_entities):
    data = hass.data.setdefault(DOMAIN, {}).setdefault(entry.entry_id, {})
    api: IntuisScheduleApi = data.get("api")
    coordinator: IntuisScheduleCoordinator = data.get("coordinator")
    select_entity = entry.data.get(CONF_SCHEDULE_SELECT_ENTITY)
    if not api or not coordinator or not select_entity:
        return
    async_add_entities([IntuisScheduleSelect(api, coordinator, entry.entry_id, select_entity)], True)

class IntuisScheduleSelect(CoordinatorEntity[IntuisScheduleCoordinator], SelectEntity):
    """Relais vers le sélecteur de planning d'intuis_connect."""

    def __init__(self, api, coordinator, entry_id, select_entity):
        super().__init__(coordinator)
        self._api = api
        self._select_entity = select_entity
        self._attr_name = "Intuis Active Schedule"
        self._attr_unique_id = f"{DOMAIN}_{entry_id}_schedule"

    @property
    def options(self):
        summary = self.coordinator.data
        if summary is None:
            return []
        return [s.name for s in summary.available_schedules]

    @property
    def current_option(self):
        summary = self.coordinator.data
        return summary.selected_schedule if summary else None

    async def async_select_option(self, option: str):
        if option in self.options:
            await self._api.async_select_schedule(self._select_entity, option)
            await self.coordinator.async_request_refresh()
