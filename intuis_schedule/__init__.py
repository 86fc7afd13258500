from __future__ import annotations

import logging
from typing import Final

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_ENTITY, CONF_PROTOCOL, DEFAULT_PROTOCOL, DOMAIN
from .api import HassScheduleApi
from .config_flow import build_api
from .coordinator import IntuisScheduleCoordinator
from .editor import ScheduleEditor
from .models import EditProtocol
from .services import async_setup_services, async_unload_services

PLATFORMS: Final = ["sensor", "select"]
_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up an Intuis schedule from a config entry."""
    api = build_api(hass, dict(entry.data))
    entity_id: str = entry.data[CONF_ENTITY]
    protocol: EditProtocol = entry.data.get(CONF_PROTOCOL, DEFAULT_PROTOCOL)

    coordinator = IntuisScheduleCoordinator(hass, api, entity_id)
    await coordinator.async_config_entry_first_refresh()

    if isinstance(api, HassScheduleApi):
        # même instance : on suit directement les changements du capteur
        entry.async_on_unload(coordinator.async_track_source())

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = {
        "api": api,
        "coordinator": coordinator,
        "editor": ScheduleEditor(api, protocol=protocol),
        "protocol": protocol,
    }

    async_setup_services(hass)
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok and entry.entry_id in hass.data.get(DOMAIN, {}):
        hass.data[DOMAIN].pop(entry.entry_id, None)
        if not hass.data[DOMAIN]:
            async_unload_services(hass)
    return unload_ok
