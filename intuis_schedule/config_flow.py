from __future__ import annotations

from typing import Any, Dict
import logging
import voluptuous as vol

from homeassistant import config_entries
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import (
    CONF_ACCESS_TOKEN,
    CONF_ENTITY,
    CONF_HOST,
    CONF_PROTOCOL,
    CONF_SCHEDULE_SELECT_ENTITY,
    DEFAULT_PROTOCOL,
    DOMAIN,
    PROTOCOLS,
)
from .api import HassScheduleApi, IntuisScheduleApi, IntuisScheduleApiError, RestScheduleApi

_LOGGER = logging.getLogger(__name__)

USER_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_ENTITY): str,
        vol.Optional(CONF_SCHEDULE_SELECT_ENTITY): str,
        vol.Optional(CONF_PROTOCOL, default=DEFAULT_PROTOCOL): vol.In(PROTOCOLS),
        vol.Optional(CONF_HOST): str,
        vol.Optional(CONF_ACCESS_TOKEN): str,
    }
)


def build_api(hass, data: Dict[str, Any]) -> IntuisScheduleApi:
    """In-process API unless a remote host is configured."""
    host = (data.get(CONF_HOST) or "").strip()
    if host:
        return RestScheduleApi(async_get_clientsession(hass), host=host, access_token=data.get(CONF_ACCESS_TOKEN, ""))
    return HassScheduleApi(hass)


class IntuisScheduleConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input: Dict[str, Any] | None = None) -> FlowResult:
        errors: Dict[str, str] = {}
        if user_input is not None:
            entity_id = user_input[CONF_ENTITY].strip()
            host = (user_input.get(CONF_HOST) or "").strip()
            await self.async_set_unique_id(f"{host or 'local'}:{entity_id}".lower())
            self._abort_if_unique_id_configured()

            if host and not user_input.get(CONF_ACCESS_TOKEN):
                errors[CONF_ACCESS_TOKEN] = "token_required"
            else:
                api = build_api(self.hass, user_input)
                try:
                    summary = await api.async_get_summary(entity_id)
                except IntuisScheduleApiError as exc:
                    _LOGGER.exception("Schedule summary fetch failed: %s", exc)
                    msg = str(exc).lower()
                    errors["base"] = "invalid_auth" if any(k in msg for k in ("401", "403")) else "cannot_connect"
                else:
                    if summary is None:
                        errors[CONF_ENTITY] = "not_a_schedule"
                    else:
                        data = {**user_input, CONF_ENTITY: entity_id, CONF_HOST: host}
                        return self.async_create_entry(title=f"Intuis schedule ({summary.name})", data=data)
        return self.async_show_form(step_id="user", data_schema=USER_SCHEMA, errors=errors)
