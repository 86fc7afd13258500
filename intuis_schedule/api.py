from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError

from .const import (
    INTUIS_DOMAIN,
    SERVICE_REFRESH_SCHEDULES,
    SERVICE_SET_SCHEDULE_SLOT,
)
from .models import ScheduleSummary

_LOGGER = logging.getLogger(__name__)

# ---- Exceptions ----------------------------------------------------------------


class IntuisScheduleApiError(Exception):
    pass


# ---- Low-level HTTP client (API REST Home Assistant) ----------------------------


class HomeAssistantHttpClient:
    def __init__(self, session: aiohttp.ClientSession, *, host: str, access_token: str) -> None:
        self._session = session
        self._base = host.rstrip("/")
        self._token = access_token

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def _request_json(self, method: str, path: str, *, json: Any | None = None) -> Any:
        url = f"{self._base}{path}"
        headers = self._auth_headers()
        if json is not None:
            headers["Content-Type"] = "application/json"
        try:
            async with self._session.request(method, url, headers=headers, json=json) as resp:
                if resp.status == 404:
                    return None
                if resp.status >= 400:
                    try:
                        err_text = await resp.text()
                    except aiohttp.ClientError:
                        err_text = "<no body>"
                    raise IntuisScheduleApiError(f"{method} {url} -> {resp.status} {resp.reason} | body: {err_text}")
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    text = await resp.text()
                    raise IntuisScheduleApiError(f"Invalid JSON from {url}: {e} | body: {text}") from e
        except aiohttp.ClientError as e:
            raise IntuisScheduleApiError(f"{method} {url} failed: {e}") from e

    async def get_state(self, entity_id: str) -> Optional[Dict[str, Any]]:
        """GET /api/states/<entity_id> -> {"state": ..., "attributes": {...}} ou None."""
        raw = await self._request_json("GET", f"/api/states/{entity_id}")
        if raw is None:
            return None
        if not isinstance(raw, dict):
            _LOGGER.error("states/%s: type inattendu: %s - extrait=%r", entity_id, type(raw), str(raw)[:300])
            raise IntuisScheduleApiError(f"Schéma inattendu pour /api/states/{entity_id}")
        return raw

    async def call_service(self, domain: str, service: str, data: Dict[str, Any]) -> Any:
        return await self._request_json("POST", f"/api/services/{domain}/{service}", json=data)


# ---- High-level API used by the integration ------------------------------------


class IntuisScheduleApi(ABC):
    """Collaborator call interface: read the summary, send schedule updates."""

    @abstractmethod
    async def async_get_state(self, entity_id: str) -> Optional[Dict[str, Any]]:
        """{"state": ..., "attributes": {...}} of `entity_id`, None if unknown."""

    @abstractmethod
    async def async_call(self, domain: str, service: str, data: Dict[str, Any]) -> None:
        """Call a Home Assistant service and wait for it to finish."""

    async def async_get_summary(self, entity_id: str) -> Optional[ScheduleSummary]:
        """Latest snapshot of the schedule summary sensor, None if unavailable."""
        raw = await self.async_get_state(entity_id)
        if raw is None:
            _LOGGER.debug("Entity %s not found", entity_id)
            return None
        return ScheduleSummary.from_state(raw.get("state"), raw.get("attributes"))

    async def async_set_schedule_slot(self, data: Dict[str, Any]) -> None:
        await self.async_call(INTUIS_DOMAIN, SERVICE_SET_SCHEDULE_SLOT, data)

    async def async_refresh_schedules(self) -> None:
        await self.async_call(INTUIS_DOMAIN, SERVICE_REFRESH_SCHEDULES, {})

    async def async_select_schedule(self, entity_id: str, option: str) -> None:
        await self.async_call("select", "select_option", {"entity_id": entity_id, "option": option})


class HassScheduleApi(IntuisScheduleApi):
    """Same Home Assistant instance: states machine + service registry."""

    def __init__(self, hass: HomeAssistant) -> None:
        self._hass = hass

    async def async_get_state(self, entity_id: str) -> Optional[Dict[str, Any]]:
        state = self._hass.states.get(entity_id)
        if state is None:
            return None
        return {"state": state.state, "attributes": dict(state.attributes)}

    async def async_call(self, domain: str, service: str, data: Dict[str, Any]) -> None:
        try:
            await self._hass.services.async_call(domain, service, data, blocking=True)
        except HomeAssistantError as e:
            raise IntuisScheduleApiError(f"{domain}.{service} failed: {e}") from e


class RestScheduleApi(IntuisScheduleApi):
    """Remote Home Assistant reached through its REST API."""

    def __init__(self, session: aiohttp.ClientSession, *, host: str, access_token: str) -> None:
        self._client = HomeAssistantHttpClient(session, host=host, access_token=access_token)

    async def async_get_state(self, entity_id: str) -> Optional[Dict[str, Any]]:
        return await self._client.get_state(entity_id)

    async def async_call(self, domain: str, service: str, data: Dict[str, Any]) -> None:
        await self._client.call_service(domain, service, data)
