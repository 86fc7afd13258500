import logging
from datetime import timedelta

from homeassistant.core import Event, HomeAssistant, callback
from homeassistant.helpers.event import async_track_state_change_event
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .const import DOMAIN, UPDATE_INTERVAL_SECONDS
from .api import IntuisScheduleApi, IntuisScheduleApiError
from .models import ScheduleSummary

_LOGGER = logging.getLogger(__name__)


class IntuisScheduleCoordinator(DataUpdateCoordinator[ScheduleSummary]):
    """Relit le résumé de planning à chaque rafraîchissement (aucun cache)."""

    def __init__(self, hass: HomeAssistant, api: IntuisScheduleApi, entity_id: str) -> None:
        super().__init__(
            hass,
            _LOGGER,
            name=f"{DOMAIN}_coordinator",
            update_interval=timedelta(seconds=UPDATE_INTERVAL_SECONDS),
        )
        self.api = api
        self.entity_id = entity_id

    async def _async_update_data(self) -> ScheduleSummary:
        try:
            summary = await self.api.async_get_summary(self.entity_id)
        except IntuisScheduleApiError as err:
            raise UpdateFailed(f"Intuis schedule error: {err}") from err
        if summary is None:
            raise UpdateFailed(f"Entity {self.entity_id} not found or has no timetable")
        return summary

    @callback
    def async_track_source(self):
        """Refresh as soon as the summary sensor changes; returns the unsubscribe."""

        @callback
        def _on_change(event: Event) -> None:
            new_state = event.data.get("new_state")
            summary = None
            if new_state is not None:
                summary = ScheduleSummary.from_state(new_state.state, new_state.attributes)
            if summary is None:
                _LOGGER.debug("%s changed without timetable, full refresh", self.entity_id)
                self.hass.async_create_task(self.async_request_refresh())
                return
            self.async_set_updated_data(summary)

        return async_track_state_change_event(self.hass, [self.entity_id], _on_change)
