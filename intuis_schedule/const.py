from __future__ import annotations

from typing import Final

DOMAIN: Final = "intuis_schedule"

# Integration qui possède le planning (services appelés en sortie)
INTUIS_DOMAIN: Final = "intuis_connect"
SERVICE_SET_SCHEDULE_SLOT: Final = "set_schedule_slot"
SERVICE_REFRESH_SCHEDULES: Final = "refresh_schedules"

# Services exposed by this integration
SERVICE_GET_BLOCKS: Final = "get_blocks"
SERVICE_DETECT_SPAN: Final = "detect_span"
SERVICE_EDIT_SCHEDULE: Final = "edit_schedule"
SERVICE_REFRESH: Final = "refresh"

CONF_ENTITY: Final = "entity"
CONF_SCHEDULE_SELECT_ENTITY: Final = "schedule_select_entity"
CONF_PROTOCOL: Final = "protocol"
CONF_HOST: Final = "host"
CONF_ACCESS_TOKEN: Final = "access_token"

PROTOCOL_MULTI: Final = "multi"
PROTOCOL_SINGLE: Final = "single"
PROTOCOLS: Final = [PROTOCOL_MULTI, PROTOCOL_SINGLE]
DEFAULT_PROTOCOL: Final = PROTOCOL_MULTI

UPDATE_INTERVAL_SECONDS: Final = 60

MINUTES_PER_DAY: Final = 1440
DAYS_IN_WEEK: Final = 7
MIDNIGHT: Final = "00:00"
END_OF_DAY: Final = "24:00"

DAYS_OF_WEEK: Final = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]
DAY_INDEX: Final = {day: idx for idx, day in enumerate(DAYS_OF_WEEK)}

# Codes de type de zone (doc API Intuis)
ZONE_TYPE_NAMES: Final = {
    0: "Comfort",
    1: "Night",
    4: "Day",
    5: "Eco",
    8: "Comfort+",
}
