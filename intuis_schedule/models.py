from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional

from .const import DAYS_OF_WEEK, MIDNIGHT, MINUTES_PER_DAY, ZONE_TYPE_NAMES
from .timeutil import day_name, format_minutes

EditProtocol = Literal["multi", "single"]

@dataclass(frozen=True)
class Zone:
    id: int
    name: str
    type: int = 0
    room_temperatures: Dict[str, float] = field(default_factory=dict, compare=False, hash=False)

    @property
    def type_name(self) -> str:
        return ZONE_TYPE_NAMES.get(self.type, f"Type {self.type}")

    @property
    def average_temperature(self) -> int:
        temps = list(self.room_temperatures.values())
        if not temps:
            return 0
        return round(sum(temps) / len(temps))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Zone":
        temps: Dict[str, float] = {}
        for room_id, temp in (raw.get("room_temperatures") or {}).items():
            try:
                temps[str(room_id)] = float(temp)
            except (TypeError, ValueError):
                continue
        return cls(
            id=int(raw.get("id", 0)),
            name=str(raw.get("name", "")),
            type=int(raw.get("type", 0) or 0),
            room_temperatures=temps,
        )

@dataclass(frozen=True)
class TimetableEntry:
    time: str             # "HH:MM"
    zone: str             # zone name

WeeklyTimetable = Dict[str, List[TimetableEntry]]

@dataclass(frozen=True)
class Block:
    zone: Zone
    start_minutes: int    # [0, 1440)
    end_minutes: int      # (0, 1440]

    @property
    def start_time(self) -> str:
        return format_minutes(self.start_minutes)

    @property
    def end_time(self) -> str:
        # 24:00 s'affiche 00:00, la valeur entière reste 1440
        if self.end_minutes >= MINUTES_PER_DAY:
            return MIDNIGHT
        return format_minutes(self.end_minutes)

    @property
    def duration(self) -> int:
        return self.end_minutes - self.start_minutes

    def as_dict(self) -> Dict[str, Any]:
        return {
            "zone": self.zone.name,
            "zone_id": self.zone.id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "start_minutes": self.start_minutes,
            "end_minutes": self.end_minutes,
        }

@dataclass(frozen=True)
class Span:
    start_day: int        # 0=Mon ... 6=Sun
    start_time: str
    end_day: int
    end_time: str         # "24:00" = through end of day
    zone_id: int

    @property
    def start_day_name(self) -> str:
        return day_name(self.start_day)

    @property
    def end_day_name(self) -> str:
        return day_name(self.end_day)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "start_day": self.start_day_name,
            "start_day_index": self.start_day,
            "start_time": self.start_time,
            "end_day": self.end_day_name,
            "end_day_index": self.end_day,
            "end_time": self.end_time,
            "zone_id": self.zone_id,
        }

@dataclass
class EditableSpan:
    block: Block          # bloc cliqué
    start_day: str
    start_day_index: int
    end_day: str
    end_day_index: int
    start_time: str
    end_time: str
    selected_zone_id: Optional[int]

    @classmethod
    def from_span(cls, span: Span, block: Block) -> "EditableSpan":
        return cls(
            block=block,
            start_day=span.start_day_name,
            start_day_index=span.start_day,
            end_day=span.end_day_name,
            end_day_index=span.end_day,
            start_time=span.start_time,
            end_time=span.end_time,
            selected_zone_id=block.zone.id,
        )

    def to_span(self) -> Span:
        zone_id = self.selected_zone_id if self.selected_zone_id is not None else self.block.zone.id
        return Span(
            start_day=self.start_day_index,
            start_time=self.start_time,
            end_day=self.end_day_index,
            end_time=self.end_time,
            zone_id=zone_id,
        )

@dataclass(frozen=True)
class AvailableSchedule:
    id: str
    name: str
    selected: bool = False

@dataclass
class ScheduleSummary:
    name: str
    schedule_id: Optional[str]
    zones: List[Zone]
    weekly_timetable: WeeklyTimetable
    available_schedules: List[AvailableSchedule] = field(default_factory=list)
    is_default: bool = False
    is_active: bool = False
    away_temperature: Optional[float] = None
    frost_guard_temperature: Optional[float] = None

    @property
    def selected_schedule(self) -> Optional[str]:
        for schedule in self.available_schedules:
            if schedule.selected:
                return schedule.name
        return None

    @classmethod
    def from_state(cls, state: Optional[str], attributes: Optional[Mapping[str, Any]]) -> Optional["ScheduleSummary"]:
        """Build a summary from the schedule sensor state/attributes.

        Returns None when the sensor does not carry a timetable (entity missing,
        unavailable, or not an Intuis schedule summary).
        """
        if not isinstance(attributes, Mapping):
            return None
        raw_tt = attributes.get("weekly_timetable")
        raw_zones = attributes.get("zones")
        if not isinstance(raw_tt, Mapping) or not isinstance(raw_zones, list):
            return None

        zones = [Zone.from_dict(z) for z in raw_zones if isinstance(z, Mapping)]

        timetable: WeeklyTimetable = {}
        for day in DAYS_OF_WEEK:
            entries = raw_tt.get(day) or []
            timetable[day] = [
                TimetableEntry(time=str(e.get("time")), zone=str(e.get("zone")))
                for e in entries
                if isinstance(e, Mapping) and e.get("time") and e.get("zone") is not None
            ]

        schedules = [
            AvailableSchedule(id=str(s.get("id", "")), name=str(s.get("name", "")), selected=bool(s.get("selected")))
            for s in attributes.get("available_schedules") or []
            if isinstance(s, Mapping)
        ]

        def _float(key: str) -> Optional[float]:
            try:
                return float(attributes[key])
            except (KeyError, TypeError, ValueError):
                return None

        return cls(
            name=str(state) if state not in (None, "") else "Unknown",
            schedule_id=attributes.get("schedule_id"),
            zones=zones,
            weekly_timetable=timetable,
            available_schedules=schedules,
            is_default=bool(attributes.get("is_default")),
            is_active=bool(attributes.get("is_active")),
            away_temperature=_float("away_temperature"),
            frost_guard_temperature=_float("frost_guard_temperature"),
        )
