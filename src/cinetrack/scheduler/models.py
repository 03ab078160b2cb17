from __future__ import annotations

import datetime as dt
import enum
import typing as t
from dataclasses import dataclass, field

ShowId = t.Union[int, str]
AirDate = t.Union[dt.datetime, dt.date, str, int, float]


class ShowState(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    TBA = "TBA"
    ENDED = "ENDED"
    UNCHANGED = "UNCHANGED"


@dataclass(frozen=True)
class ShowMeta:
    name: str = ""
    next_ep: str = ""

    def to_hash(self) -> t.Dict[str, str]:
        return {"name": self.name, "nextEp": self.next_ep}

    @classmethod
    def from_hash(cls, data: t.Mapping[str, str]) -> "ShowMeta":
        return cls(name=data.get("name", ""), next_ep=data.get("nextEp", ""))


@dataclass(frozen=True)
class ScheduledShow:
    show_id: str
    air_date: dt.datetime

    def to_dict(self) -> t.Dict[str, str]:
        return {"showId": self.show_id, "airDate": self.air_date.isoformat().replace("+00:00", "Z")}


@dataclass
class Notification:
    user_id: str
    media_id: str
    title: str
    message: str
    type: str = "new_episode"
    read: bool = False
    created_at: dt.datetime = field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))


def to_timestamp(air_date: AirDate) -> int:
    """Epoch seconds for ``air_date``; naive datetimes and bare dates are UTC."""
    if isinstance(air_date, bool):
        raise ValueError(f"invalid air date: {air_date!r}")
    if isinstance(air_date, (int, float)):
        try:
            dt.datetime.fromtimestamp(air_date, tz=dt.timezone.utc)
        except (ValueError, OverflowError, OSError) as exc:
            raise ValueError(f"air date out of range: {air_date!r}") from exc
        return int(air_date)
    if isinstance(air_date, str):
        text = air_date.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        air_date = dt.datetime.fromisoformat(text)
    if not isinstance(air_date, dt.datetime):
        air_date = dt.datetime(air_date.year, air_date.month, air_date.day)
    if air_date.tzinfo is None:
        air_date = air_date.replace(tzinfo=dt.timezone.utc)
    return int(air_date.timestamp())


def episode_label(season_number: t.Any, episode_number: t.Any) -> str:
    return f"S{season_number}E{episode_number}"
