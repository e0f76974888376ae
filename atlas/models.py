from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import ClassVar, Union

ORGANIZATIONS = "organizations"
PRODUCTS = "products"
PLACES = "places"


def _text(payload: dict[str, object], *keys: str) -> str | None:
    for key in keys:
        value = payload.get(key)
        if value is None:
            continue
        cleaned = str(value).strip()
        if cleaned:
            return cleaned
    return None


def _number(payload: dict[str, object], *keys: str) -> float | None:
    for key in keys:
        value = payload.get(key)
        if value is None or value == "":
            continue
        return float(value)
    return None


@dataclass(frozen=True, slots=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(slots=True)
class Organization:
    id: str
    name: str
    location: str | None = None
    description: str | None = None

    kind: ClassVar[str] = ORGANIZATIONS

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> Organization:
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name") or ""),
            location=_text(payload, "location"),
            description=_text(payload, "description"),
        )

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind, **asdict(self)}


@dataclass(slots=True)
class Product:
    id: str
    name: str
    origin_country: str | None = None
    description: str | None = None

    kind: ClassVar[str] = PRODUCTS

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> Product:
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name") or ""),
            origin_country=_text(payload, "origin_country", "originCountry"),
            description=_text(payload, "description"),
        )

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind, **asdict(self)}


@dataclass(slots=True)
class Place:
    id: str
    name: str
    country: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    area_hectares: float | None = None
    description: str | None = None

    kind: ClassVar[str] = PLACES

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> Place:
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name") or ""),
            country=_text(payload, "country"),
            city=_text(payload, "city"),
            latitude=_number(payload, "latitude", "lat"),
            longitude=_number(payload, "longitude", "lng"),
            area_hectares=_number(payload, "area_hectares", "areaHectares"),
            description=_text(payload, "description"),
        )

    @property
    def coordinate(self) -> Coordinate | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(self.latitude, self.longitude)

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind, **asdict(self)}


Entity = Union[Organization, Product, Place]


@dataclass(slots=True)
class Marker:
    lat: float
    lng: float
    size: float
    color: str
    country: str
    city: str
    entities: list[Entity] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "lat": self.lat,
            "lng": self.lng,
            "size": self.size,
            "color": self.color,
            "country": self.country,
            "city": self.city,
            "entities": [entity.to_dict() for entity in self.entities],
        }


@dataclass(frozen=True, slots=True)
class Ring:
    lat: float
    lng: float
    color: str
    max_radius: float
    propagation_speed: float
    repeat_period_ms: int

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class CountryColors:
    cap: str
    side: str
    stroke: str
    altitude: float

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class CameraCommand:
    lat: float | None
    lng: float | None
    altitude: float
    duration_ms: int

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class SearchEvent:
    id: str
    query: str
    results_count: int
    session_id: str
    timestamp: datetime
    active_layer: str
    camera_lat: float | None = None
    camera_lng: float | None = None
    camera_altitude: float | None = None


@dataclass(frozen=True, slots=True)
class SearchClickEvent:
    search_event_id: str
    result_type: str
    result_name: str
    result_id: str
    result_country: str | None
    result_city: str | None
    result_lat: float | None
    result_lng: float | None
    latency_ms: int
