"""Drill-down focus state machine for the globe.

Transitions are pure functions of ``(state, event, index)``. Camera moves are
returned as :class:`CameraCommand` values for the caller to play against the
renderer; nothing here waits on an animation.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Union

from atlas.aggregator import CountryIndex, bucket_coordinate
from atlas.locations import country_centroid
from atlas.models import CameraCommand, Marker

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class World:
    level = "world"

    def to_dict(self) -> dict[str, object]:
        return {"level": self.level}


@dataclass(frozen=True, slots=True)
class CountryFocus:
    country: str

    level = "country"

    def to_dict(self) -> dict[str, object]:
        return {"level": self.level, "country": self.country}


@dataclass(frozen=True, slots=True)
class CityFocus:
    country: str
    city: str

    level = "city"

    def to_dict(self) -> dict[str, object]:
        return {"level": self.level, "country": self.country, "city": self.city}


@dataclass(frozen=True, slots=True)
class StreetFocus:
    country: str
    city: str

    level = "street"

    def to_dict(self) -> dict[str, object]:
        return {"level": self.level, "country": self.country, "city": self.city}


FocusState = Union[World, CountryFocus, CityFocus, StreetFocus]

WORLD = World()


@dataclass(frozen=True, slots=True)
class CameraConfig:
    default_lat: float = 20.0
    default_lng: float = 0.0
    default_altitude: float = 2.5
    country_altitude: float = 1.5
    city_altitude: float = 0.6
    street_altitude: float = 0.2
    duration_ms: int = 1500
    min_altitude: float = 1.5
    max_altitude: float = 4.0
    zoom_step: float = 0.5
    zoom_duration_ms: int = 1000


@dataclass(frozen=True, slots=True)
class Transition:
    state: FocusState
    camera: CameraCommand | None = None
    load_street_view: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "state": self.state.to_dict(),
            "camera": self.camera.to_dict() if self.camera else None,
            "load_street_view": self.load_street_view,
        }


def reset_camera(config: CameraConfig, duration_ms: int | None = None) -> CameraCommand:
    return CameraCommand(
        lat=config.default_lat,
        lng=config.default_lng,
        altitude=config.default_altitude,
        duration_ms=config.duration_ms if duration_ms is None else duration_ms,
    )


def hover(index: CountryIndex, country: str | None, current: str | None = None) -> str | None:
    """Next hovered country; pointing at a country without entities keeps the current one."""
    if country is None:
        return None
    return country if index.has_entities(country) else current


def select_country(
    state: FocusState,
    country: str,
    index: CountryIndex,
    config: CameraConfig = CameraConfig(),
    duration_ms: int | None = None,
) -> Transition:
    if not index.has_entities(country):
        return Transition(state)

    duration = config.duration_ms if duration_ms is None else duration_ms
    if state == CountryFocus(country):
        return Transition(WORLD, reset_camera(config, duration))

    target = country_centroid(country)
    camera = CameraCommand(lat=target.lat, lng=target.lng, altitude=config.country_altitude, duration_ms=duration)
    return Transition(CountryFocus(country), camera)


def select_marker(
    state: FocusState,
    marker: Marker,
    index: CountryIndex,
    config: CameraConfig = CameraConfig(),
) -> Transition:
    if not index.bucket(marker.country, marker.city):
        return Transition(state)

    camera = CameraCommand(
        lat=marker.lat,
        lng=marker.lng,
        altitude=config.city_altitude,
        duration_ms=config.duration_ms,
    )
    return Transition(CityFocus(marker.country, marker.city), camera)


def _city_camera(index: CountryIndex, country: str, city: str, altitude: float, config: CameraConfig) -> CameraCommand:
    target = bucket_coordinate(country, city, index.bucket(country, city))
    return CameraCommand(lat=target.lat, lng=target.lng, altitude=altitude, duration_ms=config.duration_ms)


def open_street_portal(
    state: FocusState,
    index: CountryIndex,
    config: CameraConfig = CameraConfig(),
) -> Transition:
    if not isinstance(state, CityFocus) or not index.bucket(state.country, state.city):
        return Transition(state)

    camera = _city_camera(index, state.country, state.city, config.street_altitude, config)
    return Transition(StreetFocus(state.country, state.city), camera, load_street_view=True)


def close_street_portal(
    state: FocusState,
    index: CountryIndex,
    config: CameraConfig = CameraConfig(),
) -> Transition:
    if not isinstance(state, StreetFocus):
        return Transition(state)
    camera = _city_camera(index, state.country, state.city, config.city_altitude, config)
    return Transition(CityFocus(state.country, state.city), camera)


def close_city_focus(state: FocusState, config: CameraConfig = CameraConfig()) -> Transition:
    # Goes straight back to the world view, skipping the enclosing country.
    if not isinstance(state, (CityFocus, StreetFocus)):
        return Transition(state)
    return Transition(WORLD, reset_camera(config))


def reset_view(config: CameraConfig = CameraConfig()) -> Transition:
    return Transition(WORLD, reset_camera(config, config.zoom_duration_ms))


def zoom(altitude: float, step: float, config: CameraConfig = CameraConfig()) -> CameraCommand:
    target = min(max(altitude + step, config.min_altitude), config.max_altitude)
    return CameraCommand(lat=None, lng=None, altitude=target, duration_ms=config.zoom_duration_ms)


def zoom_in(altitude: float, config: CameraConfig = CameraConfig()) -> CameraCommand:
    return zoom(altitude, -config.zoom_step, config)


def zoom_out(altitude: float, config: CameraConfig = CameraConfig()) -> CameraCommand:
    return zoom(altitude, config.zoom_step, config)


class FocusStateMachine:
    """Single owner of the current focus; transitions are serialized."""

    def __init__(self, config: CameraConfig | None = None) -> None:
        self.config = config or CameraConfig()
        self.state: FocusState = WORLD
        self.hovered: str | None = None
        self._lock = threading.Lock()

    def _apply(self, transition: Transition) -> Transition:
        if transition.state != self.state:
            logger.debug(f"Focus {self.state.to_dict()} -> {transition.state.to_dict()}")
        self.state = transition.state
        return transition

    def hover(self, index: CountryIndex, country: str | None) -> str | None:
        with self._lock:
            self.hovered = hover(index, country, self.hovered)
            return self.hovered

    def select_country(self, index: CountryIndex, country: str, duration_ms: int | None = None) -> Transition:
        with self._lock:
            return self._apply(select_country(self.state, country, index, self.config, duration_ms))

    def select_marker(self, index: CountryIndex, marker: Marker) -> Transition:
        with self._lock:
            return self._apply(select_marker(self.state, marker, index, self.config))

    def open_street_portal(self, index: CountryIndex) -> Transition:
        with self._lock:
            return self._apply(open_street_portal(self.state, index, self.config))

    def close_street_portal(self, index: CountryIndex) -> Transition:
        with self._lock:
            return self._apply(close_street_portal(self.state, index, self.config))

    def close_city_focus(self) -> Transition:
        with self._lock:
            return self._apply(close_city_focus(self.state, self.config))

    def reset_view(self) -> Transition:
        with self._lock:
            return self._apply(reset_view(self.config))
