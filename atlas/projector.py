from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from atlas.aggregator import CountryIndex, bucket_coordinate
from atlas.focus import WORLD, CountryFocus, FocusState
from atlas.layers import ALL, NO_DATA_COLOR, blend_kinds, layer_color, normalize_layer
from atlas.models import CountryColors, Entity, Marker, Place, Ring

HIGHLIGHT_MARKER_COLOR: Final[str] = "#fbbf24"
SELECTED_CAP_COLOR: Final[str] = "#facc15"
SELECTED_STROKE_COLOR: Final[str] = "#fde047"
HOVER_COLOR: Final[str] = "#22d3ee"
SIDE_COLOR: Final[str] = "#064e3b"
STROKE_COLOR: Final[str] = "#10b981"

SELECTED_ALTITUDE: Final[float] = 0.15
HOVER_ALTITUDE: Final[float] = 0.06
BASE_ALTITUDE: Final[float] = 0.01


@dataclass(frozen=True, slots=True)
class ProjectorConfig:
    size_factor: float = 0.3
    min_size: float = 0.3
    max_size: float = 2.0
    highlight_multiplier: float = 1.3
    hectares_per_unit: float = 100.0
    ring_max_radius: float = 4.0
    ring_propagation_speed: float = 2.5
    ring_repeat_period_ms: int = 1800


def marker_size(magnitude: float, config: ProjectorConfig = ProjectorConfig()) -> float:
    size = max(magnitude, 0.0) * config.size_factor
    return round(min(max(size, config.min_size), config.max_size), 4)


def bucket_magnitude(entities: list[Entity], config: ProjectorConfig = ProjectorConfig()) -> float:
    hectares = sum(entity.area_hectares or 0.0 for entity in entities if isinstance(entity, Place))
    magnitude = float(len(entities))
    if hectares > 0 and config.hectares_per_unit > 0:
        magnitude += hectares / config.hectares_per_unit
    return magnitude


def color_for_country(index: CountryIndex, country: str, layer: str) -> str:
    layer = normalize_layer(layer)
    if not index.has_entities(country):
        return NO_DATA_COLOR
    if layer == ALL:
        return blend_kinds(index.kinds(country))
    return layer_color(layer)


def country_style(
    index: CountryIndex,
    country: str,
    layer: str,
    focus: FocusState = WORLD,
    hovered: str | None = None,
) -> CountryColors:
    if isinstance(focus, CountryFocus) and focus.country == country:
        return CountryColors(
            cap=SELECTED_CAP_COLOR,
            side=SIDE_COLOR,
            stroke=SELECTED_STROKE_COLOR,
            altitude=SELECTED_ALTITUDE,
        )
    if hovered is not None and hovered == country:
        return CountryColors(cap=HOVER_COLOR, side=SIDE_COLOR, stroke=HOVER_COLOR, altitude=HOVER_ALTITUDE)
    return CountryColors(
        cap=color_for_country(index, country, layer),
        side=SIDE_COLOR,
        stroke=STROKE_COLOR,
        altitude=BASE_ALTITUDE,
    )


def project_markers(
    index: CountryIndex,
    layer: str,
    focus: FocusState = WORLD,
    config: ProjectorConfig = ProjectorConfig(),
) -> list[Marker]:
    layer = normalize_layer(layer)
    focused_country = focus.country if isinstance(focus, CountryFocus) else None

    markers: list[Marker] = []
    for country, city, entities in index.buckets():
        if not entities:
            continue
        coordinate = bucket_coordinate(country, city, entities)
        size = marker_size(bucket_magnitude(entities, config), config)
        if layer == ALL:
            color = blend_kinds(index.kinds(country))
        else:
            color = layer_color(layer)

        if country == focused_country:
            color = HIGHLIGHT_MARKER_COLOR
            size = round(size * config.highlight_multiplier, 4)

        markers.append(
            Marker(
                lat=coordinate.lat,
                lng=coordinate.lng,
                size=size,
                color=color,
                country=country,
                city=city,
                entities=list(entities),
            )
        )
    return markers


def project_rings(markers: list[Marker], config: ProjectorConfig = ProjectorConfig()) -> list[Ring]:
    return [
        Ring(
            lat=marker.lat,
            lng=marker.lng,
            color=marker.color,
            max_radius=config.ring_max_radius,
            propagation_speed=config.ring_propagation_speed,
            repeat_period_ms=config.ring_repeat_period_ms,
        )
        for marker in markers
    ]
