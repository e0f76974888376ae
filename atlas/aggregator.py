from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
import logging
from typing import Iterable, Iterator

from atlas.layers import ALL, ENTITY_LAYERS, normalize_layer
from atlas.locations import OTHER_CITY, normalize_country, parse_location, resolve_city_coordinate
from atlas.models import Coordinate, Entity, Organization, Place, Product

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CountryIndex:
    """Country -> city -> entities, with the entity kinds seen per country."""

    countries_map: dict[str, dict[str, list[Entity]]] = field(default_factory=dict)
    sources: dict[str, set[str]] = field(default_factory=dict)

    def add(self, country: str, city: str, entity: Entity) -> None:
        cities = self.countries_map.setdefault(country, {})
        cities.setdefault(city, []).append(entity)
        self.sources.setdefault(country, set()).add(entity.kind)

    def __contains__(self, country: object) -> bool:
        return country in self.countries_map

    def __len__(self) -> int:
        return len(self.countries_map)

    def countries(self) -> list[str]:
        return list(self.countries_map)

    def cities(self, country: str) -> list[str]:
        return list(self.countries_map.get(country, {}))

    def bucket(self, country: str, city: str) -> list[Entity]:
        return list(self.countries_map.get(country, {}).get(city, []))

    def entity_count(self, country: str) -> int:
        return sum(len(entities) for entities in self.countries_map.get(country, {}).values())

    def has_entities(self, country: str | None) -> bool:
        return country is not None and self.entity_count(country) > 0

    def kinds(self, country: str) -> frozenset[str]:
        return frozenset(self.sources.get(country, set()))

    def buckets(self) -> Iterator[tuple[str, str, list[Entity]]]:
        for country, cities in self.countries_map.items():
            for city, entities in cities.items():
                yield country, city, entities

    def entities(self) -> list[Entity]:
        return [entity for _country, _city, entities in self.buckets() for entity in entities]

    def to_dict(self) -> dict[str, dict[str, list[dict[str, object]]]]:
        return {
            country: {city: [entity.to_dict() for entity in entities] for city, entities in cities.items()}
            for country, cities in self.countries_map.items()
        }


@dataclass(slots=True)
class CountrySummary:
    country: str
    entity_count: int
    city_count: int
    top_cities: list[tuple[str, int]]
    featured: list[Entity]

    def to_dict(self) -> dict[str, object]:
        return {
            "country": self.country,
            "entity_count": self.entity_count,
            "city_count": self.city_count,
            "top_cities": [{"city": city, "count": count} for city, count in self.top_cities],
            "featured": [entity.to_dict() for entity in self.featured],
        }


def locate_entity(entity: Entity) -> tuple[str, str] | None:
    """Return the (country, city) bucket for an entity, or None when unresolvable."""
    if isinstance(entity, Organization):
        parsed = parse_location(entity.location)
        if parsed is None:
            return None
        city, country = parsed
        return (country, city) if country else None

    if isinstance(entity, Product):
        country = normalize_country(entity.origin_country)
        return (country, OTHER_CITY) if country else None

    if isinstance(entity, Place):
        country = normalize_country(entity.country)
        if not country:
            return None
        city = (entity.city or "").strip() or OTHER_CITY
        return country, city

    return None


def build_index(entities: Iterable[Entity], layer: str) -> CountryIndex:
    layer = normalize_layer(layer)
    index = CountryIndex()
    if layer not in ENTITY_LAYERS and layer != ALL:
        return index

    skipped = 0
    for entity in entities:
        if layer != ALL and entity.kind != layer:
            continue
        location = locate_entity(entity)
        if location is None:
            skipped += 1
            continue
        country, city = location
        index.add(country, city, entity)

    if skipped:
        logger.debug(f"Skipped {skipped} {layer} entities without a resolvable location")
    return index


def merge_indices(*indices: CountryIndex) -> CountryIndex:
    merged = CountryIndex()
    seen: set[tuple[str, str]] = set()
    for index in indices:
        for country, city, entities in index.buckets():
            for entity in entities:
                key = (entity.kind, entity.id)
                if key in seen:
                    continue
                seen.add(key)
                merged.add(country, city, entity)
        for country, kinds in index.sources.items():
            if country in merged:
                merged.sources[country].update(kinds)
    return merged


def summarize_country(index: CountryIndex, country: str, limit: int = 3) -> CountrySummary | None:
    if not index.has_entities(country):
        return None

    counts = Counter({city: len(index.bucket(country, city)) for city in index.cities(country)})
    featured = [entity for city in index.cities(country) for entity in index.bucket(country, city)]
    return CountrySummary(
        country=country,
        entity_count=index.entity_count(country),
        city_count=len(counts),
        top_cities=counts.most_common(limit),
        featured=featured[:limit],
    )


def bucket_coordinate(country: str, city: str, entities: list[Entity]) -> Coordinate:
    """Mean of the places' own coordinates, else the city gazetteer or capital."""
    own = [entity.coordinate for entity in entities if isinstance(entity, Place) and entity.coordinate]
    if own:
        return Coordinate(
            lat=sum(item.lat for item in own) / len(own),
            lng=sum(item.lng for item in own) / len(own),
        )
    return resolve_city_coordinate(city, country)
