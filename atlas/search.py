"""Cross-entity search over the country index and raw entities.

Results come back in a fixed category order (countries, cities, places,
organizations, products) with no further relevance scoring.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterable, Union

from atlas.aggregator import CountryIndex, locate_entity
from atlas.locations import OTHER_CITY, country_centroid, resolve_city_coordinate
from atlas.models import Entity, Organization, Place, Product

MAX_RESULTS = 10


@dataclass(frozen=True, slots=True)
class CountryResult:
    name: str
    entity_count: int
    lat: float
    lng: float

    result_type: ClassVar[str] = "country"

    @property
    def result_id(self) -> str:
        return self.name

    @property
    def country(self) -> str:
        return self.name

    @property
    def city(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class CityResult:
    name: str
    country: str
    entity_count: int
    lat: float
    lng: float

    result_type: ClassVar[str] = "city"

    @property
    def result_id(self) -> str:
        return f"{self.country}/{self.name}"

    @property
    def city(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class PlaceResult:
    place: Place
    country: str | None
    city: str | None
    lat: float | None
    lng: float | None

    result_type: ClassVar[str] = "place"

    @property
    def name(self) -> str:
        return self.place.name

    @property
    def result_id(self) -> str:
        return self.place.id


@dataclass(frozen=True, slots=True)
class OrganizationResult:
    organization: Organization
    country: str | None
    city: str | None
    lat: float | None
    lng: float | None

    result_type: ClassVar[str] = "organization"

    @property
    def name(self) -> str:
        return self.organization.name

    @property
    def result_id(self) -> str:
        return self.organization.id


@dataclass(frozen=True, slots=True)
class ProductResult:
    product: Product
    country: str | None
    lat: float | None
    lng: float | None

    result_type: ClassVar[str] = "product"

    @property
    def name(self) -> str:
        return self.product.name

    @property
    def result_id(self) -> str:
        return self.product.id

    @property
    def city(self) -> str | None:
        return None


SearchResult = Union[CountryResult, CityResult, PlaceResult, OrganizationResult, ProductResult]


def result_to_dict(result: SearchResult) -> dict[str, object]:
    return {
        "type": result.result_type,
        "id": result.result_id,
        "name": result.name,
        "country": result.country,
        "city": result.city,
        "lat": result.lat,
        "lng": result.lng,
    }


def _matches(text: str | None, needle: str) -> bool:
    return bool(text) and needle in text.casefold()


def _entity_position(entity: Entity) -> tuple[str | None, str | None, float | None, float | None]:
    location = locate_entity(entity)
    if location is None:
        return None, None, None, None
    country, city = location
    if isinstance(entity, Place) and entity.coordinate is not None:
        return country, city, entity.coordinate.lat, entity.coordinate.lng
    coordinate = resolve_city_coordinate(city, country)
    return country, None if city == OTHER_CITY else city, coordinate.lat, coordinate.lng


def search(
    query: str | None,
    index: CountryIndex,
    entities: Iterable[Entity],
    limit: int = MAX_RESULTS,
) -> list[SearchResult]:
    needle = (query or "").strip().casefold()
    if not needle:
        return []

    results: list[SearchResult] = []
    matched_countries: set[str] = set()

    for country in sorted(index.countries()):
        if _matches(country, needle):
            matched_countries.add(country)
            centroid = country_centroid(country)
            results.append(CountryResult(country, index.entity_count(country), centroid.lat, centroid.lng))

    for country in sorted(index.countries()):
        if country in matched_countries:
            continue
        for city in sorted(index.cities(country)):
            if city == OTHER_CITY or not _matches(city, needle):
                continue
            coordinate = resolve_city_coordinate(city, country)
            results.append(
                CityResult(city, country, len(index.bucket(country, city)), coordinate.lat, coordinate.lng)
            )

    places: list[SearchResult] = []
    organizations: list[SearchResult] = []
    products: list[SearchResult] = []
    for entity in entities:
        if not _matches(entity.name, needle):
            continue
        country, city, lat, lng = _entity_position(entity)
        if isinstance(entity, Place):
            places.append(PlaceResult(entity, country, city, lat, lng))
        elif isinstance(entity, Organization):
            organizations.append(OrganizationResult(entity, country, city, lat, lng))
        elif isinstance(entity, Product):
            products.append(ProductResult(entity, country, lat, lng))

    results.extend(places)
    results.extend(organizations)
    results.extend(products)
    return results[:limit]
