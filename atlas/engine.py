from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Iterable

from atlas.aggregator import CountryIndex, CountrySummary, build_index, merge_indices, summarize_country
from atlas.analytics import AnalyticsSink, HttpAnalyticsSink, LoggingAnalyticsSink
from atlas.config import Settings
from atlas.focus import CameraConfig, FocusState, FocusStateMachine, Transition, zoom_in, zoom_out
from atlas.layers import ALL, ENTITY_LAYERS, EVENTS, OFF, normalize_layer
from atlas.loaders import EntitySnapshot
from atlas.models import (
    CameraCommand,
    CountryColors,
    Entity,
    Marker,
    Organization,
    Place,
    Product,
    Ring,
    SearchClickEvent,
)
from atlas.projector import ProjectorConfig, country_style, project_markers, project_rings
from atlas.search import SearchResult, search
from atlas.tracking import SearchContext, SearchTracker

logger = logging.getLogger(__name__)


def sink_from_settings(settings: Settings) -> AnalyticsSink:
    if settings.analytics_url:
        return HttpAnalyticsSink(settings.analytics_url, timeout_seconds=settings.analytics_timeout_seconds)
    return LoggingAnalyticsSink()


class AggregationEngine:
    """Owns the country indices, focus state and search snapshot for one globe session."""

    def __init__(
        self,
        settings: Settings | None = None,
        sink: AnalyticsSink | None = None,
        session_id: str | None = None,
        timer_factory: Callable[..., Any] = threading.Timer,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or Settings()
        self.projector_config = ProjectorConfig(
            size_factor=self.settings.marker_size_factor,
            min_size=self.settings.marker_min_size,
            max_size=self.settings.marker_max_size,
        )
        self.focus = FocusStateMachine(CameraConfig(duration_ms=self.settings.camera_duration_ms))
        self.tracker = SearchTracker(
            sink or sink_from_settings(self.settings),
            session_id=session_id,
            debounce_seconds=self.settings.search_debounce_ms / 1000,
            timer_factory=timer_factory,
            clock=clock,
        )
        self.layer = ALL
        self.entities: list[Entity] = []
        self.indices: dict[str, CountryIndex] = {}
        self.last_query = ""
        self.last_results: list[SearchResult] = []
        self._lock = threading.Lock()
        self.load()

    def load(
        self,
        organizations: Iterable[Organization] = (),
        products: Iterable[Product] = (),
        places: Iterable[Place] = (),
    ) -> None:
        self.entities = [*places, *organizations, *products]
        indices = {layer: build_index(self.entities, layer) for layer in ENTITY_LAYERS}
        indices[EVENTS] = CountryIndex()
        indices[OFF] = CountryIndex()
        indices[ALL] = merge_indices(*(indices[layer] for layer in ENTITY_LAYERS))
        self.indices = indices
        logger.info(
            f"Indexed {len(self.entities)} entities across {len(indices[ALL])} countries"
        )

    def load_snapshot(self, snapshot: EntitySnapshot) -> None:
        self.load(snapshot.organizations, snapshot.products, snapshot.places)

    def set_layer(self, layer: str) -> str:
        self.layer = normalize_layer(layer)
        return self.layer

    def resolve_layer(self, layer: str | None = None) -> str:
        """The named layer, or the active one when none is given; never changes the active layer."""
        return self.layer if layer is None else normalize_layer(layer)

    def index_for(self, layer: str | None = None) -> CountryIndex:
        return self.indices.get(self.resolve_layer(layer), CountryIndex())

    @property
    def index(self) -> CountryIndex:
        return self.index_for()

    @property
    def state(self) -> FocusState:
        return self.focus.state

    @property
    def hovered(self) -> str | None:
        return self.focus.hovered

    def markers(self, layer: str | None = None) -> list[Marker]:
        layer = self.resolve_layer(layer)
        return project_markers(self.index_for(layer), layer, self.focus.state, self.projector_config)

    def rings(self, layer: str | None = None) -> list[Ring]:
        return project_rings(self.markers(layer), self.projector_config)

    def country_counts(self, layer: str | None = None) -> list[tuple[str, int]]:
        index = self.index_for(layer)
        return [(country, index.entity_count(country)) for country in sorted(index.countries())]

    def country_style(self, country: str) -> CountryColors:
        return country_style(self.index, country, self.layer, self.focus.state, self.focus.hovered)

    def country_summary(self, country: str, limit: int = 3) -> CountrySummary | None:
        return summarize_country(self.index, country, limit)

    def find_marker(self, country: str, city: str) -> Marker | None:
        for marker in self.markers():
            if marker.country == country and marker.city == city:
                return marker
        return None

    def hover(self, country: str | None) -> str | None:
        return self.focus.hover(self.index, country)

    def select_country(self, country: str, duration_ms: int | None = None) -> Transition:
        return self.focus.select_country(self.index, country, duration_ms)

    def select_marker(self, marker: Marker) -> Transition:
        return self.focus.select_marker(self.index, marker)

    def select_city(self, country: str, city: str) -> Transition:
        marker = self.find_marker(country, city)
        if marker is None:
            return Transition(self.focus.state)
        return self.select_marker(marker)

    def open_street_portal(self) -> Transition:
        return self.focus.open_street_portal(self.index)

    def close_street_portal(self) -> Transition:
        return self.focus.close_street_portal(self.index)

    def close_city_focus(self) -> Transition:
        return self.focus.close_city_focus()

    def reset_view(self) -> Transition:
        return self.focus.reset_view()

    def zoom_in(self, altitude: float) -> CameraCommand:
        return zoom_in(altitude, self.focus.config)

    def zoom_out(self, altitude: float) -> CameraCommand:
        return zoom_out(altitude, self.focus.config)

    def search(
        self,
        query: str,
        context: SearchContext | None = None,
        track: bool = True,
        layer: str | None = None,
    ) -> list[SearchResult]:
        layer = self.resolve_layer(layer)
        results = search(query, self.index_for(layer), self._searchable_entities(layer))
        with self._lock:
            self.last_query = query
            self.last_results = results
        if track:
            self.tracker.track_search(query, len(results), context or SearchContext(active_layer=layer))
        return results

    def find_result(self, result_type: str, result_id: str) -> SearchResult | None:
        with self._lock:
            results = list(self.last_results)
        for result in results:
            if result.result_type == result_type and result.result_id == result_id:
                return result
        return None

    def track_click(self, result: SearchResult) -> SearchClickEvent | None:
        return self.tracker.track_click(result)

    def _searchable_entities(self, layer: str) -> list[Entity]:
        if layer == ALL:
            return self.entities
        if layer in ENTITY_LAYERS:
            return [entity for entity in self.entities if entity.kind == layer]
        return []
