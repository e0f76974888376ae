"""Debounced search tracking and result-click attribution."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
import logging
import threading
import time
from typing import Any, Callable
import uuid

from atlas.analytics import AnalyticsSink
from atlas.models import SearchClickEvent, SearchEvent
from atlas.search import SearchResult

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5
MIN_QUERY_LENGTH = 3


@dataclass(frozen=True, slots=True)
class SearchContext:
    active_layer: str = "all"
    camera_lat: float | None = None
    camera_lng: float | None = None
    camera_altitude: float | None = None


class RestartableTimer:
    """One pending delayed call at a time; restarting cancels the previous one."""

    def __init__(self, delay_seconds: float, timer_factory: Callable[..., Any] = threading.Timer) -> None:
        self.delay_seconds = delay_seconds
        self.timer_factory = timer_factory
        self._pending: Any = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def restart(self, callback: Callable[..., None], *args: Any) -> None:
        with self._lock:
            self._cancel_pending()
            timer = self.timer_factory(self.delay_seconds, self._run, args=(self._generation, callback, args))
            timer.daemon = True
            self._pending = timer
        timer.start()

    def cancel(self) -> None:
        with self._lock:
            self._cancel_pending()

    def _cancel_pending(self) -> None:
        # A timer that already started ignores cancel(); the new generation makes its run a no-op.
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _run(self, generation: int, callback: Callable[..., None], args: tuple[Any, ...]) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._pending = None
        callback(*args)


class SearchTracker:
    def __init__(
        self,
        sink: AnalyticsSink,
        session_id: str | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        min_query_length: int = MIN_QUERY_LENGTH,
        timer_factory: Callable[..., Any] = threading.Timer,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.sink = sink
        self.session_id = session_id or uuid.uuid4().hex
        self.min_query_length = min_query_length
        self.clock = clock
        self._timer = RestartableTimer(debounce_seconds, timer_factory)
        self._lock = threading.Lock()
        self._open_event: SearchEvent | None = None
        self._opened_at: float | None = None

    @property
    def open_event(self) -> SearchEvent | None:
        return self._open_event

    def track_search(self, query: str, results_count: int, context: SearchContext | None = None) -> None:
        cleaned = (query or "").strip()
        with self._lock:
            self._timer.cancel()
            if len(cleaned) < self.min_query_length:
                return
            self._timer.restart(self._emit_search, cleaned, results_count, context or SearchContext())

    def cancel(self) -> None:
        with self._lock:
            self._timer.cancel()

    def _emit_search(self, query: str, results_count: int, context: SearchContext) -> None:
        event = SearchEvent(
            id=uuid.uuid4().hex,
            query=query,
            results_count=results_count,
            session_id=self.session_id,
            timestamp=datetime.now(timezone.utc),
            active_layer=context.active_layer,
            camera_lat=context.camera_lat,
            camera_lng=context.camera_lng,
            camera_altitude=context.camera_altitude,
        )
        with self._lock:
            self._open_event = event
            self._opened_at = self.clock()

        try:
            remote_id = self.sink.record_search(event)
        except Exception:
            logger.exception(f"Failed to record search '{query}'")
            return

        if remote_id:
            with self._lock:
                if self._open_event is event:
                    self._open_event = replace(event, id=remote_id)

    def track_click(self, result: SearchResult) -> SearchClickEvent | None:
        with self._lock:
            event = self._open_event
            opened_at = self._opened_at
            if event is None or opened_at is None:
                return None
            self._open_event = None
            self._opened_at = None

        click = SearchClickEvent(
            search_event_id=event.id,
            result_type=result.result_type,
            result_name=result.name,
            result_id=result.result_id,
            result_country=result.country,
            result_city=result.city,
            result_lat=result.lat,
            result_lng=result.lng,
            latency_ms=max(int((self.clock() - opened_at) * 1000), 0),
        )
        try:
            self.sink.record_click(click)
        except Exception:
            logger.exception(f"Failed to record click on {click.result_type} '{click.result_name}'")
        return click
