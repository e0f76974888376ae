from __future__ import annotations

import logging
from typing import Protocol

import requests

from atlas.models import SearchClickEvent, SearchEvent

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {"Content-Type": "application/json"}


class AnalyticsSink(Protocol):
    def record_search(self, event: SearchEvent) -> str | None: ...

    def record_click(self, event: SearchClickEvent) -> None: ...


def search_payload(event: SearchEvent) -> dict[str, object]:
    return {
        "searchEventId": event.id,
        "sessionId": event.session_id,
        "query": event.query,
        "resultsCount": event.results_count,
        "activeLayer": event.active_layer,
        "cameraLat": event.camera_lat,
        "cameraLng": event.camera_lng,
        "cameraAltitude": event.camera_altitude,
        "timestamp": event.timestamp.isoformat(),
    }


def click_payload(event: SearchClickEvent) -> dict[str, object]:
    return {
        "searchEventId": event.search_event_id,
        "resultType": event.result_type,
        "resultName": event.result_name,
        "resultId": event.result_id,
        "resultCountry": event.result_country,
        "resultCity": event.result_city,
        "resultLat": event.result_lat,
        "resultLng": event.result_lng,
        "timeToClickMs": event.latency_ms,
    }


class LoggingAnalyticsSink:
    """Used when no analytics endpoint is configured."""

    def record_search(self, event: SearchEvent) -> str | None:
        logger.info(f"Search '{event.query}' ({event.results_count} results) in session {event.session_id}")
        return None

    def record_click(self, event: SearchClickEvent) -> None:
        logger.info(
            f"Search result click {event.result_type} '{event.result_name}' after {event.latency_ms}ms"
        )


class HttpAnalyticsSink:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _post(self, path: str, payload: dict[str, object]) -> dict[str, object] | None:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.post(url, json=payload, headers=REQUEST_HEADERS, timeout=self.timeout_seconds)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.warning(f"Analytics request to {url} failed: {e}")
        except ValueError as e:
            logger.warning(f"Analytics response from {url} was not JSON: {e}")
        return None

    def record_search(self, event: SearchEvent) -> str | None:
        body = self._post("/search/track", search_payload(event))
        if not body:
            return None
        search_id = body.get("searchId")
        return str(search_id) if search_id else None

    def record_click(self, event: SearchClickEvent) -> None:
        self._post("/search/track-click", click_payload(event))
