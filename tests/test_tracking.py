from unittest.mock import MagicMock

import requests

from atlas.analytics import HttpAnalyticsSink, click_payload, search_payload
from atlas.models import SearchClickEvent
from atlas.search import CityResult
from atlas.tracking import RestartableTimer, SearchContext, SearchTracker
from tests.conftest import FakeTimer, RecordingSink

PARIS = CityResult("Paris", "France", 2, 48.8566, 2.3522)


def _tracker(sink, timer_factory, clock):
    return SearchTracker(sink, session_id="session-1", timer_factory=timer_factory, clock=clock)


def test_restartable_timer_keeps_only_latest_call(timer_factory) -> None:
    calls = []
    timer = RestartableTimer(0.5, timer_factory)

    timer.restart(calls.append, "first")
    timer.restart(calls.append, "second")

    first, second = timer_factory.timers
    assert first.cancelled is True
    assert second.daemon is True
    assert second.interval == 0.5
    first.fire()
    second.fire()
    assert calls == ["second"]
    assert timer.pending is False


class RunningTimer(FakeTimer):
    """A timer whose countdown already elapsed: cancel() can no longer stop it."""

    def cancel(self):
        pass


def test_superseded_timer_that_already_started_never_emits(sink, clock) -> None:
    timers = []

    def factory(interval, function, args=None, kwargs=None):
        timer = RunningTimer(interval, function, args=args, kwargs=kwargs)
        timers.append(timer)
        return timer

    tracker = SearchTracker(sink, session_id="session-1", timer_factory=factory, clock=clock)

    tracker.track_search("hemp", 3)
    tracker.track_search("hemp o", 2)
    timers[0].fire()
    tracker.track_search("hemp oil", 1)
    for timer in timers:
        timer.fire()

    assert [event.query for event in sink.searches] == ["hemp oil"]


def test_restartable_timer_cancel_after_start_drops_callback() -> None:
    calls = []
    timers = []

    def factory(interval, function, args=None, kwargs=None):
        timer = RunningTimer(interval, function, args=args, kwargs=kwargs)
        timers.append(timer)
        return timer

    timer = RestartableTimer(0.5, factory)
    timer.restart(calls.append, "late")
    timer.cancel()
    timers[0].fire()

    assert calls == []
    assert timer.pending is False


def test_search_is_emitted_only_after_debounce(sink, timer_factory, clock) -> None:
    tracker = _tracker(sink, timer_factory, clock)

    tracker.track_search("hem", 4)
    tracker.track_search("hemp", 3)

    assert sink.searches == []
    timer_factory.timers[0].fire()
    timer_factory.last.fire()
    [event] = sink.searches
    assert event.query == "hemp"
    assert event.results_count == 3
    assert event.session_id == "session-1"


def test_short_queries_are_not_tracked(sink, timer_factory, clock) -> None:
    tracker = _tracker(sink, timer_factory, clock)

    tracker.track_search("  he  ", 5)

    assert timer_factory.timers == []
    assert sink.searches == []


def test_short_query_cancels_pending_search(sink, timer_factory, clock) -> None:
    tracker = _tracker(sink, timer_factory, clock)

    tracker.track_search("hemp", 5)
    tracker.track_search("he", 5)

    assert timer_factory.last.cancelled is True


def test_search_event_carries_context(sink, timer_factory, clock) -> None:
    tracker = _tracker(sink, timer_factory, clock)
    context = SearchContext(active_layer="places", camera_lat=20.0, camera_lng=0.0, camera_altitude=2.5)

    tracker.track_search("farm", 1, context)
    timer_factory.last.fire()

    [event] = sink.searches
    assert event.active_layer == "places"
    assert (event.camera_lat, event.camera_lng, event.camera_altitude) == (20.0, 0.0, 2.5)


def test_click_without_open_search_is_noop(sink, timer_factory, clock) -> None:
    tracker = _tracker(sink, timer_factory, clock)

    assert tracker.track_click(PARIS) is None
    assert sink.clicks == []


def test_click_reports_latency_and_closes_search(sink, timer_factory, clock) -> None:
    tracker = _tracker(sink, timer_factory, clock)
    tracker.track_search("par", 2)
    timer_factory.last.fire()
    [event] = sink.searches

    clock.advance(1.25)
    click = tracker.track_click(PARIS)

    assert click is not None
    assert click.search_event_id == event.id
    assert click.latency_ms == 1250
    assert (click.result_type, click.result_id, click.result_city) == ("city", "France/Paris", "Paris")
    assert sink.clicks == [click]
    assert tracker.open_event is None
    assert tracker.track_click(PARIS) is None


def test_new_search_supersedes_open_event(sink, timer_factory, clock) -> None:
    tracker = _tracker(sink, timer_factory, clock)
    tracker.track_search("par", 2)
    timer_factory.last.fire()
    tracker.track_search("paris", 2)
    timer_factory.last.fire()

    click = tracker.track_click(PARIS)

    assert click is not None
    assert click.search_event_id == sink.searches[1].id


def test_server_search_id_replaces_local_id(timer_factory, clock) -> None:
    sink = RecordingSink(search_id="remote-42")
    tracker = _tracker(sink, timer_factory, clock)
    tracker.track_search("hemp", 1)
    timer_factory.last.fire()

    click = tracker.track_click(PARIS)

    assert click is not None
    assert click.search_event_id == "remote-42"


def test_sink_failures_never_reach_caller(timer_factory, clock) -> None:
    sink = RecordingSink(fail=True)
    tracker = _tracker(sink, timer_factory, clock)
    tracker.track_search("hemp", 1)

    timer_factory.last.fire()
    click = tracker.track_click(PARIS)

    assert click is not None
    assert tracker.open_event is None


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


def test_http_sink_posts_camel_case_payloads(sink, timer_factory, clock) -> None:
    tracker = _tracker(sink, timer_factory, clock)
    tracker.track_search("hemp", 7, SearchContext(active_layer="organizations"))
    timer_factory.last.fire()
    [event] = sink.searches
    session = MagicMock()
    session.post.return_value = _response({"searchId": "srv-1"})
    http_sink = HttpAnalyticsSink("https://analytics.example.org/api/", session=session)

    search_id = http_sink.record_search(event)

    assert search_id == "srv-1"
    url = session.post.call_args.args[0]
    payload = session.post.call_args.kwargs["json"]
    assert url == "https://analytics.example.org/api/search/track"
    assert payload == search_payload(event)
    assert payload["resultsCount"] == 7
    assert payload["activeLayer"] == "organizations"
    assert session.post.call_args.kwargs["timeout"] == 5.0


def test_http_sink_click_payload() -> None:
    click = SearchClickEvent(
        search_event_id="srv-1",
        result_type="city",
        result_name="Paris",
        result_id="France/Paris",
        result_country="France",
        result_city="Paris",
        result_lat=48.8566,
        result_lng=2.3522,
        latency_ms=900,
    )
    session = MagicMock()
    session.post.return_value = _response({})
    http_sink = HttpAnalyticsSink("https://analytics.example.org/api", session=session)

    http_sink.record_click(click)

    assert session.post.call_args.args[0] == "https://analytics.example.org/api/search/track-click"
    payload = session.post.call_args.kwargs["json"]
    assert payload == click_payload(click)
    assert payload["timeToClickMs"] == 900
    assert payload["searchEventId"] == "srv-1"


def test_http_sink_swallows_request_errors(caplog) -> None:
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("refused")
    http_sink = HttpAnalyticsSink("https://analytics.example.org", session=session)
    click = SearchClickEvent(
        search_event_id="s",
        result_type="country",
        result_name="France",
        result_id="France",
        result_country="France",
        result_city=None,
        result_lat=46.2276,
        result_lng=2.2137,
        latency_ms=10,
    )

    http_sink.record_click(click)

    assert "failed" in caplog.text


def test_http_sink_ignores_non_json_body() -> None:
    session = MagicMock()
    response = MagicMock()
    response.json.side_effect = ValueError("no json")
    session.post.return_value = response
    http_sink = HttpAnalyticsSink("https://analytics.example.org", session=session)
    event = MagicMock()
    event.timestamp.isoformat.return_value = "2024-01-01T00:00:00+00:00"

    assert http_sink.record_search(event) is None
