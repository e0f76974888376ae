import json
from pathlib import Path

from fastapi.testclient import TestClient
import pytest

from atlas.config import Settings
from atlas.engine import AggregationEngine
from atlas.web_app import create_app


@pytest.fixture
def client(mixed_entities, sink, timer_factory, clock):
    settings = Settings()
    engine = AggregationEngine(settings, sink=sink, timer_factory=timer_factory, clock=clock)
    engine.load(mixed_entities["organizations"], mixed_entities["products"], mixed_entities["places"])
    return TestClient(create_app(settings, engine=engine))


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_markers_for_layer(client) -> None:
    response = client.get("/markers", params={"layer": "organizations"})

    payload = response.json()
    assert payload["layer"] == "organizations"
    assert {(marker["country"], marker["city"]) for marker in payload["markers"]} == {
        ("France", "Paris"),
        ("France", "Lyon"),
        ("Germany", "Berlin"),
        ("Germany", "Munich"),
        ("Germany", "Other"),
    }
    assert all(marker["color"] == "#10b981" for marker in payload["markers"])


def test_unknown_layer_is_rejected(client) -> None:
    response = client.get("/markers", params={"layer": "weather"})

    assert response.status_code == 400


def test_countries_and_rings(client) -> None:
    countries = client.get("/countries", params={"layer": "all"}).json()["countries"]
    rings = client.get("/rings").json()["rings"]

    assert countries[0] == {"country": "France", "entity_count": 4}
    assert len(rings) == len(client.get("/markers").json()["markers"])


def test_country_summary_and_missing_country(client) -> None:
    summary = client.get("/countries/France/summary").json()

    assert summary["entity_count"] == 4
    assert summary["top_cities"][0] == {"city": "Paris", "count": 2}
    assert client.get("/countries/Spain/summary").status_code == 404


def test_focus_flow(client) -> None:
    selected = client.post("/focus/country", json={"country": "Germany"}).json()

    assert selected["state"] == {"level": "country", "country": "Germany"}
    assert selected["camera"]["altitude"] == 1.5
    assert client.get("/countries/Germany/style").json()["cap"] == "#facc15"

    city = client.post("/focus/city", json={"country": "Germany", "city": "Berlin"}).json()
    assert city["state"] == {"level": "city", "country": "Germany", "city": "Berlin"}

    street = client.post("/focus/street/open").json()
    assert street["load_street_view"] is True

    closed = client.post("/focus/city/close").json()
    assert closed["state"] == {"level": "world"}
    assert client.get("/focus").json()["state"] == {"level": "world"}


def test_select_country_requires_name(client) -> None:
    assert client.post("/focus/country", json={}).status_code == 400


def test_hover_ignores_empty_countries(client) -> None:
    assert client.post("/focus/hover", json={"country": "Spain"}).json() == {"hovered": None}
    assert client.post("/focus/hover", json={"country": "France"}).json() == {"hovered": "France"}
    assert client.post("/focus/hover", json={"country": "Spain"}).json() == {"hovered": "France"}
    assert client.post("/focus/hover", json={}).json() == {"hovered": None}


def test_layer_query_parameter_does_not_change_active_layer(client) -> None:
    products = client.get("/markers", params={"layer": "products"}).json()

    assert products["layer"] == "products"
    assert client.get("/markers").json()["layer"] == "all"

    selected = client.post("/focus/country", json={"country": "Germany"}).json()

    assert selected["state"] == {"level": "country", "country": "Germany"}


def test_post_layer_switches_active_layer(client) -> None:
    assert client.post("/layer", json={"layer": "products"}).json() == {"layer": "products"}
    assert client.get("/countries").json()["countries"] == [{"country": "France", "entity_count": 1}]
    assert client.post("/layer", json={"layer": "weather"}).status_code == 400
    assert client.get("/markers").json()["layer"] == "products"


def test_search_then_click(client, sink, timer_factory, clock) -> None:
    response = client.get("/search", params={"q": "par", "camera_altitude": 2.5})

    results = response.json()["results"]
    assert [result["type"] for result in results] == ["city", "place"]

    timer_factory.last.fire()
    assert sink.searches[0].camera_altitude == 2.5
    clock.advance(0.5)

    clicked = client.post("/search/click", json={"result_type": "place", "result_id": "pl1"}).json()

    assert clicked == {"tracked": True, "latency_ms": 500}
    assert sink.clicks[0].result_name == "Paris Hemp Farm"


def test_click_on_unknown_result_is_404(client) -> None:
    client.get("/search", params={"q": "par", "track": "false"})

    response = client.post("/search/click", json={"result_type": "city", "result_id": "Spain/Madrid"})

    assert response.status_code == 404


def test_create_app_loads_snapshot_from_settings(tmp_path: Path) -> None:
    data_file = tmp_path / "entities.json"
    data_file.write_text(
        json.dumps({"organizations": [{"id": "o1", "name": "Hemp Co", "location": "Berlin, DE"}]}),
        encoding="utf-8",
    )

    client = TestClient(create_app(Settings(data_file=data_file)))

    assert client.get("/countries").json()["countries"] == [{"country": "Germany", "entity_count": 1}]
