from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from atlas.config import BASE_DIR, Settings
from atlas.engine import AggregationEngine
from atlas.loaders import load_snapshot
from atlas.search import result_to_dict
from atlas.tracking import SearchContext


class CountryRequest(BaseModel):
    country: str | None = None
    duration_ms: int | None = None


class CityRequest(BaseModel):
    country: str
    city: str


class LayerRequest(BaseModel):
    layer: str


class ClickRequest(BaseModel):
    result_type: str
    result_id: str


def create_app(settings: Settings, engine: AggregationEngine | None = None) -> FastAPI:
    app = FastAPI(title="Hemp Atlas engine")
    if engine is None:
        engine = AggregationEngine(settings)
        engine.load_snapshot(load_snapshot(settings.data_file))
    app.state.engine = engine

    def _resolve_layer(layer: str | None) -> str:
        try:
            return engine.resolve_layer(layer)
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/layer")
    def set_layer(request: LayerRequest) -> dict[str, Any]:
        try:
            return {"layer": engine.set_layer(request.layer)}
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error

    @app.get("/markers")
    def markers(layer: str | None = None) -> dict[str, Any]:
        current = _resolve_layer(layer)
        return {
            "layer": current,
            "markers": [marker.to_dict() for marker in engine.markers(current)],
        }

    @app.get("/rings")
    def rings(layer: str | None = None) -> dict[str, Any]:
        current = _resolve_layer(layer)
        return {"layer": current, "rings": [ring.to_dict() for ring in engine.rings(current)]}

    @app.get("/countries")
    def countries(layer: str | None = None) -> dict[str, Any]:
        current = _resolve_layer(layer)
        return {
            "layer": current,
            "countries": [
                {"country": country, "entity_count": count} for country, count in engine.country_counts(current)
            ],
        }

    @app.get("/countries/{country}/style")
    def country_style(country: str) -> dict[str, Any]:
        return engine.country_style(country).to_dict()

    @app.get("/countries/{country}/summary")
    def country_summary(country: str) -> dict[str, Any]:
        summary = engine.country_summary(country)
        if summary is None:
            raise HTTPException(status_code=404, detail="Country has no entities")
        return summary.to_dict()

    @app.get("/focus")
    def focus() -> dict[str, Any]:
        return {"state": engine.state.to_dict(), "hovered": engine.hovered}

    @app.post("/focus/hover")
    def hover(request: CountryRequest) -> dict[str, Any]:
        return {"hovered": engine.hover(request.country)}

    @app.post("/focus/country")
    def select_country(request: CountryRequest) -> dict[str, Any]:
        if not request.country:
            raise HTTPException(status_code=400, detail="Country is required")
        return engine.select_country(request.country, request.duration_ms).to_dict()

    @app.post("/focus/city")
    def select_city(request: CityRequest) -> dict[str, Any]:
        return engine.select_city(request.country, request.city).to_dict()

    @app.post("/focus/street/open")
    def open_street() -> dict[str, Any]:
        return engine.open_street_portal().to_dict()

    @app.post("/focus/street/close")
    def close_street() -> dict[str, Any]:
        return engine.close_street_portal().to_dict()

    @app.post("/focus/city/close")
    def close_city() -> dict[str, Any]:
        return engine.close_city_focus().to_dict()

    @app.post("/focus/reset")
    def reset() -> dict[str, Any]:
        return engine.reset_view().to_dict()

    @app.get("/search")
    def search(
        q: str = "",
        layer: str | None = None,
        track: bool = True,
        camera_lat: float | None = None,
        camera_lng: float | None = None,
        camera_altitude: float | None = None,
    ) -> dict[str, Any]:
        current = _resolve_layer(layer)
        context = SearchContext(
            active_layer=current,
            camera_lat=camera_lat,
            camera_lng=camera_lng,
            camera_altitude=camera_altitude,
        )
        results = engine.search(q, context=context, track=track, layer=current)
        return {"query": q, "results": [result_to_dict(result) for result in results]}

    @app.post("/search/click")
    def search_click(request: ClickRequest) -> dict[str, Any]:
        result = engine.find_result(request.result_type, request.result_id)
        if result is None:
            raise HTTPException(status_code=404, detail="Result not found in the last search")
        click = engine.track_click(result)
        return {"tracked": click is not None, "latency_ms": click.latency_ms if click else None}

    return app


app = create_app(Settings.from_env(BASE_DIR))
