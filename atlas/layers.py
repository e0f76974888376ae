from __future__ import annotations

from typing import Final

from atlas.models import ORGANIZATIONS, PLACES, PRODUCTS

OFF = "off"
EVENTS = "events"
ALL = "all"

LAYERS: Final[tuple[str, ...]] = (OFF, PLACES, ORGANIZATIONS, PRODUCTS, EVENTS, ALL)
ENTITY_LAYERS: Final[tuple[str, ...]] = (PLACES, ORGANIZATIONS, PRODUCTS)

LAYER_COLORS: Final[dict[str, str]] = {
    PLACES: "#ec4899",
    ORGANIZATIONS: "#10b981",
    PRODUCTS: "#f59e0b",
    EVENTS: "#a855f7",
    ALL: "#06b6d4",
    OFF: "#64748b",
}

NO_DATA_COLOR: Final[str] = "#064e3b"

# Hand-picked per pair; keys are sorted kind names.
PAIR_BLEND_COLORS: Final[dict[tuple[str, str], str]] = {
    (ORGANIZATIONS, PLACES): "#8b5cf6",
    (ORGANIZATIONS, PRODUCTS): "#84cc16",
    (PLACES, PRODUCTS): "#f97316",
}


def normalize_layer(layer: str | None) -> str:
    if layer is None:
        return ALL
    lowered = layer.strip().casefold()
    if lowered in {"orgs", "organization", "companies"}:
        return ORGANIZATIONS
    if lowered in {"place", "product", "event"}:
        return f"{lowered}s"
    if lowered not in LAYERS:
        raise ValueError(f"Unknown layer '{layer}'")
    return lowered


def layer_color(layer: str) -> str:
    return LAYER_COLORS.get(layer, LAYER_COLORS[ALL])


def blend_kinds(kinds: set[str] | frozenset[str]) -> str:
    if not kinds:
        return NO_DATA_COLOR
    if len(kinds) == 1:
        return layer_color(next(iter(kinds)))
    if len(kinds) == 2:
        pair = tuple(sorted(kinds))
        return PAIR_BLEND_COLORS.get(pair, LAYER_COLORS[ALL])
    return LAYER_COLORS[ALL]
