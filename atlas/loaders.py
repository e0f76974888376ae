from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path

from atlas.models import Entity, Organization, Place, Product

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EntitySnapshot:
    organizations: list[Organization] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    places: list[Place] = field(default_factory=list)

    def all(self) -> list[Entity]:
        return [*self.places, *self.organizations, *self.products]


def parse_snapshot(payload: object) -> EntitySnapshot:
    if not isinstance(payload, dict):
        raise ValueError("Expected a JSON object with organizations, products and places")

    def _items(key: str) -> list[dict[str, object]]:
        items = payload.get(key) or []
        if not isinstance(items, list):
            raise ValueError(f"Expected list for '{key}'")
        return [item for item in items if isinstance(item, dict) and item.get("id") is not None]

    return EntitySnapshot(
        organizations=[Organization.from_dict(item) for item in _items("organizations")],
        products=[Product.from_dict(item) for item in _items("products")],
        places=[Place.from_dict(item) for item in _items("places")],
    )


def load_snapshot(path: Path) -> EntitySnapshot:
    if not path.exists():
        logger.warning(f"Entity snapshot {path} not found, starting empty")
        return EntitySnapshot()

    payload = json.loads(path.read_text(encoding="utf-8"))
    snapshot = parse_snapshot(payload)
    logger.info(
        f"Loaded {len(snapshot.organizations)} organizations, {len(snapshot.products)} products "
        f"and {len(snapshot.places)} places from {path}"
    )
    return snapshot
