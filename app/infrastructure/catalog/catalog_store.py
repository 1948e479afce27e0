from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from app.application.ports.catalog import CatalogPort
from app.domain.entities.catalog_item import BookingKind, CatalogItem
from app.infrastructure.catalog.catalog_data import SAMPLE_CATALOG


class CatalogStore(CatalogPort):
    def __init__(self, items: list[CatalogItem] | None = None) -> None:
        self._items = list(items if items is not None else SAMPLE_CATALOG)

    def list_categories(self, kind: BookingKind) -> list[str]:
        categories: list[str] = []
        for item in self._items:
            if item.kind == kind and item.category not in categories:
                categories.append(item.category)
        return categories

    def list_by_category(self, kind: BookingKind, category: str, limit: int) -> list[CatalogItem]:
        matches = [item for item in self._items if item.kind == kind and item.category == category]
        return matches[:limit]

    def get_item(self, kind: BookingKind, item_id: str) -> CatalogItem | None:
        for item in self._items:
            if item.kind == kind and item.id == item_id:
                return item
        return None


def load_catalog(path: str) -> list[CatalogItem]:
    """Load catalog items from a JSON file holding a list of item objects."""
    with open(Path(path), "r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError(f"Catalog file {path} must contain a JSON list")
    return [_parse_item(entry) for entry in raw]


def _parse_item(entry: dict[str, Any]) -> CatalogItem:
    return CatalogItem(
        id=str(entry["id"]),
        display_name=str(entry["name"]),
        kind=BookingKind(entry["kind"]),
        category=str(entry["category"]),
        location=entry.get("location"),
        capacity=entry.get("capacity"),
        price=entry.get("price"),
        images=tuple(entry.get("images") or ()),
    )
