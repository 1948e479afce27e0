from __future__ import annotations

from dataclasses import dataclass

from app.domain.entities.catalog_item import CatalogItem


@dataclass(frozen=True)
class EngineResult:
    reply_text: str
    # Items listed in the reply, so a transport can render cards or images.
    items_to_render: tuple[CatalogItem, ...] = ()
