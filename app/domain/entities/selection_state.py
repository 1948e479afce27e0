from __future__ import annotations

from dataclasses import dataclass

from app.domain.entities.catalog_item import BookingKind, CatalogItem


@dataclass(frozen=True)
class SelectionState:
    kind: BookingKind | None = None
    category_options: tuple[str, ...] = ()  # categories shown in the submenu, in menu order
    category: str | None = None
    candidates: tuple[CatalogItem, ...] = ()  # items shown in the last listing, in menu order
    chosen_item_id: str | None = None

    def candidate_at(self, index: int) -> CatalogItem | None:
        """Resolve a 1-based menu index against the candidate list."""
        if 1 <= index <= len(self.candidates):
            return self.candidates[index - 1]
        return None

    def chosen_item(self) -> CatalogItem | None:
        """
        Return the chosen item, or None when no item is chosen or the chosen id
        is not part of the candidate list (inconsistent state).
        """
        if self.chosen_item_id is None:
            return None
        for item in self.candidates:
            if item.id == self.chosen_item_id:
                return item
        return None
