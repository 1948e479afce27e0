from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities.catalog_item import BookingKind, CatalogItem


class CatalogPort(ABC):
    @abstractmethod
    def list_categories(self, kind: BookingKind) -> list[str]:
        """Distinct categories offered for a kind, in catalog order."""
        raise NotImplementedError

    @abstractmethod
    def list_by_category(self, kind: BookingKind, category: str, limit: int) -> list[CatalogItem]:
        """Bookable items of a category, in stable creation order, at most `limit`."""
        raise NotImplementedError

    @abstractmethod
    def get_item(self, kind: BookingKind, item_id: str) -> CatalogItem | None:
        raise NotImplementedError
