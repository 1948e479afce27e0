from __future__ import annotations

from app.domain.entities.catalog_item import BookingKind, CatalogItem

# Listed in creation order; categories are offered in order of first appearance.
SAMPLE_CATALOG: list[CatalogItem] = [
    CatalogItem(
        id="v-royal-orchid",
        display_name="Royal Orchid Banquets",
        kind=BookingKind.VENUE,
        category="Wedding Hall",
        location="Jaipur, Rajasthan",
        capacity=600,
        price=150000,
    ),
    CatalogItem(
        id="v-lotus-court",
        display_name="Lotus Court",
        kind=BookingKind.VENUE,
        category="Wedding Hall",
        location="Udaipur, Rajasthan",
        capacity=400,
        price=120000,
    ),
    CatalogItem(
        id="v-silver-oak",
        display_name="Silver Oak Banquet",
        kind=BookingKind.VENUE,
        category="Banquet",
        location="Pune, Maharashtra",
        capacity=250,
        price=60000,
    ),
    CatalogItem(
        id="v-green-meadows",
        display_name="Green Meadows Lawn",
        kind=BookingKind.VENUE,
        category="Party Lawn",
        location="Ahmedabad, Gujarat",
        capacity=800,
        price=90000,
    ),
    CatalogItem(
        id="v-tech-park-hall",
        display_name="Tech Park Conference Centre",
        kind=BookingKind.VENUE,
        category="Conference Hall",
        location="Bengaluru, Karnataka",
        capacity=150,
        price=40000,
    ),
    CatalogItem(
        id="f-mango-grove",
        display_name="Mango Grove Farmhouse",
        kind=BookingKind.FARM,
        category="Farmhouse",
        location="Lonavala, Maharashtra",
        capacity=40,
        price=25000,
    ),
    CatalogItem(
        id="f-riverside",
        display_name="Riverside Farm Stay",
        kind=BookingKind.FARM,
        category="Farmhouse",
        location="Karjat, Maharashtra",
        capacity=30,
        price=18000,
    ),
    CatalogItem(
        id="f-sunrise-orchard",
        display_name="Sunrise Orchard",
        kind=BookingKind.FARM,
        category="Orchard",
        location="Nashik, Maharashtra",
        capacity=20,
        price=12000,
    ),
]
