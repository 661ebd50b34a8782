from __future__ import annotations

import json
from pathlib import Path
from typing import List

import pytest

from offer_analytics.config import EngineSettings
from offer_analytics.engine import OfferAnalyticsEngine
from offer_analytics.offers import Offer
from tests.offer_test_utils import NOW, make_offer


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def engine_settings() -> EngineSettings:
    return EngineSettings()


@pytest.fixture()
def engine(engine_settings: EngineSettings) -> OfferAnalyticsEngine:
    return OfferAnalyticsEngine(engine_settings)


@pytest.fixture()
def offers() -> List[Offer]:
    return [
        make_offer("offer-1", name="Summer Sale", marketplaces=["Amazon", "Walmart"], product_ids=["1", "2"]),
        make_offer("offer-2", name="Free Shipping Weekend", offer_type="free_shipping", discount_percent=None,
                   marketplaces=["Amazon"]),
        make_offer("offer-3", name="BOGO Electronics", offer_type="bogo_half", discount_percent=None,
                   start_days=5, end_days=15, condition={"buyQty": 1, "getQty": 1}),
        make_offer("offer-4", name="Bulk Discount", offer_type="bulk_purchase", discount_percent=15,
                   end_days=1, condition={"minQty": 5}, marketplaces=["eBay", "Walmart"]),
        make_offer("offer-5", name="Expired Markdown", start_days=-60, end_days=-5, marketplaces=["Target"]),
        make_offer("offer-6", name="Unassigned Promo", marketplaces=[]),
    ]


@pytest.fixture()
def snapshot_files(tmp_path: Path) -> dict:
    offers_path = tmp_path / "offers.json"
    offers_path.write_text(
        json.dumps(
            {
                "offers": [
                    {
                        "id": "offer-1",
                        "name": "Summer Sale",
                        "type": "percent_discount",
                        "discountPercent": 20,
                        "startDate": "2020-01-01T00:00:00Z",
                        "endDate": "2099-01-01T00:00:00Z",
                        "createdAt": "2020-01-01T00:00:00Z",
                        "productIds": ["1", "2", "99"],
                        "marketplaces": ["Amazon", "Walmart"],
                        "isActive": True,
                    },
                    {
                        "id": "offer-2",
                        "name": "Clearance Markdown",
                        "type": "fixed_discount",
                        "discountAmount": 5,
                        "startDate": "2020-01-01T00:00:00Z",
                        "endDate": "2099-01-01T00:00:00Z",
                        "productIds": ["2"],
                        "marketplaces": [],
                        "isActive": True,
                    },
                ]
            }
        ),
        encoding="utf-8",
    )
    products_path = tmp_path / "products.csv"
    products_path.write_text(
        "id,name,vendor_sku,image\n1,Wireless Earbuds,WE-100,a.png\n2,Bluetooth Speaker,BS-220,b.png\n",
        encoding="utf-8",
    )
    return {"offers": offers_path, "products": products_path, "output": tmp_path / "out"}
