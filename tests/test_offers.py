from __future__ import annotations

from datetime import datetime, timezone

import pytest

from offer_analytics.offers import (
    BogoFree,
    BulkPurchase,
    FixedDiscount,
    FreeShipping,
    Offer,
    OfferFormatError,
    PercentDiscount,
    format_offer_discount,
    offer_from_dict,
    offer_to_dict,
    products_from_records,
)


def _record(**overrides):
    record = {
        "id": "offer-1",
        "name": "Summer Sale",
        "type": "percent_discount",
        "discountPercent": 20,
        "startDate": "2026-06-01T00:00:00Z",
        "endDate": "2026-07-01T00:00:00Z",
        "productIds": ["1", "2"],
        "marketplaces": ["Amazon"],
        "isActive": True,
    }
    record.update(overrides)
    return record


def test_percent_offer_parses_wire_format():
    offer = offer_from_dict(_record())

    assert offer.type == "percent_discount"
    assert offer.discount == PercentDiscount(percent=20.0)
    assert offer.discount_percent == 20.0
    assert offer.discount_amount is None
    assert offer.product_ids == ("1", "2")
    assert offer.marketplaces == ("Amazon",)
    assert offer.start_date.tzinfo is not None
    assert offer.created_at is None


def test_discount_fields_follow_type():
    fixed = offer_from_dict(_record(type="fixed_discount", discountPercent=None, discountAmount=5))
    assert isinstance(fixed.discount, FixedDiscount)
    assert fixed.discount_percent is None
    assert fixed.discount_amount == 5.0

    bulk = offer_from_dict(_record(type="bulk_purchase", discountPercent=15, condition={"minQty": 5}))
    assert bulk.discount == BulkPurchase(percent=15.0, min_qty=5)

    bogo = offer_from_dict(_record(type="bogo_free", condition={"buyQty": 2, "getQty": 1}))
    assert bogo.discount == BogoFree(buy_qty=2, get_qty=1)
    assert bogo.discount_percent is None

    shipping = offer_from_dict(_record(type="free_shipping"))
    assert isinstance(shipping.discount, FreeShipping)


def test_unknown_type_rejected():
    with pytest.raises(OfferFormatError, match="Unknown offer type"):
        offer_from_dict(_record(type="mystery_box"))


def test_unreadable_dates_rejected():
    with pytest.raises(OfferFormatError, match="endDate"):
        offer_from_dict(_record(endDate="not-a-date"))
    with pytest.raises(OfferFormatError, match="startDate"):
        offer_from_dict(_record(startDate=20260601))


def test_missing_dates_leave_bounds_open():
    record = _record()
    del record["startDate"], record["endDate"]
    offer = offer_from_dict(record)

    assert offer.start_date is None
    assert offer.end_date is None
    assert offer.created_at is None
    assert "startDate" not in offer_to_dict(offer)


def test_naive_datetimes_normalized_to_utc():
    offer = Offer(
        id="offer-1",
        name="Summer Sale",
        discount=PercentDiscount(percent=20),
        start_date=datetime(2026, 6, 1),
        end_date=datetime(2026, 7, 1),
    )
    assert offer.start_date == datetime(2026, 6, 1, tzinfo=timezone.utc)
    assert offer.end_date.tzinfo is timezone.utc


def test_missing_id_rejected():
    with pytest.raises(OfferFormatError):
        offer_from_dict(_record(id=""))


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({}, "20% Off"),
        ({"type": "fixed_discount", "discountAmount": 5}, "$5.00 Off"),
        ({"type": "quantity_discount", "discountPercent": 10, "condition": {"minQty": 3}}, "10% Off (3+ units)"),
        ({"type": "bulk_purchase", "discountPercent": 15, "condition": {"minQty": 5}}, "Bulk: 15% Off (5+ units)"),
        ({"type": "bogo_half"}, "BOGO 50% Off"),
        ({"type": "bogo_free"}, "BOGO Free"),
        ({"type": "free_shipping"}, "Free Shipping"),
    ],
)
def test_format_offer_discount(overrides, expected):
    assert format_offer_discount(offer_from_dict(_record(**overrides))) == expected


def test_offer_to_dict_keeps_condition():
    offer = offer_from_dict(_record(type="bulk_purchase", discountPercent=15, condition={"minQty": 5}))
    payload = offer_to_dict(offer)

    assert payload["type"] == "bulk_purchase"
    assert payload["discountPercent"] == 15.0
    assert payload["condition"] == {"minQty": 5}
    assert offer_from_dict(payload) == offer


def test_products_catalog_keyed_by_id():
    catalog = products_from_records(
        [
            {"id": 1, "name": "Wireless Earbuds", "vendorSku": "WE-100", "image": "a.png", "brand": "Acme"},
            {"id": "2", "name": "Speaker", "sku": "BS-220"},
        ]
    )

    assert set(catalog) == {"1", "2"}
    assert catalog["1"].sku == "WE-100"
    assert catalog["1"].extra == {"brand": "Acme"}
    assert catalog["2"].sku == "BS-220"
