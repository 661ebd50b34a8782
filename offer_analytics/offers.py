"""Offer, discount and product records consumed by the analytics engine.

Offers arrive in the camelCase wire format used by the offer store:

* ``type`` selects the discount variant (``percent_discount``, ``bogo_free``, ...)
* ``discountPercent`` / ``discountAmount`` carry the discount value
* ``condition`` holds ``minQty`` or ``buyQty``/``getQty`` thresholds
* ``startDate`` / ``endDate`` / ``createdAt`` are ISO-8601 timestamps; any of them
  may be absent, which leaves that bound open

Each discount variant is its own frozen dataclass so that only the fields that
make sense for that type exist on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar, Dict, Iterable, List, Literal, Mapping, Optional, Tuple, Union

OfferScope = Literal["product", "marketplace"]


class OfferFormatError(ValueError):
    """Raised when an offer record cannot be parsed."""


@dataclass(frozen=True, slots=True)
class FreeShipping:
    tag: ClassVar[str] = "free_shipping"


@dataclass(frozen=True, slots=True)
class PercentDiscount:
    tag: ClassVar[str] = "percent_discount"
    percent: float


@dataclass(frozen=True, slots=True)
class FixedDiscount:
    tag: ClassVar[str] = "fixed_discount"
    amount: float


@dataclass(frozen=True, slots=True)
class QuantityDiscount:
    tag: ClassVar[str] = "quantity_discount"
    percent: float
    min_qty: int


@dataclass(frozen=True, slots=True)
class BulkPurchase:
    tag: ClassVar[str] = "bulk_purchase"
    percent: float
    min_qty: int


@dataclass(frozen=True, slots=True)
class BogoHalf:
    tag: ClassVar[str] = "bogo_half"
    buy_qty: int = 1
    get_qty: int = 1


@dataclass(frozen=True, slots=True)
class BogoFree:
    tag: ClassVar[str] = "bogo_free"
    buy_qty: int = 1
    get_qty: int = 1


Discount = Union[
    FreeShipping,
    PercentDiscount,
    FixedDiscount,
    QuantityDiscount,
    BulkPurchase,
    BogoHalf,
    BogoFree,
]

OFFER_TYPES: Tuple[str, ...] = (
    FreeShipping.tag,
    PercentDiscount.tag,
    FixedDiscount.tag,
    QuantityDiscount.tag,
    BulkPurchase.tag,
    BogoHalf.tag,
    BogoFree.tag,
)


@dataclass(frozen=True, slots=True)
class Offer:
    id: str
    name: str
    discount: Discount
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    scope: OfferScope = "product"
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    product_ids: Tuple[str, ...] = ()
    marketplaces: Tuple[str, ...] = ()
    is_active: bool = True

    def __post_init__(self) -> None:
        # Naive timestamps are read as UTC so they compare with an aware `now`.
        for name in ("start_date", "end_date", "created_at"):
            value = getattr(self, name)
            if value is not None and value.tzinfo is None:
                object.__setattr__(self, name, value.replace(tzinfo=timezone.utc))

    @property
    def type(self) -> str:
        return self.discount.tag

    @property
    def discount_percent(self) -> Optional[float]:
        if isinstance(self.discount, (PercentDiscount, QuantityDiscount, BulkPurchase)):
            return self.discount.percent
        return None

    @property
    def discount_amount(self) -> Optional[float]:
        if isinstance(self.discount, FixedDiscount):
            return self.discount.amount
        return None


@dataclass(frozen=True, slots=True)
class Product:
    id: str
    name: str
    sku: str = ""
    image: str = ""
    extra: Dict[str, object] = field(default_factory=dict, compare=False)


def _parse_timestamp(value: object, field_name: str, offer_id: str) -> Optional[datetime]:
    """Absent values give ``None``; present but unreadable ones raise."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as exc:
            raise OfferFormatError(f"Offer {offer_id!r}: invalid {field_name} {value!r}") from exc
    raise OfferFormatError(f"Offer {offer_id!r}: invalid {field_name} {value!r}")


def _as_float(value: object, fallback: float = 0.0) -> float:
    if value is None or value == "":
        return fallback
    return float(value)  # type: ignore[arg-type]


def _as_int(value: object, fallback: int) -> int:
    if value is None or value == "":
        return fallback
    return int(value)  # type: ignore[arg-type]


def discount_from_record(record: Mapping[str, object]) -> Discount:
    offer_type = record.get("type")
    condition = record.get("condition") or {}
    if not isinstance(condition, Mapping):
        condition = {}
    percent = record.get("discountPercent")
    amount = record.get("discountAmount")

    if offer_type == "free_shipping":
        return FreeShipping()
    if offer_type == "percent_discount":
        return PercentDiscount(percent=_as_float(percent))
    if offer_type == "fixed_discount":
        return FixedDiscount(amount=_as_float(amount))
    if offer_type == "quantity_discount":
        return QuantityDiscount(percent=_as_float(percent), min_qty=_as_int(condition.get("minQty"), 1))
    if offer_type == "bulk_purchase":
        return BulkPurchase(percent=_as_float(percent), min_qty=_as_int(condition.get("minQty"), 1))
    if offer_type == "bogo_half":
        return BogoHalf(buy_qty=_as_int(condition.get("buyQty"), 1), get_qty=_as_int(condition.get("getQty"), 1))
    if offer_type == "bogo_free":
        return BogoFree(buy_qty=_as_int(condition.get("buyQty"), 1), get_qty=_as_int(condition.get("getQty"), 1))
    raise OfferFormatError(f"Unknown offer type {offer_type!r}; expected one of {list(OFFER_TYPES)}")


def offer_from_dict(record: Mapping[str, object]) -> Offer:
    offer_id = record.get("id")
    if not offer_id:
        raise OfferFormatError("Offer record is missing `id`")
    offer_id = str(offer_id)

    scope = record.get("scope") or "product"
    if scope not in ("product", "marketplace"):
        raise OfferFormatError(f"Offer {offer_id!r}: unknown scope {scope!r}")

    return Offer(
        id=offer_id,
        name=str(record.get("name") or ""),
        description=record.get("description") or None,  # type: ignore[arg-type]
        discount=discount_from_record(record),
        scope=scope,  # type: ignore[arg-type]
        start_date=_parse_timestamp(record.get("startDate"), "startDate", offer_id),
        end_date=_parse_timestamp(record.get("endDate"), "endDate", offer_id),
        created_at=_parse_timestamp(record.get("createdAt"), "createdAt", offer_id),
        product_ids=tuple(str(pid) for pid in record.get("productIds") or ()),  # type: ignore[union-attr]
        marketplaces=tuple(str(mp) for mp in record.get("marketplaces") or ()),  # type: ignore[union-attr]
        is_active=bool(record.get("isActive", True)),
    )


def offers_from_records(records: Iterable[Mapping[str, object]]) -> List[Offer]:
    return [offer_from_dict(record) for record in records]


def offer_to_dict(offer: Offer) -> Dict[str, object]:
    """Serialise an offer back to the camelCase wire format."""

    payload: Dict[str, object] = {
        "id": offer.id,
        "name": offer.name,
        "type": offer.type,
        "scope": offer.scope,
        "productIds": list(offer.product_ids),
        "marketplaces": list(offer.marketplaces),
        "isActive": offer.is_active,
    }
    if offer.description:
        payload["description"] = offer.description
    if offer.start_date is not None:
        payload["startDate"] = offer.start_date.isoformat()
    if offer.end_date is not None:
        payload["endDate"] = offer.end_date.isoformat()
    if offer.created_at is not None:
        payload["createdAt"] = offer.created_at.isoformat()
    if offer.discount_percent is not None:
        payload["discountPercent"] = offer.discount_percent
    if offer.discount_amount is not None:
        payload["discountAmount"] = offer.discount_amount
    discount = offer.discount
    if isinstance(discount, (QuantityDiscount, BulkPurchase)):
        payload["condition"] = {"minQty": discount.min_qty}
    elif isinstance(discount, (BogoHalf, BogoFree)):
        payload["condition"] = {"buyQty": discount.buy_qty, "getQty": discount.get_qty}
    return payload


def format_offer_discount(offer: Offer) -> str:
    discount = offer.discount
    if isinstance(discount, FreeShipping):
        return "Free Shipping"
    if isinstance(discount, PercentDiscount):
        return f"{discount.percent:g}% Off"
    if isinstance(discount, FixedDiscount):
        return f"${discount.amount:.2f} Off"
    if isinstance(discount, QuantityDiscount):
        return f"{discount.percent:g}% Off ({discount.min_qty}+ units)"
    if isinstance(discount, BulkPurchase):
        return f"Bulk: {discount.percent:g}% Off ({discount.min_qty}+ units)"
    if isinstance(discount, BogoHalf):
        return "BOGO 50% Off"
    if isinstance(discount, BogoFree):
        return "BOGO Free"
    raise TypeError(f"Unhandled discount variant: {type(discount).__name__}")


def product_from_dict(record: Mapping[str, object]) -> Product:
    product_id = record.get("id")
    if product_id is None or product_id == "":
        raise ValueError("Product record is missing `id`")
    known = {"id", "name", "sku", "vendorSku", "image"}
    return Product(
        id=str(product_id),
        name=str(record.get("name") or ""),
        sku=str(record.get("sku") or record.get("vendorSku") or ""),
        image=str(record.get("image") or ""),
        extra={k: v for k, v in record.items() if k not in known},
    )


def products_from_records(records: Iterable[Mapping[str, object]]) -> Dict[str, Product]:
    catalog: Dict[str, Product] = {}
    for record in records:
        product = product_from_dict(record)
        catalog[product.id] = product
    return catalog
