"""Per-offer, per-marketplace and per-product performance rows."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Literal, Mapping, Optional, Sequence, Tuple

from offer_analytics.config import EngineSettings
from offer_analytics.offers import Offer, Product
from offer_analytics.status import OfferStatus, classify_status, days_remaining, is_live
from offer_analytics.synth import pair_salt, synth_int

logger = logging.getLogger(__name__)

MarketplaceStatus = Literal["active", "inactive", "not_listed"]

# (low, high) bounds fed to the synthesizer
OFFER_IMPRESSIONS = (5000, 50000)
OFFER_AD_SPEND = (100, 2000)
MARKETPLACE_IMPRESSIONS = (1000, 15000)
MARKETPLACE_AD_SPEND = (50, 800)
PRODUCT_IMPRESSIONS = (500, 5000)
CLICK_RATE_PCT = (5, 15)
CONVERSION_RATE_PCT = (3, 12)
ORDER_VALUE = (25, 150)
REVENUE_IMPACT_PCT = (10, 35)

INACTIVE_OFFER_MULTIPLIER = 0.3
MARKETPLACE_MULTIPLIERS: Dict[str, float] = {"active": 1.0, "inactive": 0.1, "not_listed": 0.0}
DEFAULT_DISCOUNT_PERCENT = 10.0


@dataclass(frozen=True, slots=True)
class OfferAnalytics:
    offer: Offer
    status: OfferStatus
    days_remaining: int
    impressions: int
    clicks: int
    conversions: int
    conversion_rate: float
    revenue: float
    revenue_impact: float
    average_order_value: float
    cost_per_conversion: float
    roi: float
    ad_spend: float
    roas: float

    @property
    def is_live(self) -> bool:
        return is_live(self.status)


@dataclass(frozen=True, slots=True)
class MarketplaceAnalytics:
    marketplace: str
    status: MarketplaceStatus
    impressions: int
    clicks: int
    conversions: int
    revenue: float
    conversion_rate: float
    ad_spend: float
    roas: float

    @property
    def is_listed(self) -> bool:
        return self.status != "not_listed"


@dataclass(frozen=True, slots=True)
class ProductAnalytics:
    product: Product
    impressions: int
    clicks: int
    conversions: int
    revenue: float
    conversion_rate: float


def safe_ratio(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return float(numerator / denominator)


def _funnel(
    identifier: str,
    salt: int,
    impressions_range: Tuple[int, int],
    multiplier: float,
) -> Tuple[float, int, int, int]:
    """Draw impressions -> clicks -> conversions -> revenue for one entity."""

    raw_impressions = synth_int(identifier, salt, *impressions_range) * multiplier
    clicks = math.floor(raw_impressions * synth_int(identifier, salt, *CLICK_RATE_PCT) / 100)
    conversions = math.floor(clicks * synth_int(identifier, salt, *CONVERSION_RATE_PCT) / 100)
    revenue = conversions * synth_int(identifier, salt, *ORDER_VALUE)
    return raw_impressions, clicks, conversions, revenue


def build_offer_analytics(offer: Offer, index: int, *, now: Optional[datetime] = None) -> OfferAnalytics:
    status = classify_status(offer, now)
    multiplier = 1.0 if is_live(status) else INACTIVE_OFFER_MULTIPLIER

    raw_impressions, clicks, conversions, revenue = _funnel(offer.id, index, OFFER_IMPRESSIONS, multiplier)
    revenue_impact = revenue * synth_int(offer.id, index, *REVENUE_IMPACT_PCT) / 100
    discount_cost = revenue * (offer.discount_percent or DEFAULT_DISCOUNT_PERCENT) / 100
    ad_spend = synth_int(offer.id, index, *OFFER_AD_SPEND) * multiplier

    return OfferAnalytics(
        offer=offer,
        status=status,
        days_remaining=days_remaining(offer, now),
        impressions=math.floor(raw_impressions),
        clicks=clicks,
        conversions=conversions,
        conversion_rate=safe_ratio(conversions, clicks) * 100,
        revenue=float(revenue),
        revenue_impact=revenue_impact,
        average_order_value=safe_ratio(revenue, conversions),
        cost_per_conversion=safe_ratio(discount_cost, conversions),
        roi=safe_ratio(revenue_impact - discount_cost, discount_cost) * 100,
        ad_spend=ad_spend,
        roas=safe_ratio(revenue, ad_spend),
    )


def build_all_offer_analytics(offers: Sequence[Offer], *, now: Optional[datetime] = None) -> List[OfferAnalytics]:
    return [build_offer_analytics(offer, index, now=now) for index, offer in enumerate(offers)]


def build_marketplace_rollup(
    offer: Offer,
    offer_index: int,
    settings: EngineSettings,
) -> List[MarketplaceAnalytics]:
    """One row per catalog marketplace, listed or not."""

    listed = set(
        settings.marketplace_policy.defaults_for(offer.marketplaces, settings.marketplaces, "rollup")
    )
    rows: List[MarketplaceAnalytics] = []
    for mp_index, marketplace in enumerate(settings.marketplaces):
        identifier = offer.id + marketplace
        salt = pair_salt(offer_index, mp_index)

        status: MarketplaceStatus
        if marketplace not in listed:
            status = "not_listed"
        elif synth_int(identifier, salt, 0, 10) > 2:
            status = "active"
        else:
            status = "inactive"

        multiplier = MARKETPLACE_MULTIPLIERS[status]
        raw_impressions, clicks, conversions, revenue = _funnel(identifier, salt, MARKETPLACE_IMPRESSIONS, multiplier)
        ad_spend = synth_int(identifier, salt, *MARKETPLACE_AD_SPEND) * multiplier

        rows.append(
            MarketplaceAnalytics(
                marketplace=marketplace,
                status=status,
                impressions=math.floor(raw_impressions),
                clicks=clicks,
                conversions=conversions,
                revenue=float(revenue),
                conversion_rate=safe_ratio(conversions, clicks) * 100,
                ad_spend=ad_spend,
                roas=safe_ratio(revenue, ad_spend),
            )
        )
    return rows


def build_marketplace_rollups(
    offers: Sequence[Offer],
    settings: EngineSettings,
) -> Dict[str, List[MarketplaceAnalytics]]:
    return {offer.id: build_marketplace_rollup(offer, index, settings) for index, offer in enumerate(offers)}


def build_product_rollup(
    offer: Offer,
    offer_index: int,
    catalog: Optional[Mapping[str, Product]] = None,
) -> List[ProductAnalytics]:
    """Rows for the offer's linked products.

    With a catalog, rows follow catalog order (which fixes each product's salt)
    and ids it does not know are skipped. Without one, rows follow
    ``offer.product_ids`` and carry a bare :class:`Product` named after its id.
    """

    if catalog is None:
        products = [Product(id=product_id, name=product_id) for product_id in offer.product_ids]
    else:
        linked = set(offer.product_ids)
        products = [product for product_id, product in catalog.items() if product_id in linked]
        for product_id in sorted(linked.difference(catalog)):
            logger.debug("Offer %s links unknown product %s", offer.id, product_id)

    rows: List[ProductAnalytics] = []
    for product_index, product in enumerate(products):
        salt = pair_salt(offer_index, product_index)
        _, clicks, conversions, revenue = _funnel(product.id, salt, PRODUCT_IMPRESSIONS, 1.0)
        rows.append(
            ProductAnalytics(
                product=product,
                impressions=synth_int(product.id, salt, *PRODUCT_IMPRESSIONS),
                clicks=clicks,
                conversions=conversions,
                revenue=float(revenue),
                conversion_rate=safe_ratio(conversions, clicks) * 100,
            )
        )
    return rows
