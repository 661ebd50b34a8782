"""Dashboard KPIs rolled up from offer or marketplace rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence

from offer_analytics.builders import MarketplaceAnalytics, OfferAnalytics, safe_ratio
from offer_analytics.config import EngineSettings


@dataclass(frozen=True, slots=True)
class SummaryMetrics:
    active_offers: int
    total_offers: int
    total_revenue: float
    total_revenue_impact: float
    total_conversions: int
    total_clicks: int
    total_impressions: int
    avg_conversion_rate: float
    avg_roi: float
    click_through_rate: float
    total_ad_spend: float
    avg_roas: float


def filter_offer_analytics(
    analytics: Sequence[OfferAnalytics],
    selected: Iterable[str],
    settings: EngineSettings,
) -> List[OfferAnalytics]:
    """Keep offers assigned to any selected marketplace (all when none selected)."""

    selected_set = set(selected)
    if not selected_set:
        return list(analytics)

    policy = settings.marketplace_policy
    kept: List[OfferAnalytics] = []
    for row in analytics:
        assigned = policy.defaults_for(row.offer.marketplaces, settings.marketplaces, "filter")
        if selected_set.intersection(assigned):
            kept.append(row)
    return kept


def is_partial_filter(selected: Iterable[str], settings: EngineSettings) -> bool:
    selected_set = set(selected)
    return bool(selected_set) and not selected_set.issuperset(settings.marketplaces)


def compute_summary(
    filtered: Sequence[OfferAnalytics],
    rollups: Mapping[str, Sequence[MarketplaceAnalytics]],
    selected: Iterable[str],
    settings: EngineSettings,
) -> SummaryMetrics:
    """Reduce filtered offer rows into summary KPIs.

    A partial marketplace filter sums only active rollup rows for the selected
    marketplaces; revenue impact is then pro-rated by the share of the catalog
    selected, which approximates rather than splits it per marketplace.
    """

    selected_set = set(selected)
    live = [row for row in filtered if row.is_live]
    avg_roi = safe_ratio(sum(row.roi for row in live), len(live))

    if is_partial_filter(selected_set, settings):
        share = len(selected_set) / len(settings.marketplaces)
        total_revenue = 0.0
        total_revenue_impact = 0.0
        total_conversions = 0
        total_clicks = 0
        total_impressions = 0
        total_ad_spend = 0.0
        for row in live:
            for mp in rollups.get(row.offer.id, ()):
                if mp.marketplace in selected_set and mp.status == "active":
                    total_revenue += mp.revenue
                    total_conversions += mp.conversions
                    total_clicks += mp.clicks
                    total_impressions += mp.impressions
                    total_ad_spend += mp.ad_spend
            total_revenue_impact += row.revenue_impact * share
    else:
        total_revenue = sum(row.revenue for row in live)
        total_revenue_impact = sum(row.revenue_impact for row in live)
        total_conversions = sum(row.conversions for row in live)
        total_clicks = sum(row.clicks for row in live)
        total_impressions = sum(row.impressions for row in live)
        total_ad_spend = sum(row.ad_spend for row in live)

    return SummaryMetrics(
        active_offers=len(live),
        total_offers=len(filtered),
        total_revenue=float(total_revenue),
        total_revenue_impact=float(total_revenue_impact),
        total_conversions=int(total_conversions),
        total_clicks=int(total_clicks),
        total_impressions=int(total_impressions),
        avg_conversion_rate=safe_ratio(total_conversions, total_clicks) * 100,
        avg_roi=avg_roi,
        click_through_rate=safe_ratio(total_clicks, total_impressions) * 100,
        total_ad_spend=float(total_ad_spend),
        avg_roas=safe_ratio(total_revenue, total_ad_spend),
    )
