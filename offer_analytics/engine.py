"""Single entry point shared by every analytics surface."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from offer_analytics.alerts import PerformanceAlert, compute_alerts
from offer_analytics.builders import (
    MarketplaceAnalytics,
    OfferAnalytics,
    ProductAnalytics,
    build_all_offer_analytics,
    build_marketplace_rollups,
    build_product_rollup,
)
from offer_analytics.config import EngineSettings, validate_marketplace_filter, validate_sort_key
from offer_analytics.offers import Offer, Product
from offer_analytics.ranking import (
    ChartRow,
    TrendPoint,
    TypeShare,
    chart_ranking,
    revenue_trend,
    table_ranking,
    type_distribution,
)
from offer_analytics.summary import SummaryMetrics, compute_summary, filter_offer_analytics


@dataclass(frozen=True, slots=True)
class Ranking:
    chart: List[ChartRow]
    table: List[OfferAnalytics]
    type_distribution: List[TypeShare]


@dataclass(frozen=True, slots=True)
class AnalyticsSnapshot:
    generated_at: datetime
    marketplace_filter: tuple[str, ...]
    sort_by: str
    analytics: List[OfferAnalytics]
    filtered: List[OfferAnalytics]
    marketplace_rollups: Dict[str, List[MarketplaceAnalytics]]
    product_rollups: Dict[str, List[ProductAnalytics]]
    summary: SummaryMetrics
    alerts: List[PerformanceAlert]
    ranking: Ranking
    trend: List[TrendPoint]


class OfferAnalyticsEngine:
    """Stateless analytics over an offer list snapshot.

    Every method recomputes from its arguments; nothing is cached between calls.
    """

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self.settings = settings or EngineSettings()

    def compute_offer_analytics(
        self,
        offers: Sequence[Offer],
        *,
        now: Optional[datetime] = None,
    ) -> List[OfferAnalytics]:
        return build_all_offer_analytics(offers, now=now)

    def compute_marketplace_rollups(self, offers: Sequence[Offer]) -> Dict[str, List[MarketplaceAnalytics]]:
        return build_marketplace_rollups(offers, self.settings)

    def compute_product_rollups(
        self,
        offers: Sequence[Offer],
        catalog: Optional[Mapping[str, Product]] = None,
    ) -> Dict[str, List[ProductAnalytics]]:
        return {offer.id: build_product_rollup(offer, index, catalog) for index, offer in enumerate(offers)}

    def filter_analytics(
        self,
        analytics: Sequence[OfferAnalytics],
        marketplace_filter: Iterable[str] = (),
    ) -> List[OfferAnalytics]:
        selected = validate_marketplace_filter(list(marketplace_filter), self.settings.marketplaces)
        return filter_offer_analytics(analytics, selected, self.settings)

    def compute_summary(
        self,
        analytics: Sequence[OfferAnalytics],
        rollups: Mapping[str, Sequence[MarketplaceAnalytics]],
        marketplace_filter: Iterable[str] = (),
    ) -> SummaryMetrics:
        selected = validate_marketplace_filter(list(marketplace_filter), self.settings.marketplaces)
        filtered = filter_offer_analytics(analytics, selected, self.settings)
        return compute_summary(filtered, rollups, selected, self.settings)

    def compute_alerts(
        self,
        analytics: Sequence[OfferAnalytics],
        summary: SummaryMetrics,
        marketplace_filter: Iterable[str] = (),
    ) -> List[PerformanceAlert]:
        filtered = self.filter_analytics(analytics, marketplace_filter)
        return compute_alerts(filtered, summary, self.settings.alert_thresholds)

    def compute_ranking(
        self,
        analytics: Sequence[OfferAnalytics],
        sort_by: str = "revenue",
        marketplace_filter: Iterable[str] = (),
    ) -> Ranking:
        validate_sort_key(sort_by)
        filtered = self.filter_analytics(analytics, marketplace_filter)
        return Ranking(
            chart=chart_ranking(filtered, sort_by, self.settings),
            table=table_ranking(filtered, sort_by, self.settings),
            type_distribution=type_distribution(filtered, self.settings),
        )

    def compute_trend(self, days: int, *, seed: Optional[int] = None) -> List[TrendPoint]:
        return revenue_trend(days, self.settings, seed=seed)

    def run(
        self,
        offers: Sequence[Offer],
        *,
        catalog: Optional[Mapping[str, Product]] = None,
        marketplace_filter: Iterable[str] = (),
        sort_by: str = "revenue",
        trend_days: int = 30,
        now: Optional[datetime] = None,
    ) -> AnalyticsSnapshot:
        current = now or datetime.now(timezone.utc)
        selected = validate_marketplace_filter(list(marketplace_filter), self.settings.marketplaces)
        validate_sort_key(sort_by)

        analytics = self.compute_offer_analytics(offers, now=current)
        rollups = self.compute_marketplace_rollups(offers)
        filtered = filter_offer_analytics(analytics, selected, self.settings)
        summary = compute_summary(filtered, rollups, selected, self.settings)

        return AnalyticsSnapshot(
            generated_at=current,
            marketplace_filter=selected,
            sort_by=sort_by,
            analytics=analytics,
            filtered=filtered,
            marketplace_rollups=rollups,
            product_rollups=self.compute_product_rollups(offers, catalog),
            summary=summary,
            alerts=compute_alerts(filtered, summary, self.settings.alert_thresholds),
            ranking=self.compute_ranking(analytics, sort_by, selected),
            trend=self.compute_trend(trend_days),
        )
