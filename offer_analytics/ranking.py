"""Sorted and truncated views for charts and tables."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from offer_analytics.builders import OfferAnalytics
from offer_analytics.config import EngineSettings, validate_sort_key

_SORT_ATTRIBUTES = {
    "revenue": "revenue",
    "conversions": "conversions",
    "roi": "roi",
}


@dataclass(frozen=True, slots=True)
class ChartRow:
    offer_id: str
    name: str
    revenue: int
    conversions: int
    roi: int


@dataclass(frozen=True, slots=True)
class TypeShare:
    name: str
    value: int


@dataclass(frozen=True, slots=True)
class TrendPoint:
    day: str
    revenue: int
    conversions: int


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def truncate_name(name: str, width: int) -> str:
    if len(name) > width:
        return name[:width] + "..."
    return name


def rank_offers(analytics: Sequence[OfferAnalytics], sort_by: str) -> List[OfferAnalytics]:
    """Full list sorted descending by *sort_by*; ties keep input order."""

    attribute = _SORT_ATTRIBUTES[validate_sort_key(sort_by)]
    return sorted(analytics, key=lambda row: getattr(row, attribute), reverse=True)


def table_ranking(analytics: Sequence[OfferAnalytics], sort_by: str, settings: EngineSettings) -> List[OfferAnalytics]:
    return rank_offers(analytics, sort_by)[: settings.table_size]


def chart_ranking(analytics: Sequence[OfferAnalytics], sort_by: str, settings: EngineSettings) -> List[ChartRow]:
    candidates = [row for row in analytics if row.status != "expired"]
    top = rank_offers(candidates, sort_by)[: settings.chart_size]
    return [
        ChartRow(
            offer_id=row.offer.id,
            name=truncate_name(row.offer.name, settings.chart_name_width),
            revenue=_round_half_up(row.revenue),
            conversions=row.conversions,
            roi=_round_half_up(row.roi),
        )
        for row in top
    ]


def type_distribution(analytics: Sequence[OfferAnalytics], settings: EngineSettings) -> List[TypeShare]:
    counts: Dict[str, int] = {}
    for row in analytics:
        label = settings.label_for(row.offer.type)
        counts[label] = counts.get(label, 0) + 1
    return [TypeShare(name=name, value=value) for name, value in counts.items()]


def revenue_trend(
    days: int,
    settings: EngineSettings,
    *,
    seed: Optional[int] = None,
) -> List[TrendPoint]:
    """Mock daily revenue series.

    Unlike every other series this one is not derived from the offers. It is
    random on each call unless a seed is supplied here or in ``settings.trend_seed``.
    """

    length = max(0, min(days, settings.trend_max_days))
    rng = np.random.default_rng(seed if seed is not None else settings.trend_seed)
    draws = rng.random((length, 2))
    return [
        TrendPoint(
            day=f"Day {i + 1}",
            revenue=int(math.floor(draws[i, 0] * 5000 + 2000)),
            conversions=int(math.floor(draws[i, 1] * 100 + 20)),
        )
        for i in range(length)
    ]
