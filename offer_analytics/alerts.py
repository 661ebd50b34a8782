from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, List, Literal, Optional, Sequence, Tuple

from offer_analytics.builders import OfferAnalytics
from offer_analytics.config import AlertThresholds
from offer_analytics.offers import Offer
from offer_analytics.summary import SummaryMetrics

AlertType = Literal["critical", "warning", "info", "success"]
AlertAction = Literal["extend", "review", "adjust", "promote"]

ALERT_PRIORITY: Dict[str, int] = {"critical": 0, "warning": 1, "info": 2, "success": 3}

ACTION_LABELS: Dict[str, str] = {
    "extend": "Extend Offer",
    "review": "Review",
    "adjust": "Adjust Discount",
    "promote": "Promote",
}


@dataclass(frozen=True, slots=True)
class PerformanceAlert:
    id: str
    type: AlertType
    title: str
    description: str
    offer: Offer
    metric: Optional[str] = None
    action: Optional[AlertAction] = None

    @property
    def action_label(self) -> str:
        return ACTION_LABELS.get(self.action or "", "View")


@dataclass(frozen=True, slots=True)
class Baseline:
    conversion_rate: float
    roi: float


Rule = Callable[[OfferAnalytics, Baseline, AlertThresholds], Optional[PerformanceAlert]]


def _fixed(value: float, places: int = 1) -> str:
    """Fixed-point text with halves rounded away from zero (``-14.5`` -> ``"-15"``)."""

    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _plural_days(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


# R1 Ending soon + high performer
def ending_high_performer(row: OfferAnalytics, base: Baseline, limits: AlertThresholds) -> Optional[PerformanceAlert]:
    if row.status != "ending_soon":
        return None
    if not row.conversion_rate > base.conversion_rate * limits.ending_soon_conversion_multiplier:
        return None
    return PerformanceAlert(
        id=f"ending-high-{row.offer.id}",
        type="warning",
        title="High-Performer Ending Soon",
        description=(
            f'"{row.offer.name}" has {_fixed(row.conversion_rate)}% conversion rate but ends in '
            f"{_plural_days(row.days_remaining)}. Consider extending."
        ),
        offer=row.offer,
        metric=f"{_fixed(row.conversion_rate)}% conv.",
        action="extend",
    )


# R2 Low conversion
def low_conversion(row: OfferAnalytics, base: Baseline, limits: AlertThresholds) -> Optional[PerformanceAlert]:
    if not row.conversion_rate < base.conversion_rate * limits.low_conversion_multiplier:
        return None
    if not row.impressions > limits.low_conversion_min_impressions:
        return None
    return PerformanceAlert(
        id=f"low-conv-{row.offer.id}",
        type="critical",
        title="Low Conversion Rate",
        description=(
            f'"{row.offer.name}" has only {_fixed(row.conversion_rate)}% conversion rate '
            f"(avg: {_fixed(base.conversion_rate)}%). Review offer terms."
        ),
        offer=row.offer,
        metric=f"{_fixed(row.conversion_rate)}% vs {_fixed(base.conversion_rate)}%",
        action="review",
    )


# R3 Negative ROI
def negative_roi(row: OfferAnalytics, base: Baseline, limits: AlertThresholds) -> Optional[PerformanceAlert]:
    if not row.roi < 0:
        return None
    return PerformanceAlert(
        id=f"neg-roi-{row.offer.id}",
        type="critical",
        title="Negative ROI",
        description=f'"{row.offer.name}" has {_fixed(row.roi, 0)}% ROI. The discount cost exceeds revenue impact.',
        offer=row.offer,
        metric=f"{_fixed(row.roi, 0)}% ROI",
        action="adjust",
    )


# R4 Top performer
def top_performer(row: OfferAnalytics, base: Baseline, limits: AlertThresholds) -> Optional[PerformanceAlert]:
    if not row.conversion_rate > base.conversion_rate * limits.top_conversion_multiplier:
        return None
    if not row.roi > base.roi * limits.top_roi_multiplier:
        return None
    return PerformanceAlert(
        id=f"top-{row.offer.id}",
        type="success",
        title="Top Performer",
        description=(
            f'"{row.offer.name}" is outperforming with {_fixed(row.conversion_rate)}% conversion '
            f"and {_fixed(row.roi, 0)}% ROI."
        ),
        offer=row.offer,
        metric=f"{_fixed(row.roi, 0)}% ROI",
    )


# R5 Low visibility
def low_visibility(row: OfferAnalytics, base: Baseline, limits: AlertThresholds) -> Optional[PerformanceAlert]:
    if not row.impressions < limits.low_visibility_max_impressions:
        return None
    if not row.days_remaining < limits.low_visibility_max_days:
        return None
    return PerformanceAlert(
        id=f"low-imp-{row.offer.id}",
        type="info",
        title="Low Visibility",
        description=f'"{row.offer.name}" has only {row.impressions} impressions. Consider promoting it more.',
        offer=row.offer,
        metric=f"{row.impressions} views",
        action="promote",
    )


RULES: Tuple[Rule, ...] = (
    ending_high_performer,
    low_conversion,
    negative_roi,
    top_performer,
    low_visibility,
)


def compute_alerts(
    filtered: Sequence[OfferAnalytics],
    summary: SummaryMetrics,
    thresholds: AlertThresholds | None = None,
) -> List[PerformanceAlert]:
    """Evaluate every rule against each live offer, most severe first.

    ``sorted`` is stable, so alerts of equal severity keep offer/rule order.
    """

    limits = thresholds or AlertThresholds()
    base = Baseline(conversion_rate=summary.avg_conversion_rate, roi=summary.avg_roi)

    alerts: List[PerformanceAlert] = []
    for row in filtered:
        if not row.is_live:
            continue
        for rule in RULES:
            alert = rule(row, base, limits)
            if alert is not None:
                alerts.append(alert)

    return sorted(alerts, key=lambda alert: ALERT_PRIORITY[alert.type])
