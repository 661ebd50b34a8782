"""Tabular views, JSON payloads and Markdown for an analytics snapshot."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List

import pandas as pd

from offer_analytics.alerts import PerformanceAlert
from offer_analytics.builders import MarketplaceAnalytics, OfferAnalytics, ProductAnalytics
from offer_analytics.engine import AnalyticsSnapshot
from offer_analytics.offers import format_offer_discount
from offer_analytics.status import STATUS_LABELS

REPORT_VERSION = "offer-analytics/1.0"

_OFFER_COLUMNS = [
    "offer_id",
    "name",
    "type",
    "discount",
    "status",
    "days_remaining",
    "impressions",
    "clicks",
    "conversions",
    "conversion_rate",
    "revenue",
    "revenue_impact",
    "average_order_value",
    "cost_per_conversion",
    "roi",
    "ad_spend",
    "roas",
]


def _frame_to_json_records(df: pd.DataFrame) -> list[dict[str, object]]:
    if df.empty:
        return []
    return json.loads(df.to_json(orient="records", date_format="iso"))


def dataframe_to_csv(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if df.empty:
        path.write_text("", encoding="utf-8")
    else:
        df.to_csv(path, index=False)


def dataframe_to_markdown(df: pd.DataFrame) -> str:
    if df.empty:
        return "_No data available._"
    return df.to_markdown(index=False)


def offer_frame(analytics: List[OfferAnalytics]) -> pd.DataFrame:
    records = [
        {
            "offer_id": row.offer.id,
            "name": row.offer.name,
            "type": row.offer.type,
            "discount": format_offer_discount(row.offer),
            "status": row.status,
            "days_remaining": row.days_remaining,
            "impressions": row.impressions,
            "clicks": row.clicks,
            "conversions": row.conversions,
            "conversion_rate": row.conversion_rate,
            "revenue": row.revenue,
            "revenue_impact": row.revenue_impact,
            "average_order_value": row.average_order_value,
            "cost_per_conversion": row.cost_per_conversion,
            "roi": row.roi,
            "ad_spend": row.ad_spend,
            "roas": row.roas,
        }
        for row in analytics
    ]
    return pd.DataFrame(records, columns=_OFFER_COLUMNS)


def marketplace_frame(rollups: Dict[str, List[MarketplaceAnalytics]]) -> pd.DataFrame:
    records = []
    for offer_id, rows in rollups.items():
        for row in rows:
            record = {"offer_id": offer_id}
            record.update(asdict(row))
            records.append(record)
    return pd.DataFrame(records)


def product_frame(rollups: Dict[str, List[ProductAnalytics]]) -> pd.DataFrame:
    records = []
    for offer_id, rows in rollups.items():
        for row in rows:
            records.append(
                {
                    "offer_id": offer_id,
                    "product_id": row.product.id,
                    "product_name": row.product.name,
                    "sku": row.product.sku,
                    "impressions": row.impressions,
                    "clicks": row.clicks,
                    "conversions": row.conversions,
                    "revenue": row.revenue,
                    "conversion_rate": row.conversion_rate,
                }
            )
    return pd.DataFrame(records)


def alert_frame(alerts: List[PerformanceAlert]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": alert.id,
                "type": alert.type,
                "title": alert.title,
                "offer_id": alert.offer.id,
                "metric": alert.metric,
                "action": alert.action,
                "description": alert.description,
            }
            for alert in alerts
        ],
        columns=["id", "type", "title", "offer_id", "metric", "action", "description"],
    )


def build_summary_payload(snapshot: AnalyticsSnapshot) -> Dict[str, object]:
    """Serializable payload suitable for an HTTP response or ``summary.json``."""

    ranking = snapshot.ranking
    return {
        "generated_at": snapshot.generated_at.isoformat(),
        "report_version": REPORT_VERSION,
        "marketplace_filter": list(snapshot.marketplace_filter),
        "sort_by": snapshot.sort_by,
        "summary": asdict(snapshot.summary),
        "alerts": _frame_to_json_records(alert_frame(snapshot.alerts)),
        "chart": [asdict(row) for row in ranking.chart],
        "type_distribution": [asdict(share) for share in ranking.type_distribution],
        "top_offers": _frame_to_json_records(offer_frame(ranking.table)),
        "revenue_trend": [asdict(point) for point in snapshot.trend],
        "offers": _frame_to_json_records(offer_frame(snapshot.filtered)),
    }


def _format_summary_value(key: str, value: float | int) -> str:
    if key.endswith("rate") or key == "avg_roi":
        return f"{value:.1f}%"
    if key == "avg_roas":
        return f"{value:.2f}x"
    if "revenue" in key or "spend" in key:
        return f"${value:,.2f}"
    return f"{value:,.0f}"


def build_markdown_report(snapshot: AnalyticsSnapshot) -> str:
    summary = asdict(snapshot.summary)
    scope = ", ".join(snapshot.marketplace_filter) if snapshot.marketplace_filter else "All Marketplaces"
    lines = [
        "# Offer Performance Summary",
        "",
        f"**Generated:** {snapshot.generated_at:%Y-%m-%d %H:%M} UTC",
        f"**Marketplaces:** {scope}",
        f"**Sorted by:** {snapshot.sort_by}",
        "",
        "## Key Metrics",
    ]
    for key, label in [
        ("active_offers", "Active offers"),
        ("total_offers", "Offers in view"),
        ("total_revenue", "Revenue"),
        ("total_revenue_impact", "Revenue impact"),
        ("total_conversions", "Conversions"),
        ("avg_conversion_rate", "Conversion rate"),
        ("click_through_rate", "Click-through rate"),
        ("avg_roi", "Average ROI"),
        ("total_ad_spend", "Ad spend"),
        ("avg_roas", "ROAS"),
    ]:
        lines.append(f"- **{label}:** {_format_summary_value(key, summary[key])}")

    lines.extend(["", "## Alerts", ""])
    if snapshot.alerts:
        for alert in snapshot.alerts:
            suffix = f" _({alert.action_label})_" if alert.action else ""
            lines.append(f"- **[{alert.type}] {alert.title}:** {alert.description}{suffix}")
    else:
        lines.append("_No alerts._")

    table = offer_frame(snapshot.ranking.table)
    if not table.empty:
        table["status"] = table["status"].map(STATUS_LABELS)
        table = table[["name", "discount", "status", "revenue", "conversions", "conversion_rate", "roi", "roas"]]
        table = table.round({"revenue": 2, "conversion_rate": 1, "roi": 0, "roas": 2})
    lines.extend(["", "## Top offers", "", dataframe_to_markdown(table)])

    distribution = pd.DataFrame([asdict(share) for share in snapshot.ranking.type_distribution])
    lines.extend(["", "## Offer types", "", dataframe_to_markdown(distribution)])

    return "\n".join(lines) + "\n"
