"""Chart rendering for the offer report."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Dict

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402

from offer_analytics.engine import AnalyticsSnapshot  # noqa: E402

sns.set_theme(style="whitegrid")


def _save_plot(fig: plt.Figure, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def ranking_plot(snapshot: AnalyticsSnapshot, output_dir: Path) -> Path | None:
    frame = pd.DataFrame([asdict(row) for row in snapshot.ranking.chart])
    if frame.empty:
        return None
    metric = snapshot.sort_by
    fig, ax = plt.subplots(figsize=(8, 5))
    sns.barplot(data=frame, x=metric, y="name", color="#4c72b0", ax=ax)
    ax.set_ylabel("Offer")
    ax.set_xlabel(metric.upper() if metric == "roi" else metric.title())
    ax.set_title(f"Top offers by {metric}")
    output_path = output_dir / "figures" / "offer_ranking.png"
    _save_plot(fig, output_path)
    return output_path


def type_distribution_plot(snapshot: AnalyticsSnapshot, output_dir: Path) -> Path | None:
    frame = pd.DataFrame([asdict(share) for share in snapshot.ranking.type_distribution])
    if frame.empty:
        return None
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.pie(frame["value"], labels=frame["name"], autopct="%1.0f%%", startangle=90)
    ax.set_title("Offers by type")
    output_path = output_dir / "figures" / "offer_types.png"
    _save_plot(fig, output_path)
    return output_path


def trend_plot(snapshot: AnalyticsSnapshot, output_dir: Path) -> Path | None:
    frame = pd.DataFrame([asdict(point) for point in snapshot.trend])
    if frame.empty:
        return None
    fig, ax = plt.subplots(figsize=(10, 5))
    sns.lineplot(data=frame, x="day", y="revenue", label="Revenue", ax=ax)
    ax2 = ax.twinx()
    sns.lineplot(data=frame, x="day", y="conversions", label="Conversions", color="#dd8452", ax=ax2)
    ax2.set_ylabel("Conversions")
    ax.set_ylabel("Revenue")
    ax.set_title("Revenue trend")
    ax.tick_params(axis="x", rotation=45)
    output_path = output_dir / "figures" / "revenue_trend.png"
    _save_plot(fig, output_path)
    return output_path


def generate_visuals(snapshot: AnalyticsSnapshot, output_dir: Path) -> Dict[str, str]:
    figures: Dict[str, str] = {}

    path = ranking_plot(snapshot, output_dir)
    if path:
        figures["offer_ranking"] = path.name

    path = type_distribution_plot(snapshot, output_dir)
    if path:
        figures["offer_types"] = path.name

    path = trend_plot(snapshot, output_dir)
    if path:
        figures["revenue_trend"] = path.name

    return figures
