"""Batch runner for the offer performance report."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict

from offer_analytics import OfferReportPipeline, ReportSettings, load_engine_settings
from offer_analytics.config import SORT_KEYS


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute offer analytics, alerts and rankings for an offer snapshot.")
    parser.add_argument("--config", type=Path, help="Path to a JSON report configuration file.")
    parser.add_argument("--offers", type=Path, help="JSON file with the offer list (used when --config is absent).")
    parser.add_argument("--products", type=Path, help="Optional product catalog (JSON or CSV).")
    parser.add_argument(
        "--engine-config",
        type=Path,
        help="JSON file with engine settings (catalog, thresholds) for --offers runs.",
    )
    parser.add_argument("--output-dir", type=Path, default=Path("reports"), help="Directory for report artifacts.")
    parser.add_argument(
        "--marketplace",
        action="append",
        default=[],
        help="Restrict the summary to a marketplace (repeatable; overrides the config file).",
    )
    parser.add_argument("--sort-by", choices=list(SORT_KEYS), help="Ranking key for charts and tables (default: revenue).")
    parser.add_argument("--days", type=int, help="Requested revenue trend length in days (default: 30).")
    parser.add_argument("--no-visuals", action="store_true", help="Skip chart generation stage.")
    parser.add_argument("--seed", type=int, help="Seed for the mock revenue trend (random when omitted).")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose logging for troubleshooting.",
    )
    return parser.parse_args(argv)


def display_console_summary(results: Dict[str, object]) -> None:
    summary = results["summary"]
    alerts = results.get("alerts") or []

    print("\nOffer analytics run completed.\n")
    for key, label in [
        ("active_offers", "Active offers"),
        ("total_offers", "Offers in view"),
        ("total_revenue", "Revenue"),
        ("total_conversions", "Conversions"),
        ("avg_conversion_rate", "Conversion rate"),
        ("avg_roi", "Average ROI"),
        ("total_ad_spend", "Ad spend"),
        ("avg_roas", "ROAS"),
    ]:
        value = getattr(summary, key)
        if key.endswith("rate") or key == "avg_roi":
            formatted = f"{value:.1f}%"
        elif key == "avg_roas":
            formatted = f"{value:.2f}x"
        elif "revenue" in key or "spend" in key:
            formatted = f"${value:,.2f}"
        else:
            formatted = f"{value:,.0f}"
        print(f"  {label:20s} {formatted}")

    print(f"\nAlerts: {len(alerts)}")
    for alert in alerts:  # type: ignore[union-attr]
        print(f"  [{alert.type:8s}] {alert.title}: {alert.offer.name}")

    print("\nArtifacts:")
    print(f"  Markdown report: {results['report_path']}")
    print(f"  Summary JSON:    {results['summary_path']}")
    figures = results.get("figures") or {}
    for name, filename in figures.items():  # type: ignore[union-attr]
        print(f"  Figure ({name}): {filename}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.config:
        pipeline = OfferReportPipeline.from_config_file(args.config)
        if args.marketplace:
            pipeline.settings.marketplace_filter = tuple(args.marketplace)
        if args.sort_by:
            pipeline.settings.sort_by = args.sort_by
        if args.days is not None:
            pipeline.settings.trend_days = args.days
        if args.no_visuals:
            pipeline.settings.include_visuals = False
    elif args.offers:
        settings = ReportSettings(
            offers_path=args.offers,
            products_path=args.products,
            output_dir=args.output_dir,
            marketplace_filter=tuple(args.marketplace),
            sort_by=args.sort_by or "revenue",
            trend_days=30 if args.days is None else args.days,
            include_visuals=not args.no_visuals,
        )
        pipeline = OfferReportPipeline(settings, load_engine_settings(args.engine_config))
    else:
        raise SystemExit("No work to execute. Provide --offers or --config.")

    if args.seed is not None:
        pipeline.engine.settings = replace(pipeline.engine.settings, trend_seed=args.seed)

    results = pipeline.run()
    display_console_summary(results)


if __name__ == "__main__":
    main()
