"""High-level batch report orchestration."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from offer_analytics.config import EngineSettings, ReportSettings, settings_from_dict
from offer_analytics.data_loader import OfferSnapshot, load_snapshot
from offer_analytics.engine import OfferAnalyticsEngine
from offer_analytics.reporting import (
    alert_frame,
    build_markdown_report,
    build_summary_payload,
    dataframe_to_csv,
    marketplace_frame,
    offer_frame,
    product_frame,
)

logger = logging.getLogger(__name__)


class OfferReportPipeline:
    """Load an offer snapshot, run the engine, and write report artifacts."""

    def __init__(self, settings: ReportSettings, engine_settings: EngineSettings | None = None) -> None:
        self.settings = settings
        self.settings.resolve_paths()
        self.settings.ensure_output_tree()
        self.engine = OfferAnalyticsEngine(engine_settings)

    @classmethod
    def from_config_file(cls, path: Path) -> "OfferReportPipeline":
        payload = json.loads(path.read_text(encoding="utf-8"))
        report, engine = settings_from_dict(payload, base_path=path.parent)
        return cls(report, engine)

    def _load(self) -> OfferSnapshot:
        return load_snapshot(self.settings.offers_path, self.settings.products_path)

    def run(self, *, now: Optional[datetime] = None) -> Dict[str, object]:
        snapshot_input = self._load()
        output_dir = self.settings.output_dir
        logger.info("Computing analytics for %d offers", len(snapshot_input.offers))

        snapshot = self.engine.run(
            snapshot_input.offers,
            catalog=snapshot_input.catalog,
            marketplace_filter=self.settings.marketplace_filter,
            sort_by=self.settings.sort_by,
            trend_days=self.settings.trend_days,
            now=now,
        )
        logger.debug(
            "Summary: %d active of %d offers, %d alerts",
            snapshot.summary.active_offers,
            snapshot.summary.total_offers,
            len(snapshot.alerts),
        )

        figures: Dict[str, str] = {}
        if self.settings.include_visuals:
            from offer_analytics.visualization import generate_visuals

            figures = generate_visuals(snapshot, output_dir)

        payload = build_summary_payload(snapshot)
        payload["offers_path"] = str(self.settings.offers_path)
        payload["figures"] = figures

        summary_path = output_dir / "summary.json"
        summary_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

        report_path = output_dir / "offer_report.md"
        report_path.write_text(build_markdown_report(snapshot), encoding="utf-8")

        dataframe_to_csv(offer_frame(snapshot.analytics), output_dir / "offer_performance.csv")
        dataframe_to_csv(marketplace_frame(snapshot.marketplace_rollups), output_dir / "marketplace_performance.csv")
        dataframe_to_csv(product_frame(snapshot.product_rollups), output_dir / "product_performance.csv")
        dataframe_to_csv(alert_frame(snapshot.alerts), output_dir / "alerts.csv")

        return {
            "snapshot": snapshot,
            "summary": snapshot.summary,
            "alerts": snapshot.alerts,
            "figures": figures,
            "summary_path": summary_path,
            "report_path": report_path,
        }
