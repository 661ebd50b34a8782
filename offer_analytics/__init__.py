"""Public API for the offer_analytics package."""

from .alerts import PerformanceAlert, compute_alerts
from .builders import MarketplaceAnalytics, OfferAnalytics, ProductAnalytics
from .config import AlertThresholds, EngineSettings, MarketplacePolicy, ReportSettings, load_engine_settings
from .engine import AnalyticsSnapshot, OfferAnalyticsEngine
from .offers import Offer, OfferFormatError, Product, offer_from_dict, offers_from_records
from .pipeline import OfferReportPipeline
from .status import classify_status, days_remaining
from .summary import SummaryMetrics
from .synth import synth_int

__all__ = [
    "AlertThresholds",
    "AnalyticsSnapshot",
    "EngineSettings",
    "MarketplaceAnalytics",
    "MarketplacePolicy",
    "Offer",
    "OfferAnalytics",
    "OfferAnalyticsEngine",
    "OfferFormatError",
    "OfferReportPipeline",
    "PerformanceAlert",
    "Product",
    "ProductAnalytics",
    "ReportSettings",
    "SummaryMetrics",
    "classify_status",
    "compute_alerts",
    "days_remaining",
    "load_engine_settings",
    "offer_from_dict",
    "offers_from_records",
    "synth_int",
]
