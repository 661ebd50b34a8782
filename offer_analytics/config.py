"""Configuration models for the offer analytics engine and batch report."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Literal, MutableMapping, Optional, Tuple

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "offer_engine.json"

SortKey = Literal["revenue", "conversions", "roi"]
SORT_KEYS: Tuple[str, ...] = ("revenue", "conversions", "roi")

DEFAULT_MARKETPLACES: Tuple[str, ...] = (
    "Amazon",
    "Walmart",
    "eBay",
    "Target",
    "Etsy",
    "Shopify",
    "Best Buy",
    "Wayfair",
    "Newegg",
    "Home Depot",
)

DEFAULT_OFFER_TYPE_LABELS: Dict[str, str] = {
    "free_shipping": "Free Shipping",
    "percent_discount": "% Discount",
    "fixed_discount": "$ Discount",
    "quantity_discount": "Quantity Discount",
    "bulk_purchase": "Bulk Purchase",
    "bogo_half": "Buy 1 Get 1 50% Off",
    "bogo_free": "Buy 1 Get 1 Free",
}


@dataclass(frozen=True, slots=True)
class MarketplacePolicy:
    """Default marketplaces assumed for offers that list none.

    Filter matching and the marketplace rollup both consult this policy; each
    can opt in or out of the fallback independently.
    """

    fallback_count: int = 3
    apply_to_filter: bool = True
    apply_to_rollup: bool = False

    def defaults_for(
        self,
        marketplaces: Tuple[str, ...] | List[str],
        catalog: Tuple[str, ...],
        purpose: Literal["filter", "rollup"],
    ) -> Tuple[str, ...]:
        if marketplaces:
            return tuple(marketplaces)
        enabled = self.apply_to_filter if purpose == "filter" else self.apply_to_rollup
        if not enabled:
            return ()
        return tuple(catalog[: self.fallback_count])


@dataclass(frozen=True, slots=True)
class AlertThresholds:
    ending_soon_conversion_multiplier: float = 1.2
    low_conversion_multiplier: float = 0.5
    low_conversion_min_impressions: int = 1000
    top_conversion_multiplier: float = 1.5
    top_roi_multiplier: float = 1.5
    low_visibility_max_impressions: int = 500
    low_visibility_max_days: int = 7


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Immutable catalogs and knobs injected into :class:`OfferAnalyticsEngine`."""

    marketplaces: Tuple[str, ...] = DEFAULT_MARKETPLACES
    offer_type_labels: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_OFFER_TYPE_LABELS))
    marketplace_policy: MarketplacePolicy = field(default_factory=MarketplacePolicy)
    alert_thresholds: AlertThresholds = field(default_factory=AlertThresholds)
    chart_size: int = 6
    chart_name_width: int = 15
    table_size: int = 10
    trend_max_days: int = 14
    trend_seed: Optional[int] = None

    def label_for(self, offer_type: str) -> str:
        return self.offer_type_labels.get(offer_type, offer_type)


@dataclass(slots=True)
class ReportSettings:
    """Execution parameters for the batch offer report."""

    offers_path: Path
    products_path: Optional[Path] = None
    output_dir: Path = Path("reports")
    marketplace_filter: Tuple[str, ...] = ()
    sort_by: str = "revenue"
    trend_days: int = 30
    include_visuals: bool = True

    def resolve_paths(self) -> None:
        self.offers_path = self.offers_path.expanduser().resolve()
        if self.products_path is not None:
            self.products_path = self.products_path.expanduser().resolve()
        self.output_dir = self.output_dir.expanduser().resolve()

    def ensure_output_tree(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        (self.output_dir / "figures").mkdir(exist_ok=True)


def validate_sort_key(sort_by: str) -> str:
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unsupported sort key {sort_by!r}; expected one of {list(SORT_KEYS)}")
    return sort_by


def validate_marketplace_filter(selected: Tuple[str, ...] | List[str], catalog: Tuple[str, ...]) -> Tuple[str, ...]:
    unknown = [mp for mp in selected if mp not in catalog]
    if unknown:
        raise ValueError(f"Marketplaces not in catalog: {unknown}")
    return tuple(dict.fromkeys(selected))


def engine_settings_from_dict(payload: MutableMapping[str, object]) -> EngineSettings:
    """Create :class:`EngineSettings` from a parsed JSON payload."""

    if not isinstance(payload, MutableMapping):
        raise ValueError("Engine configuration must be a JSON object")

    kwargs: Dict[str, object] = {}

    marketplaces = payload.get("marketplaces")
    if marketplaces is not None:
        if not isinstance(marketplaces, list) or not marketplaces:
            raise ValueError("`marketplaces` must be a non-empty list")
        kwargs["marketplaces"] = tuple(str(mp) for mp in marketplaces)

    labels = payload.get("offer_type_labels")
    if isinstance(labels, MutableMapping):
        merged = dict(DEFAULT_OFFER_TYPE_LABELS)
        merged.update({str(k): str(v) for k, v in labels.items()})
        kwargs["offer_type_labels"] = merged

    policy_payload = payload.get("marketplace_policy")
    if isinstance(policy_payload, MutableMapping):
        policy_kwargs = {
            key: policy_payload[key]
            for key in MarketplacePolicy.__dataclass_fields__.keys()
            if key in policy_payload
        }
        kwargs["marketplace_policy"] = MarketplacePolicy(**policy_kwargs)

    thresholds_payload = payload.get("alert_thresholds")
    if isinstance(thresholds_payload, MutableMapping):
        threshold_kwargs = {
            key: thresholds_payload[key]
            for key in AlertThresholds.__dataclass_fields__.keys()
            if key in thresholds_payload
        }
        kwargs["alert_thresholds"] = AlertThresholds(**threshold_kwargs)

    for key in ("chart_size", "chart_name_width", "table_size", "trend_max_days"):
        if key in payload:
            kwargs[key] = int(payload[key])  # type: ignore[arg-type]
    if payload.get("trend_seed") is not None:
        kwargs["trend_seed"] = int(payload["trend_seed"])  # type: ignore[arg-type]

    return EngineSettings(**kwargs)  # type: ignore[arg-type]


def load_engine_settings(config_path: Path | None = None) -> EngineSettings:
    """Read engine settings from JSON, or return defaults when no file is given."""

    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return EngineSettings()
        config_path = DEFAULT_CONFIG_PATH
    path = config_path.resolve()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    payload = json.loads(path.read_text(encoding="utf-8"))
    engine_payload = payload.get("engine", payload) if isinstance(payload, MutableMapping) else payload
    return engine_settings_from_dict(engine_payload)


def settings_from_dict(
    payload: MutableMapping[str, object],
    *,
    base_path: Path | None = None,
) -> Tuple[ReportSettings, EngineSettings]:
    """Create report and engine settings from a single config payload."""

    if not isinstance(payload, MutableMapping):
        raise ValueError("Configuration payload must be a JSON object")

    base = base_path or Path.cwd()

    engine_payload = payload.get("engine", {})
    engine = engine_settings_from_dict(engine_payload if isinstance(engine_payload, MutableMapping) else {})

    offers_value = payload.get("offers_path")
    if not offers_value:
        raise ValueError("`offers_path` is required in the configuration payload")
    products_value = payload.get("products_path")
    output_value = payload.get("output_dir")

    raw_filter = payload.get("marketplace_filter") or []
    if not isinstance(raw_filter, list):
        raise ValueError("`marketplace_filter` must be a list of marketplace names")

    report = ReportSettings(
        offers_path=Path(str(offers_value)),
        products_path=Path(str(products_value)) if products_value else None,
        output_dir=Path(str(output_value)) if output_value else Path("reports"),
        marketplace_filter=validate_marketplace_filter([str(mp) for mp in raw_filter], engine.marketplaces),
        sort_by=validate_sort_key(str(payload.get("sort_by", "revenue"))),
        trend_days=int(payload.get("trend_days", 30)),  # type: ignore[arg-type]
        include_visuals=bool(payload.get("include_visuals", True)),
    )

    if not report.offers_path.is_absolute():
        report.offers_path = base / report.offers_path
    if report.products_path is not None and not report.products_path.is_absolute():
        report.products_path = base / report.products_path
    if not report.output_dir.is_absolute():
        report.output_dir = base / report.output_dir
    report.resolve_paths()
    return report, engine
