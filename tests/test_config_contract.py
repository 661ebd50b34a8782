from __future__ import annotations

import json
from pathlib import Path

import pytest

from offer_analytics.config import (
    DEFAULT_MARKETPLACES,
    EngineSettings,
    MarketplacePolicy,
    engine_settings_from_dict,
    load_engine_settings,
    settings_from_dict,
)


def test_default_engine_settings():
    settings = EngineSettings()

    assert settings.marketplaces == DEFAULT_MARKETPLACES
    assert len(settings.marketplaces) == 10
    assert settings.label_for("bogo_half") == "Buy 1 Get 1 50% Off"
    assert settings.label_for("unknown") == "unknown"
    assert settings.chart_size == 6
    assert settings.trend_seed is None


def test_marketplace_policy_purposes():
    policy = MarketplacePolicy()
    catalog = DEFAULT_MARKETPLACES

    assert policy.defaults_for((), catalog, "filter") == ("Amazon", "Walmart", "eBay")
    assert policy.defaults_for((), catalog, "rollup") == ()
    assert policy.defaults_for(("Etsy",), catalog, "rollup") == ("Etsy",)
    assert MarketplacePolicy(fallback_count=1, apply_to_rollup=True).defaults_for((), catalog, "rollup") == ("Amazon",)


def test_engine_settings_from_dict_overrides():
    settings = engine_settings_from_dict(
        {
            "marketplaces": ["Amazon", "eBay"],
            "offer_type_labels": {"free_shipping": "Ships Free"},
            "marketplace_policy": {"fallback_count": 1},
            "alert_thresholds": {"low_conversion_min_impressions": 250},
            "chart_size": 4,
            "trend_seed": 11,
        }
    )

    assert settings.marketplaces == ("Amazon", "eBay")
    assert settings.label_for("free_shipping") == "Ships Free"
    assert settings.label_for("percent_discount") == "% Discount"
    assert settings.marketplace_policy.fallback_count == 1
    assert settings.alert_thresholds.low_conversion_min_impressions == 250
    assert settings.alert_thresholds.low_conversion_multiplier == 0.5
    assert settings.chart_size == 4
    assert settings.trend_seed == 11


def test_engine_settings_reject_empty_catalog():
    with pytest.raises(ValueError):
        engine_settings_from_dict({"marketplaces": []})


def test_settings_from_dict_resolves_relative_paths(tmp_path: Path):
    report, engine = settings_from_dict(
        {
            "offers_path": "data/offers.json",
            "products_path": "data/products.csv",
            "output_dir": "out",
            "marketplace_filter": ["Amazon"],
            "sort_by": "roi",
            "trend_days": 7,
            "include_visuals": False,
        },
        base_path=tmp_path,
    )

    assert report.offers_path == (tmp_path / "data" / "offers.json").resolve()
    assert report.products_path == (tmp_path / "data" / "products.csv").resolve()
    assert report.output_dir == (tmp_path / "out").resolve()
    assert report.marketplace_filter == ("Amazon",)
    assert report.sort_by == "roi"
    assert report.include_visuals is False
    assert engine == EngineSettings()


@pytest.mark.parametrize(
    "payload, message",
    [
        ({}, "offers_path"),
        ({"offers_path": "o.json", "sort_by": "clicks"}, "sort key"),
        ({"offers_path": "o.json", "marketplace_filter": ["Nowhere"]}, "not in catalog"),
    ],
)
def test_settings_from_dict_validation(payload, message):
    with pytest.raises(ValueError, match=message):
        settings_from_dict(payload)


def test_load_engine_settings_from_file(tmp_path: Path):
    path = tmp_path / "engine.json"
    path.write_text(json.dumps({"engine": {"table_size": 5}}), encoding="utf-8")

    assert load_engine_settings(path).table_size == 5

    with pytest.raises(FileNotFoundError):
        load_engine_settings(tmp_path / "missing.json")


def test_bundled_config_loads():
    settings = load_engine_settings()
    assert settings.marketplaces == DEFAULT_MARKETPLACES
