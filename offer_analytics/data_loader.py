"""Utilities for loading offer and product snapshots from disk."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from offer_analytics.offers import Offer, Product, offers_from_records, products_from_records

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OfferSnapshot:
    """Offers plus the optional product catalog used to decorate product rows."""

    offers: List[Offer]
    catalog: Optional[Dict[str, Product]] = None

    @property
    def offer_ids(self) -> list[str]:
        return [offer.id for offer in self.offers]


_NON_ALNUM_PATTERN = re.compile(r"[^0-9a-zA-Z]+")

_PRODUCT_COLUMN_ALIASES = {
    "id": "id",
    "product_id": "id",
    "name": "name",
    "product_name": "name",
    "title": "name",
    "sku": "sku",
    "vendor_sku": "sku",
    "image": "image",
    "image_url": "image",
}


def _normalize_column_name(name: str) -> str:
    normalized = _NON_ALNUM_PATTERN.sub("_", name.strip().lower())
    return normalized.strip("_")


def _read_json(path: Path) -> object:
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def load_offers(path: str | Path) -> List[Offer]:
    """Read offers from a JSON list or an object with an ``offers`` key."""

    payload = _read_json(Path(path))
    records = payload.get("offers") if isinstance(payload, dict) else payload
    if not isinstance(records, list):
        raise ValueError(f"Expected a list of offers in {path}")
    offers = offers_from_records(records)
    logger.debug("Loaded %d offers from %s", len(offers), path)
    return offers


def load_products(path: str | Path) -> Dict[str, Product]:
    """Read a product catalog from JSON or CSV."""

    path = Path(path)
    if path.suffix.lower() == ".csv":
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        df = pd.read_csv(path, dtype=str).fillna("")
        renamed = {}
        for column in df.columns:
            normalized = _normalize_column_name(column)
            renamed[column] = _PRODUCT_COLUMN_ALIASES.get(normalized, normalized)
        df = df.rename(columns=renamed)
        if "id" not in df.columns:
            raise ValueError(f"Product catalog {path} has no id column")
        df = df.loc[:, ~df.columns.duplicated()]
        records = df.to_dict(orient="records")
    else:
        payload = _read_json(path)
        records = payload.get("products") if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise ValueError(f"Expected a list of products in {path}")

    catalog = products_from_records(records)
    logger.debug("Loaded %d products from %s", len(catalog), path)
    return catalog


def load_snapshot(offers_path: str | Path, products_path: str | Path | None = None) -> OfferSnapshot:
    offers = load_offers(offers_path)
    catalog = load_products(products_path) if products_path else None
    return OfferSnapshot(offers=offers, catalog=catalog)
