"""Offer lifecycle classification from dates and the active flag."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from offer_analytics.offers import Offer

OfferStatus = Literal["scheduled", "just_created", "active", "ending_soon", "expired"]

LIVE_STATUSES = frozenset({"active", "ending_soon", "just_created"})

STATUS_LABELS = {
    "active": "Active",
    "scheduled": "Scheduled",
    "expired": "Expired",
    "ending_soon": "Ending Soon",
    "just_created": "Just Created",
}

JUST_CREATED_WINDOW = timedelta(hours=24)
ENDING_SOON_WINDOW = timedelta(hours=48)


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def classify_status(offer: Offer, now: Optional[datetime] = None) -> OfferStatus:
    """Lifecycle status at ``now``. A missing start or end date leaves that side open."""

    current = _now(now)

    if not offer.is_active:
        return "expired"
    if offer.start_date is not None and current < offer.start_date:
        return "scheduled"
    if offer.end_date is not None and current > offer.end_date:
        return "expired"

    if offer.created_at is not None and current - offer.created_at <= JUST_CREATED_WINDOW:
        return "just_created"

    if offer.end_date is not None and timedelta(0) < offer.end_date - current <= ENDING_SOON_WINDOW:
        return "ending_soon"

    return "active"


def days_remaining(offer: Offer, now: Optional[datetime] = None) -> int:
    if offer.end_date is None:
        return 0
    remaining = (offer.end_date - _now(now)).total_seconds() / 86400
    return max(0, math.ceil(remaining))


def is_live(status: str) -> bool:
    return status in LIVE_STATUSES
