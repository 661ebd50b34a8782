from __future__ import annotations

from offer_analytics.alerts import ALERT_PRIORITY, compute_alerts
from offer_analytics.builders import build_all_offer_analytics, build_marketplace_rollups
from offer_analytics.config import AlertThresholds
from offer_analytics.summary import compute_summary
from tests.offer_test_utils import NOW, make_offer, make_row, make_summary


def test_low_conversion_fires_and_top_performer_does_not():
    offer = make_offer("offer-1", name="Summer Sale")
    row = make_row(offer, conversion_rate=0.0, impressions=1200, conversions=0)
    alerts = compute_alerts([row], make_summary(avg_conversion_rate=10.0, avg_roi=10.0))

    assert [alert.id for alert in alerts] == ["low-conv-offer-1"]
    alert = alerts[0]
    assert alert.type == "critical"
    assert alert.action == "review"
    assert alert.description == '"Summer Sale" has only 0.0% conversion rate (avg: 10.0%). Review offer terms.'
    assert alert.metric == "0.0% vs 10.0%"


def test_low_conversion_requires_impressions_over_threshold():
    row = make_row(make_offer("offer-1"), conversion_rate=1.0, impressions=1000)
    assert compute_alerts([row], make_summary(avg_conversion_rate=10.0)) == []


def test_negative_roi_rounds_to_whole_percent():
    offer = make_offer("offer-1", name="Clearance")
    row = make_row(offer, roi=-15.2)
    alerts = compute_alerts([row], make_summary(avg_conversion_rate=10.0, avg_roi=10.0))

    assert [alert.id for alert in alerts] == ["neg-roi-offer-1"]
    assert "-15%" in alerts[0].description
    assert alerts[0].metric == "-15% ROI"
    assert alerts[0].action == "adjust"
    assert alerts[0].action_label == "Adjust Discount"


def test_alert_text_rounds_halves_away_from_zero():
    offer = make_offer("offer-1", name="Clearance")
    row = make_row(offer, roi=-14.5, conversion_rate=2.25, impressions=6000)
    alerts = compute_alerts([row], make_summary(avg_conversion_rate=10.0, avg_roi=10.0))

    by_id = {alert.id: alert for alert in alerts}
    assert by_id["neg-roi-offer-1"].metric == "-15% ROI"
    assert by_id["low-conv-offer-1"].metric == "2.3% vs 10.0%"


def test_ending_soon_high_performer():
    offer = make_offer("offer-1", name="Flash Deal", end_days=1)
    row = make_row(offer, status="ending_soon", days_remaining=1, conversion_rate=13.0, roi=5.0)
    alerts = compute_alerts([row], make_summary(avg_conversion_rate=10.0, avg_roi=10.0))

    assert [alert.id for alert in alerts] == ["ending-high-offer-1"]
    assert alerts[0].type == "warning"
    assert alerts[0].action == "extend"
    assert alerts[0].description == (
        '"Flash Deal" has 13.0% conversion rate but ends in 1 day. Consider extending.'
    )


def test_top_performer_has_no_action():
    row = make_row(make_offer("offer-1", name="Hero"), conversion_rate=16.0, roi=20.0)
    alerts = compute_alerts([row], make_summary(avg_conversion_rate=10.0, avg_roi=10.0))

    assert [alert.id for alert in alerts] == ["top-offer-1"]
    assert alerts[0].type == "success"
    assert alerts[0].action is None
    assert alerts[0].action_label == "View"
    assert alerts[0].description == '"Hero" is outperforming with 16.0% conversion and 20% ROI.'


def test_low_visibility():
    row = make_row(make_offer("offer-1", name="Quiet"), impressions=300, days_remaining=3)
    alerts = compute_alerts([row], make_summary(avg_conversion_rate=10.0, avg_roi=100.0))

    assert [alert.id for alert in alerts] == ["low-imp-offer-1"]
    assert alerts[0].type == "info"
    assert alerts[0].metric == "300 views"
    assert alerts[0].action == "promote"


def test_non_live_offers_are_skipped():
    row = make_row(make_offer("offer-1"), status="expired", roi=-50.0)
    assert compute_alerts([row], make_summary()) == []


def test_alerts_sorted_by_severity_with_stable_ties():
    summary = make_summary(avg_conversion_rate=10.0, avg_roi=10.0)
    rows = [
        make_row(make_offer("a"), conversion_rate=16.0, roi=20.0),
        make_row(make_offer("b"), impressions=300, days_remaining=2, conversion_rate=10.0),
        make_row(make_offer("c"), status="ending_soon", days_remaining=1, conversion_rate=13.0),
        make_row(make_offer("d"), conversion_rate=2.0, roi=-5.0),
        make_row(make_offer("e"), roi=-1.0),
    ]
    alerts = compute_alerts(rows, summary)

    assert [alert.id for alert in alerts] == [
        "low-conv-d",
        "neg-roi-d",
        "neg-roi-e",
        "ending-high-c",
        "low-imp-b",
        "top-a",
    ]
    priorities = [ALERT_PRIORITY[alert.type] for alert in alerts]
    assert priorities == sorted(priorities)


def test_custom_thresholds():
    row = make_row(make_offer("offer-1"), conversion_rate=7.0, impressions=5000)
    summary = make_summary(avg_conversion_rate=10.0)

    assert compute_alerts([row], summary) == []
    tight = AlertThresholds(low_conversion_multiplier=0.8)
    assert [alert.id for alert in compute_alerts([row], summary, tight)] == ["low-conv-offer-1"]


def test_alerts_are_idempotent(offers, engine_settings):
    def _cycle():
        analytics = build_all_offer_analytics(offers, now=NOW)
        rollups = build_marketplace_rollups(offers, engine_settings)
        summary = compute_summary(analytics, rollups, [], engine_settings)
        return [alert.id for alert in compute_alerts(analytics, summary)]

    first = _cycle()
    assert first == _cycle()
    assert len(first) == len(set(first))
