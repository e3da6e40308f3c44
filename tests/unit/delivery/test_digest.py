"""Tests for cassius_notify/queue/digest.py

Digest boundaries are evaluated in the schedule timezone (Europe/Paris).
Reference time is Monday 2026-10-19 12:00.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from cassius_notify.config_models import DigestScheduleConfig
from cassius_notify.models import DigestCadence, Frequency, PendingNotification
from cassius_notify.queue.digest import (
    create_digest_summary,
    digest_period,
    is_category_digest_due,
    next_category_digest_at,
    next_digest_at,
)

PARIS = ZoneInfo("Europe/Paris")


def _notification(n: int, title: str = "Import terminé", severity: str = "INFO", minutes: int = 0):
    return PendingNotification(
        id=f"notif_{n:03d}",
        user_id="test_user_123",
        type="IMPORT_COMPLETED",
        title=title,
        severity=severity,
        created_at=datetime(2026, 10, 19, 9, 0) + timedelta(minutes=minutes),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Boundaries
# ─────────────────────────────────────────────────────────────────────────────


class TestNextDigestAt:
    """Tests for per-type digest boundaries."""

    def test_daily_same_evening(self, schedule, monday_noon):
        assert next_digest_at(DigestCadence.DAILY, monday_noon, schedule) == datetime(
            2026, 10, 19, 19, 0, tzinfo=PARIS
        )

    def test_daily_rolls_to_next_day(self, schedule):
        after = datetime(2026, 10, 19, 19, 0)

        assert next_digest_at(DigestCadence.DAILY, after, schedule) == datetime(
            2026, 10, 20, 19, 0, tzinfo=PARIS
        )

    def test_weekly_is_friday_evening(self, schedule, monday_noon):
        assert next_digest_at(DigestCadence.WEEKLY, monday_noon, schedule) == datetime(
            2026, 10, 23, 19, 0, tzinfo=PARIS
        )

    def test_weekly_after_friday_slot_rolls_a_week(self, schedule):
        after = datetime(2026, 10, 23, 19, 0)

        assert next_digest_at("weekly", after, schedule) == datetime(
            2026, 10, 30, 19, 0, tzinfo=PARIS
        )

    def test_friday_morning_is_same_day(self, schedule):
        after = datetime(2026, 10, 23, 8, 0)

        assert next_digest_at(DigestCadence.WEEKLY, after, schedule) == datetime(
            2026, 10, 23, 19, 0, tzinfo=PARIS
        )

    def test_none_has_no_boundary(self, schedule, monday_noon):
        assert next_digest_at(DigestCadence.NONE, monday_noon, schedule) is None

    def test_aware_input_is_converted(self, schedule):
        """10:00 UTC is 12:00 in Paris (summer time)."""
        after = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)

        result = next_digest_at(DigestCadence.DAILY, after, schedule)

        assert result == datetime(2026, 10, 19, 19, 0, tzinfo=PARIS)

    def test_configured_slot(self, monday_noon):
        schedule = DigestScheduleConfig(daily_hour=7, weekly_weekday=0, weekly_hour=9)

        assert next_digest_at(DigestCadence.DAILY, monday_noon, schedule) == datetime(
            2026, 10, 20, 7, 0, tzinfo=PARIS
        )
        assert next_digest_at(DigestCadence.WEEKLY, monday_noon, schedule) == datetime(
            2026, 10, 26, 9, 0, tzinfo=PARIS
        )

    @pytest.mark.parametrize("cadence", [DigestCadence.DAILY, DigestCadence.WEEKLY])
    def test_strictly_after(self, schedule, monday_noon, cadence):
        assert next_digest_at(cadence, monday_noon, schedule) > monday_noon.replace(tzinfo=PARIS)


class TestCategoryDigest:
    """Tests for the category DIGEST frequency schedule."""

    def test_next_uses_digest_time(self, schedule, alerts_record, monday_noon):
        assert next_category_digest_at(alerts_record, monday_noon, schedule) == datetime(
            2026, 10, 20, 8, 30, tzinfo=PARIS
        )

    def test_next_same_day_when_before_slot(self, schedule, alerts_record):
        record = replace(alerts_record, digest_time="18:00")

        assert next_category_digest_at(record, datetime(2026, 10, 19, 12, 0), schedule) == datetime(
            2026, 10, 19, 18, 0, tzinfo=PARIS
        )

    def test_record_without_time_uses_schedule_default(self, alerts_record):
        schedule = DigestScheduleConfig(default_digest_time="10:00")
        record = replace(alerts_record, frequency=Frequency.DIGEST, email_enabled=True)

        assert next_category_digest_at(record, datetime(2026, 10, 19, 6, 0), schedule) == datetime(
            2026, 10, 19, 10, 0, tzinfo=PARIS
        )
        assert is_category_digest_due(record, datetime(2026, 10, 19, 10, 15), schedule) is True
        assert is_category_digest_due(record, datetime(2026, 10, 19, 8, 30), schedule) is False

    def test_record_time_wins_over_schedule_default(self, alerts_record):
        schedule = DigestScheduleConfig(default_digest_time="10:00")
        record = replace(alerts_record, digest_time="07:15")

        assert next_category_digest_at(record, datetime(2026, 10, 19, 6, 0), schedule) == datetime(
            2026, 10, 19, 7, 15, tzinfo=PARIS
        )

    def test_due_during_digest_hour(self, schedule, alerts_record):
        record = replace(alerts_record, frequency=Frequency.DIGEST, email_enabled=True)

        assert is_category_digest_due(record, datetime(2026, 10, 19, 8, 45), schedule) is True
        assert is_category_digest_due(record, datetime(2026, 10, 19, 9, 0), schedule) is False

    def test_not_due_without_email(self, schedule, alerts_record):
        record = replace(alerts_record, frequency=Frequency.DIGEST)

        assert is_category_digest_due(record, datetime(2026, 10, 19, 8, 30), schedule) is False

    def test_not_due_when_immediate(self, schedule, alerts_record):
        record = replace(alerts_record, email_enabled=True)

        assert is_category_digest_due(record, datetime(2026, 10, 19, 8, 30), schedule) is False


class TestDigestPeriod:
    """Tests for digest_period."""

    def test_daily_without_history(self, monday_noon):
        assert digest_period(DigestCadence.DAILY, monday_noon) == (
            monday_noon - timedelta(days=1),
            monday_noon,
        )

    def test_weekly_without_history(self, monday_noon):
        start, end = digest_period(DigestCadence.WEEKLY, monday_noon)

        assert end - start == timedelta(days=7)

    def test_starts_at_last_sent(self, monday_noon):
        last = datetime(2026, 10, 18, 19, 0)

        assert digest_period(DigestCadence.DAILY, monday_noon, last) == (last, monday_noon)

    def test_none_raises(self, monday_noon):
        with pytest.raises(ValueError):
            digest_period(DigestCadence.NONE, monday_noon)


# ─────────────────────────────────────────────────────────────────────────────
# Summary
# ─────────────────────────────────────────────────────────────────────────────


class TestCreateDigestSummary:
    """Tests for create_digest_summary."""

    def test_empty(self):
        summary = create_digest_summary([])

        assert summary["title"] == "Aucune notification"
        assert summary["count"] == 0
        assert summary["notification_ids"] == []

    def test_single(self):
        summary = create_digest_summary([_notification(1)], DigestCadence.WEEKLY)

        assert summary["title"] == "Résumé hebdomadaire : 1 notification"
        assert summary["period_label"] == "Hebdomadaire"
        assert summary["body"] == "- Import terminé"

    def test_previews_three_and_counts_rest(self):
        notifications = [_notification(n, title=f"Import {n}", minutes=n) for n in range(5)]

        summary = create_digest_summary(notifications)

        assert summary["title"] == "Résumé quotidien : 5 notifications"
        assert summary["body"] == "- Import 0\n- Import 1\n- Import 2\n...et 2 de plus"

    def test_orders_by_creation(self):
        late = _notification(1, minutes=30)
        early = _notification(2, minutes=5)

        summary = create_digest_summary([late, early])

        assert summary["notification_ids"] == ["notif_002", "notif_001"]

    def test_truncates_long_titles(self):
        summary = create_digest_summary([_notification(1, title="x" * 50)])

        assert summary["body"] == "- " + "x" * 37 + "..."

    @pytest.mark.parametrize("severities, expected", [
        (["INFO", "INFO"], "INFO"),
        (["INFO", "WARNING"], "WARNING"),
        (["WARNING", "CRITICAL", "INFO"], "CRITICAL"),
    ])
    def test_highest_severity(self, severities, expected):
        notifications = [
            _notification(n, severity=severity, minutes=n)
            for n, severity in enumerate(severities)
        ]

        assert create_digest_summary(notifications)["severity"] == expected
