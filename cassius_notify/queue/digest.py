"""
Tool: Digest Scheduling
Purpose: Compute when email digests go out and summarize their content

Usage:
    from cassius_notify.queue.digest import (
        next_digest_at,
        next_category_digest_at,
        is_category_digest_due,
        digest_period,
        create_digest_summary,
    )

Two schedules exist:
    - Per-type cadence: daily (evening) or weekly (Friday evening) slots
    - Category DIGEST frequency: once a day at the record's digest_time,
      checked by an hourly scheduler
"""

from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from cassius_notify.config_models import DigestScheduleConfig
from cassius_notify.models import (
    DigestCadence,
    Frequency,
    PendingNotification,
    PreferenceRecord,
    parse_digest_time,
)


PERIOD_LABELS = {
    DigestCadence.DAILY: "Quotidien",
    DigestCadence.WEEKLY: "Hebdomadaire",
}


def _localize(moment: datetime, tz: tzinfo) -> datetime:
    # Naive datetimes are taken as wall-clock time in the schedule timezone
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def _at(day: date, hour: int, minute: int, tz: tzinfo) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=tz)


def _next_time_of_day(local: datetime, slot: time, tz: tzinfo) -> datetime:
    candidate = _at(local.date(), slot.hour, slot.minute, tz)
    if candidate <= local:
        candidate = _at(local.date() + timedelta(days=1), slot.hour, slot.minute, tz)
    return candidate


def next_digest_at(
    cadence: DigestCadence,
    after: datetime,
    schedule: DigestScheduleConfig,
) -> datetime | None:
    """
    Next digest boundary strictly after `after`.

    Args:
        cadence: Per-type digest cadence
        after: Reference time (naive = schedule timezone)
        schedule: Digest schedule configuration

    Returns:
        Timezone-aware datetime, or None for DigestCadence.NONE
    """
    cadence = DigestCadence(cadence)
    if cadence is DigestCadence.NONE:
        return None

    tz = ZoneInfo(schedule.timezone)
    local = _localize(after, tz)

    if cadence is DigestCadence.DAILY:
        return _next_time_of_day(local, time(schedule.daily_hour), tz)

    days_ahead = (schedule.weekly_weekday - local.weekday()) % 7
    candidate = _at(local.date() + timedelta(days=days_ahead), schedule.weekly_hour, 0, tz)
    if candidate <= local:
        candidate = _at(candidate.date() + timedelta(days=7), schedule.weekly_hour, 0, tz)
    return candidate


def _category_slot(record: PreferenceRecord, schedule: DigestScheduleConfig) -> time:
    return parse_digest_time(record.digest_time or schedule.default_digest_time)


def next_category_digest_at(
    record: PreferenceRecord,
    after: datetime,
    schedule: DigestScheduleConfig,
) -> datetime:
    """Next occurrence of the record's daily digest_time after `after`."""
    tz = ZoneInfo(schedule.timezone)
    return _next_time_of_day(_localize(after, tz), _category_slot(record, schedule), tz)


def is_category_digest_due(
    record: PreferenceRecord,
    now: datetime,
    schedule: DigestScheduleConfig,
) -> bool:
    """
    Hourly scheduler check for a DIGEST category.

    Due when email is on and the digest hour is the current hour.
    """
    if record.frequency is not Frequency.DIGEST or not record.email_enabled:
        return False

    local = _localize(now, ZoneInfo(schedule.timezone))
    return _category_slot(record, schedule).hour == local.hour


def digest_period(
    cadence: DigestCadence,
    now: datetime,
    last_sent_at: datetime | None = None,
) -> tuple[datetime, datetime]:
    """
    Time window a digest covers.

    Starts at the last sent digest when there is one, otherwise one period
    (a day or a week) back.

    Raises:
        ValueError: cadence is NONE (immediate delivery has no period)
    """
    cadence = DigestCadence(cadence)
    if cadence is DigestCadence.NONE:
        raise ValueError("Immediate delivery has no digest period")

    if last_sent_at is not None:
        return last_sent_at, now

    span = timedelta(days=1) if cadence is DigestCadence.DAILY else timedelta(days=7)
    return now - span, now


def create_digest_summary(
    notifications: list[PendingNotification],
    cadence: DigestCadence = DigestCadence.DAILY,
) -> dict:
    """
    Summary of a digest batch.

    Args:
        notifications: Notifications in the batch
        cadence: Schedule the batch was collected under

    Returns:
        {
            "title": str,
            "body": str,
            "period_label": str,
            "count": int,
            "notification_ids": list[str],
            "severity": str,
        }
    """
    period_label = PERIOD_LABELS.get(DigestCadence(cadence), "Quotidien")

    if not notifications:
        return {
            "title": "Aucune notification",
            "body": "",
            "period_label": period_label,
            "count": 0,
            "notification_ids": [],
            "severity": "INFO",
        }

    ordered = sorted(notifications, key=lambda n: n.created_at)
    count = len(ordered)

    severities = {n.severity for n in ordered}
    if "CRITICAL" in severities:
        severity = "CRITICAL"
    elif "WARNING" in severities:
        severity = "WARNING"
    else:
        severity = "INFO"

    noun = "notification" if count == 1 else "notifications"
    title = f"Résumé {period_label.lower()} : {count} {noun}"

    preview_count = min(3, count)
    previews = []
    for n in ordered[:preview_count]:
        t = n.title
        if len(t) > 40:
            t = t[:37] + "..."
        previews.append(f"- {t}")

    body = "\n".join(previews)
    remaining = count - preview_count
    if remaining > 0:
        body += f"\n...et {remaining} de plus"

    return {
        "title": title,
        "body": body,
        "period_label": period_label,
        "count": count,
        "notification_ids": [n.id for n in ordered],
        "severity": severity,
    }
