"""
Tool: Delivery Planning
Purpose: Decide, per pending notification, in-app push and email timing

Usage:
    from cassius_notify.queue.dispatcher import (
        plan_delivery,
        dispatch_pending,
        DigestBuffer,
    )

The dispatcher reads preferences and never writes them. It returns plans
and digest batches; pushing items and sending emails is left to the caller.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo

from cassius_notify.config_models import DigestScheduleConfig
from cassius_notify.logging_config import get_logger
from cassius_notify.models import (
    Category,
    DigestCadence,
    Frequency,
    PendingNotification,
    PreferenceRecord,
)
from cassius_notify.preferences.catalog import NotificationCatalog
from cassius_notify.preferences.resolution import effective_digest_cadence, resolve_delivery
from cassius_notify.queue.digest import (
    create_digest_summary,
    next_category_digest_at,
    next_digest_at,
)

logger = get_logger(__name__)


class EmailMode(str, Enum):
    """How the email channel handles one notification."""

    NONE = "none"
    IMMEDIATE = "immediate"
    DIGEST = "digest"


@dataclass(frozen=True)
class DeliveryPlan:
    """Dispatcher decision for one notification."""

    notification_id: str
    type: str
    in_app: bool
    email_mode: EmailMode
    send_email_at: datetime | None = None
    cadence: DigestCadence = DigestCadence.NONE

    @property
    def suppressed(self) -> bool:
        return not self.in_app and self.email_mode is EmailMode.NONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "notification_id": self.notification_id,
            "type": self.type,
            "in_app": self.in_app,
            "email_mode": self.email_mode.value,
            "send_email_at": self.send_email_at.isoformat() if self.send_email_at else None,
            "cadence": self.cadence.value,
        }


def plan_delivery(
    notification: PendingNotification,
    record: PreferenceRecord | None,
    catalog: NotificationCatalog,
    now: datetime,
    schedule: DigestScheduleConfig,
) -> DeliveryPlan:
    """
    Plan delivery of one notification.

    Email goes out immediately unless a digest applies: a per-type cadence
    wins over the category DIGEST frequency. Neither applies when email
    resolves off.

    Args:
        notification: The pending notification
        record: Recipient's record for the type's category (None = defaults)
        catalog: Notification catalog
        now: Current time
        schedule: Digest schedule configuration

    Raises:
        UnknownNotificationTypeError: notification.type is not in the catalog
    """
    notification_type = catalog.get(notification.type)
    if record is None:
        record = PreferenceRecord.default(notification_type.category)

    decision = resolve_delivery(notification_type, record)

    email_mode = EmailMode.NONE
    send_at = None
    cadence = DigestCadence.NONE

    if decision.email:
        cadence = effective_digest_cadence(notification_type, record)
        if cadence is not DigestCadence.NONE:
            email_mode = EmailMode.DIGEST
            send_at = next_digest_at(cadence, now, schedule)
        elif record.frequency is Frequency.DIGEST:
            email_mode = EmailMode.DIGEST
            cadence = DigestCadence.DAILY
            send_at = next_category_digest_at(record, now, schedule)
        else:
            email_mode = EmailMode.IMMEDIATE

    return DeliveryPlan(
        notification_id=notification.id,
        type=notification.type,
        in_app=decision.in_app,
        email_mode=email_mode,
        send_email_at=send_at,
        cadence=cadence,
    )


@dataclass
class DigestBatch:
    """Notifications of one user flushed together at one boundary."""

    user_id: str
    send_at: datetime
    cadence: DigestCadence
    notifications: list[PendingNotification] = field(default_factory=list)

    def summary(self) -> dict:
        return create_digest_summary(self.notifications, self.cadence)


class DigestBuffer:
    """
    In-memory accumulator of digest-planned notifications.

    Keyed by (user, boundary, cadence): notifications of one user that fall
    due at the same boundary leave in one batch.
    """

    def __init__(self, schedule: DigestScheduleConfig):
        self._tz = ZoneInfo(schedule.timezone)
        self._pending: dict[tuple[str, datetime, DigestCadence], list[PendingNotification]] = {}

    def add(self, notification: PendingNotification, plan: DeliveryPlan) -> None:
        if plan.email_mode is not EmailMode.DIGEST or plan.send_email_at is None:
            raise ValueError(f"Notification {notification.id} is not planned for a digest")

        key = (notification.user_id, plan.send_email_at, plan.cadence)
        self._pending.setdefault(key, []).append(notification)

    def pending_count(self, user_id: str | None = None) -> int:
        return sum(
            len(items)
            for (owner, _, _), items in self._pending.items()
            if user_id is None or owner == user_id
        )

    def flush_due(self, now: datetime) -> list[DigestBatch]:
        """
        Remove and return every batch whose boundary is at or before `now`.

        Returns:
            Batches ordered by boundary, then user
        """
        if now.tzinfo is None:
            now = now.replace(tzinfo=self._tz)

        due_keys = sorted(
            (key for key in self._pending if key[1] <= now),
            key=lambda k: (k[1], k[0]),
        )

        batches = []
        for key in due_keys:
            user_id, send_at, cadence = key
            batches.append(DigestBatch(
                user_id=user_id,
                send_at=send_at,
                cadence=cadence,
                notifications=self._pending.pop(key),
            ))

        if batches:
            logger.info(
                "digest_flush",
                batches=len(batches),
                notifications=sum(len(b.notifications) for b in batches),
            )
        return batches


def dispatch_pending(
    notifications: Iterable[PendingNotification],
    records: Mapping[tuple[str, Category], PreferenceRecord],
    catalog: NotificationCatalog,
    buffer: DigestBuffer,
    now: datetime,
    schedule: DigestScheduleConfig,
) -> dict:
    """
    Plan a batch of pending notifications and queue digest emails.

    Args:
        notifications: Pending notification instances
        records: (user_id, category) -> record; missing pairs use defaults
        catalog: Notification catalog
        buffer: Digest buffer receiving digest-planned notifications
        now: Current time
        schedule: Digest schedule configuration

    Returns:
        {
            "in_app": list[str],           # notification ids to push
            "email_immediate": list[str],  # notification ids to email now
            "digested": int,
            "suppressed": int,
            "plans": list[DeliveryPlan],
        }
    """
    results: dict[str, Any] = {
        "in_app": [],
        "email_immediate": [],
        "digested": 0,
        "suppressed": 0,
        "plans": [],
    }

    for notification in notifications:
        category = catalog.get(notification.type).category
        record = records.get((notification.user_id, category))
        plan = plan_delivery(notification, record, catalog, now, schedule)
        results["plans"].append(plan)

        if plan.suppressed:
            results["suppressed"] += 1
            logger.debug(
                "notification_suppressed",
                notification_id=notification.id,
                user_id=notification.user_id,
                type=notification.type,
            )
            continue

        if plan.in_app:
            results["in_app"].append(notification.id)

        if plan.email_mode is EmailMode.IMMEDIATE:
            results["email_immediate"].append(notification.id)
        elif plan.email_mode is EmailMode.DIGEST:
            buffer.add(notification, plan)
            results["digested"] += 1

    logger.info(
        "dispatch_complete",
        in_app=len(results["in_app"]),
        email_immediate=len(results["email_immediate"]),
        digested=results["digested"],
        suppressed=results["suppressed"],
    )
    return results
