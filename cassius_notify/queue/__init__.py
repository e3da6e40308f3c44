"""Digest scheduling and delivery planning for the notification dispatcher."""

from cassius_notify.queue.digest import (
    create_digest_summary,
    digest_period,
    is_category_digest_due,
    next_category_digest_at,
    next_digest_at,
)
from cassius_notify.queue.dispatcher import (
    DeliveryPlan,
    DigestBatch,
    DigestBuffer,
    EmailMode,
    dispatch_pending,
    plan_delivery,
)

__all__ = [
    "create_digest_summary",
    "digest_period",
    "is_category_digest_due",
    "next_category_digest_at",
    "next_digest_at",
    "DeliveryPlan",
    "DigestBatch",
    "DigestBuffer",
    "EmailMode",
    "dispatch_pending",
    "plan_delivery",
]
