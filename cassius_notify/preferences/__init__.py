"""Notification type catalog, preference resolution, mutations and storage."""

from cassius_notify.preferences.catalog import (
    DEFAULT_NOTIFICATION_TYPES,
    NotificationCatalog,
    default_catalog,
    load_catalog,
)
from cassius_notify.preferences.resolution import (
    aggregate_state,
    category_in_app_enabled,
    channel_state,
    effective_digest_cadence,
    resolve_delivery,
    resolve_type,
    summarize,
    validate_record,
)
from cassius_notify.preferences.mutations import (
    set_digest,
    set_digest_time,
    set_email_enabled,
    set_frequency,
    toggle_category,
    toggle_type,
)
from cassius_notify.preferences.store import (
    delete_preferences,
    get_preferences,
    list_preferences,
    put_preferences,
    update_preferences,
)

__all__ = [
    "DEFAULT_NOTIFICATION_TYPES",
    "NotificationCatalog",
    "default_catalog",
    "load_catalog",
    "aggregate_state",
    "category_in_app_enabled",
    "channel_state",
    "effective_digest_cadence",
    "resolve_delivery",
    "resolve_type",
    "summarize",
    "validate_record",
    "set_digest",
    "set_digest_time",
    "set_email_enabled",
    "set_frequency",
    "toggle_category",
    "toggle_type",
    "delete_preferences",
    "get_preferences",
    "list_preferences",
    "put_preferences",
    "update_preferences",
]
