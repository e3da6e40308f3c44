"""
Tool: Preference Resolution
Purpose: Derive effective delivery per notification type and per category

Usage:
    from cassius_notify.preferences.resolution import (
        resolve_delivery,
        resolve_type,
        aggregate_state,
        channel_state,
        summarize,
    )

Everything here is a pure function of its arguments: no I/O, no logging,
no shared state. A missing record means the default record.
"""

from typing import Any

from cassius_notify.models import (
    AggregateState,
    Category,
    CategoryMismatchError,
    Channel,
    DeliveryDecision,
    DigestCadence,
    Frequency,
    NotificationType,
    PreferenceError,
    PreferenceRecord,
)
from cassius_notify.preferences.catalog import NotificationCatalog


def _record_for(category: Category, record: PreferenceRecord | None) -> PreferenceRecord:
    if record is None:
        return PreferenceRecord.default(category)
    if record.category != category:
        raise CategoryMismatchError(None, expected=Category(category), actual=record.category)
    return record


def check_type_in_record(notification_type: NotificationType, record: PreferenceRecord) -> None:
    """Reject a type that does not belong to the record's category."""
    if notification_type.category != record.category:
        raise CategoryMismatchError(
            notification_type.type,
            expected=record.category,
            actual=notification_type.category,
        )


def validate_record(record: PreferenceRecord, catalog: NotificationCatalog) -> None:
    """
    Check that a record only references types of its own category.

    Raises:
        UnknownNotificationTypeError: a referenced type is not in the catalog
        CategoryMismatchError: a referenced type belongs to another category
        PreferenceError: malformed digest cadence
    """
    for type_id in sorted(record.referenced_types()):
        check_type_in_record(catalog.get(type_id), record)

    for type_id, cadence in record.digest_cadences.items():
        if not isinstance(cadence, DigestCadence):
            raise PreferenceError(f"Invalid digest cadence for {type_id}: {cadence!r}")


def resolve_delivery(
    notification_type: NotificationType,
    record: PreferenceRecord | None = None,
) -> DeliveryDecision:
    """
    Effective in-app and email delivery for one notification type.

    Frequency NONE forces both channels off whatever the per-type sets say.

    Args:
        notification_type: Catalog entry
        record: Preferences of the type's category, or None for defaults

    Returns:
        DeliveryDecision(in_app, email)
    """
    record = _record_for(notification_type.category, record)
    check_type_in_record(notification_type, record)

    if record.frequency is Frequency.NONE:
        return DeliveryDecision(in_app=False, email=False)

    type_id = notification_type.type
    return DeliveryDecision(
        in_app=type_id not in record.disabled_types,
        email=record.email_enabled and type_id not in record.disabled_email_types,
    )


def resolve_type(
    catalog: NotificationCatalog,
    type_id: str,
    record: PreferenceRecord | None = None,
) -> DeliveryDecision:
    """Look up a type identifier, then resolve it. Unknown ids raise."""
    return resolve_delivery(catalog.get(type_id), record)


def effective_digest_cadence(
    notification_type: NotificationType,
    record: PreferenceRecord | None = None,
) -> DigestCadence:
    """Digest schedule that actually applies: none unless email resolves on."""
    record = _record_for(notification_type.category, record)
    if not resolve_delivery(notification_type, record).email:
        return DigestCadence.NONE
    return record.digest_cadence(notification_type.type)


def category_in_app_enabled(record: PreferenceRecord, catalog: NotificationCatalog) -> bool:
    """Category master flag: off only when every type is suppressed in-app."""
    type_ids = catalog.type_ids_in(record.category)
    return bool(type_ids) and not type_ids <= record.disabled_types


def _tri_state(flags: list[bool]) -> AggregateState:
    # An empty category has nothing to switch on
    if flags and all(flags):
        return AggregateState.FULL
    if any(flags):
        return AggregateState.PARTIAL
    return AggregateState.NONE


def aggregate_state(
    category: Category | str,
    record: PreferenceRecord | None,
    catalog: NotificationCatalog,
) -> AggregateState:
    """
    Tri-state of the category switch.

    A type counts as on when either channel resolves on. Always derived,
    never stored.
    """
    category = Category(category)
    record = _record_for(category, record)
    return _tri_state([
        resolve_delivery(t, record).any for t in catalog.types_in(category)
    ])


def channel_state(
    category: Category | str,
    record: PreferenceRecord | None,
    catalog: NotificationCatalog,
    channel: Channel,
) -> AggregateState:
    """Tri-state of a single channel column within a category."""
    category = Category(category)
    record = _record_for(category, record)
    flags = []
    for notification_type in catalog.types_in(category):
        decision = resolve_delivery(notification_type, record)
        flags.append(decision.in_app if channel is Channel.IN_APP else decision.email)
    return _tri_state(flags)


def summarize(record: PreferenceRecord, catalog: NotificationCatalog) -> dict[str, Any]:
    """
    Settings-screen view of one category.

    Returns:
        {
            "category": str,
            "frequency": str,
            "in_app_enabled": bool,
            "email_enabled": bool,
            "state": str,
            "types": [{"type", "label", "description", "in_app", "email", "digest"}],
        }
    """
    rows = []
    for notification_type in catalog.types_in(record.category):
        decision = resolve_delivery(notification_type, record)
        rows.append({
            "type": notification_type.type,
            "label": notification_type.label,
            "description": notification_type.description,
            **decision.to_dict(),
            "digest": record.digest_cadence(notification_type.type).value,
        })

    return {
        "category": record.category.value,
        "frequency": record.frequency.value,
        "in_app_enabled": category_in_app_enabled(record, catalog),
        "email_enabled": record.email_enabled,
        "state": aggregate_state(record.category, record, catalog).value,
        "types": rows,
    }
