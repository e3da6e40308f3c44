"""
Tool: Preference Mutations
Purpose: Compute the new preference record for a user toggle

Usage:
    from cassius_notify.preferences.mutations import (
        toggle_type,
        toggle_category,
        set_digest,
        set_frequency,
        set_email_enabled,
        set_digest_time,
    )

Each operation returns a new PreferenceRecord; the input is never modified.
The caller persists the result with put_preferences.
"""

from dataclasses import replace

from cassius_notify.logging_config import get_logger
from cassius_notify.models import (
    Channel,
    DigestCadence,
    Frequency,
    NotificationType,
    PreferenceRecord,
    parse_digest_time,
)
from cassius_notify.preferences.catalog import NotificationCatalog
from cassius_notify.preferences.resolution import check_type_in_record

logger = get_logger(__name__)


def toggle_type(
    record: PreferenceRecord,
    notification_type: NotificationType,
    channel: Channel,
    enabled: bool,
) -> PreferenceRecord:
    """
    Enable or suppress one type on one channel.

    Idempotent. Leaves email_enabled and frequency untouched, so a type
    re-enabled under frequency NONE still resolves off.

    Raises:
        CategoryMismatchError: the type belongs to another category
    """
    check_type_in_record(notification_type, record)
    channel = Channel(channel)

    field_name = "disabled_types" if channel is Channel.IN_APP else "disabled_email_types"
    current: frozenset[str] = getattr(record, field_name)

    if enabled:
        updated = current - {notification_type.type}
    else:
        updated = current | {notification_type.type}

    logger.debug(
        "toggle_type",
        category=record.category.value,
        type=notification_type.type,
        channel=channel.value,
        enabled=enabled,
    )
    return replace(record, **{field_name: updated})


def toggle_category(
    record: PreferenceRecord,
    enabled: bool,
    catalog: NotificationCatalog,
) -> PreferenceRecord:
    """
    Switch every type of the category on or off for in-app delivery.

    Turning on clears disabled_types. Turning off suppresses every type of the
    category explicitly. Per-type email state is preserved either way.
    """
    if enabled:
        disabled: frozenset[str] = frozenset()
    else:
        disabled = catalog.type_ids_in(record.category)

    logger.debug("toggle_category", category=record.category.value, enabled=enabled)
    return replace(record, disabled_types=disabled)


def set_digest(
    record: PreferenceRecord,
    notification_type: NotificationType,
    cadence: DigestCadence | str,
) -> PreferenceRecord:
    """
    Attach a digest schedule to one type.

    Accepted even when the type's email is off; it only takes effect once
    email resolves on. DigestCadence.NONE removes the override.
    """
    check_type_in_record(notification_type, record)
    cadence = DigestCadence(cadence)

    cadences = dict(record.digest_cadences)
    if cadence is DigestCadence.NONE:
        cadences.pop(notification_type.type, None)
    else:
        cadences[notification_type.type] = cadence

    logger.debug(
        "set_digest",
        category=record.category.value,
        type=notification_type.type,
        cadence=cadence.value,
    )
    return replace(record, digest_cadences=cadences)


def set_frequency(record: PreferenceRecord, frequency: Frequency | str) -> PreferenceRecord:
    """Change the category cadence. NONE silences the whole category."""
    frequency = Frequency(frequency)
    logger.debug("set_frequency", category=record.category.value, frequency=frequency.value)
    return replace(record, frequency=frequency)


def set_email_enabled(record: PreferenceRecord, enabled: bool) -> PreferenceRecord:
    """Category-level email opt-in. Per-type email suppressions are kept."""
    logger.debug("set_email_enabled", category=record.category.value, enabled=bool(enabled))
    return replace(record, email_enabled=bool(enabled))


def set_digest_time(record: PreferenceRecord, digest_time: str) -> PreferenceRecord:
    """
    Set the hour at which a DIGEST category is summarized (e.g. '08:30').

    Raises:
        InvalidDigestTimeError: not a valid HH:MM string
    """
    normalized = parse_digest_time(digest_time).strftime("%H:%M")
    logger.debug("set_digest_time", category=record.category.value, digest_time=normalized)
    return replace(record, digest_time=normalized)
