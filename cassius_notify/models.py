"""
Tool: Notification Preference Models
Purpose: Data structures for notification types and preference records

Usage:
    from cassius_notify.models import (
        Category,
        Channel,
        Frequency,
        DigestCadence,
        AggregateState,
        NotificationType,
        PreferenceRecord,
        DeliveryDecision,
    )
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


DEFAULT_DIGEST_TIME = "08:30"


class Category(str, Enum):
    """Fixed notification categories. Each owns one or more types."""

    ALERTS_REMINDERS = "ALERTS_REMINDERS"
    TEAM_ACTIVITY = "TEAM_ACTIVITY"
    IMPORTS = "IMPORTS"
    SYSTEM = "SYSTEM"


class Frequency(str, Enum):
    """
    Category-level delivery cadence.

    NONE is a master kill switch: nothing in the category is delivered.
    """

    NONE = "NONE"
    IMMEDIATE = "IMMEDIATE"
    DIGEST = "DIGEST"


class Channel(str, Enum):
    """Delivery medium."""

    IN_APP = "in_app"
    EMAIL = "email"


class DigestCadence(str, Enum):
    """Per-type email digest schedule. NONE means send immediately."""

    NONE = "none"
    DAILY = "daily"     # evening, 19h
    WEEKLY = "weekly"   # Friday evening, 19h


class AggregateState(str, Enum):
    """Derived tri-state of a category switch."""

    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


# =============================================================================
# Errors
# =============================================================================

class PreferenceError(ValueError):
    """Base class for preference precondition violations."""


class UnknownNotificationTypeError(PreferenceError):
    """The type identifier is not in the catalog."""

    def __init__(self, type_id: str):
        super().__init__(f"Unknown notification type: {type_id}")
        self.type_id = type_id


class CategoryMismatchError(PreferenceError):
    """A type or record was addressed through another category.

    type_id is None when a whole record is used for the wrong category.
    """

    def __init__(self, type_id: str | None, expected: "Category", actual: "Category"):
        if type_id is None:
            message = (
                f"Record for {Category(actual).value} used for category "
                f"{Category(expected).value}"
            )
        else:
            message = (
                f"Notification type {type_id} belongs to {Category(actual).value}, "
                f"not {Category(expected).value}"
            )
        super().__init__(message)
        self.type_id = type_id
        self.expected = expected
        self.actual = actual


class InvalidDigestTimeError(PreferenceError):
    """Digest time is not a valid HH:MM string."""


class DuplicateTypeError(PreferenceError):
    """The same type identifier was registered twice in a catalog."""


# =============================================================================
# Catalog entries
# =============================================================================

@dataclass(frozen=True)
class NotificationType:
    """Static catalog entry. Not persisted per user."""

    type: str
    category: Category
    label: str = ""
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "category": self.category.value,
            "label": self.label,
            "description": self.description,
        }


# =============================================================================
# Preference record
# =============================================================================

@dataclass(frozen=True)
class PreferenceRecord:
    """
    Preferences of one user for one category.

    The category-level in-app switch is not stored: it is derived from
    disabled_types (see resolution.category_in_app_enabled). Email stays an
    explicit opt-in flag.
    """

    category: Category
    email_enabled: bool = False
    frequency: Frequency = Frequency.IMMEDIATE
    disabled_types: frozenset[str] = frozenset()
    disabled_email_types: frozenset[str] = frozenset()
    # None falls back to the schedule default_digest_time
    digest_time: str | None = None
    # Read-only view, left out of the hash
    digest_cadences: Mapping[str, DigestCadence] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "category", Category(self.category))
        object.__setattr__(self, "frequency", Frequency(self.frequency))
        object.__setattr__(self, "disabled_types", frozenset(self.disabled_types))
        object.__setattr__(self, "disabled_email_types", frozenset(self.disabled_email_types))
        object.__setattr__(self, "digest_cadences", MappingProxyType(dict(self.digest_cadences)))

    @classmethod
    def default(cls, category: Category | str) -> "PreferenceRecord":
        """Record used when a user has never saved this category."""
        return cls(category=Category(category))

    def digest_cadence(self, type_id: str) -> DigestCadence:
        return self.digest_cadences.get(type_id, DigestCadence.NONE)

    def referenced_types(self) -> set[str]:
        """Every type identifier this record mentions."""
        return set(self.disabled_types) | set(self.disabled_email_types) | set(self.digest_cadences)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for storage and JSON output."""
        return {
            "category": self.category.value,
            "email_enabled": self.email_enabled,
            "frequency": self.frequency.value,
            "disabled_types": sorted(self.disabled_types),
            "disabled_email_types": sorted(self.disabled_email_types),
            "digest_time": self.digest_time,
            "digest_cadences": {
                type_id: cadence.value
                for type_id, cadence in sorted(self.digest_cadences.items())
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PreferenceRecord":
        """Create from dict. List fields may be JSON strings (database rows)."""

        def _load(value: Any, empty: Any) -> Any:
            if value is None or value == "":
                return empty
            if isinstance(value, str):
                return json.loads(value)
            return value

        cadences = _load(data.get("digest_cadences"), {})

        return cls(
            category=Category(data["category"]),
            email_enabled=bool(data.get("email_enabled", False)),
            frequency=Frequency(data.get("frequency") or Frequency.IMMEDIATE),
            disabled_types=frozenset(_load(data.get("disabled_types"), [])),
            disabled_email_types=frozenset(_load(data.get("disabled_email_types"), [])),
            digest_time=data.get("digest_time") or None,
            digest_cadences={
                type_id: DigestCadence(value)
                for type_id, value in cadences.items()
                if DigestCadence(value) is not DigestCadence.NONE
            },
        )


@dataclass(frozen=True)
class DeliveryDecision:
    """Effective per-type delivery."""

    in_app: bool
    email: bool

    @property
    def any(self) -> bool:
        return self.in_app or self.email

    def to_dict(self) -> dict[str, bool]:
        return {"in_app": self.in_app, "email": self.email}


@dataclass
class PendingNotification:
    """
    A notification instance waiting for the dispatcher.

    Only `type` matters for preference resolution; the rest is carried into
    in-app items and digest emails.
    """

    id: str
    user_id: str
    type: str
    title: str
    body: str | None = None
    severity: str = "INFO"  # INFO, WARNING, CRITICAL
    created_at: datetime = field(default_factory=datetime.now)

    @staticmethod
    def generate_id() -> str:
        return f"notif_{uuid.uuid4().hex[:12]}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "title": self.title,
            "body": self.body,
            "severity": self.severity,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def parse_digest_time(value: str) -> time:
    """
    Parse an 'HH:MM' digest time.

    Raises:
        InvalidDigestTimeError: not a valid HH:MM string
    """
    try:
        parts = value.split(":")
        if len(parts) != 2:
            raise ValueError()
        hour, minute = int(parts[0]), int(parts[1])
        return time(hour, minute)
    except (ValueError, AttributeError):
        raise InvalidDigestTimeError(f"Invalid time format: {value}. Use HH:MM") from None
