"""
Tool: Notification Type Catalog
Purpose: Static, versioned list of notification types and their categories

Usage:
    from cassius_notify.preferences.catalog import (
        NotificationCatalog,
        DEFAULT_NOTIFICATION_TYPES,
        default_catalog,
        load_catalog,
    )

The catalog is passed explicitly to every operation that needs the type
list. Changing it is a deploy, not a data migration.
"""

from collections.abc import Iterable, Iterator

from cassius_notify.config_models import CatalogConfig
from cassius_notify.models import (
    Category,
    DuplicateTypeError,
    NotificationType,
    UnknownNotificationTypeError,
)


DEFAULT_CATALOG_VERSION = "1"

DEFAULT_NOTIFICATION_TYPES: tuple[NotificationType, ...] = (
    # Alerts & reminders
    NotificationType("ISQ_LOW", Category.ALERTS_REMINDERS, "ISQ bas",
                     "Alerte quand un ISQ est inférieur au seuil critique"),
    NotificationType("ISQ_DECLINING", Category.ALERTS_REMINDERS, "ISQ en déclin",
                     "Alerte quand l'ISQ baisse significativement"),
    NotificationType("UNSTABLE_ISQ_HISTORY", Category.ALERTS_REMINDERS, "Historique ISQ instable",
                     "Alerte pour plusieurs ISQ bas consécutifs"),
    NotificationType("NO_POSTOP_FOLLOWUP", Category.ALERTS_REMINDERS, "Suivi post-op manquant",
                     "Rappel si pas de suivi après une chirurgie"),
    NotificationType("NO_RECENT_VISIT", Category.ALERTS_REMINDERS, "Visite récente manquante",
                     "Rappel si le patient n'a pas eu de visite récente"),
    NotificationType("SURGERY_NO_FOLLOWUP_PLANNED", Category.ALERTS_REMINDERS, "Suivi non planifié",
                     "Rappel si aucun suivi n'est planifié"),
    NotificationType("FOLLOWUP_TO_SCHEDULE", Category.ALERTS_REMINDERS, "Suivi à planifier",
                     "Rappel pour planifier un suivi"),
    # Team activity
    NotificationType("APPOINTMENT_CREATED", Category.TEAM_ACTIVITY, "Nouveau rendez-vous",
                     "Notification lors de la création d'un rendez-vous"),
    NotificationType("PATIENT_UPDATED", Category.TEAM_ACTIVITY, "Patient modifié",
                     "Notification quand un dossier patient est modifié"),
    NotificationType("DOCUMENT_ADDED", Category.TEAM_ACTIVITY, "Document ajouté",
                     "Notification lors de l'ajout d'un document"),
    NotificationType("RADIO_ADDED", Category.TEAM_ACTIVITY, "Radio ajoutée",
                     "Notification lors de l'ajout d'une radiographie"),
    NotificationType("NEW_MEMBER_JOINED", Category.TEAM_ACTIVITY, "Nouveau membre",
                     "Notification quand un collaborateur rejoint l'équipe"),
    NotificationType("ROLE_CHANGED", Category.TEAM_ACTIVITY, "Rôle modifié",
                     "Notification quand un rôle est modifié"),
    NotificationType("INVITATION_SENT", Category.TEAM_ACTIVITY, "Invitation envoyée",
                     "Confirmation d'envoi d'invitation"),
    # Imports
    NotificationType("IMPORT_STARTED", Category.IMPORTS, "Import démarré",
                     "Notification au début d'un import"),
    NotificationType("IMPORT_COMPLETED", Category.IMPORTS, "Import terminé",
                     "Notification quand un import est terminé"),
    NotificationType("IMPORT_PARTIAL", Category.IMPORTS, "Import partiel",
                     "Notification si l'import a des erreurs partielles"),
    NotificationType("IMPORT_FAILED", Category.IMPORTS, "Import échoué",
                     "Notification si l'import a échoué"),
    # System
    NotificationType("SYNC_ERROR", Category.SYSTEM, "Erreur de synchronisation",
                     "Erreur de synchronisation avec les services externes"),
    NotificationType("EMAIL_ERROR", Category.SYSTEM, "Erreur d'email",
                     "Erreur lors de l'envoi d'un email"),
    NotificationType("SYSTEM_MAINTENANCE", Category.SYSTEM, "Maintenance système",
                     "Annonces de maintenance programmée"),
)


class NotificationCatalog:
    """
    Read-only mapping of type identifier to NotificationType.

    Types keep their declaration order within each category, which is the
    order the settings screen lists them in.
    """

    def __init__(self, types: Iterable[NotificationType], version: str = DEFAULT_CATALOG_VERSION):
        self.version = version
        self._types: dict[str, NotificationType] = {}
        self._by_category: dict[Category, tuple[NotificationType, ...]] = {}

        grouped: dict[Category, list[NotificationType]] = {c: [] for c in Category}
        for notification_type in types:
            if notification_type.type in self._types:
                raise DuplicateTypeError(
                    f"Notification type registered twice: {notification_type.type}"
                )
            self._types[notification_type.type] = notification_type
            grouped[Category(notification_type.category)].append(notification_type)

        self._by_category = {c: tuple(items) for c, items in grouped.items()}

    def get(self, type_id: str) -> NotificationType:
        """
        Look up a type by identifier.

        Raises:
            UnknownNotificationTypeError: the identifier is not in the catalog
        """
        try:
            return self._types[type_id]
        except KeyError:
            raise UnknownNotificationTypeError(type_id) from None

    def types_in(self, category: Category | str) -> tuple[NotificationType, ...]:
        return self._by_category[Category(category)]

    def type_ids_in(self, category: Category | str) -> frozenset[str]:
        return frozenset(t.type for t in self.types_in(category))

    def categories(self) -> list[Category]:
        """Categories that own at least one type."""
        return [c for c in Category if self._by_category[c]]

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._types

    def __iter__(self) -> Iterator[NotificationType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"NotificationCatalog(version={self.version!r}, types={len(self)})"


def default_catalog() -> NotificationCatalog:
    """Catalog of the types built into the application."""
    return NotificationCatalog(DEFAULT_NOTIFICATION_TYPES, version=DEFAULT_CATALOG_VERSION)


def load_catalog(config: CatalogConfig | None = None) -> NotificationCatalog:
    """
    Build a catalog from configuration.

    Args:
        config: The `catalog` section of notifications.yaml

    Returns:
        Configured catalog, or the built-in types when none are configured
    """
    if config is None or not config.types:
        version = config.version if config is not None else DEFAULT_CATALOG_VERSION
        return NotificationCatalog(DEFAULT_NOTIFICATION_TYPES, version=version)

    return NotificationCatalog(
        (
            NotificationType(
                type=entry.type,
                category=entry.category,
                label=entry.label,
                description=entry.description,
            )
            for entry in config.types
        ),
        version=config.version,
    )
