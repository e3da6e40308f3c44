"""
Tool: Preference Store
Purpose: Read and write one preference record per (user, category)

Usage:
    from cassius_notify.preferences.store import (
        get_preferences,
        put_preferences,
        list_preferences,
        update_preferences,
        delete_preferences,
    )

Writes replace the whole record: concurrent edits of the same
(user, category) are last-write-wins.
"""

import asyncio
import json
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from cassius_notify import get_connection
from cassius_notify.logging_config import get_logger
from cassius_notify.models import Category, CategoryMismatchError, PreferenceRecord
from cassius_notify.preferences.catalog import NotificationCatalog
from cassius_notify.preferences.resolution import category_in_app_enabled, validate_record

logger = get_logger(__name__)


def _row_to_record(row: dict, catalog: NotificationCatalog) -> PreferenceRecord:
    record = PreferenceRecord.from_dict(row)

    # Rows written before disabled_types became the only in-app switch may
    # carry in_app_enabled = 0 with a partial list
    if row.get("in_app_enabled") is not None and not row["in_app_enabled"]:
        record = replace(record, disabled_types=catalog.type_ids_in(record.category))

    return record


async def get_preferences(
    user_id: str,
    category: Category | str,
    catalog: NotificationCatalog,
) -> PreferenceRecord:
    """
    Get a user's record for one category.

    A user who never saved the category gets the default record; nothing is
    written until the first put.

    Args:
        user_id: The user ID
        category: Category ID
        catalog: Catalog used to normalize legacy rows

    Returns:
        PreferenceRecord
    """
    category = Category(category)

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute(
        "SELECT * FROM notification_preferences WHERE user_id = ? AND category = ?",
        (user_id, category.value),
    )
    row = cursor.fetchone()
    conn.close()

    if not row:
        return PreferenceRecord.default(category)

    return _row_to_record(dict(row), catalog)


async def put_preferences(
    user_id: str,
    category: Category | str,
    record: PreferenceRecord,
    catalog: NotificationCatalog,
) -> PreferenceRecord:
    """
    Validate and save a record, replacing any previous one.

    Raises:
        CategoryMismatchError: record is for another category or names foreign types
        sqlite3.Error: the write failed
    """
    category = Category(category)
    if record.category != category:
        raise CategoryMismatchError(None, expected=category, actual=record.category)
    validate_record(record, catalog)

    data = record.to_dict()
    now = datetime.now().isoformat()

    conn = get_connection()
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            INSERT INTO notification_preferences
            (user_id, category, frequency, in_app_enabled, email_enabled, digest_time,
             disabled_types, disabled_email_types, digest_cadences, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, category) DO UPDATE SET
                frequency = excluded.frequency,
                in_app_enabled = excluded.in_app_enabled,
                email_enabled = excluded.email_enabled,
                digest_time = excluded.digest_time,
                disabled_types = excluded.disabled_types,
                disabled_email_types = excluded.disabled_email_types,
                digest_cadences = excluded.digest_cadences,
                updated_at = excluded.updated_at
            """,
            (
                user_id,
                category.value,
                data["frequency"],
                category_in_app_enabled(record, catalog),
                data["email_enabled"],
                data["digest_time"],
                json.dumps(data["disabled_types"]),
                json.dumps(data["disabled_email_types"]),
                json.dumps(data["digest_cadences"]),
                now,
                now,
            ),
        )
        conn.commit()
    finally:
        conn.close()

    logger.info(
        "preferences_saved",
        user_id=user_id,
        category=category.value,
        frequency=data["frequency"],
        disabled=len(data["disabled_types"]),
        disabled_email=len(data["disabled_email_types"]),
    )
    return record


async def list_preferences(
    user_id: str,
    catalog: NotificationCatalog,
) -> dict[Category, PreferenceRecord]:
    """
    Get one record per catalog category, defaults filled in.

    Returns:
        {Category: PreferenceRecord} in catalog order
    """
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute(
        "SELECT * FROM notification_preferences WHERE user_id = ?",
        (user_id,),
    )
    rows = cursor.fetchall()
    conn.close()

    stored = {}
    for row in rows:
        data = dict(row)
        try:
            category = Category(data["category"])
        except ValueError:
            logger.warning("unknown_category_row", user_id=user_id, category=data["category"])
            continue
        stored[category] = _row_to_record(data, catalog)

    return {
        category: stored.get(category, PreferenceRecord.default(category))
        for category in catalog.categories()
    }


async def update_preferences(
    user_id: str,
    category: Category | str,
    mutation: Callable[[PreferenceRecord], PreferenceRecord],
    catalog: NotificationCatalog,
) -> PreferenceRecord:
    """
    Read the current record, apply a mutation, save the result.

    Args:
        user_id: The user ID
        category: Category ID
        mutation: Function from the current record to the new one
        catalog: Notification catalog

    Returns:
        The saved record
    """
    current = await get_preferences(user_id, category, catalog)
    return await put_preferences(user_id, category, mutation(current), catalog)


async def delete_preferences(user_id: str) -> dict:
    """
    Remove every stored record of a user (account deletion).

    Returns:
        {"success": True, "deleted": int}
    """
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute(
        "DELETE FROM notification_preferences WHERE user_id = ?",
        (user_id,),
    )
    deleted = cursor.rowcount
    conn.commit()
    conn.close()

    logger.info("preferences_deleted", user_id=user_id, deleted=deleted)
    return {"success": True, "deleted": deleted}


# CLI interface
if __name__ == "__main__":
    import argparse

    from cassius_notify.config_models import load_config
    from cassius_notify.preferences.catalog import load_catalog

    parser = argparse.ArgumentParser(description="Notification preference store")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    get_parser = subparsers.add_parser("get", help="Get user preferences")
    get_parser.add_argument("--user-id", "-u", required=True, help="User ID")

    delete_parser = subparsers.add_parser("delete", help="Delete all preferences of a user")
    delete_parser.add_argument("--user-id", "-u", required=True, help="User ID")

    args = parser.parse_args()
    catalog = load_catalog(load_config().catalog)

    if args.command == "get":
        records = asyncio.run(list_preferences(args.user_id, catalog))
        print(json.dumps({c.value: r.to_dict() for c, r in records.items()}, indent=2))

    elif args.command == "delete":
        result = asyncio.run(delete_preferences(args.user_id))
        print(f"Deleted: {result['deleted']}")

    else:
        parser.print_help()
