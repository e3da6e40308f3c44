"""Notification preferences for Cassius

Philosophy:
    Clinicians should get the alerts that matter (low ISQ, missing post-op
    follow-up) without being buried in team activity they never asked for.
    In-app delivery is opt-out, email is opt-in.

Design Principles:
    1. Per-type control — every notification type can be muted per channel
    2. Derived state — the category switch is computed, never stored
    3. Master kill switch — frequency NONE silences a whole category
    4. Digests — email can be batched into daily or weekly summaries

Components:
    preferences/: Catalog, resolution, mutations and the preference store
    queue/: Digest scheduling and delivery planning for the dispatcher

Database: data/notify.db
    - notification_preferences: One row per (user, category)
"""

import os
import sqlite3
from pathlib import Path


# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_PATH = ARGS_DIR / "notifications.yaml"
DATA_PATH = PROJECT_ROOT / "data"
DB_PATH = Path(os.environ.get("CASSIUS_NOTIFY_DB", DATA_PATH / "notify.db"))


def get_connection() -> sqlite3.Connection:
    """
    Get database connection, creating tables if needed.

    Returns:
        SQLite connection with row_factory set
    """
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row

    cursor = conn.cursor()

    # Per-user, per-category preference records
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS notification_preferences (
            user_id TEXT NOT NULL,
            category TEXT NOT NULL,
            frequency TEXT NOT NULL DEFAULT 'IMMEDIATE',
            in_app_enabled BOOLEAN DEFAULT TRUE,
            email_enabled BOOLEAN DEFAULT FALSE,
            digest_time TEXT,
            disabled_types TEXT,
            disabled_email_types TEXT,
            digest_cadences TEXT,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (user_id, category)
        )
    """)

    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_preferences_digest "
        "ON notification_preferences(frequency, email_enabled)"
    )

    conn.commit()
    return conn
