#!/usr/bin/env python3
"""
Cassius notification preferences command line interface

Main entry point for the `cassius-notify` command.

Usage:
    cassius-notify catalog                              # List notification types
    cassius-notify show -u alice                        # Preferences of a user
    cassius-notify toggle-type -u alice ISQ_LOW --channel email --on
    cassius-notify toggle-category -u alice IMPORTS --off
    cassius-notify set-digest -u alice IMPORT_COMPLETED weekly
    cassius-notify set-frequency -u alice SYSTEM NONE
    cassius-notify set-email -u alice ALERTS_REMINDERS --on
    cassius-notify next-digest weekly --after 2026-10-19T12:00
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

from cassius_notify.config_models import load_config
from cassius_notify.logging_config import get_logger, setup_logging
from cassius_notify.models import (
    Category,
    Channel,
    DigestCadence,
    Frequency,
    PreferenceError,
)
from cassius_notify.preferences.catalog import load_catalog
from cassius_notify.preferences.mutations import (
    set_digest,
    set_email_enabled,
    set_frequency,
    toggle_category,
    toggle_type,
)
from cassius_notify.preferences.resolution import summarize
from cassius_notify.preferences.store import list_preferences, update_preferences
from cassius_notify.queue.digest import next_digest_at

logger = get_logger("cassius_notify.cli")


def _print(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_catalog(args, config):
    """List the notification types, optionally for one category."""
    catalog = load_catalog(config.catalog)
    categories = [Category(args.category)] if args.category else catalog.categories()
    _print({
        "version": catalog.version,
        "categories": {
            c.value: [t.to_dict() for t in catalog.types_in(c)] for c in categories
        },
    })


def cmd_show(args, config):
    """Show a user's resolved preferences."""
    catalog = load_catalog(config.catalog)
    records = asyncio.run(list_preferences(args.user_id, catalog))
    if args.category:
        records = {Category(args.category): records[Category(args.category)]}
    _print([summarize(record, catalog) for record in records.values()])


def _apply(args, config, category, mutation):
    catalog = load_catalog(config.catalog)
    record = asyncio.run(update_preferences(args.user_id, category, mutation, catalog))
    _print(summarize(record, catalog))


def cmd_toggle_type(args, config):
    catalog = load_catalog(config.catalog)
    notification_type = catalog.get(args.type)
    _apply(
        args,
        config,
        notification_type.category,
        lambda record: toggle_type(record, notification_type, Channel(args.channel), args.enabled),
    )


def cmd_toggle_category(args, config):
    catalog = load_catalog(config.catalog)
    _apply(
        args,
        config,
        Category(args.category),
        lambda record: toggle_category(record, args.enabled, catalog),
    )


def cmd_set_digest(args, config):
    catalog = load_catalog(config.catalog)
    notification_type = catalog.get(args.type)
    _apply(
        args,
        config,
        notification_type.category,
        lambda record: set_digest(record, notification_type, DigestCadence(args.cadence)),
    )


def cmd_set_frequency(args, config):
    _apply(
        args,
        config,
        Category(args.category),
        lambda record: set_frequency(record, Frequency(args.frequency)),
    )


def cmd_set_email(args, config):
    _apply(
        args,
        config,
        Category(args.category),
        lambda record: set_email_enabled(record, args.enabled),
    )


def cmd_next_digest(args, config):
    """Show the next digest boundary for a cadence."""
    after = args.after or datetime.now()
    boundary = next_digest_at(DigestCadence(args.cadence), after, config.digest)
    _print({
        "cadence": args.cadence,
        "after": after.isoformat(),
        "next": boundary.isoformat() if boundary else None,
    })


def _iso_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO datetime: {value!r}") from None


def _add_enabled_flag(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--on", dest="enabled", action="store_true", help="Enable")
    group.add_argument("--off", dest="enabled", action="store_false", help="Disable")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cassius-notify",
        description="Cassius notification preferences",
    )
    parser.add_argument("--config", default=None, help="Path to notifications.yaml")
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    categories = [c.value for c in Category]

    catalog_parser = subparsers.add_parser("catalog", help="List notification types")
    catalog_parser.add_argument("--category", "-c", choices=categories, help="Only this category")
    catalog_parser.set_defaults(func=cmd_catalog)

    show_parser = subparsers.add_parser("show", help="Show a user's preferences")
    show_parser.add_argument("--user-id", "-u", required=True, help="User ID")
    show_parser.add_argument("--category", "-c", choices=categories, help="Only this category")
    show_parser.set_defaults(func=cmd_show)

    toggle_type_parser = subparsers.add_parser(
        "toggle-type", help="Enable or disable one type on one channel"
    )
    toggle_type_parser.add_argument("--user-id", "-u", required=True, help="User ID")
    toggle_type_parser.add_argument("type", help="Notification type (e.g., ISQ_LOW)")
    toggle_type_parser.add_argument(
        "--channel", choices=[c.value for c in Channel], default=Channel.IN_APP.value,
        help="Delivery channel (default: in_app)",
    )
    _add_enabled_flag(toggle_type_parser)
    toggle_type_parser.set_defaults(func=cmd_toggle_type)

    toggle_category_parser = subparsers.add_parser(
        "toggle-category", help="Enable or disable every type of a category in-app"
    )
    toggle_category_parser.add_argument("--user-id", "-u", required=True, help="User ID")
    toggle_category_parser.add_argument("category", choices=categories, help="Category")
    _add_enabled_flag(toggle_category_parser)
    toggle_category_parser.set_defaults(func=cmd_toggle_category)

    digest_parser = subparsers.add_parser("set-digest", help="Set a type's digest cadence")
    digest_parser.add_argument("--user-id", "-u", required=True, help="User ID")
    digest_parser.add_argument("type", help="Notification type")
    digest_parser.add_argument("cadence", choices=[c.value for c in DigestCadence], help="Cadence")
    digest_parser.set_defaults(func=cmd_set_digest)

    frequency_parser = subparsers.add_parser("set-frequency", help="Set a category's frequency")
    frequency_parser.add_argument("--user-id", "-u", required=True, help="User ID")
    frequency_parser.add_argument("category", choices=categories, help="Category")
    frequency_parser.add_argument("frequency", choices=[f.value for f in Frequency], help="Frequency")
    frequency_parser.set_defaults(func=cmd_set_frequency)

    email_parser = subparsers.add_parser("set-email", help="Opt a category in or out of email")
    email_parser.add_argument("--user-id", "-u", required=True, help="User ID")
    email_parser.add_argument("category", choices=categories, help="Category")
    _add_enabled_flag(email_parser)
    email_parser.set_defaults(func=cmd_set_email)

    next_parser = subparsers.add_parser("next-digest", help="Next digest boundary")
    next_parser.add_argument(
        "cadence", choices=[c.value for c in DigestCadence if c is not DigestCadence.NONE],
        help="Cadence",
    )
    next_parser.add_argument(
        "--after", type=_iso_datetime, default=None, help="ISO datetime (default: now)"
    )
    next_parser.set_defaults(func=cmd_next_digest)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # If no command given, show help
    if not args.command:
        parser.print_help()
        return 0

    config = load_config(Path(args.config) if args.config else None)
    setup_logging(config.logging, level=args.log_level, catalog_version=config.catalog.version)

    try:
        args.func(args, config)
    except PreferenceError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
