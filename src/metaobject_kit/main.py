#!/usr/bin/env python3
"""Command-line entry point: ``metaobject-kit plan`` and ``metaobject-kit push``."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from metaobject_kit.config import ConfigurationError, StoreConfig
from metaobject_kit.exceptions import MetaobjectKitError, PartialApplyError, ReconciliationCancelled
from metaobject_kit.reconcile.diff import ChangeSet
from metaobject_kit.schema.loader import load_local_schema
from metaobject_kit.store import MetaobjectStore

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metaobject-kit",
        description="Reconcile a local metaobject schema with a store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan = subparsers.add_parser("plan", help="Show the changes push would apply")
    plan.add_argument("--schema", help="Path of the schema module (default: $METAOBJECT_SCHEMA_PATH or schema.py)")

    push = subparsers.add_parser("push", help="Apply the local schema to the store")
    push.add_argument("--schema", help="Path of the schema module (default: $METAOBJECT_SCHEMA_PATH or schema.py)")
    push.add_argument("--yes", action="store_true", help="Apply destructive changes without asking")
    return parser


def _print_change_set(change_set: ChangeSet) -> None:
    for line in change_set.describe():
        print(line)


def confirm_destructive(change_set: ChangeSet) -> bool:
    """Ask on the terminal before deleting definitions or fields."""
    print("The following changes cannot be undone:")
    for definition_id in change_set.delete:
        print(f"  - delete object type {change_set.deleted_types.get(definition_id, definition_id)}")
    for type_, key in change_set.field_deletions():
        print(f"  - delete field {type_}.{key}")

    while True:
        try:
            answer = input("Apply these changes? [yes/no] ").strip().lower()
        except EOFError:
            return False
        if answer in ("yes", "y"):
            return True
        if answer in ("no", "n", ""):
            return False
        print("Please answer 'yes' or 'no'.")


def run(args: argparse.Namespace) -> int:
    config = StoreConfig.with_defaults(schema_path=args.schema)
    schema = load_local_schema(config.schema_path)
    store = MetaobjectStore.from_config(config, schema)

    if args.command == "plan":
        change_set = store.plan()
        if change_set.is_empty:
            print("Remote schema is up to date.")
        else:
            _print_change_set(change_set)
        return 0

    def confirm(change_set: ChangeSet) -> bool:
        _print_change_set(change_set)
        return confirm_destructive(change_set)

    report = store.push(confirm=None if args.yes else confirm)
    if report.steps == 0:
        print("Remote schema is up to date.")
    else:
        print(
            f"Applied {report.steps} changes: {len(report.created)} created, "
            f"{len(report.updated)} updated, {len(report.deleted)} deleted."
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the metaobject-kit CLI."""
    args = _build_parser().parse_args(argv)

    # Loads from .env in the current working directory
    load_dotenv()
    _configure_logging()

    try:
        return run(args)
    except ReconciliationCancelled:
        print("Cancelled, nothing was applied.", file=sys.stderr)
        return 1
    except PartialApplyError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"Applied before the failure: {e.report.to_dict()}", file=sys.stderr)
        return 1
    except (MetaobjectKitError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
