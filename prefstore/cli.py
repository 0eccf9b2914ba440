"""
Command-line access to preference stores.

    python -m prefstore.cli get RedirectData text --default ""
    python -m prefstore.cli put RedirectData text hello
    python -m prefstore.cli load
    python -m prefstore.cli apply "new text"

Exit status is 0 when the read succeeded, the write committed or apply
reported OK, and 1 otherwise.
"""

from __future__ import annotations

import argparse
import json
import sys

from prefstore.config.settings import settings
from prefstore.core.errors import CommitFailedError, PrefStoreError
from prefstore.core.preferences import PreferenceStore
from prefstore.core.redirect import RedirectGetter
from prefstore.storage import create_backend
from prefstore.util.logger import logger, set_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prefstore", description="Read and write durable named preferences.")
    parser.add_argument(
        "--backend",
        choices=("file", "sqlite", "redis", "postgres"),
        default=None,
        help="Storage backend (default: PREFSTORE_STORAGE_BACKEND or file)",
    )
    parser.add_argument("--data-dir", default=None, help="Directory for file stores")
    parser.add_argument("--db-path", default=None, help="SQLite database path")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log store activity to stderr at DEBUG level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    get_cmd = sub.add_parser("get", help="Print one value")
    get_cmd.add_argument("store")
    get_cmd.add_argument("key")
    get_cmd.add_argument("--default", default=None, help="Printed when the key is absent")
    get_cmd.add_argument("--json", action="store_true", help="Print a JSON object instead of the raw value")

    put_cmd = sub.add_parser("put", help="Commit one value")
    put_cmd.add_argument("store")
    put_cmd.add_argument("key")
    put_cmd.add_argument("value")

    sub.add_parser("load", help="Print the redirect text")

    apply_cmd = sub.add_parser("apply", help="Commit the redirect text and print the result")
    apply_cmd.add_argument("text")
    apply_cmd.add_argument(
        "--policy",
        choices=("silent", "report"),
        default=None,
        help="What a failed commit does (default: PREFSTORE_COMMIT_FAILURE_POLICY)",
    )
    return parser


def _apply_overrides(args: argparse.Namespace) -> None:
    if args.backend:
        settings.storage_backend = args.backend
    if args.data_dir:
        settings.data_dir = args.data_dir
    if args.db_path:
        settings.sqlite_db_path = args.db_path


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _apply_overrides(args)
    if args.verbose:
        set_level("DEBUG")

    try:
        store = PreferenceStore(create_backend())
    except PrefStoreError as exc:
        logger.error("cannot open preference store: %s", exc)
        return 1

    try:
        if args.command == "get":
            value = store.get(args.store, args.key, args.default)
            if args.json:
                print(json.dumps({"store": args.store, "key": args.key, "value": value}, ensure_ascii=False))
            elif value is not None:
                print(value)
            return 0

        if args.command == "put":
            committed = store.put(args.store, args.key, args.value)
            print("committed" if committed else "not committed")
            return 0 if committed else 1

        getter = RedirectGetter(store, failure_policy=getattr(args, "policy", None))
        if args.command == "load":
            print(getter.load())
            return 0

        try:
            outcome = getter.apply(args.text)
        except CommitFailedError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        print(outcome.result.name)
        return 0 if outcome.ok else 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    raise SystemExit(main())
