from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from .config import get_config
from .errors import PasteStoreError, StorageUnavailable
from .migrate import upgrade_database
from .observability import configure_logging
from .store import PasteStore


logger = logging.getLogger(__name__)


def _database_path(args: argparse.Namespace) -> str:
    # -d wins over PASTERD_DATABASE_PATH, which the config already reads.
    if args.database:
        return args.database
    return get_config(os.getenv("APP_ENV", "production")).DATABASE_PATH


def cmd_sweep(args: argparse.Namespace) -> int:
    path = _database_path(args)
    try:
        store = PasteStore.open(path, lock_timeout=args.lock_timeout)
    except StorageUnavailable as exc:
        print(f"abort: could not open database: {exc}", file=sys.stderr)
        return 1

    with store:
        try:
            count = store.sweep()
        except PasteStoreError as exc:
            print(f"abort: sweep failed: {exc}", file=sys.stderr)
            return 1

    if args.verbose:
        print(f"{count} expired paste(s) removed")
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    path = _database_path(args)
    try:
        upgrade_database(path, args.revision)
    except SQLAlchemyError as exc:
        print(f"abort: could not migrate database: {exc}", file=sys.stderr)
        return 1

    logger.info(
        "Database migrated",
        extra={"event": "database_migrated", "database_path": path},
    )
    return 0


def _add_common(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("-d", "--database", help="path to the paste database")
    sp.add_argument("-v", "--verbose", action="store_true")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("paster")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("sweep", help="delete expired pastes once")
    _add_common(sp)
    sp.add_argument("--lock-timeout", type=float, default=30.0)
    sp.set_defaults(func=cmd_sweep)

    sp = sub.add_parser("init-db", help="apply schema migrations")
    _add_common(sp)
    sp.add_argument("--revision", default="head")
    sp.set_defaults(func=cmd_init_db)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(logging.INFO if args.verbose else logging.WARNING)
    return args.func(args)


def clean_main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point of ``paster-clean``, meant to be run from cron."""
    if argv is None:
        argv = sys.argv[1:]
    return main(["sweep", *argv])


if __name__ == "__main__":
    sys.exit(main())
