"""
Command line tools for syncing the guest roster with a CSV file

    python -m app.cli pull-guests [path]
    python -m app.cli seed-guests [path] [--keep-missing]
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

from app.core.config import settings
from app.core.db import Base, engine, session_scope
from app.services.repositories import use_firestore
from app.services.roster_service import RosterService

logger = logging.getLogger(__name__)

DEFAULT_ROSTER_PATH = "data/guests.csv"


def pull_guests(path: str) -> int:
    with session_scope() as db:
        df = RosterService.export_roster(db)

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(target, index=False)
    logger.info(f"Wrote {len(df)} guests to {target}")
    return 0


def seed_guests(path: str, keep_missing: bool = False) -> int:
    source = Path(path)
    if not source.exists():
        logger.error(f"Roster file not found: {source}")
        return 1

    df = pd.read_csv(source, dtype=str, keep_default_na=False)
    try:
        with session_scope() as db:
            counts = RosterService.import_roster(db, df, deactivate_missing=not keep_missing)
    except ValueError as e:
        logger.error(f"Invalid roster {source}: {e}")
        return 1

    print(
        f"{counts['added']} added, {counts['updated']} updated, "
        f"{counts['unchanged']} unchanged, {counts['deactivated']} deactivated"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m app.cli", description="Guest roster tools")
    commands = parser.add_subparsers(dest="command", required=True)

    pull = commands.add_parser("pull-guests", help="Export active guests to CSV")
    pull.add_argument("path", nargs="?", default=DEFAULT_ROSTER_PATH)

    seed = commands.add_parser("seed-guests", help="Sync guests from a CSV roster")
    seed.add_argument("path", nargs="?", default=DEFAULT_ROSTER_PATH)
    seed.add_argument(
        "--keep-missing",
        action="store_true",
        help="Do not deactivate guests missing from the roster",
    )
    return parser


def main(argv=None) -> int:
    logging.basicConfig(level=settings.LOG_LEVEL)
    args = build_parser().parse_args(argv)

    if not use_firestore():
        Base.metadata.create_all(bind=engine)

    if args.command == "pull-guests":
        return pull_guests(args.path)
    return seed_guests(args.path, keep_missing=args.keep_missing)


if __name__ == "__main__":
    sys.exit(main())
