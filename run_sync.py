"""Run one sync job from the command line and print its summary as JSON.

    python run_sync.py catalog
    python run_sync.py prices [--limit 50] [--throttle 0]
    python run_sync.py health
"""
import argparse
import json
import sys

from brickdeals import config
from brickdeals.db import Base, engine, session_scope
from brickdeals import models  # noqa: F401
from brickdeals.services import SyncJobError, health_check, run_catalog_sync, run_price_sync


def build_parser():
    parser = argparse.ArgumentParser(description="Brick deals sync jobs")
    sub = parser.add_subparsers(dest="job", required=True)
    sub.add_parser("catalog", help="refresh the set catalog from Rebrickable")
    prices = sub.add_parser("prices", help="refresh retailer prices and deals")
    prices.add_argument("--limit", type=int, default=config.MANUAL_PRICE_SYNC_ITEM_LIMIT)
    prices.add_argument("--throttle", type=float, default=0.0)
    sub.add_parser("health", help="print catalog and deal counts")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        try:
            if args.job == "catalog":
                result = run_catalog_sync(db)
            elif args.job == "prices":
                result = run_price_sync(db, item_limit=args.limit, throttle=args.throttle)
            else:
                result = health_check(db)
        except SyncJobError as e:
            print(json.dumps({"success": False, "error": str(e)}))
            return 1

    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
