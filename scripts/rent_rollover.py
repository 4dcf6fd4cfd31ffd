"""
Daily rent rollover: issue any missing monthly obligations, then refresh
statuses and tenant late flags.

Schedule once a day (cron, a container job, etc.):

    python -m scripts.rent_rollover
    python -m scripts.rent_rollover --as-of 2025-03-01 --landlord-id 7

Safe to re-run: months that already have an obligation are skipped and the
status sweep only writes what changed.
"""
import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

from database import get_session_context
from services.rent_ledger_service import RentLedgerService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("rent_rollover")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--as-of", type=date.fromisoformat, default=None, help="Run as of YYYY-MM-DD (default today)")
    parser.add_argument("--landlord-id", type=int, default=None, help="Limit the run to one landlord")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> dict:
    args = parse_args(argv)
    logger.info("Starting rent rollover (as_of=%s, landlord=%s)", args.as_of or "today", args.landlord_id or "all")

    with get_session_context() as db:
        result = RentLedgerService.roll_over(db, args.as_of, landlord_id=args.landlord_id)

    if result["obligations_created"] == 0 and result["statuses_updated"] == 0:
        logger.info("Nothing to do, every month is issued and every status is current.")
    else:
        logger.info(
            "Rollover complete. created=%d  updated=%d",
            result["obligations_created"], result["statuses_updated"],
        )
    return result


if __name__ == "__main__":
    main()
    sys.exit(0)
