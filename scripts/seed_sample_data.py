#!/usr/bin/env python3
"""Load the demo visits into the configured database.

    python scripts/seed_sample_data.py            # add demo data
    python scripts/seed_sample_data.py --reset    # wipe first, then add

Uses the same service functions as POST /api/reset and POST /api/seed.
"""

import argparse
from datetime import date

from loguru import logger

from visita360.database import SessionLocal, create_tables
from visita360.logging_config import setup_logging
from visita360.services.visit_service import reset_all, seed_sample_data


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--reset", action="store_true", help="delete all visits first")
    args = parser.parse_args()

    setup_logging()
    create_tables()
    db = SessionLocal()
    try:
        if args.reset:
            logger.info("Reset: {}", reset_all(db))
        logger.info("Seeded: {}", seed_sample_data(db, date.today()))
    finally:
        db.close()


if __name__ == "__main__":
    main()
