#!/usr/bin/env python3
"""
Standalone database initialization script.

Creates the catalog and user tables, then seeds the administrator account.
With ``--with-samples`` an empty catalog also gets a few sample products and
preparations.
Connection settings come from the environment or ``.env``.
"""

import argparse
import sys
import logging
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings
from app.context import AppContext
from app.exceptions import KitchenGuideError
from domain.models import init_database
from services.sample_data import seed_sample_catalog

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("kitchen.init_db")


def main(with_samples: bool = False) -> int:
    settings = get_settings()
    context = AppContext.from_settings(settings)
    logger.info("=" * 60)
    logger.info("Initializing database...")
    logger.info("=" * 60)

    try:
        init_database(context.engine)
        tables = inspect(context.engine).get_table_names()
        logger.info(f"Created {len(tables)} tables: {', '.join(sorted(tables))}")

        with context.session_factory() as db:
            if context.auth.seed_default_admin(db) is None:
                logger.info("Admin account already present")
            if with_samples:
                products, preparations = seed_sample_catalog(
                    db, settings.placeholder_picture_url
                )
                logger.info(f"Sample data: {products} products, {preparations} preparations")
    except (SQLAlchemyError, KitchenGuideError) as e:
        logger.error(f"Failed to initialize database: {e}")
        return 1
    finally:
        context.close()

    logger.info("Database is ready")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create tables and seed the admin account")
    parser.add_argument(
        "--with-samples",
        action="store_true",
        help="Also insert sample products and preparations into an empty catalog",
    )
    args = parser.parse_args()
    sys.exit(main(with_samples=args.with_samples))
