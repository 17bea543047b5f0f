"""
Migration script to create the database tables

Run this script to create the cache and review tables:
    python -m filmreview.migrations.create_all_tables
"""

import logging

from filmreview.database import engine, Base
# Import all models to ensure they're registered with Base
from filmreview.models.title_cache import TitleCache  # noqa: F401
from filmreview.models.review import Review  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables():
    """Create all database tables; existing tables are left untouched"""
    logger.info("Creating database tables on %s", engine.url.render_as_string(hide_password=True))

    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Error creating tables: {e}")
        raise

    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    create_tables()
