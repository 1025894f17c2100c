"""
Create all SupaSpend tables in the configured database.

Usage (from backend/): python -m app.db.init_db
"""
import logging
from app.core.config import settings
from app.db.session import init_db

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    logger.info(f"Creating tables in {settings.DATABASE_URL}")
    init_db()
    logger.info("Database ready")


if __name__ == "__main__":
    main()
