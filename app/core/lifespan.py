from contextlib import asynccontextmanager
import logging

from app.core.config.scoring import get_scoring_config
from app.features.industry_detector import available_industries
from app.taxonomy import get_default_variation_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    # Warm the read-only lookup tables.
    get_scoring_config()
    database = get_default_variation_database()
    industries = available_industries()
    logger.info(
        "ats_tables_warmed industries=%s variation_industries=%s",
        len(industries),
        len(database.available_industries()),
    )
    yield
