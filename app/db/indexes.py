"""
app/db/indexes.py

Purpose: Database index management

- Unique index on session id
- TTL index so idle sessions clean themselves up
"""

from app.core.config import settings
from app.db.mongo import get_sessions_collection
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        sessions = get_sessions_collection()

        logger.info("Creating database indexes...")

        await sessions.create_index("session_id", unique=True, name="session_id_unique")
        logger.debug("Created unique index on sessions.session_id")

        await sessions.create_index(
            "updated_at",
            expireAfterSeconds=settings.SESSION_TTL_DAYS * 24 * 3600,
            name="session_ttl_idx"
        )
        logger.debug("Created TTL index on sessions.updated_at")

        logger.info("Database indexes created")

    except Exception as e:
        logger.error(f"Error creating indexes: {e}", exc_info=True)
        raise
