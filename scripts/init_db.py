"""
Database initialization script - session store indexes

Run once against a new database (SESSION_BACKEND=mongo):
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.db.mongo import connect_to_mongo, close_mongo_connection, get_sessions_collection
from app.db.indexes import create_indexes

setup_logging()
logger = get_logger("scripts.init_db")


async def main():
    if not settings.MONGODB_URL:
        raise ValueError("❌ MONGODB_URL must be set in .env file")

    logger.info(f"🔌 Connecting to MongoDB: {settings.MONGODB_DB_NAME}")
    await connect_to_mongo()

    try:
        await create_indexes()

        sessions = get_sessions_collection()
        indexes = await sessions.index_information()
        for name in indexes:
            if name != "_id_":
                logger.info(f"  ✅ sessions.{name}")

        count = await sessions.count_documents({})
        logger.info(f"📊 Stored sessions: {count}")
        logger.info("✅ Database initialization complete!")

    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main())
