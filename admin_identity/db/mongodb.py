import logging

from motor.motor_asyncio import AsyncIOMotorClient
from admin_identity.core.config import settings

logger = logging.getLogger(__name__)


class MongoDB:
    client: AsyncIOMotorClient = None

mongodb = MongoDB()


# 🔹 Return database object
async def get_database():
    return mongodb.client[settings.MONGO_DB_NAME]


# 🔹 Connect MongoDB (called on startup)
async def connect_to_mongo():
    mongodb.client = AsyncIOMotorClient(settings.MONGO_URI)
    logger.info("📌 Connected to MongoDB (%s)", settings.MONGO_DB_NAME)


# 🔹 Close connection (shutdown)
async def close_mongo_connection():
    if mongodb.client is not None:
        mongodb.client.close()
        mongodb.client = None
    logger.info("❌ MongoDB Connection Closed")


def get_client():
    """Return raw MongoDB client"""
    return mongodb.client
