"""
MongoDB connection owned by the application lifespan
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from teamfinder.core.config import Config
from teamfinder.core.errors import StoreUnavailableError
from teamfinder.core.logger import logger


class MongoDatabase:
    """Database connection manager"""

    def __init__(self, config: Config):
        self.url = config.mongodb_url
        self.database_name = config.mongodb_database
        self.host = config.mongodb_host
        self.port = config.mongodb_port
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> AsyncIOMotorDatabase:
        """Create database connection"""
        logger.info("Connecting to MongoDB...")

        try:
            self.client = AsyncIOMotorClient(self.url)
            self.database = self.client[self.database_name]

            # Test connection
            await self.client.admin.command("ping")

            logger.info(
                f"Successfully connected to MongoDB database '{self.database_name}'",
                metadata={
                    "event": "mongodb_connected",
                    "database": self.database_name,
                    "host": self.host,
                    "port": self.port,
                },
            )
            return self.database
        except Exception as e:
            logger.error(
                f"Could not connect to MongoDB: {e}",
                metadata={"event": "mongodb_connection_error"},
                error=e,
            )
            await self.close()
            raise StoreUnavailableError(f"Could not connect to MongoDB: {e}") from e

    async def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except Exception as e:
            logger.warning("MongoDB ping failed", error=e)
            return False

    async def close(self) -> None:
        """Close database connection"""
        if self.client is not None:
            logger.info("Closing connection to MongoDB...")
            self.client.close()
        self.client = None
        self.database = None
