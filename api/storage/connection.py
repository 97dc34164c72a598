"""
MongoDB connection management.

One MongoClient is created per process; its connection pool is safe for
concurrent use by all request handlers.
"""
import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import DataConfig
from errors import StorageConnectionError

logger = logging.getLogger(__name__)


class MongoConnection:
    """Owns the process-wide MongoClient"""

    def __init__(self, config: DataConfig, client_factory=MongoClient):
        self.config = config
        self._client_factory = client_factory
        self.client: Optional[MongoClient] = None

    def connect(self) -> MongoClient:
        """Create the client and verify the server is reachable

        Raises:
            StorageConnectionError: server could not be reached
        """
        logger.info(f"Connecting to MongoDB at {self.config.redacted_uri()}")
        timeout_ms = self.config.timeout_seconds * 1000
        try:
            self.client = self._client_factory(
                self.config.mongo_uri(),
                tz_aware=True,
                serverSelectionTimeoutMS=timeout_ms,
            )
            self.client.admin.command("ping")
        except PyMongoError as e:
            self.close()
            raise StorageConnectionError(
                f"Failed to connect to MongoDB at {self.config.redacted_uri()}: {e}"
            ) from e

        logger.debug("MongoDB connection established")
        return self.client

    @property
    def database(self) -> Database:
        """Configured database handle"""
        if self.client is None:
            raise StorageConnectionError("MongoDB connection has not been established")
        return self.client[self.config.database]

    def ping(self) -> bool:
        """Check whether the server still answers"""
        if self.client is None:
            return False
        try:
            self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    def close(self):
        """Close client and its pool"""
        if self.client is not None:
            self.client.close()
            self.client = None
