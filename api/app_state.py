from typing import Dict

from config import Config


class StorageServices:
    """Storage dependencies

    Holds the process-wide MongoDB connection. The client is shared
    read-only by every request handler.
    """

    def __init__(self):
        self.connection = None


class QueryServices:
    """Search pipelines, one per collection variant

    Separated from StorageServices to maintain SRP.
    """

    def __init__(self):
        self.pipelines: Dict[str, object] = {}


class AppState:
    """Application state container

    Built once at startup with the loaded configuration and passed to
    routes through app.state; request handlers only read from it.

    Delegation methods hide internal structure (Law of Demeter).
    """

    def __init__(self, config: Config):
        self.config = config
        self.storage = StorageServices()
        self.query = QueryServices()

    # === Service Access Delegation (for route handlers) ===

    def get_config(self) -> Config:
        """Get loaded configuration"""
        return self.config

    def get_connection(self):
        """Get MongoDB connection"""
        return self.storage.connection

    def get_database(self):
        """Get configured MongoDB database"""
        return self.storage.connection.database

    def get_search_pipeline(self, collection: str):
        """Get search pipeline for a collection"""
        return self.query.pipelines[collection]

    def register_search_pipeline(self, pipeline):
        """Register search pipeline under its collection name"""
        self.query.pipelines[pipeline.name] = pipeline

    # === Health ===

    def is_database_healthy(self) -> bool:
        """Check if storage answers a ping"""
        connection = self.storage.connection
        if connection is None:
            return False
        return connection.ping()

    # === Lifecycle Management Delegation ===

    def close_all_resources(self):
        """Close storage connection"""
        if self.storage.connection:
            self.storage.connection.close()
            self.storage.connection = None
        self.query.pipelines.clear()
