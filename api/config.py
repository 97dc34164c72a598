"""
Configuration for the rando search service
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple


@dataclass
class DataConfig:
    """MongoDB connection and query configuration"""
    protocol: str = "mongodb"
    host: str = "localhost:27017"
    username: str = ""
    password: str = ""
    database: str = "randos"
    options: str = "retryWrites=true&w=majority"
    default_page_size: int = 100
    max_page_size: int = 10000
    timeout_seconds: int = 30
    populate_count: int = 10_000_000
    populate_batch_size: int = 1000

    def mongo_uri(self) -> str:
        """Build connection URI; credentials are omitted unless both are set"""
        if not self.username or not self.password:
            return f"{self.protocol}://{self.host}/{self.database}?{self.options}"

        return (
            f"{self.protocol}://{self.username}:{self.password}"
            f"@{self.host}/{self.database}?{self.options}"
        )

    def redacted_uri(self) -> str:
        """Connection URI safe for logging"""
        if not self.username or not self.password:
            return self.mongo_uri()
        return (
            f"{self.protocol}://{self.username}:****"
            f"@{self.host}/{self.database}?{self.options}"
        )


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "info"


@dataclass
class ServerConfig:
    """HTTP server configuration"""
    address: str = "0.0.0.0:8080"

    def host_port(self) -> Tuple[str, int]:
        """Split listen address into (host, port)"""
        host, _, port = self.address.rpartition(":")
        return host or "0.0.0.0", int(port)


@dataclass
class Config:
    """Main configuration container"""
    data: DataConfig = field(default_factory=DataConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    populate: bool = False

    @classmethod
    def load(cls, settings_path: Optional[Path] = None) -> 'Config':
        """Create config from settings files and environment - delegates to EnvironmentConfigLoader"""
        from environment_config_loader import EnvironmentConfigLoader
        return EnvironmentConfigLoader(settings_path).load()
