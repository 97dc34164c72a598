"""
Configuration validator for startup checks.

Validates configuration settings early to provide clear error messages
before the application attempts to connect or serve traffic.
"""
from typing import List


class ConfigValidationError(Exception):
    """Configuration validation failed"""
    pass


class ConfigValidator:
    """Validates configuration settings on startup"""

    def __init__(self, config):
        self.config = config
        self.errors: List[str] = []

    def validate(self) -> None:
        """Validate all configuration settings

        Raises:
            ConfigValidationError: If validation fails
        """
        self._validate_connection()
        self._validate_page_sizes()
        self._validate_timeout()
        self._validate_populate()
        self._validate_server_address()

        if self.errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(
                f"  - {error}" for error in self.errors
            )
            raise ConfigValidationError(error_msg)

    def _validate_connection(self) -> None:
        """Validate MongoDB connection settings"""
        data = self.config.data
        if not data.host:
            self.errors.append(
                "MongoDB host is empty\n"
                "    Set data.host in settings or DATA_HOST"
            )
        if not data.database:
            self.errors.append(
                "MongoDB database name is empty\n"
                "    Set data.database in settings or DATA_DATABASE"
            )

    def _validate_page_sizes(self) -> None:
        """Validate pagination defaults"""
        data = self.config.data
        if data.default_page_size < 1:
            self.errors.append(
                f"Default page size must be at least 1, got {data.default_page_size}"
            )
        if data.max_page_size < 1:
            self.errors.append(
                f"Maximum page size must be at least 1, got {data.max_page_size}"
            )
        if data.default_page_size > data.max_page_size:
            self.errors.append(
                f"Default page size ({data.default_page_size}) exceeds "
                f"maximum page size ({data.max_page_size})"
            )

    def _validate_timeout(self) -> None:
        """Validate per-operation timeout"""
        if self.config.data.timeout_seconds < 1:
            self.errors.append(
                f"Timeout must be at least 1 second, got {self.config.data.timeout_seconds}"
            )

    def _validate_populate(self) -> None:
        """Validate seeding settings (only used in populate mode)"""
        if not self.config.populate:
            return
        data = self.config.data
        if data.populate_count < 0:
            self.errors.append(f"Populate count must not be negative, got {data.populate_count}")
        if data.populate_batch_size < 1:
            self.errors.append(f"Populate batch size must be at least 1, got {data.populate_batch_size}")

    def _validate_server_address(self) -> None:
        """Validate listen address has a numeric port"""
        try:
            self.config.server.host_port()
        except ValueError:
            self.errors.append(
                f"Server address must look like host:port, got {self.config.server.address!r}"
            )
