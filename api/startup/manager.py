"""Startup manager - orchestrates application initialization.

Every step is fatal on failure: the service must not serve traffic (or seed
data) against storage that is unreachable or unprovisioned.
"""
import asyncio
import logging

from app_state import AppState
from operations.search_pipeline import SearchPipeline
from startup.config_validator import ConfigValidator
from storage.connection import MongoConnection
from storage.provisioner import CollectionProvisioner
from storage.variants import VARIANTS
from value_objects import PageDefaults

logger = logging.getLogger(__name__)


class StartupManager:
    """Manages application startup.

    Phases, in order:
    - Configuration: validate config
    - Storage: connect to MongoDB
    - Provisioning: ensure both collections, validators and indices
    - Query: build one search pipeline per collection variant
    """

    def __init__(self, app_state: AppState):
        self.state = app_state
        self.config = app_state.get_config()

    async def initialize(self):
        """Initialize all components (blocking storage calls run off the event loop)"""
        logger.info("Initializing rando service...")
        self._validate_config()
        await asyncio.to_thread(self._connect)
        await asyncio.to_thread(self._provision_collections)
        self._init_search_pipelines()
        logger.info("Rando service ready")

    # ============ Configuration Phase ============

    def _validate_config(self):
        """Validate configuration before startup"""
        validator = ConfigValidator(self.config)
        validator.validate()
        logger.debug("Configuration validated")

    # ============ Storage Phase ============

    def _connect(self):
        """Connect to MongoDB"""
        connection = MongoConnection(self.config.data)
        connection.connect()
        self.state.storage.connection = connection

    # ============ Provisioning Phase ============

    def _provision_collections(self):
        """Ensure every known collection exists under one startup deadline"""
        provisioner = CollectionProvisioner(self.state.get_database())
        provisioner.ensure_all(list(VARIANTS), self.config.data.timeout_seconds)

    # ============ Query Phase ============

    def _init_search_pipelines(self):
        """Create one search pipeline per collection variant"""
        database = self.state.get_database()
        page_defaults = PageDefaults.from_config(self.config.data)
        for name, variant in VARIANTS.items():
            pipeline = SearchPipeline(
                variant,
                database[name],
                page_defaults,
                self.config.data.timeout_seconds
            )
            self.state.register_search_pipeline(pipeline)
            logger.debug(f"Search pipeline ready for /{variant.version}/randos -> {name}")
