"""Rando search service entry point.

Serve:     python main.py            (or: uvicorn --factory main:create_app)
Populate:  python main.py --populate
"""
import argparse
import asyncio
import logging
import signal
import sys
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI

from app_state import AppState
from config import Config
from errors import RandoServiceError
from logging_config import TRACE, configure_logging
from operations.data_populator import DataPopulator
from routes.health import router as health_router
from routes.randos import router as randos_router
from startup.config_validator import ConfigValidationError
from startup.manager import StartupManager
from storage.variants import VARIANTS

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Build the FastAPI application around one AppState"""
    state = AppState(config or Config.load())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan"""
        manager = StartupManager(state)
        await manager.initialize()
        yield
        state.close_all_resources()

    app = FastAPI(
        title="Rando Search API",
        description="Paginated, filterable search over synthetic rando records",
        version="1.0.0",
        lifespan=lifespan
    )

    # Store state in app for route access
    app.state.app_state = state

    app.include_router(health_router)
    app.include_router(randos_router)
    return app


def populate(config: Config, cancel_event: Optional[threading.Event] = None) -> int:
    """Provision storage, seed both collections, return a process exit code"""
    state = AppState(config)
    try:
        asyncio.run(StartupManager(state).initialize())
        populator = DataPopulator(
            batch_size=config.data.populate_batch_size,
            cancel_event=cancel_event
        )
        logger.info("Populating environment with random data")
        inserted = populator.populate_all(state.get_database(), list(VARIANTS), config.data.populate_count)
    except (RandoServiceError, ConfigValidationError) as e:
        logger.critical(f"Unable to complete operation: {e}")
        return 1
    finally:
        state.close_all_resources()

    if cancel_event is not None and cancel_event.is_set():
        logger.warning(f"Data population cancelled after inserting {inserted} records")
        return 0

    logger.info(f"Data population complete: {inserted} records inserted")
    return 0


def serve(config: Config) -> int:
    """Run the HTTP server until interrupted"""
    import uvicorn

    host, port = config.server.host_port()
    logger.info(f"Starting HTTP server on {host}:{port}")
    uvicorn.run(create_app(config), host=host, port=port, log_config=None)
    return 0


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rando search service")
    parser.add_argument("-p", "--populate", action="store_true",
                        help="Seed both collections with random data and exit")
    parser.add_argument("--settings", type=Path, default=None,
                        help="Path to a settings YAML file (default: settings/defaults.yaml)")
    return parser.parse_args(argv)


def run(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point"""
    args = _parse_args(argv)
    config = Config.load(args.settings)
    if args.populate:
        config.populate = True

    configure_logging(config.logging)
    logger.log(TRACE, f"Settings gathered: populate={config.populate} "
                      f"database={config.data.database} address={config.server.address}")

    if not config.populate:
        return serve(config)

    cancel_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda signum, frame: cancel_event.set())
    return populate(config, cancel_event)


if __name__ == "__main__":
    sys.exit(run())
