"""Seeds rando collections with generated records.

Inserts in ordered batches and stops at the first failing record. Records
inserted before the failure stay in place. A threading.Event can be set to
stop the run between batches.
"""
import logging
import threading
import time
from typing import Callable, Iterable, Optional

from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import BulkWriteError, PyMongoError

from errors import PopulationError
from operations.rando_generator import RandomRecordGenerator
from storage.variants import get_variant
from value_objects import PopulationProgress

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 100_000
DEFAULT_BATCH_SIZE = 1000

ProgressCallback = Callable[[PopulationProgress], None]


class DataPopulator:
    """Drives RandomRecordGenerator to fill a collection"""

    def __init__(self, generator: Optional[RandomRecordGenerator] = None,
                 batch_size: int = DEFAULT_BATCH_SIZE,
                 on_progress: Optional[ProgressCallback] = None,
                 cancel_event: Optional[threading.Event] = None):
        self.generator = generator or RandomRecordGenerator()
        self.batch_size = max(1, batch_size)
        self.on_progress = on_progress
        self.cancel_event = cancel_event or threading.Event()

    def populate(self, collection: Collection, variant, count: int) -> int:
        """Insert count generated records into collection

        Returns:
            Number of records inserted (less than count if cancelled)

        Raises:
            PopulationError: an insertion failed; carries the failing record index
        """
        start = time.perf_counter()
        inserted = 0
        next_report = PROGRESS_INTERVAL

        logger.info(f"Populating {variant.collection} with {count} records")
        while inserted < count:
            if self.cancel_event.is_set():
                logger.warning(f"Population of {variant.collection} cancelled after {inserted} records")
                return inserted

            size = min(self.batch_size, count - inserted)
            batch = [self.generator.generate_document(variant) for _ in range(size)]
            inserted += self._insert(collection, variant, batch, inserted)

            while inserted >= next_report:
                self._report(PopulationProgress(variant.collection, next_report, count))
                next_report += PROGRESS_INTERVAL

        elapsed = time.perf_counter() - start
        logger.info(f"Collection {variant.collection} populated with {inserted} records in {elapsed:.1f}s")
        return inserted

    def populate_all(self, database: Database, collections: Iterable[str], count: int) -> int:
        """Populate each collection in turn; stops on the first failure"""
        total = 0
        for name in collections:
            if self.cancel_event.is_set():
                break
            variant = get_variant(name)
            total += self.populate(database[name], variant, count)
        return total

    @staticmethod
    def _insert(collection: Collection, variant, batch: list, offset: int) -> int:
        try:
            collection.insert_many(batch, ordered=True)
        except BulkWriteError as e:
            write_errors = e.details.get("writeErrors") or [{}]
            index = offset + write_errors[0].get("index", e.details.get("nInserted", 0))
            logger.error(f"Insert failed on {variant.collection} at record {index}: {e}")
            raise PopulationError(variant.collection, index, e) from e
        except PyMongoError as e:
            logger.error(f"Insert failed on {variant.collection} at batch starting {offset}: {e}")
            raise PopulationError(variant.collection, offset, e) from e
        return len(batch)

    def _report(self, progress: PopulationProgress):
        logger.debug(f"Inserted documents: {progress}")
        if self.on_progress is not None:
            self.on_progress(progress)
