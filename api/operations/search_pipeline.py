"""Search pipeline for one rando collection.

Stages run strictly in order and are never retried:

1. Parse      raw query string -> QueryOptions (defaults and clamp applied)
2. Build      QueryOptions -> filter + find options
3. Find       run find() under the request deadline
4. Materialize  drain the cursor into Rando models (bounded by limit)
5. Count      estimated count for an empty filter, exact count otherwise
6. Assemble   SearchResult with the total pipeline duration

Parse/build failures raise client errors before any storage access. Storage
failures, timeouts included, raise ExecutionError. The cursor is closed on
every path once find() has returned.
"""
import logging
import time
from typing import Any, Callable, Dict, List

import pymongo
from pymongo.collection import Collection
from bson.errors import BSONError
from pymongo.errors import PyMongoError

from errors import ExecutionError
from logging_config import TRACE
from models import Rando
from query.filter_builder import MongoQueryBuilder
from query.translator import QueryTranslator
from value_objects import PageDefaults, SearchResult

logger = logging.getLogger(__name__)

# Driver failures plus command encoding failures (out-of-range integers, invalid BSON)
STORAGE_ERRORS = (PyMongoError, BSONError, OverflowError)


class SearchPipeline:
    """Executes search requests against one variant's collection.

    Holds no per-request state, so one instance serves concurrent requests.
    """

    def __init__(self, variant, collection: Collection, page_defaults: PageDefaults,
                 timeout_seconds: float, clock: Callable[[], float] = time.perf_counter):
        self.variant = variant
        self.collection = collection
        self.translator = QueryTranslator(variant, page_defaults)
        self.builder = MongoQueryBuilder(variant)
        self.timeout_seconds = timeout_seconds
        self.clock = clock

    @property
    def name(self) -> str:
        return self.variant.collection

    def execute(self, raw_query: str) -> SearchResult:
        """Run all stages for one request

        Raises:
            ParseError, FilterBuildError: client errors
            ExecutionError: find, cursor read or count failed
        """
        start = self.clock()

        options = self.translator.translate(raw_query)
        query_filter = self.builder.filter(options)
        find_kwargs = self.builder.find_options(options)
        self._log_stage("Query built", start)

        with pymongo.timeout(self.timeout_seconds):
            cursor = self._find(query_filter, find_kwargs)
            try:
                data = self._materialize(cursor, options.limit)
            finally:
                self._close(cursor)
            total = self._count(query_filter)

        duration_ms = self._elapsed_ms(start)
        logger.info(
            f"Search on {self.name} complete: {len(data)} of {total} in {duration_ms:.1f}ms"
        )
        return SearchResult(data=data, options=options, total=total, duration_ms=duration_ms)

    # ============ Stages ============

    def _find(self, query_filter: Dict[str, Any], find_kwargs: Dict[str, Any]):
        logger.log(TRACE, f"Beginning MongoDB query on {self.name}")
        start = self.clock()
        try:
            cursor = self.collection.find(query_filter, **find_kwargs)
        except STORAGE_ERRORS as e:
            raise self._failure("find", start, e) from e

        self._log_stage("MongoDB query complete", start)
        return cursor

    def _materialize(self, cursor, limit: int) -> List[Rando]:
        start = self.clock()
        data: List[Rando] = []
        try:
            for document in cursor:
                data.append(self.variant.decode(document))
                if len(data) >= limit:
                    break
        except STORAGE_ERRORS + (ValueError,) as e:
            raise self._failure("read cursor", start, e) from e

        self._log_stage("Cursor read / data serialization complete", start)
        return data

    def _count(self, query_filter: Dict[str, Any]) -> int:
        logger.log(TRACE, f"Looking up total count on {self.name}")
        start = self.clock()
        try:
            if not query_filter:
                total = self.collection.estimated_document_count()
            else:
                total = self.collection.count_documents(query_filter)
        except STORAGE_ERRORS as e:
            raise self._failure("count", start, e) from e

        self._log_stage("Completed count lookup", start)
        return total

    def _close(self, cursor):
        """Close the cursor; a failure here is logged and never surfaced"""
        try:
            cursor.close()
        except PyMongoError as e:
            logger.error(f"Failed to close cursor on {self.name}: {e}")

    # ============ Helpers ============

    def _failure(self, stage: str, start: float, cause: Exception) -> ExecutionError:
        error = ExecutionError(self.name, stage, self._elapsed_ms(start), cause)
        logger.error(f"Failed to {stage}: {error}")
        return error

    def _log_stage(self, message: str, start: float):
        logger.debug(f"{message} on {self.name} in {self._elapsed_ms(start):.1f}ms")

    def _elapsed_ms(self, start: float) -> float:
        return (self.clock() - start) * 1000
