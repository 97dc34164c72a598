"""
Collection provisioning.

Ensures each rando collection exists with its $jsonSchema validator and
index set. An existing collection is left untouched. When the listing misses a
collection that a concurrent instance creates first, the "namespace exists"
reply from create is treated the same way.
"""
import logging
import time
from typing import Iterable

import pymongo
from pymongo.database import Database
from pymongo.errors import CollectionInvalid, OperationFailure, PyMongoError

from errors import ProvisionError
from logging_config import TRACE
from storage.variants import get_variant
from value_objects import ProvisionReport

logger = logging.getLogger(__name__)

NAMESPACE_EXISTS = 48


class CollectionProvisioner:
    """Creates schema-validated, indexed collections idempotently"""

    def __init__(self, database: Database):
        self.database = database

    def ensure(self, collection: str) -> bool:
        """Ensure one collection exists

        Returns:
            True if the collection was created, False if it already existed

        Raises:
            UnknownCollectionError: no definition exists for the collection
            ProvisionError: collection or index creation failed
        """
        variant = get_variant(collection)

        if self._exists(variant) or not self._create_collection(variant):
            logger.debug(f"Collection {collection} already exists")
            return False

        self._create_indexes(variant)
        return True

    def ensure_all(self, collections: Iterable[str], timeout_seconds: float) -> ProvisionReport:
        """Ensure every collection under one shared deadline"""
        start = time.perf_counter()
        created, existing = [], []
        with pymongo.timeout(timeout_seconds):
            for collection in collections:
                if self.ensure(collection):
                    created.append(collection)
                else:
                    existing.append(collection)

        report = ProvisionReport(created=created, existing=existing)
        elapsed = time.perf_counter() - start
        logger.info(f"Collections ready ({report}) in {elapsed:.2f}s")
        return report

    def _exists(self, variant) -> bool:
        try:
            names = self.database.list_collection_names(filter={"name": variant.collection})
        except PyMongoError as e:
            raise self._failure(variant.collection, "list collections", e) from e
        return variant.collection in names

    def _create_collection(self, variant) -> bool:
        """Create with validator; a concurrent creator winning the race counts as existing"""
        logger.log(TRACE, f"Creating collection {variant.collection}")
        try:
            self.database.create_collection(
                variant.collection,
                check_exists=False,
                validator={"$jsonSchema": variant.schema},
            )
        except CollectionInvalid:
            return False
        except OperationFailure as e:
            if e.code == NAMESPACE_EXISTS:
                return False
            raise self._failure(variant.collection, "create collection", e) from e
        except PyMongoError as e:
            raise self._failure(variant.collection, "create collection", e) from e

        logger.debug(f"Collection {variant.collection} created")
        return True

    def _create_indexes(self, variant):
        logger.log(TRACE, f"Creating indices on {variant.collection}")
        try:
            names = self.database[variant.collection].create_indexes(list(variant.indexes))
        except PyMongoError as e:
            # collection stays in place, under-indexed
            raise self._failure(variant.collection, "create indices", e) from e

        logger.debug(f"Indices created on {variant.collection}: {names}")

    @staticmethod
    def _failure(collection: str, operation: str, cause: Exception) -> ProvisionError:
        logger.error(f"Failed to {operation} for {collection}: {cause}")
        return ProvisionError(f"Failed to {operation} for {collection}: {cause}")
