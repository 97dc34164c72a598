"""
Error types for the rando search service.

Client errors (ParseError, FilterBuildError) carry a message that is safe to
return to the caller. Everything else is logged with context and surfaced as
a generic failure.
"""


class RandoServiceError(Exception):
    """Base class for all service errors"""
    pass


class ClientError(RandoServiceError):
    """Request could not be understood (HTTP 400)"""
    status_code = 400


class ParseError(ClientError):
    """Raw query string is malformed or references unknown fields"""
    pass


class FilterBuildError(ClientError):
    """Parsed options could not be translated into a storage filter"""
    pass


class ExecutionError(RandoServiceError):
    """A storage operation failed while serving a request (HTTP 500)"""
    status_code = 500

    def __init__(self, collection: str, stage: str, elapsed_ms: float, cause: Exception):
        self.collection = collection
        self.stage = stage
        self.elapsed_ms = elapsed_ms
        self.cause = cause
        super().__init__(
            f"{stage} failed on {collection} after {elapsed_ms:.1f}ms: {cause}"
        )


class StorageConnectionError(RandoServiceError):
    """Initial connection to storage failed"""
    pass


class ProvisionError(RandoServiceError):
    """Collection or index creation failed"""
    pass


class UnknownCollectionError(ProvisionError):
    """Provisioning was requested for a collection with no known definition"""

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"unknown collection: {collection}")


class PopulationError(RandoServiceError):
    """An insertion failed while seeding a collection"""

    def __init__(self, collection: str, index: int, cause: Exception):
        self.collection = collection
        self.index = index
        self.cause = cause
        super().__init__(
            f"failed to insert record {index} into {collection}: {cause}"
        )
