"""
Value objects for the rando search service.

Principles:
- Immutable data structures
- Named instead of primitive types (no Primitive Obsession)
"""

from dataclasses import dataclass, field
from typing import List

from models import Rando
from query.options import QueryOptions


@dataclass(frozen=True)
class PageDefaults:
    """Pagination policy applied to every parsed query.

    Replaces passing (default_page_size, max_page_size) as loose ints.
    """
    default_page_size: int = 100
    max_page_size: int = 10000

    @classmethod
    def from_config(cls, data_config) -> 'PageDefaults':
        """Create from DataConfig"""
        return cls(
            default_page_size=data_config.default_page_size,
            max_page_size=data_config.max_page_size
        )


@dataclass(frozen=True)
class SearchResult:
    """Outcome of one search request.

    total is approximate when the filter is empty (storage estimate)
    and exact otherwise.
    """
    data: List[Rando]
    options: QueryOptions
    total: int
    duration_ms: float = 0.0

    @property
    def duration_header(self) -> str:
        """Value for the X-Query-Duration response header"""
        return f"{self.duration_ms:.3f}ms"


@dataclass(frozen=True)
class PopulationProgress:
    """Progress snapshot reported while seeding a collection"""
    collection: str
    inserted: int
    total: int

    @property
    def percentage(self) -> float:
        """Percentage of the run completed"""
        if self.total == 0:
            return 100.0
        return self.inserted / self.total * 100

    def __str__(self) -> str:
        return f"{self.collection}: {self.inserted}/{self.total} ({self.percentage:.2f}%)"


@dataclass(frozen=True)
class ProvisionReport:
    """Which collections were created by a provisioning run"""
    created: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"created={self.created} existing={self.existing}"
