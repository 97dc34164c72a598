"""Query options parsed from a request query string."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

LIMIT = "limit"
OFFSET = "offset"


@dataclass
class QueryOptions:
    """Filter, sort, pagination and projection for one request.

    filter maps a field name to the raw value expressions supplied for it
    (e.g. {"email": ["x@test.com"], "createdAt": [">=2024-01-01"]}).
    sort holds field names, prefixed with "-" for descending order.
    """
    filter: Dict[str, List[str]] = field(default_factory=dict)
    sort: List[str] = field(default_factory=list)
    page: Dict[str, int] = field(default_factory=dict)
    fields: List[str] = field(default_factory=list)

    @property
    def limit(self) -> Optional[int]:
        return self.page.get(LIMIT)

    @property
    def offset(self) -> Optional[int]:
        return self.page.get(OFFSET)

    def has_filter(self) -> bool:
        return bool(self.filter)

    def add_filter(self, field_name: str, expression: str):
        self.filter.setdefault(field_name, []).append(expression)

    def apply_page_defaults(self, default_page_size: int, max_page_size: int):
        """Fill in and clamp pagination, in this order:

        1. no page block: {limit: default, offset: 0}
        2. missing limit: default
        3. missing offset: 0
        4. limit above max: max
        """
        if not self.page:
            self.page = {LIMIT: default_page_size, OFFSET: 0}

        if LIMIT not in self.page:
            self.page[LIMIT] = default_page_size

        if OFFSET not in self.page:
            self.page[OFFSET] = 0

        if self.page[LIMIT] > max_page_size:
            self.page[LIMIT] = max_page_size

    def to_dict(self) -> dict:
        """Shape echoed back in search responses"""
        return {
            "filter": {name: list(values) for name, values in self.filter.items()},
            "sort": list(self.sort),
            "page": {LIMIT: self.limit, OFFSET: self.offset},
            "fields": list(self.fields),
        }
