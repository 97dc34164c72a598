"""Builds MongoDB filters and find options from QueryOptions.

Filter expressions (one per clause):

    v           equality
    v1,v2       $in
    !v          $ne
    !v1,v2      $nin
    >v >=v      $gt / $gte
    <v <=v      $lt / $lte
    *v* v* *v   contains / starts with / ends with (string fields only)
    null        attribute missing or null

Values are coerced to the field's schema type: "date" fields accept ISO-8601
timestamps (a missing offset means UTC).
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from pymongo import ASCENDING, DESCENDING

from errors import FilterBuildError
from query.options import QueryOptions
from storage.variants import PRIMARY_KEY

_COMPARISONS = (
    (">=", "$gte"),
    ("<=", "$lte"),
    (">", "$gt"),
    ("<", "$lt"),
)

NULL = "null"
WILDCARD = "*"


class MongoQueryBuilder:
    """Translates QueryOptions into pymongo find() arguments for one variant"""

    def __init__(self, variant):
        self.variant = variant

    def filter(self, options: QueryOptions) -> Dict[str, Any]:
        """Build the find/count filter

        Raises:
            FilterBuildError: a value cannot be applied to its field
        """
        query_filter: Dict[str, Any] = {}
        and_clauses: List[Dict[str, Any]] = []

        for field_name, expressions in options.filter.items():
            key = self.variant.storage_key(field_name)
            conditions = [self._condition(field_name, expr) for expr in expressions]
            self._combine(key, conditions, query_filter, and_clauses)

        if and_clauses:
            query_filter["$and"] = and_clauses
        return query_filter

    def find_options(self, options: QueryOptions) -> Dict[str, Any]:
        """Build keyword arguments for Collection.find()"""
        find_kwargs: Dict[str, Any] = {
            "skip": options.offset or 0,
            "limit": options.limit,
            # non-indexed sorts may spill to disk instead of failing
            "allow_disk_use": True,
        }

        sort = self._sort(options.sort)
        if sort:
            find_kwargs["sort"] = sort

        projection = self._projection(options.fields)
        if projection:
            find_kwargs["projection"] = projection

        return find_kwargs

    # ============ Filter ============

    @staticmethod
    def _combine(key: str, conditions: List[Any], query_filter: dict, and_clauses: list):
        """Merge the conditions for one field, falling back to $and on operator clashes"""
        if len(conditions) == 1:
            query_filter[key] = conditions[0]
            return

        merged: Dict[str, Any] = {}
        for condition in conditions:
            if not isinstance(condition, dict):
                condition = {"$eq": condition}
            if merged.keys() & condition.keys():
                and_clauses.append({key: condition})
            else:
                merged.update(condition)
        query_filter[key] = merged

    def _condition(self, field_name: str, expression: str) -> Any:
        negate = expression.startswith("!")
        body = expression[1:] if negate else expression

        if body == NULL:
            return {"$ne": None} if negate else None

        for prefix, operator in _COMPARISONS:
            if body.startswith(prefix):
                if negate:
                    raise FilterBuildError(
                        f"negated comparisons are not supported for {field_name!r}: {expression!r}"
                    )
                return {operator: self._coerce(field_name, body[len(prefix):])}

        if WILDCARD in body:
            pattern = self._pattern(field_name, body)
            return {"$not": pattern} if negate else {"$regex": pattern.pattern}

        values = body.split(",")
        if len(values) > 1:
            coerced = [self._coerce(field_name, value) for value in values]
            return {"$nin": coerced} if negate else {"$in": coerced}

        value = self._coerce(field_name, body)
        return {"$ne": value} if negate else value

    def _pattern(self, field_name: str, body: str) -> re.Pattern:
        if self.variant.bson_type(field_name) != "string":
            raise FilterBuildError(f"wildcard filters are only supported on text fields, not {field_name!r}")

        term = body.strip(WILDCARD)
        if not term or WILDCARD in term or "\x00" in term:
            raise FilterBuildError(f"unsupported wildcard expression for {field_name!r}: {body!r}")

        pattern = re.escape(term)
        if not body.startswith(WILDCARD):
            pattern = "^" + pattern
        if not body.endswith(WILDCARD):
            pattern = pattern + "$"
        return re.compile(pattern)

    def _coerce(self, field_name: str, value: str) -> Any:
        if value == "":
            raise FilterBuildError(f"empty value in filter for {field_name!r}")

        if self.variant.bson_type(field_name) == "date":
            return _parse_date(field_name, value)
        return value

    # ============ Sort & projection ============

    def _sort(self, sort: List[str]) -> List[Tuple[str, int]]:
        keys = []
        for entry in sort:
            direction = DESCENDING if entry.startswith("-") else ASCENDING
            keys.append((self.variant.storage_key(entry.lstrip("-")), direction))
        return keys

    def _projection(self, fields: List[str]) -> Dict[str, int]:
        if not fields:
            return {}

        projection = {self.variant.storage_key(name): 1 for name in fields}
        # _id is returned unless excluded; only keep it when it is the requested identity
        if PRIMARY_KEY not in projection:
            projection[PRIMARY_KEY] = 0
        return projection


def _parse_date(field_name: str, value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise FilterBuildError(
            f"invalid date for {field_name!r}: {value!r} (expected ISO-8601)"
        ) from None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
