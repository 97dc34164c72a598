"""Query string translation.

Grammar (values are URL-decoded):

    filter[<field>]=<expr>     repeatable; clauses on one field are ANDed
    sort=<field>,-<field>      repeatable; "-" sorts descending
    page[limit]=<int>
    page[offset]=<int>
    fields=<field>,<field>     projection

Filter expressions are kept as raw strings here; their operators are
interpreted by MongoQueryBuilder against the field types.
"""
import logging
import re
from typing import Iterable, List, Tuple
from urllib.parse import unquote_plus

from errors import ParseError
from query.options import LIMIT, OFFSET, QueryOptions
from value_objects import PageDefaults

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^(?P<name>[A-Za-z_]+)(?:\[(?P<sub>[^\[\]]*)\])?$")

# skip and limit are encoded as signed 64-bit integers
MAX_PAGE_VALUE = 2 ** 63 - 1


class QueryTranslator:
    """Translates a raw query string into QueryOptions for one variant.

    The variant supplies the known field names; clauses on anything else
    are rejected.
    """

    def __init__(self, variant, page_defaults: PageDefaults):
        self.variant = variant
        self.page_defaults = page_defaults

    def translate(self, raw_query: str) -> QueryOptions:
        """Parse raw_query and apply pagination defaults

        Raises:
            ParseError: malformed syntax, unknown fields or invalid page values
        """
        options = QueryOptions()
        for name, sub, value in self._split(raw_query or ""):
            self._apply(options, name, sub, value)

        options.apply_page_defaults(
            self.page_defaults.default_page_size,
            self.page_defaults.max_page_size
        )
        logger.debug(f"Parsed query for {self.variant.collection}: {options.to_dict()}")
        return options

    # ============ Tokenizing ============

    @staticmethod
    def _split(raw_query: str) -> Iterable[Tuple[str, str, str]]:
        """Yield (name, bracket, value) for each query parameter"""
        for pair in raw_query.split("&"):
            if not pair:
                continue
            if "=" not in pair:
                raise ParseError(f"malformed query parameter: {unquote_plus(pair)}")

            raw_key, raw_value = pair.split("=", 1)
            key = unquote_plus(raw_key)
            match = _KEY_PATTERN.match(key)
            if not match:
                raise ParseError(f"malformed query parameter: {key}")

            yield match.group("name"), match.group("sub"), unquote_plus(raw_value)

    # ============ Parameters ============

    def _apply(self, options: QueryOptions, name: str, sub, value: str):
        if name == "filter":
            self._apply_filter(options, sub, value)
        elif name == "page":
            self._apply_page(options, sub, value)
        elif name == "sort":
            self._no_bracket(name, sub)
            options.sort.extend(self._parse_sort(value))
        elif name == "fields":
            self._no_bracket(name, sub)
            options.fields.extend(self._parse_fields(value))
        else:
            raise ParseError(f"unsupported query parameter: {name}")

    def _apply_filter(self, options: QueryOptions, field_name, value: str):
        if not field_name:
            raise ParseError("filter requires a field name, e.g. filter[email]=...")
        self._check_field(field_name)
        if value == "":
            raise ParseError(f"filter[{field_name}] requires a value")
        options.add_filter(field_name, value)

    def _apply_page(self, options: QueryOptions, key, value: str):
        if key not in (LIMIT, OFFSET):
            raise ParseError(f"unsupported page parameter: page[{key or ''}]")

        try:
            number = int(value)
        except ValueError:
            raise ParseError(f"page[{key}] must be an integer, got {value!r}")

        if key == LIMIT and number < 1:
            raise ParseError(f"page[limit] must be at least 1, got {number}")
        if key == OFFSET and number < 0:
            raise ParseError(f"page[offset] must not be negative, got {number}")
        if number > MAX_PAGE_VALUE:
            raise ParseError(f"page[{key}] must not exceed {MAX_PAGE_VALUE}, got {number}")

        options.page[key] = number

    def _parse_sort(self, value: str) -> List[str]:
        entries = [entry.strip() for entry in value.split(",") if entry.strip()]
        for entry in entries:
            self._check_field(entry.lstrip("-+"))
        # a leading "+" is accepted as an explicit ascending marker
        return [entry[1:] if entry.startswith("+") else entry for entry in entries]

    def _parse_fields(self, value: str) -> List[str]:
        names = [name.strip() for name in value.split(",") if name.strip()]
        for name in names:
            self._check_field(name)
        return names

    def _check_field(self, field_name: str):
        if field_name not in self.variant.field_names():
            raise ParseError(
                f"unknown field {field_name!r} for {self.variant.collection}"
            )

    @staticmethod
    def _no_bracket(name: str, sub):
        if sub is not None:
            raise ParseError(f"malformed query parameter: {name}[{sub}]")
