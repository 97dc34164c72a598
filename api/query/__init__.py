"""Query string translation.

- options: QueryOptions parsed from a request
- translator: raw query string -> QueryOptions with pagination policy applied
- filter_builder: QueryOptions -> MongoDB filter and find options
"""
