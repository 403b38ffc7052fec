"""
Cache key derivation.

A key is a fixed prefix naming the query followed by its path parameters,
joined with '-', e.g. 'results-zone-5'. Parameters keep their case; only
'%' and '-' inside a parameter are percent-escaped, so ('a-b', 'c') and
('a', 'b-c') can never produce the same key.
"""

SEPARATOR = '-'


def _escape(param) -> str:
    return str(param).replace('%', '%25').replace(SEPARATOR, '%2D')


def cache_key(prefix: str, *params) -> str:
    """Build the cache key for a query prefix and its parameters."""
    if not prefix:
        raise ValueError('Cache key prefix must not be empty')
    return SEPARATOR.join([prefix] + [_escape(p) for p in params])
