"""Cross-origin gate: echo CORS headers back to allow-listed referers only."""
from typing import Iterable, Optional

ALLOW_METHODS = 'GET,POST,PUT,PATCH,DELETE'


def allowed_origin(referer: Optional[str], allow_list: Iterable[str]) -> Optional[str]:
    """Return the referer's origin if it is allow-listed, otherwise None."""
    if not referer:
        return None
    if referer.endswith('/'):
        referer = referer[:-1]
    return referer if referer in allow_list else None


def cors_headers(referer: Optional[str], allow_list: Iterable[str]) -> dict[str, str]:
    origin = allowed_origin(referer, allow_list)
    if origin is None:
        return {}
    return {
        'Access-Control-Allow-Origin': origin,
        'Access-Control-Allow-Methods': ALLOW_METHODS,
    }
