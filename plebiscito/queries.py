"""
The cacheable queries behind every endpoint.

Each builder returns a Query: the cache key derived from its parameters,
the producer that computes the authoritative value, and the settings that
must be present before the query is worth answering at all.
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional

from plebiscito import listing, schemas, tables
from plebiscito.config import Settings
from plebiscito.errors import ConfigurationMissing
from plebiscito.keys import cache_key


@dataclass(frozen=True)
class Query:
    key: str
    produce: Callable[[], Any]
    requires: tuple[tuple[str, Optional[str]], ...] = ()

    def check_configured(self) -> None:
        """
        Raises:
            ConfigurationMissing: If a required setting is empty
        """
        for setting, value in self.requires:
            if not value:
                raise ConfigurationMissing(f'No {setting} configured')


def _files(settings: Settings):
    return ('FILES_PATH', settings.files_path)


def _schemas(settings: Settings):
    return ('SCHEMA_PATH', settings.schema_path)


def zones() -> Query:
    return Query('zones', lambda: tables.ZONE_TYPES)


def elections() -> Query:
    return Query('elections', lambda: tables.ELECTIONS)


def ambits() -> Query:
    return Query('ambit', lambda: tables.AMBITS)


def files(settings: Settings) -> Query:
    root = settings.files_path
    return Query('files', lambda: listing.file_list(root), (_files(settings),))


def not_copied(settings: Settings) -> Query:
    files_root, schema_root = settings.files_path, settings.schema_path
    return Query('not-copy', lambda: listing.files_not_copied(files_root, schema_root),
                 (_files(settings), _schemas(settings)))


def scenery(settings: Settings, zone: str) -> Query:
    root = settings.schema_path
    return Query(cache_key('scenery', zone), lambda: listing.schema_files_for_zone(root, zone),
                 (_schemas(settings),))


def zone_data(settings: Settings, zone: str, zone_type: Optional[str] = None) -> Query:
    root = settings.schema_path
    if zone_type is None:
        return Query(cache_key('data', zone), lambda: schemas.zone_info(root, zone),
                     (_schemas(settings),))
    return Query(cache_key('data', zone, zone_type),
                 lambda: schemas.zone_info_by_type(root, zone, zone_type),
                 (_schemas(settings),))


def all_results(settings: Settings) -> Query:
    root = settings.schema_path
    return Query('results-all', lambda: schemas.results(root), (_schemas(settings),))


def filtered_results(settings: Settings, *params: str) -> Query:
    """Results filtered by alternating key/value path parameters."""
    if not params or len(params) % 2:
        raise ValueError('Result filters come in key/value pairs')
    root = settings.schema_path
    pairs = [(params[i], params[i + 1]) for i in range(0, len(params), 2)]
    return Query(cache_key('results', *params), lambda: schemas.results_filtered(root, *pairs),
                 (_schemas(settings),))


def search(settings: Settings, complex_id: str) -> Query:
    root = settings.schema_path
    return Query(cache_key('search', complex_id), lambda: schemas.search(root, complex_id),
                 (_schemas(settings),))


def search_by_type(settings: Settings, zone_type: str, zone_id: Optional[str] = None) -> Query:
    root = settings.schema_path
    if zone_id is None:
        return Query(cache_key('search-type', zone_type),
                     lambda: schemas.search_by_type(root, zone_type),
                     (_schemas(settings),))
    return Query(cache_key('search-type', zone_type, zone_id),
                 lambda: schemas.search_by_type_and_id(root, zone_type, zone_id),
                 (_schemas(settings),))
