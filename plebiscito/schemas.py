"""
Readers for the schema datasets copied under SCHEMA_PATH.

    results.csv        one row per (zone, option) tally; columns include
                       zone_type, zone_id, complex_id, option, votes
    zones/<zone>.csv   members of a zone; columns include type, id, name

Filters compare cell values as text, exactly as they arrive in the URL.
Records come back as JSON-ready dicts with missing cells as None.
"""
import io
import json
from typing import Optional

import pandas as pd

from plebiscito.errors import DataNotFound
from plebiscito.sources import open_source

RESULTS_FILE = 'results.csv'
ZONES_DIR = 'zones'

# Parsed as numbers in the output; everything else stays text so ids keep
# their leading zeros
NUMERIC_COLUMNS = ('votes', 'percentage', 'electors', 'valid_votes', 'blank_votes',
                   'null_votes', 'tables', 'tables_counted')


def _read_table(schema_root: Optional[str], name: str) -> pd.DataFrame:
    raw = open_source(schema_root, 'SCHEMA_PATH').read(name)
    return pd.read_csv(io.BytesIO(raw), dtype=str, keep_default_na=False)


def _records(df: pd.DataFrame) -> list[dict]:
    df = df.copy()
    for col in NUMERIC_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors='coerce')
    # to_json turns NaN into null, which to_dict would not
    return json.loads(df.to_json(orient='records', force_ascii=False))


def _filter(df: pd.DataFrame, *pairs: tuple[str, str]) -> pd.DataFrame:
    mask = pd.Series(True, index=df.index)
    for column, value in pairs:
        if column not in df.columns:
            raise DataNotFound(f'Unknown field: {column}')
        mask &= df[column] == value
    return df.loc[mask]


def _zone_file(zone: str) -> str:
    if not zone or '/' in zone or '\\' in zone or zone.startswith('.'):
        raise DataNotFound(f'Unknown zone: {zone}')
    return f'{ZONES_DIR}/{zone}.csv'


def zone_info(schema_root: Optional[str], zone: str) -> list[dict]:
    return _records(_read_table(schema_root, _zone_file(zone)))


def zone_info_by_type(schema_root: Optional[str], zone: str, zone_type: str) -> list[dict]:
    df = _read_table(schema_root, _zone_file(zone))
    return _records(_filter(df, ('type', zone_type)))


def results(schema_root: Optional[str]) -> list[dict]:
    return _records(_read_table(schema_root, RESULTS_FILE))


def results_filtered(schema_root: Optional[str], *pairs: tuple[str, str]) -> list[dict]:
    """Result rows matching every (column, value) pair."""
    df = _read_table(schema_root, RESULTS_FILE)
    return _records(_filter(df, *pairs))


def search(schema_root: Optional[str], complex_id: str) -> list[dict]:
    return results_filtered(schema_root, ('complex_id', complex_id))


def search_by_type(schema_root: Optional[str], zone_type: str) -> list[dict]:
    return results_filtered(schema_root, ('zone_type', zone_type))


def search_by_type_and_id(schema_root: Optional[str], zone_type: str, zone_id: str) -> list[dict]:
    return results_filtered(schema_root, ('zone_type', zone_type), ('zone_id', zone_id))
