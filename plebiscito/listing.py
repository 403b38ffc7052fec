from typing import Optional

from plebiscito.sources import open_source

SCHEMA_SEPARATORS = ('_', '-', '.')


def file_list(files_root: Optional[str]) -> list[dict]:
    """Every file published in the remote listing."""
    return open_source(files_root, 'FILES_PATH').list()


def files_not_copied(files_root: Optional[str], schema_root: Optional[str]) -> list[dict]:
    """Files in the remote listing that have no copy among the schema files yet."""
    remote = open_source(files_root, 'FILES_PATH').list()
    copied = {f['name'] for f in open_source(schema_root, 'SCHEMA_PATH').list()}
    return [f for f in remote if f['name'] not in copied]


def _belongs_to_zone(name: str, zone: str) -> bool:
    if name == zone:
        return True
    return any(name.startswith(zone + sep) for sep in SCHEMA_SEPARATORS)


def schema_files_for_zone(schema_root: Optional[str], zone: str) -> list[dict]:
    """Schema files for one zone: named '<zone>' or '<zone>' followed by '_', '-' or '.'."""
    files = open_source(schema_root, 'SCHEMA_PATH').list()
    return [f for f in files if _belongs_to_zone(f['name'], zone)]
