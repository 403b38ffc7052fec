"""
Process configuration, read from the environment.

    CORS         comma-separated allow-list of origins
    CACHE_URL    backing store URL (REDIS_URL is accepted too); unset disables caching
    FILES_PATH   root of the remote file listing (directory or s3://bucket/prefix)
    SCHEMA_PATH  root of the copied schema datasets (directory or s3://bucket/prefix)
    PORT         HTTP port for the development server
    CACHE_TTL    expiry of cache entries, in seconds
    DEV_MODE     run CherryPy in development mode
"""
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from plebiscito.cache import DEFAULT_TTL
from plebiscito.utils import is_true, split_list

DEFAULT_PORT = 3333


@dataclass
class Settings:
    cors_origins: list[str] = field(default_factory=list)
    cache_url: Optional[str] = None
    files_path: Optional[str] = None
    schema_path: Optional[str] = None
    port: int = DEFAULT_PORT
    cache_ttl: int = DEFAULT_TTL
    dev_mode: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        env = os.environ if environ is None else environ
        settings = cls(
            cors_origins=split_list(env.get('CORS')),
            cache_url=env.get('CACHE_URL') or env.get('REDIS_URL') or None,
            files_path=env.get('FILES_PATH') or None,
            schema_path=env.get('SCHEMA_PATH') or None,
            port=int(env.get('PORT') or DEFAULT_PORT),
            cache_ttl=int(env.get('CACHE_TTL') or DEFAULT_TTL),
            dev_mode=is_true(env.get('DEV_MODE')),
        )
        if settings.cache_ttl <= 0:
            raise ValueError(f'CACHE_TTL must be positive, got {settings.cache_ttl}')
        return settings
