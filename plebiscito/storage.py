"""
Storage abstraction for cached API payloads.

A backing store hands out a short-lived Session for every cache call. A
session reads and writes opaque bytes under a key together with an expiry
in seconds; the store forgets entries on its own once they expire, there is
no delete operation.

Backends are picked from a single connection URL (see open_storage).
"""
import os
import tempfile
import time
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote, urlparse

import appdirs
import boto3
import redis
from botocore.exceptions import ClientError

APP_NAME = 'plebiscito_reader'

# Seconds; a hung store must not hold a request thread for long
SOCKET_TIMEOUT = 5


class Session(ABC):
    """A per-call handle on a backing store."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """
        Retrieve an entry.

        Returns:
            Entry contents as bytes, or None if absent or expired
        """
        pass

    @abstractmethod
    def ttl(self, key: str) -> Optional[int]:
        """
        Remaining lifetime of an entry in seconds.

        Returns:
            Whole seconds left, or None if the entry is absent or the
            store cannot tell
        """
        pass

    @abstractmethod
    def put(self, key: str, data: bytes, expiry: int) -> None:
        """Store an entry, replacing any previous one, expiring in `expiry` seconds."""
        pass

    def disconnect(self) -> None:
        """Release whatever the session acquired. Default: nothing."""
        pass


class Storage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    def connect(self) -> Session:
        """
        Acquire a session for one cache call.

        Raises:
            Any backend error if the store cannot be reached
        """
        pass

    def close(self) -> None:
        """Tear down process-wide resources at shutdown."""
        pass


def _remaining(expires_at: float) -> int:
    return max(0, int(expires_at - time.time()))


class LocalFileStorage(Storage, Session):
    """
    Local filesystem storage implementation.

    Each entry is one file in `base_dir`: a header line holding the absolute
    expiry time, followed by the payload. Uses atomic writes (write to a
    temporary file, then rename) so readers never see a partial entry.
    Sessions are the storage itself since there is nothing to acquire.

    Expired files are deleted when read, and writes sweep the directory
    every PURGE_INTERVAL seconds for expired files nobody reads again.
    """

    SUFFIX = '.cache'
    # Seconds between sweeps for expired entries nobody reads again
    PURGE_INTERVAL = 600

    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        self._last_purge = time.time()

        # Create base directory if it doesn't exist
        if not os.path.exists(base_dir):
            os.makedirs(base_dir, exist_ok=True)

    def connect(self) -> Session:
        return self

    def _path(self, key: str) -> str:
        # Keys may carry characters that are not safe in file names
        return os.path.join(self.base_dir, quote(key, safe='') + self.SUFFIX)

    @staticmethod
    def _remove(path: str) -> None:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass

    def _read(self, key: str) -> Optional[tuple[float, bytes]]:
        path = self._path(key)

        if not os.path.exists(path):
            return None

        with open(path, 'rb') as f:
            header, _, data = f.read().partition(b'\n')

        expires_at = float(header)
        if expires_at <= time.time():
            self._remove(path)
            return None
        return expires_at, data

    def purge_expired(self) -> int:
        """
        Delete every expired entry, including ones that are never read again.

        Returns:
            Number of entries removed
        """
        now = time.time()
        removed = 0
        for name in os.listdir(self.base_dir):
            if not name.endswith(self.SUFFIX):
                continue
            path = os.path.join(self.base_dir, name)
            try:
                with open(path, 'rb') as f:
                    expires_at = float(f.readline())
            except FileNotFoundError:
                continue
            except ValueError:
                # Not written by us; leave it alone
                continue
            if expires_at <= now:
                self._remove(path)
                removed += 1
        self._last_purge = now
        return removed

    def get(self, key: str) -> Optional[bytes]:
        entry = self._read(key)
        return entry[1] if entry else None

    def ttl(self, key: str) -> Optional[int]:
        entry = self._read(key)
        return _remaining(entry[0]) if entry else None

    def put(self, key: str, data: bytes, expiry: int) -> None:
        """Atomic write using temporary file + rename."""
        path = self._path(key)
        header = f'{time.time() + expiry:.3f}\n'.encode('ascii')

        # The temporary file lives in the same directory so the rename stays atomic
        fd, temp_path = tempfile.mkstemp(dir=self.base_dir, prefix='.tmp_', suffix='')

        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(header)
                f.write(data)

            # Atomic rename (overwrites destination if it exists)
            os.replace(temp_path, path)
        except Exception:
            # Clean up temp file if something went wrong
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

        if time.time() - self._last_purge >= self.PURGE_INTERVAL:
            self.purge_expired()


class S3Storage(Storage, Session):
    """
    Amazon S3 storage implementation.

    S3 has no per-object TTL that reads honour, so the absolute expiry is kept
    in the object's user metadata and expired objects read as missing. Pair
    the bucket with a lifecycle rule if the space should be reclaimed.
    """

    EXPIRES_AT = 'expires-at'

    def __init__(self, bucket_name: str, prefix: str = '', **kwargs):
        """
        Initialize S3 storage.

        Args:
            bucket_name: Name of the S3 bucket
            prefix: Optional prefix (folder) for all keys
            **kwargs: Additional arguments passed to boto3.client()
                     (e.g., aws_access_key_id, aws_secret_access_key, region_name)
        """
        self.bucket_name = bucket_name
        self.prefix = prefix.rstrip('/') + '/' if prefix else ''
        self.s3_client = boto3.client('s3', **kwargs)

    def connect(self) -> Session:
        return self

    def _get_key(self, key: str) -> str:
        """Get the full S3 key for a cache key."""
        return self.prefix + key

    def _expires_at(self, metadata: dict) -> Optional[float]:
        value = metadata.get(self.EXPIRES_AT)
        return float(value) if value is not None else None

    @staticmethod
    def _is_missing(e: ClientError) -> bool:
        return e.response['Error']['Code'] in ('NoSuchKey', 'NotFound', '404')

    def get(self, key: str) -> Optional[bytes]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=self._get_key(key))
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise

        expires_at = self._expires_at(response.get('Metadata', {}))
        if expires_at is not None and expires_at <= time.time():
            return None
        return response['Body'].read()

    def ttl(self, key: str) -> Optional[int]:
        try:
            response = self.s3_client.head_object(Bucket=self.bucket_name, Key=self._get_key(key))
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise

        expires_at = self._expires_at(response.get('Metadata', {}))
        if expires_at is None or expires_at <= time.time():
            return None
        return _remaining(expires_at)

    def put(self, key: str, data: bytes, expiry: int) -> None:
        """S3 PUT operations are atomic by default."""
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=self._get_key(key),
            Body=data,
            Metadata={self.EXPIRES_AT: f'{time.time() + expiry:.3f}'},
        )


class RedisSession(Session):
    """A Redis client bound to the storage's shared connection pool."""

    def __init__(self, client: redis.Redis):
        self.client = client

    def get(self, key: str) -> Optional[bytes]:
        return self.client.get(key)

    def ttl(self, key: str) -> Optional[int]:
        # -1 means no expiry, -2 means no such key
        remaining = self.client.ttl(key)
        if remaining is None or remaining < 0:
            return None
        return remaining

    def put(self, key: str, data: bytes, expiry: int) -> None:
        self.client.set(key, data, ex=expiry)

    def disconnect(self) -> None:
        self.client.close()


class RedisStorage(Storage):
    """
    Redis storage implementation.

    The connection pool is owned by the storage for the life of the process;
    every session gets its own client on top of it and pings the server so
    an outage shows up at connect time.
    """

    def __init__(self, url: str, **kwargs):
        """
        Initialize Redis storage.

        Args:
            url: redis://, rediss:// or unix:// connection URL
            **kwargs: Additional arguments passed to redis.ConnectionPool.from_url()
        """
        self.url = url
        kwargs.setdefault('socket_connect_timeout', SOCKET_TIMEOUT)
        kwargs.setdefault('socket_timeout', SOCKET_TIMEOUT)
        self.pool = redis.ConnectionPool.from_url(url, **kwargs)

    def connect(self) -> Session:
        client = redis.Redis(connection_pool=self.pool)
        try:
            client.ping()
        except Exception:
            client.close()
            raise
        return RedisSession(client)

    def close(self) -> None:
        self.pool.disconnect()


def open_storage(url: Optional[str]) -> Optional[Storage]:
    """
    Build the storage backend named by a connection URL.

    Supported schemes: redis, rediss, unix, s3 (s3://bucket/prefix) and
    file (file:///path; a bare file:// uses the per-user cache directory).

    Returns:
        A Storage, or None when no URL is configured (caching disabled)

    Raises:
        ValueError: If the URL cannot name a backend
    """
    if not url:
        return None

    parsed = urlparse(url)
    scheme = parsed.scheme.lower()

    if scheme in ('redis', 'rediss', 'unix'):
        return RedisStorage(url)

    if scheme == 's3':
        if not parsed.netloc:
            raise ValueError(f'S3 cache URL needs a bucket: {url}')
        return S3Storage(parsed.netloc, prefix=parsed.path.lstrip('/'))

    if scheme == 'file':
        base_dir = parsed.netloc + parsed.path
        return LocalFileStorage(base_dir or appdirs.user_cache_dir(APP_NAME))

    raise ValueError(f'Unsupported cache URL: {url}')
