"""
Read-only file sources for the listing and schema providers.

A source is a flat collection of named files, either a local directory or
an S3 prefix. Only the top level is listed; there is no recursion.
"""
import datetime
import os
from abc import ABC, abstractmethod
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from plebiscito.errors import ConfigurationMissing, DataNotFound


def _iso(timestamp: datetime.datetime) -> str:
    return timestamp.astimezone(datetime.timezone.utc).replace(microsecond=0).isoformat()


class Source(ABC):
    """Abstract base class for file sources."""

    @abstractmethod
    def list(self) -> list[dict]:
        """
        List the files in the source.

        Returns:
            One {'name', 'size', 'modified'} dict per file, sorted by name;
            'modified' is an ISO 8601 UTC timestamp
        """
        pass

    @abstractmethod
    def read(self, name: str) -> bytes:
        """
        Read one file.

        Raises:
            DataNotFound: If the file does not exist
        """
        pass


class LocalSource(Source):
    def __init__(self, base_dir: str):
        self.base_dir = base_dir

    def list(self) -> list[dict]:
        if not os.path.isdir(self.base_dir):
            raise DataNotFound(f'Directory not found: {self.base_dir}')

        files = []
        with os.scandir(self.base_dir) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                stat = entry.stat()
                files.append({
                    'name': entry.name,
                    'size': stat.st_size,
                    'modified': _iso(datetime.datetime.fromtimestamp(stat.st_mtime, datetime.timezone.utc)),
                })
        return sorted(files, key=lambda f: f['name'])

    def read(self, name: str) -> bytes:
        path = os.path.join(self.base_dir, name)
        if not os.path.isfile(path):
            raise DataNotFound(f'File not found: {name}')
        with open(path, 'rb') as f:
            return f.read()


class S3Source(Source):
    def __init__(self, bucket_name: str, prefix: str = '', **kwargs):
        """
        Initialize an S3 source.

        Args:
            bucket_name: Name of the S3 bucket
            prefix: Optional prefix (folder) the files live under
            **kwargs: Additional arguments passed to boto3.client()
        """
        self.bucket_name = bucket_name
        self.prefix = prefix.rstrip('/') + '/' if prefix else ''
        self.s3_client = boto3.client('s3', **kwargs)

    def list(self) -> list[dict]:
        paginator = self.s3_client.get_paginator('list_objects_v2')
        files = []
        for page in paginator.paginate(Bucket=self.bucket_name, Prefix=self.prefix, Delimiter='/'):
            for obj in page.get('Contents', []):
                name = obj['Key'][len(self.prefix):]
                if not name:
                    continue
                files.append({
                    'name': name,
                    'size': obj['Size'],
                    'modified': _iso(obj['LastModified']),
                })
        return sorted(files, key=lambda f: f['name'])

    def read(self, name: str) -> bytes:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=self.prefix + name)
        except ClientError as e:
            if e.response['Error']['Code'] in ('NoSuchKey', 'NotFound', '404'):
                raise DataNotFound(f'File not found: {name}') from e
            raise
        return response['Body'].read()


def open_source(root: Optional[str], setting: str = 'path') -> Source:
    """
    Build the source for a configured root.

    Args:
        root: Local directory or s3://bucket/prefix
        setting: Name of the setting the root came from, for error messages

    Raises:
        ConfigurationMissing: If the root is not configured
    """
    if not root:
        raise ConfigurationMissing(f'No {setting} configured')
    if root.startswith('s3://'):
        bucket, _, prefix = root[len('s3://'):].partition('/')
        return S3Source(bucket, prefix=prefix)
    return LocalSource(root)
