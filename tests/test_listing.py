import tempfile

import boto3
import pytest
from moto import mock_aws

from plebiscito.errors import ConfigurationMissing, DataNotFound
from plebiscito.listing import file_list, files_not_copied, schema_files_for_zone
from plebiscito.sources import LocalSource, S3Source, open_source
from .test_utils import REMOTE_FILES, SCHEMA_FILES, upload_files, write_files

BUCKET = 'test-listing-bucket'


@pytest.fixture
def local_roots():
    """Local (files_root, schema_root) directories with sample data."""
    with tempfile.TemporaryDirectory() as files_dir, tempfile.TemporaryDirectory() as schema_dir:
        yield write_files(files_dir, REMOTE_FILES), write_files(schema_dir, SCHEMA_FILES)


@pytest.fixture
def s3_roots():
    """The same data under two prefixes of a mocked bucket."""
    with mock_aws():
        client = boto3.client('s3', region_name='us-east-1')
        client.create_bucket(Bucket=BUCKET)
        upload_files(BUCKET, 'ftp', REMOTE_FILES)
        upload_files(BUCKET, 'schemas', SCHEMA_FILES)
        yield f's3://{BUCKET}/ftp', f's3://{BUCKET}/schemas'


@pytest.fixture(params=['local', 's3'])
def roots(request, local_roots, s3_roots):
    return local_roots if request.param == 'local' else s3_roots


def names(files):
    return [f['name'] for f in files]


class TestSources:
    def test_open_source_local(self):
        assert isinstance(open_source('/srv/schemas'), LocalSource)

    def test_open_source_s3(self):
        with mock_aws():
            source = open_source('s3://bucket/some/prefix/')
            assert isinstance(source, S3Source)
            assert source.bucket_name == 'bucket'
            assert source.prefix == 'some/prefix/'

    @pytest.mark.parametrize('root', [None, ''])
    def test_open_source_unconfigured(self, root):
        with pytest.raises(ConfigurationMissing, match='SCHEMA_PATH'):
            open_source(root, 'SCHEMA_PATH')

    def test_list_shape(self, roots):
        files_root, _ = roots
        entries = open_source(files_root).list()

        assert names(entries) == ['05_mesas.csv', '13_mesas.csv', 'results.csv']
        for entry in entries:
            assert set(entry) == {'name', 'size', 'modified'}
            assert entry['modified'].endswith('+00:00')
        assert entries[0]['size'] == len(REMOTE_FILES['05_mesas.csv'])

    def test_list_skips_subdirectories(self, roots):
        _, schema_root = roots
        assert 'zones' not in names(open_source(schema_root).list())

    def test_read(self, roots):
        _, schema_root = roots
        assert open_source(schema_root).read('zones/13.csv').decode('utf-8').startswith('type,id')

    def test_read_missing(self, roots):
        _, schema_root = roots
        with pytest.raises(DataNotFound):
            open_source(schema_root).read('nope.csv')

    def test_list_missing_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(DataNotFound):
                LocalSource(tmpdir + '/gone').list()


class TestListing:
    def test_file_list(self, roots):
        files_root, _ = roots
        assert names(file_list(files_root)) == ['05_mesas.csv', '13_mesas.csv', 'results.csv']

    def test_file_list_unconfigured(self):
        with pytest.raises(ConfigurationMissing, match='FILES_PATH'):
            file_list(None)

    def test_files_not_copied(self, roots):
        files_root, schema_root = roots
        assert names(files_not_copied(files_root, schema_root)) == ['05_mesas.csv']

    def test_files_not_copied_needs_both_roots(self, roots):
        files_root, _ = roots
        with pytest.raises(ConfigurationMissing, match='SCHEMA_PATH'):
            files_not_copied(files_root, None)

    def test_schema_files_for_zone(self, roots):
        _, schema_root = roots
        # 130_mesas.csv belongs to zone 130, not 13
        assert names(schema_files_for_zone(schema_root, '13')) == ['13_mesas.csv']

    def test_schema_files_for_unknown_zone(self, roots):
        _, schema_root = roots
        assert schema_files_for_zone(schema_root, '99') == []

    def test_schema_file_named_after_zone(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            write_files(tmpdir, {'results': '', 'results.csv': '', 'results-2.csv': '', 'resultsx': ''})
            found = names(schema_files_for_zone(tmpdir, 'results'))
            assert found == ['results', 'results-2.csv', 'results.csv']
