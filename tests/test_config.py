import pytest

from plebiscito.config import DEFAULT_PORT, Settings
from plebiscito.utils import is_true, say, split_list


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.cors_origins == []
        assert settings.cache_url is None
        assert settings.files_path is None
        assert settings.schema_path is None
        assert settings.port == DEFAULT_PORT == 3333
        assert settings.cache_ttl == 3600
        assert settings.dev_mode is False

    def test_from_environment(self):
        settings = Settings.from_env({
            'CORS': 'http://localhost:4000, https://resultados.example.cl',
            'CACHE_URL': 'redis://localhost:6379/0',
            'FILES_PATH': 's3://servel-ftp/plebiscito',
            'SCHEMA_PATH': '/srv/schemas',
            'PORT': '8080',
            'CACHE_TTL': '600',
            'DEV_MODE': 'true',
        })

        assert settings.cors_origins == ['http://localhost:4000', 'https://resultados.example.cl']
        assert settings.cache_url == 'redis://localhost:6379/0'
        assert settings.files_path == 's3://servel-ftp/plebiscito'
        assert settings.schema_path == '/srv/schemas'
        assert settings.port == 8080
        assert settings.cache_ttl == 600
        assert settings.dev_mode is True

    def test_redis_url_fallback(self):
        assert Settings.from_env({'REDIS_URL': 'redis://r:6379'}).cache_url == 'redis://r:6379'

    def test_cache_url_wins_over_redis_url(self):
        settings = Settings.from_env({'CACHE_URL': 'file:///tmp/c', 'REDIS_URL': 'redis://r:6379'})
        assert settings.cache_url == 'file:///tmp/c'

    def test_empty_values_mean_unset(self):
        settings = Settings.from_env({'CACHE_URL': '', 'FILES_PATH': '', 'PORT': ''})

        assert settings.cache_url is None
        assert settings.files_path is None
        assert settings.port == DEFAULT_PORT

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv('SCHEMA_PATH', '/data/schemas')
        assert Settings.from_env().schema_path == '/data/schemas'

    @pytest.mark.parametrize('ttl', ['0', '-5'])
    def test_non_positive_ttl_rejected(self, ttl):
        with pytest.raises(ValueError):
            Settings.from_env({'CACHE_TTL': ttl})


class TestUtils:
    @pytest.mark.parametrize('value', ['true', 'True', '1', 'yes', ' on '])
    def test_is_true(self, value):
        assert is_true(value)

    @pytest.mark.parametrize('value', [None, '', 'false', '0', 'no', 'resetCache'])
    def test_is_not_true(self, value):
        assert not is_true(value)

    def test_split_list(self):
        assert split_list('a, b,,c ') == ['a', 'b', 'c']
        assert split_list(None) == []
        assert split_list('') == []

    def test_say_writes_timestamped_line(self, capsys):
        say('hello')
        err = capsys.readouterr().err
        assert err.endswith(': hello\n')

    def test_say_names_the_error(self, capsys):
        say('Cache read failed for zones', ConnectionError('refused'))
        err = capsys.readouterr().err
        assert 'Cache read failed for zones: ConnectionError: refused' in err
