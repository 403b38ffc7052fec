import pytest

from plebiscito.keys import cache_key


class TestCacheKey:
    def test_plain_parameters(self):
        assert cache_key('results', 'zone_id', '5') == 'results-zone_id-5'

    def test_prefix_only(self):
        assert cache_key('zones') == 'zones'

    def test_deterministic(self):
        assert cache_key('data', '13', 'comuna') == cache_key('data', '13', 'comuna')

    def test_case_preserved(self):
        assert cache_key('search', 'Region_13') == 'search-Region_13'
        assert cache_key('search', 'Region_13') != cache_key('search', 'region_13')

    def test_numeric_prefix_parameters_differ(self):
        assert cache_key('results', 'zone', '5') != cache_key('results', 'zone', '50')

    def test_separator_in_parameter_cannot_collide(self):
        assert cache_key('results', 'a-b', 'c') != cache_key('results', 'a', 'b-c')
        assert cache_key('results', 'a-b', 'c') == 'results-a%2Db-c'

    def test_escape_is_unambiguous(self):
        # A literal '%2D' must not look like an escaped separator
        assert cache_key('search', '%2D') != cache_key('search', '-')

    def test_non_string_parameters(self):
        assert cache_key('data', 13) == 'data-13'

    def test_empty_prefix_rejected(self):
        with pytest.raises(ValueError):
            cache_key('', 'x')
