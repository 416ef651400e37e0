"""
Unit tests for the catalog cache.
"""
from drizzledb.cache import Cache, _create_cache_key, cacheable_catalog


class Reader:

    cache_scope = 'db:3306/shop'

    def __init__(self):
        self.calls = 0

    @cacheable_catalog('test_reader')
    def read(self, table, suffix=''):
        self.calls += 1
        return f'{table}{suffix}'


def test_singleton():
    assert Cache.get_instance() is Cache.get_instance()


def test_get_cache_reuses_instances():
    cache = Cache.get_instance().get_cache('test_named', maxsize=5, ttl=10)
    assert Cache.get_instance().get_cache('test_named') is cache
    assert cache.maxsize == 5


def test_cache_key_is_lowercased():
    assert _create_cache_key('Db:3306/Shop', 'Users', ('A',), {'b': 1}) == "db:3306/shop:users:'a':b=1"


def test_cacheable_catalog_hits_and_bypass():
    reader = Reader()
    assert reader.read('users') == 'users'
    assert reader.read('users') == 'users'
    assert reader.calls == 1
    reader.read('users', bypass_cache=True)
    assert reader.calls == 2
    reader.read('users', suffix='!')
    assert reader.calls == 3


def test_quoted_names_share_one_entry():
    reader = Reader()
    assert reader.read('`users`') == 'users'
    reader.read('users')
    assert reader.calls == 1
    Cache.get_instance().clear_for_table('users')
    reader.read('`users`')
    assert reader.calls == 2


def test_clear_for_table_only_touches_that_table():
    reader = Reader()
    reader.read('users')
    reader.read('orders')
    Cache.get_instance().clear_for_table('USERS')
    reader.read('users')
    reader.read('orders')
    assert reader.calls == 3


def test_clear_cache_by_name():
    cache = Cache.get_instance().get_cache('test_clear')
    cache['k'] = 1
    Cache.get_instance().clear_cache('test_clear')
    Cache.get_instance().clear_cache('missing')
    assert 'k' not in cache
