"""Tests for sievebox.storage.redis_store — one JSON blob per user."""
import json

import pytest
import redis

from sievebox.errors import StorageError
from sievebox.storage.redis_store import RedisFilterStore


class TestRedisFilterStore:

    def test_missing_key_is_empty(self, mock_redis):
        assert RedisFilterStore(mock_redis).read_filters('alice') == []

    def test_write_sets_whole_collection(self, mock_redis, make_filter):
        store = RedisFilterStore(mock_redis)
        filters = [make_filter(name='A'), make_filter(name='B')]
        store.write_filters('alice', filters)

        mock_redis.set.assert_called_once()
        key, value = mock_redis.set.call_args[0]
        assert key == 'filters:alice'
        assert [d['name'] for d in json.loads(value)] == ['A', 'B']
        assert store.read_filters('alice') == filters

    def test_read_error_wrapped(self, mock_redis):
        mock_redis.get.side_effect = redis.ConnectionError('down')
        with pytest.raises(StorageError):
            RedisFilterStore(mock_redis).read_filters('alice')

    def test_write_error_wrapped(self, mock_redis, make_filter):
        mock_redis.set.side_effect = redis.ConnectionError('down')
        with pytest.raises(StorageError):
            RedisFilterStore(mock_redis).write_filters('alice', [make_filter()])

    def test_corrupt_blob_raises(self, mock_redis):
        mock_redis.data['filters:alice'] = 'nope'
        with pytest.raises(StorageError):
            RedisFilterStore(mock_redis).read_filters('alice')
