"""
Redis store — each user's collection is one JSON blob.

Keys:
    filters:{user}  → JSON list of filter dicts

SET replaces the whole value, so a write is all-or-nothing per collection.
"""
import json
import logging
from typing import List

import redis

from sievebox.errors import StorageError
from sievebox.models.filter import Filter
from sievebox.storage.base import FilterStore

logger = logging.getLogger('storage.redis')


class RedisFilterStore(FilterStore):

    PREFIX = 'filters'

    def __init__(self, redis_client):
        self.redis = redis_client

    def key_for(self, user: str) -> str:
        return f'{self.PREFIX}:{user}'

    def read_filters(self, user: str) -> List[Filter]:
        try:
            data = self.redis.get(self.key_for(user))
        except redis.RedisError as e:
            raise StorageError(f'Failed to read filters for {user}: {e}') from e
        if not data:
            return []
        try:
            return [Filter.from_dict(d) for d in json.loads(data)]
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f'Corrupt filter blob at {self.key_for(user)}: {e}') from e

    def write_filters(self, user: str, filters: List[Filter]) -> None:
        payload = json.dumps([f.to_dict() for f in filters])
        try:
            self.redis.set(self.key_for(user), payload)
        except redis.RedisError as e:
            raise StorageError(f'Failed to write filters for {user}: {e}') from e
