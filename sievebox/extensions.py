"""
Shared instances — the filter store and the user registry.

Built by create_app() from app.config and kept in app.extensions, so every
request handler sees the same objects without module globals.
"""
import logging

import redis

from sievebox.services.filters import FilterService
from sievebox.storage.file_store import JsonFileStore
from sievebox.storage.redis_store import RedisFilterStore
from sievebox.users import load_user_registry

logger = logging.getLogger('sievebox.extensions')


def build_store(settings):
    """Pick the filter store backend named by FILTER_STORE."""
    backend = (settings.get('FILTER_STORE') or 'file').lower()
    if backend == 'redis':
        client = redis.from_url(settings['REDIS_URL'], decode_responses=True)
        logger.info("Using Redis filter store at %s", settings['REDIS_URL'])
        return RedisFilterStore(client)
    if backend != 'file':
        raise ValueError(f"Unknown FILTER_STORE '{backend}' (expected 'file' or 'redis')")
    logger.info("Using JSON file filter store in %s", settings['DATA_DIR'])
    return JsonFileStore(settings['DATA_DIR'])


def init_extensions(app):
    """Attach the store, registry and service to the app."""
    store = app.config.get('FILTER_STORE_INSTANCE') or build_store(app.config)
    app.extensions['filter_store'] = store
    app.extensions['filter_service'] = FilterService(store)
    app.extensions['user_registry'] = load_user_registry(app.config['USERS_CONFIG'])
