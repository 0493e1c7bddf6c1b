"""
JSON file store — one pretty-printed file per user: <data_dir>/filters-<user>.json.

Writes go to a temp file in the same directory and are moved into place with
os.replace, so a crash mid-write leaves the previous collection intact.
"""
import json
import logging
import os
import stat
import tempfile
from typing import List

from sievebox.errors import StorageError
from sievebox.models.filter import Filter
from sievebox.storage.base import FilterStore

logger = logging.getLogger('storage.file')


def _existing_mode(path: str) -> int:
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        return 0o644


class JsonFileStore(FilterStore):

    def __init__(self, data_dir: str):
        self.data_dir = data_dir

    def path_for(self, user: str) -> str:
        return os.path.join(self.data_dir, f'filters-{user}.json')

    def read_filters(self, user: str) -> List[Filter]:
        path = self.path_for(user)
        if not os.path.exists(path):
            return []
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return [Filter.from_dict(d) for d in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StorageError(f'Failed to read {path}: {e}') from e

    def write_filters(self, user: str, filters: List[Filter]) -> None:
        path = self.path_for(user)
        tmp_path = None
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=self.data_dir,
                prefix=f'.filters-{user}.', suffix='.tmp', delete=False,
            ) as tmp:
                tmp_path = tmp.name
                json.dump([f.to_dict() for f in filters], tmp, indent=2)
            # NamedTemporaryFile is 0600; keep the collection's mode, or 0644 when new.
            os.chmod(tmp_path, _existing_mode(path))
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise StorageError(f'Failed to write {path}: {e}') from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
        logger.debug("Wrote %d filters to %s", len(filters), path)
