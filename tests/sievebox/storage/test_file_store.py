"""Tests for sievebox.storage.file_store — per-user JSON files."""
import json
import os
from unittest.mock import patch

import pytest

from sievebox.errors import StorageError
from sievebox.storage.file_store import JsonFileStore


class TestReadFilters:

    def test_missing_file_is_empty(self, store):
        assert store.read_filters('alice') == []

    def test_reads_original_format(self, data_dir):
        os.makedirs(data_dir)
        with open(os.path.join(data_dir, 'filters-alice.json'), 'w') as f:
            json.dump([{
                'id': 'abc', 'name': 'Boss', 'fromAddresses': ['boss@example.com'],
                'toAddress': '', 'expirationDays': None, 'markRead': True,
                'addYearLabel': False, 'targetFolder': 'Work', 'labels': [],
                'updatedAt': '2025-03-01T12:00:00.000Z',
            }], f)
        [f] = JsonFileStore(data_dir).read_filters('alice')
        assert f.name == 'Boss'
        assert f.mark_read is True

    def test_corrupt_file_raises(self, data_dir):
        os.makedirs(data_dir)
        with open(os.path.join(data_dir, 'filters-alice.json'), 'w') as f:
            f.write('{not json')
        with pytest.raises(StorageError):
            JsonFileStore(data_dir).read_filters('alice')


class TestWriteFilters:

    def test_round_trip_and_layout(self, store, make_filter, data_dir):
        filters = [make_filter(name='A'), make_filter(name='B', labels=['x'])]
        store.write_filters('alice', filters)
        assert store.read_filters('alice') == filters
        text = open(os.path.join(data_dir, 'filters-alice.json')).read()
        assert text.startswith('[\n  {')

    def test_users_are_disjoint(self, store, make_filter):
        store.write_filters('alice', [make_filter(name='A')])
        assert store.read_filters('bob') == []

    def test_no_temp_files_left(self, store, make_filter, data_dir):
        store.write_filters('alice', [make_filter()])
        assert os.listdir(data_dir) == ['filters-alice.json']

    def test_failed_write_keeps_previous_collection(self, store, make_filter, data_dir):
        original = [make_filter(name='Keep me')]
        store.write_filters('alice', original)

        with patch('sievebox.storage.file_store.os.replace', side_effect=OSError('disk full')):
            with pytest.raises(StorageError):
                store.write_filters('alice', [])

        assert store.read_filters('alice') == original
        assert os.listdir(data_dir) == ['filters-alice.json']

    def test_new_file_is_world_readable(self, store, make_filter, data_dir):
        store.write_filters('alice', [make_filter()])
        mode = os.stat(os.path.join(data_dir, 'filters-alice.json')).st_mode & 0o777
        assert mode == 0o644

    def test_rewrite_keeps_existing_mode(self, store, make_filter, data_dir):
        store.write_filters('alice', [make_filter()])
        path = os.path.join(data_dir, 'filters-alice.json')
        os.chmod(path, 0o640)
        store.write_filters('alice', [make_filter(), make_filter()])
        assert os.stat(path).st_mode & 0o777 == 0o640
