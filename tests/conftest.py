"""Shared test fixtures."""
import pytest
from unittest.mock import MagicMock

from sievebox.models.filter import Filter
from sievebox.storage.file_store import JsonFileStore


@pytest.fixture
def users_file(tmp_path):
    """users.yaml with two collections: alice and bob."""
    path = tmp_path / 'users.yaml'
    path.write_text("users:\n  - Alice\n  - bob\n")
    return str(path)


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / 'data')


@pytest.fixture
def store(data_dir):
    """JSON file store rooted in tmp_path."""
    return JsonFileStore(data_dir)


@pytest.fixture
def app(users_file, data_dir):
    """Flask test app backed by the file store in tmp_path."""
    from sievebox import create_app
    app = create_app({
        'TESTING': True,
        'FILTER_STORE': 'file',
        'DATA_DIR': data_dir,
        'USERS_CONFIG': users_file,
    })
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_filter():
    """Factory fixture — builds a Filter with sensible defaults."""
    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        defaults = dict(
            id=f'filter-{counter["n"]:03d}',
            name=f'Filter {counter["n"]}',
            from_addresses=[],
            to_address='',
            expiration_days=None,
            mark_read=False,
            add_year_label=False,
            target_folder='',
            labels=[],
            updated_at='2026-01-15T10:00:00Z',
        )
        defaults.update(overrides)
        return Filter(**defaults)
    return _make


@pytest.fixture
def mock_redis():
    """Mock Redis client with an in-memory get/set."""
    data = {}
    mock = MagicMock()
    mock.get.side_effect = lambda key: data.get(key)
    mock.set.side_effect = lambda key, value: data.__setitem__(key, value) or True
    mock.data = data
    return mock


@pytest.fixture
def payload():
    """Factory fixture — a create/update request body."""
    def _make(**overrides):
        body = {
            'name': 'Boss',
            'fromAddresses': ['boss@example.com'],
            'toAddress': '',
            'expirationDays': None,
            'markRead': True,
            'addYearLabel': False,
            'targetFolder': 'Work',
            'labels': [],
        }
        body.update(overrides)
        return body
    return _make
