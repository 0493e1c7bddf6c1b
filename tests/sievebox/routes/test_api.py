"""Tests for sievebox.routes.api — JSON API."""
import pytest
from unittest.mock import patch

from sievebox.errors import StorageError


def _create(client, body, db='alice'):
    return client.post(f'/api/filters?db={db}', json=body)


class TestHealth:

    def test_health(self, client):
        resp = client.get('/health')
        assert resp.status_code == 200
        assert resp.json == {"status": "healthy"}

    def test_api_health(self, client):
        data = client.get('/api/health').json
        assert data['status'] == 'ok'
        assert 'timestamp' in data


class TestUsers:

    def test_lists_configured_users(self, client):
        assert client.get('/api/users').json == {'users': ['alice', 'bob']}


class TestDatabaseParam:

    @pytest.mark.parametrize('url', ['/api/filters', '/api/filters?db=mallory'])
    def test_invalid_db_400(self, client, url):
        resp = client.get(url)
        assert resp.status_code == 400
        assert resp.json['error'] == 'Invalid database. Must be one of: alice, bob'

    def test_db_case_insensitive(self, client, payload):
        _create(client, payload(), db='ALICE')
        assert len(client.get('/api/filters?db=alice').json) == 1


class TestCreateFilter:

    def test_created(self, client, payload):
        resp = _create(client, payload())
        assert resp.status_code == 201
        data = resp.json
        assert data['name'] == 'Boss'
        assert data['fromAddresses'] == ['boss@example.com']
        assert data['id']
        assert data['updatedAt']

    def test_conflict_400(self, client, payload):
        _create(client, payload(name='A', targetFolder='', labels=['Work']))
        resp = _create(client, payload(name='B', targetFolder='Work'))
        assert resp.status_code == 400
        assert 'Proton Mail does not allow folders and labels' in resp.json['error']

    def test_duplicate_name_400(self, client, payload):
        _create(client, payload())
        resp = _create(client, payload(name='boss', targetFolder=''))
        assert resp.status_code == 400
        assert 'already exists' in resp.json['error']

    def test_missing_body_400(self, client):
        resp = client.post('/api/filters?db=alice')
        assert resp.status_code == 400

    def test_storage_failure_500(self, client, payload):
        with patch('sievebox.storage.file_store.JsonFileStore.write_filters',
                   side_effect=StorageError('disk full')):
            resp = _create(client, payload())
        assert resp.status_code == 500
        assert resp.json == {'error': 'Failed to create filter'}


class TestListFilters:

    def test_empty(self, client):
        assert client.get('/api/filters?db=alice').json == []

    def test_fuzzy_search(self, client, payload):
        _create(client, payload(name='Boss mail', targetFolder=''))
        _create(client, payload(name='Newsletters', targetFolder=''))
        names = [f['name'] for f in client.get('/api/filters?db=alice&q=nwl').json]
        assert names == ['Newsletters']

    def test_collections_disjoint(self, client, payload):
        _create(client, payload(), db='alice')
        assert client.get('/api/filters?db=bob').json == []

    def test_read_failure_500(self, client):
        with patch('sievebox.storage.file_store.JsonFileStore.read_filters',
                   side_effect=StorageError('bad file')):
            resp = client.get('/api/filters?db=alice')
        assert resp.status_code == 500
        assert resp.json == {'error': 'Failed to read filters'}


class TestGetFilter:

    def test_found(self, client, payload):
        created = _create(client, payload()).json
        assert client.get(f"/api/filters/{created['id']}?db=alice").json == created

    def test_not_found(self, client):
        resp = client.get('/api/filters/nope?db=alice')
        assert resp.status_code == 404
        assert resp.json == {'error': 'Filter not found'}

    def test_other_collection_not_found(self, client, payload):
        created = _create(client, payload()).json
        assert client.get(f"/api/filters/{created['id']}?db=bob").status_code == 404


class TestUpdateFilter:

    def test_updates(self, client, payload):
        created = _create(client, payload()).json
        resp = client.put(f"/api/filters/{created['id']}?db=alice", json=payload(labels=['VIP']))
        assert resp.status_code == 200
        assert resp.json['labels'] == ['VIP']
        assert resp.json['id'] == created['id']

    def test_not_found(self, client, payload):
        assert client.put('/api/filters/nope?db=alice', json=payload()).status_code == 404

    def test_local_conflict_400(self, client, payload):
        created = _create(client, payload()).json
        resp = client.put(f"/api/filters/{created['id']}?db=alice", json=payload(labels=['work']))
        assert resp.status_code == 400
        assert 'Folder name "Work" conflicts with label "work"' in resp.json['error']


class TestDeleteFilters:

    def test_deletes_existing_ignores_unknown(self, client, payload):
        a = _create(client, payload(name='A', targetFolder='')).json
        _create(client, payload(name='B', targetFolder=''))
        resp = client.delete('/api/filters?db=alice', json={'ids': [a['id'], 'ghost']})
        assert resp.status_code == 200
        assert resp.json == {'deleted': 1}
        assert [f['name'] for f in client.get('/api/filters?db=alice').json] == ['B']

    @pytest.mark.parametrize('body', [{}, {'ids': []}, {'ids': 'abc'}])
    def test_ids_required(self, client, body):
        resp = client.delete('/api/filters?db=alice', json=body)
        assert resp.status_code == 400
        assert resp.json == {'error': 'ids array is required'}


class TestValidateFilter:

    def test_ok(self, client, payload):
        data = client.post('/api/filters/validate?db=alice', json=payload()).json
        assert data['ok'] is True
        assert data['error'] is None

    def test_conflict(self, client, payload):
        _create(client, payload(name='A', targetFolder='Receipts'))
        data = client.post('/api/filters/validate?db=alice',
                           json=payload(name='B', targetFolder='', labels=['receipts'])).json
        assert data['ok'] is False
        assert data['conflict_type'] == 'external-folder'
        assert data['conflicting_name'] == 'receipts'

    def test_exclude_id(self, client, payload):
        created = _create(client, payload()).json
        data = client.post(f"/api/filters/validate?db=alice&exclude_id={created['id']}", json=payload()).json
        assert data['ok'] is True

    def test_bad_expiration_400(self, client, payload):
        resp = client.post('/api/filters/validate?db=alice', json=payload(expirationDays='soon'))
        assert resp.status_code == 400


class TestFilterScript:

    def test_plain_text_script(self, client, payload):
        created = _create(client, payload()).json
        resp = client.get(f"/api/filters/{created['id']}/script?db=alice")
        assert resp.status_code == 200
        assert resp.content_type.startswith('text/plain')
        text = resp.get_data(as_text=True)
        assert text.startswith('# Filter: Boss\n')
        assert 'address :is "from" "boss@example.com"' in text
        assert 'fileinto "Work";' in text

    def test_not_found(self, client):
        assert client.get('/api/filters/nope/script?db=alice').status_code == 404


class TestVocabulary:

    def test_vocabulary(self, client, payload):
        a = _create(client, payload(name='A', targetFolder='Work/Projects', labels=['x'])).json
        _create(client, payload(name='B', targetFolder='Home', labels=['y']))
        data = client.get(f"/api/vocabulary?db=alice&exclude_id={a['id']}").json
        assert data['labels'] == ['y']
        assert data['folders'] == ['Home', 'Work/Projects']
        assert data['folder_leaves'] == ['Home']


class TestReports:

    def test_list(self, client):
        assert len(client.get('/api/reports').json) == 5

    def test_run(self, client, payload):
        _create(client, payload(name='A', targetFolder=''))
        _create(client, payload(name='B'))
        names = [f['name'] for f in client.get('/api/reports/no-folder?db=alice').json]
        assert names == ['A']

    def test_unknown_report_404(self, client):
        assert client.get('/api/reports/bogus?db=alice').status_code == 404
