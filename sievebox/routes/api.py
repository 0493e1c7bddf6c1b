"""
API routes — filter CRUD, live validation, Sieve scripts, reports.

Every filter route takes ?db=<user>; the name must be in the user registry.
"""
import logging
from datetime import datetime, timezone

from flask import Blueprint, Response, current_app, jsonify, request

from sievebox.errors import (
    FilterConflictError,
    FilterNotFoundError,
    PayloadError,
    StorageError,
    UnknownUserError,
)
from sievebox.services.reports import list_reports, run_report
from sievebox.services.search import search_filters
from sievebox.sieve import generate_sieve_script
from sievebox.validation import collection_vocabulary

logger = logging.getLogger('routes.api')

bp = Blueprint('api', __name__)


def _service():
    return current_app.extensions['filter_service']


def _user():
    """Resolve ?db= against the registry. Raises UnknownUserError."""
    return current_app.extensions['user_registry'].resolve(request.args.get('db'))


def _bad_request(e):
    return jsonify({'error': str(e)}), 400


# ── Health / users ───────────────────────────────────────────────────────────

@bp.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({"status": "healthy"}), 200


@bp.route('/api/health')
def api_health():
    return jsonify({'status': 'ok', 'timestamp': datetime.now(timezone.utc).isoformat()})


@bp.route('/api/users')
def list_users():
    return jsonify({'users': list(current_app.extensions['user_registry'].users)})


# ── Filters ──────────────────────────────────────────────────────────────────

@bp.route('/api/filters')
def list_filters():
    """List a user's filters, optionally narrowed by fuzzy ?q= on the name."""
    try:
        user = _user()
        filters = search_filters(_service().list_filters(user), request.args.get('q'))
        return jsonify([f.to_dict() for f in filters])
    except UnknownUserError as e:
        return _bad_request(e)
    except StorageError:
        logger.error("Error reading filters", exc_info=True)
        return jsonify({'error': 'Failed to read filters'}), 500


@bp.route('/api/filters', methods=['POST'])
def create_filter():
    try:
        user = _user()
        new_filter = _service().create_filter(user, request.get_json(silent=True))
        return jsonify(new_filter.to_dict()), 201
    except (UnknownUserError, PayloadError, FilterConflictError) as e:
        return _bad_request(e)
    except StorageError:
        logger.error("Error creating filter", exc_info=True)
        return jsonify({'error': 'Failed to create filter'}), 500


@bp.route('/api/filters/<filter_id>')
def get_filter(filter_id):
    try:
        user = _user()
        return jsonify(_service().get_filter(user, filter_id).to_dict())
    except UnknownUserError as e:
        return _bad_request(e)
    except FilterNotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except StorageError:
        logger.error("Error reading filter %s", filter_id, exc_info=True)
        return jsonify({'error': 'Failed to read filter'}), 500


@bp.route('/api/filters/<filter_id>', methods=['PUT'])
def update_filter(filter_id):
    try:
        user = _user()
        updated = _service().update_filter(user, filter_id, request.get_json(silent=True))
        return jsonify(updated.to_dict())
    except (UnknownUserError, PayloadError, FilterConflictError) as e:
        return _bad_request(e)
    except FilterNotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except StorageError:
        logger.error("Error updating filter %s", filter_id, exc_info=True)
        return jsonify({'error': 'Failed to update filter'}), 500


@bp.route('/api/filters', methods=['DELETE'])
def delete_filters():
    """Batch delete. Body: {"ids": [...]}. Unknown ids are skipped."""
    try:
        user = _user()
        data = request.get_json(silent=True) or {}
        deleted = _service().delete_filters(user, data.get('ids'))
        return jsonify({'deleted': deleted})
    except (UnknownUserError, PayloadError) as e:
        return _bad_request(e)
    except StorageError:
        logger.error("Error deleting filters", exc_info=True)
        return jsonify({'error': 'Failed to delete filters'}), 500


@bp.route('/api/filters/validate', methods=['POST'])
def validate_filter():
    """
    Dry-run the save checks for a form payload.

    ?exclude_id= names the filter being edited so it is not compared
    against itself.
    """
    try:
        user = _user()
        result = _service().check_filter(
            user, request.get_json(silent=True), exclude_id=request.args.get('exclude_id'),
        )
        return jsonify(result)
    except (UnknownUserError, PayloadError) as e:
        return _bad_request(e)
    except StorageError:
        logger.error("Error validating filter", exc_info=True)
        return jsonify({'error': 'Failed to read filters'}), 500


@bp.route('/api/filters/<filter_id>/script')
def filter_script(filter_id):
    """The filter rendered as a Sieve script, as text/plain."""
    try:
        user = _user()
        script = generate_sieve_script(_service().get_filter(user, filter_id))
        return Response(script, mimetype='text/plain')
    except UnknownUserError as e:
        return _bad_request(e)
    except FilterNotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except StorageError:
        logger.error("Error reading filter %s", filter_id, exc_info=True)
        return jsonify({'error': 'Failed to read filter'}), 500


@bp.route('/api/vocabulary')
def vocabulary():
    """Labels, folders and names in use — autocomplete data for the form."""
    try:
        user = _user()
        filters = _service().list_filters(user)
        return jsonify(collection_vocabulary(filters, exclude_id=request.args.get('exclude_id')))
    except UnknownUserError as e:
        return _bad_request(e)
    except StorageError:
        logger.error("Error reading filters", exc_info=True)
        return jsonify({'error': 'Failed to read filters'}), 500


# ── Reports ──────────────────────────────────────────────────────────────────

@bp.route('/api/reports')
def reports():
    return jsonify(list_reports())


@bp.route('/api/reports/<report_id>')
def report_results(report_id):
    try:
        user = _user()
        matched = run_report(report_id, _service().list_filters(user))
        return jsonify([f.to_dict() for f in matched])
    except UnknownUserError as e:
        return _bad_request(e)
    except KeyError:
        return jsonify({'error': f'Unknown report: {report_id}'}), 404
    except StorageError:
        logger.error("Error running report %s", report_id, exc_info=True)
        return jsonify({'error': 'Failed to read filters'}), 500
