"""
UI routes — filter list, create/edit form, script view, reports, HTMX partials.

The form posts back to the same FilterService the JSON API uses, and the
live-validation partial runs the same checks on every field change.
"""
import logging

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from sievebox.errors import (
    FilterConflictError,
    FilterNotFoundError,
    PayloadError,
    StorageError,
    UnknownUserError,
)
from sievebox.services.reports import list_reports, run_report
from sievebox.services.search import search_filters, sort_recent
from sievebox.sieve import generate_sieve_script
from sievebox.validation import collection_vocabulary

logger = logging.getLogger('routes.ui')

bp = Blueprint('ui', __name__)


def _service():
    return current_app.extensions['filter_service']


def _registry():
    return current_app.extensions['user_registry']


def _user():
    """?db= if given, otherwise the first configured user."""
    db = request.args.get('db')
    if db is None and len(_registry()):
        return _registry().users[0]
    return _registry().resolve(db)


def _form_payload(form):
    """Map form fields onto the JSON payload shape parse_filter_payload expects."""
    return {
        'name': form.get('name', ''),
        'fromAddresses': form.get('fromAddresses', '').splitlines(),
        'toAddress': form.get('toAddress', ''),
        'expirationDays': form.get('expirationDays', ''),
        'markRead': form.get('markRead') == 'on',
        'addYearLabel': form.get('addYearLabel') == 'on',
        'targetFolder': form.get('targetFolder', ''),
        'labels': form.get('labels', '').split(','),
    }


def _error_page(message, status):
    return render_template('error.html', error=message), status


# ── List ─────────────────────────────────────────────────────────────────────

@bp.route('/')
def index():
    try:
        user = _user()
        query = request.args.get('q', '')
        filters = sort_recent(search_filters(_service().list_filters(user), query))
    except UnknownUserError as e:
        return _error_page(str(e), 400)
    except StorageError:
        logger.error("Error reading filters", exc_info=True)
        return _error_page('Failed to read filters', 500)
    return render_template(
        'filters_list.html',
        users=_registry().users, db=user, q=query,
        filters=[f.to_dict() for f in filters],
    )


@bp.route('/filters/delete', methods=['POST'])
def delete_selected():
    try:
        user = _user()
        ids = request.form.getlist('ids')
        if ids:
            _service().delete_filters(user, ids)
    except UnknownUserError as e:
        return _error_page(str(e), 400)
    except StorageError:
        logger.error("Error deleting filters", exc_info=True)
        return _error_page('Failed to delete filters', 500)
    return redirect(url_for('ui.index', db=user))


# ── Form ─────────────────────────────────────────────────────────────────────

def _render_form(user, form, filter_id=None, error=None, status=200):
    filters = _service().list_filters(user)
    return render_template(
        'filter_form.html',
        db=user, form=form, filter_id=filter_id, error=error,
        vocabulary=collection_vocabulary(filters, exclude_id=filter_id),
    ), status


def _form_from_filter(f):
    d = f.to_dict()
    d['fromAddresses'] = '\n'.join(f.from_addresses)
    d['labels'] = ', '.join(f.labels)
    d['expirationDays'] = '' if f.expiration_days is None else str(f.expiration_days)
    return d


@bp.route('/filters/new', methods=['GET', 'POST'])
def new_filter():
    try:
        user = _user()
        if request.method == 'GET':
            return _render_form(user, {})
        try:
            _service().create_filter(user, _form_payload(request.form))
        except (PayloadError, FilterConflictError) as e:
            return _render_form(user, request.form, error=str(e), status=400)
    except UnknownUserError as e:
        return _error_page(str(e), 400)
    except StorageError:
        logger.error("Error creating filter", exc_info=True)
        return _error_page('Failed to create filter', 500)
    return redirect(url_for('ui.index', db=user))


@bp.route('/filters/<filter_id>/edit', methods=['GET', 'POST'])
def edit_filter(filter_id):
    try:
        user = _user()
        if request.method == 'GET':
            existing = _service().get_filter(user, filter_id)
            return _render_form(user, _form_from_filter(existing), filter_id=filter_id)
        try:
            _service().update_filter(user, filter_id, _form_payload(request.form))
        except (PayloadError, FilterConflictError) as e:
            return _render_form(user, request.form, filter_id=filter_id, error=str(e), status=400)
    except UnknownUserError as e:
        return _error_page(str(e), 400)
    except FilterNotFoundError as e:
        return _error_page(str(e), 404)
    except StorageError:
        logger.error("Error updating filter %s", filter_id, exc_info=True)
        return _error_page('Failed to update filter', 500)
    return redirect(url_for('ui.index', db=user))


@bp.route('/partials/filter-validation', methods=['POST'])
def filter_validation_partial():
    """HTMX partial: inline conflict feedback while the form is being filled in."""
    try:
        user = _user()
        result = _service().check_filter(
            user, _form_payload(request.form), exclude_id=request.args.get('exclude_id') or None,
        )
    except (UnknownUserError, PayloadError) as e:
        result = {'ok': False, 'error': str(e), 'conflicting_name': None,
                  'conflict_type': None, 'name_error': None}
    except StorageError:
        logger.error("Error validating filter", exc_info=True)
        result = {'ok': False, 'error': 'Failed to read filters', 'conflicting_name': None,
                  'conflict_type': None, 'name_error': None}
    return render_template('partials/filter_validation.html', result=result)


# ── Script / reports ─────────────────────────────────────────────────────────

@bp.route('/filters/<filter_id>/script')
def script_view(filter_id):
    try:
        user = _user()
        f = _service().get_filter(user, filter_id)
    except UnknownUserError as e:
        return _error_page(str(e), 400)
    except FilterNotFoundError as e:
        return _error_page(str(e), 404)
    except StorageError:
        logger.error("Error reading filter %s", filter_id, exc_info=True)
        return _error_page('Failed to read filter', 500)
    return render_template('script.html', db=user, filter=f.to_dict(), script=generate_sieve_script(f))


@bp.route('/reports')
def reports_page():
    report_id = request.args.get('report', '')
    try:
        user = _user()
        results = []
        if report_id:
            results = [f.to_dict() for f in run_report(report_id, _service().list_filters(user))]
    except UnknownUserError as e:
        return _error_page(str(e), 400)
    except KeyError:
        return _error_page(f'Unknown report: {report_id}', 404)
    except StorageError:
        logger.error("Error running report %s", report_id, exc_info=True)
        return _error_page('Failed to read filters', 500)
    return render_template(
        'reports.html', db=user, reports=list_reports(), report_id=report_id, results=results,
    )
