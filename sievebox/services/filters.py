"""
FilterService — the persistence boundary for filter collections.

Every create/update re-runs the folder/label and name checks against the
stored collection before anything is written. A rejected save writes
nothing; an accepted one replaces the whole collection in one store call.
"""
import logging
from typing import Dict, List, Optional, Any

from sievebox.errors import FilterConflictError, FilterNotFoundError, PayloadError
from sievebox.models.filter import Filter, parse_filter_payload
from sievebox.validation import (
    others,
    validate_folder_label_conflict,
    validate_unique_name,
)

logger = logging.getLogger('services.filters')


class FilterService:

    def __init__(self, store):
        self.store = store

    # ── Reads ────────────────────────────────────────────────────────────────

    def list_filters(self, user: str) -> List[Filter]:
        return self.store.read_filters(user)

    def get_filter(self, user: str, filter_id: str) -> Filter:
        for f in self.store.read_filters(user):
            if f.id == filter_id:
                return f
        raise FilterNotFoundError(filter_id)

    # ── Validation ───────────────────────────────────────────────────────────

    def check_fields(self, fields: Dict[str, Any], filters: List[Filter],
                     exclude_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Run both rules without writing anything.

        Returns the folder/label ConflictResult dict plus 'name_error'.
        """
        rest = others(filters, exclude_id)
        result = validate_folder_label_conflict(fields.get('target_folder'), fields.get('labels'), rest)
        checked = result.to_dict()
        checked['name_error'] = validate_unique_name(fields.get('name', ''), rest)
        checked['ok'] = result.ok and not checked['name_error']
        return checked

    def check_filter(self, user: str, payload: Optional[Dict[str, Any]],
                     exclude_id: Optional[str] = None) -> Dict[str, Any]:
        """Live-feedback check for the form. A blank name is not an error here."""
        fields = parse_filter_payload(payload, require_name=False)
        return self.check_fields(fields, self.store.read_filters(user), exclude_id)

    def _enforce(self, fields, filters, exclude_id=None):
        rest = others(filters, exclude_id)
        conflict = validate_folder_label_conflict(fields['target_folder'], fields['labels'], rest)
        if not conflict.ok:
            raise FilterConflictError(conflict.error, conflict)
        name_error = validate_unique_name(fields['name'], rest)
        if name_error:
            raise FilterConflictError(name_error)

    # ── Writes ───────────────────────────────────────────────────────────────

    def create_filter(self, user: str, payload: Optional[Dict[str, Any]]) -> Filter:
        fields = parse_filter_payload(payload)
        filters = self.store.read_filters(user)
        self._enforce(fields, filters)

        new_filter = Filter.create(fields)
        self.store.write_filters(user, filters + [new_filter])
        logger.info("Created filter %s (%s) for %s", new_filter.id, new_filter.name, user)
        return new_filter

    def update_filter(self, user: str, filter_id: str, payload: Optional[Dict[str, Any]]) -> Filter:
        filters = self.store.read_filters(user)
        index = next((i for i, f in enumerate(filters) if f.id == filter_id), None)
        if index is None:
            raise FilterNotFoundError(filter_id)

        fields = parse_filter_payload(payload)
        self._enforce(fields, filters, exclude_id=filter_id)

        updated = filters[index].replace(fields)
        filters = filters[:index] + [updated] + filters[index + 1:]
        self.store.write_filters(user, filters)
        logger.info("Updated filter %s (%s) for %s", updated.id, updated.name, user)
        return updated

    def delete_filters(self, user: str, ids) -> int:
        """Remove the given ids; unknown ids are ignored. Returns how many went."""
        if not isinstance(ids, list) or not ids:
            raise PayloadError('ids array is required')

        wanted = set(ids)
        filters = self.store.read_filters(user)
        remaining = [f for f in filters if f.id not in wanted]
        deleted = len(filters) - len(remaining)
        self.store.write_filters(user, remaining)
        logger.info("Deleted %d of %d requested filters for %s", deleted, len(wanted), user)
        return deleted
