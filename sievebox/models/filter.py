"""
Filter model — one user-authored mail rule.

Stored as a JSON object with camelCase keys so collections written by
earlier versions of the app load unchanged.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any

from sievebox.errors import PayloadError


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


@dataclass
class Filter:
    """A filter record belonging to one user's collection."""
    id: str
    name: str
    from_addresses: List[str] = field(default_factory=list)
    to_address: str = ''
    expiration_days: Optional[int] = None
    mark_read: bool = False
    add_year_label: bool = False
    target_folder: str = ''
    labels: List[str] = field(default_factory=list)
    updated_at: str = ''

    @classmethod
    def create(cls, fields: Dict[str, Any]) -> 'Filter':
        """New record with a fresh id and the current timestamp."""
        return cls(id=str(uuid.uuid4()), updated_at=_now_iso(), **fields)

    def replace(self, fields: Dict[str, Any]) -> 'Filter':
        """Copy with every editable field replaced and the timestamp refreshed."""
        return Filter(id=self.id, updated_at=_now_iso(), **fields)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Filter':
        return cls(
            id=d['id'],
            name=d.get('name') or '',
            from_addresses=list(d.get('fromAddresses') or []),
            to_address=d.get('toAddress') or '',
            expiration_days=d.get('expirationDays'),
            mark_read=_parse_flag(d.get('markRead')),
            add_year_label=_parse_flag(d.get('addYearLabel')),
            target_folder=d.get('targetFolder') or '',
            labels=list(d.get('labels') or []),
            updated_at=d.get('updatedAt') or '',
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'fromAddresses': self.from_addresses,
            'toAddress': self.to_address,
            'expirationDays': self.expiration_days,
            'markRead': self.mark_read,
            'addYearLabel': self.add_year_label,
            'targetFolder': self.target_folder,
            'labels': self.labels,
            'updatedAt': self.updated_at,
        }


def _string_list(value) -> List[str]:
    """Trimmed, non-blank strings from a list; anything else is empty."""
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


_TRUE_STRINGS = ('true', 'on', '1', 'yes')


def _parse_flag(value) -> bool:
    """Real booleans pass through; form strings like 'on' or 'true' count as set."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def _parse_expiration(value) -> Optional[int]:
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise PayloadError('expirationDays must be a positive whole number of days')
    try:
        days = int(str(value).strip())
    except ValueError:
        raise PayloadError('expirationDays must be a positive whole number of days')
    if days <= 0:
        raise PayloadError('expirationDays must be a positive whole number of days')
    return days


def parse_filter_payload(data: Optional[Dict[str, Any]], require_name: bool = True) -> Dict[str, Any]:
    """
    Normalize a create/update request body into Filter field kwargs.

    Blank from-addresses and labels are dropped, labels are de-duplicated
    keeping the first spelling. Raises PayloadError for a non-positive
    expiration, and for a missing name unless require_name is False.
    """
    data = data or {}

    name = str(data.get('name') or '').strip()
    if require_name and not name:
        raise PayloadError('name is required')

    labels = []
    for label in _string_list(data.get('labels')):
        if label not in labels:
            labels.append(label)

    return {
        'name': name,
        # A bare '@' names no domain and would match every sender.
        'from_addresses': [a for a in _string_list(data.get('fromAddresses')) if a.lstrip('@')],
        'to_address': str(data.get('toAddress') or '').strip(),
        'expiration_days': _parse_expiration(data.get('expirationDays')),
        'mark_read': _parse_flag(data.get('markRead')),
        'add_year_label': _parse_flag(data.get('addYearLabel')),
        'target_folder': str(data.get('targetFolder') or '').strip(),
        'labels': labels,
    }
