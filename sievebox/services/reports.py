"""
Canned reports — audit views over one user's filters.

Each report is a predicate; run_report() returns the filters it matches.
"""
from typing import Callable, Dict, List

from sievebox.models.filter import Filter


REPORTS: Dict[str, Dict] = {
    'no-from-address': {
        'name': 'Filters without From address',
        'description': 'Lists all filters that do not specify any From addresses',
        'match': lambda f: not any(a.strip() for a in f.from_addresses),
    },
    'no-to-address': {
        'name': 'Filters without To address',
        'description': 'Lists all filters that do not specify a To address',
        'match': lambda f: not f.to_address,
    },
    'no-labels': {
        'name': 'Filters without labels',
        'description': 'Lists all filters that do not have any labels assigned',
        'match': lambda f: not f.labels,
    },
    'no-expiration': {
        'name': 'Filters without expiration',
        'description': 'Lists all filters that do not have an expiration set',
        'match': lambda f: f.expiration_days is None,
    },
    'no-folder': {
        'name': 'Filters without target folder',
        'description': 'Lists all filters that do not move emails to a folder',
        'match': lambda f: not f.target_folder,
    },
}


def list_reports() -> List[Dict[str, str]]:
    """JSON-friendly report descriptors, in definition order."""
    return [
        {'id': report_id, 'name': r['name'], 'description': r['description']}
        for report_id, r in REPORTS.items()
    ]


def run_report(report_id: str, filters: List[Filter]) -> List[Filter]:
    """Filters matched by a report. Raises KeyError for an unknown report."""
    match: Callable[[Filter], bool] = REPORTS[report_id]['match']
    return [f for f in filters if match(f)]
