"""
Filter validation — folder/label namespace and name uniqueness rules.

Proton Mail keeps folders and labels in one namespace, so the leaf of a
filter's target folder may not match any label, in the same filter or in
any other filter of the collection. Filter names are unique per collection.

These functions are pure. The live form partial and FilterService both call
them, so the interactive check and the authoritative check cannot drift.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Dict

from sievebox.models.filter import Filter

LOCAL = 'local'
EXTERNAL_LABEL = 'external-label'
EXTERNAL_FOLDER = 'external-folder'

_NAMESPACE_NOTE = 'Proton Mail does not allow folders and labels to share the same name.'


@dataclass
class ConflictResult:
    """Outcome of a folder/label check. ok=True means no collision."""
    ok: bool = True
    error: Optional[str] = None
    conflicting_name: Optional[str] = None
    conflict_type: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'ok': self.ok,
            'error': self.error,
            'conflicting_name': self.conflicting_name,
            'conflict_type': self.conflict_type,
        }


def folder_leaf_name(folder_path: Optional[str]) -> str:
    """'Work/Projects' -> 'Projects'; '' for no folder or a non-string."""
    if not folder_path or not isinstance(folder_path, str):
        return ''
    return folder_path.split('/')[-1]


def others(filters: Iterable[Filter], exclude_id: Optional[str] = None) -> List[Filter]:
    """Every filter except the one being edited."""
    return [f for f in filters if f.id != exclude_id]


def validate_folder_label_conflict(target_folder: Optional[str],
                                   labels: Optional[List[str]],
                                   other_filters: Iterable[Filter]) -> ConflictResult:
    """
    Check a candidate folder + label set against itself and the other filters.

    First match wins, in this order:
      1. folder leaf vs. a label used by another filter
      2. a label vs. another filter's folder leaf
      3. folder leaf vs. one of the candidate's own labels
    """
    # Anything but a list of strings counts as no labels.
    labels = [label for label in labels if isinstance(label, str)] if isinstance(labels, list) else []
    other_filters = list(other_filters)
    leaf = folder_leaf_name(target_folder)
    leaf_lower = leaf.lower()

    if leaf:
        for f in other_filters:
            for existing in f.labels:
                if existing.lower() == leaf_lower:
                    return ConflictResult(
                        ok=False,
                        error=(f'Folder name "{leaf}" conflicts with label "{existing}" '
                               f'used by another filter. {_NAMESPACE_NOTE}'),
                        conflicting_name=existing,
                        conflict_type=EXTERNAL_LABEL,
                    )

    other_leaves = [folder_leaf_name(f.target_folder) for f in other_filters]
    other_leaves = [name for name in other_leaves if name]
    for label in labels:
        for existing in other_leaves:
            if existing.lower() == label.lower():
                return ConflictResult(
                    ok=False,
                    error=(f'Label "{label}" conflicts with folder name "{existing}" '
                           f'used by another filter. {_NAMESPACE_NOTE}'),
                    conflicting_name=label,
                    conflict_type=EXTERNAL_FOLDER,
                )

    if leaf:
        for label in labels:
            if label.lower() == leaf_lower:
                return ConflictResult(
                    ok=False,
                    error=f'Folder name "{leaf}" conflicts with label "{label}". {_NAMESPACE_NOTE}',
                    conflicting_name=label,
                    conflict_type=LOCAL,
                )

    return ConflictResult()


def validate_unique_name(name: str, other_filters: Iterable[Filter]) -> Optional[str]:
    """Error message if another filter already uses this name (case-insensitive)."""
    wanted = (name or '').strip().lower()
    if not wanted:
        return None
    for f in other_filters:
        if f.name.strip().lower() == wanted:
            return f'A filter with the name "{name}" already exists. Proton Mail requires unique filter names.'
    return None


def collection_vocabulary(filters: Iterable[Filter], exclude_id: Optional[str] = None) -> Dict[str, List[str]]:
    """
    Names the filter form offers and checks against.

    labels/names/folder_leaves come from the other filters only; folders
    lists every folder path in the collection for autocomplete.
    """
    filters = list(filters)
    rest = others(filters, exclude_id)
    return {
        'labels': sorted({label for f in rest for label in f.labels}),
        'folders': sorted({f.target_folder for f in filters if f.target_folder}),
        'names': [f.name for f in rest],
        'folder_leaves': [leaf for leaf in (folder_leaf_name(f.target_folder) for f in rest) if leaf],
    }
