"""
Filter store contract.

A store knows two things: read a user's whole collection, and replace it.
Validation happens above it in FilterService.
"""
from abc import ABC, abstractmethod
from typing import List

from sievebox.models.filter import Filter


class FilterStore(ABC):

    @abstractmethod
    def read_filters(self, user: str) -> List[Filter]:
        """Every filter in the user's collection, in stored order."""
        ...

    @abstractmethod
    def write_filters(self, user: str, filters: List[Filter]) -> None:
        """Replace the user's collection. Raises StorageError on failure."""
        ...
