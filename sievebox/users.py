"""
User registry — the set of valid ?db= collection names.

Loaded once by create_app() from a YAML file and stored on the app as
app.extensions['user_registry']. The registry is immutable; routes read it
from the app instead of a module global.

    # config/users.yaml
    users:
      - alice
      - bob

A JSON file with the same shape also loads, since YAML is a superset.
"""
import logging
from typing import Iterable, Tuple

import yaml

from sievebox.config import DEFAULT_USERS
from sievebox.errors import UnknownUserError

logger = logging.getLogger('sievebox.users')


class UserRegistry:
    """Immutable list of lower-cased user names."""

    def __init__(self, users: Iterable[str]):
        self._users: Tuple[str, ...] = tuple(dict.fromkeys(u.strip().lower() for u in users if u and u.strip()))

    @property
    def users(self) -> Tuple[str, ...]:
        return self._users

    def is_valid(self, name) -> bool:
        return bool(name) and name.lower() in self._users

    def resolve(self, name) -> str:
        """Lower-cased collection name, or UnknownUserError."""
        if not self.is_valid(name):
            raise UnknownUserError(f"Invalid database. Must be one of: {', '.join(self._users)}")
        return name.lower()

    def __iter__(self):
        return iter(self._users)

    def __len__(self):
        return len(self._users)


def load_user_registry(path: str) -> UserRegistry:
    """Read the users file, falling back to DEFAULT_USERS if it is missing or bad."""
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        users = data.get('users') if isinstance(data, dict) else None
        if not isinstance(users, list) or not users:
            raise ValueError('expected a non-empty "users" list')
        registry = UserRegistry(str(u) for u in users)
        logger.info("Loaded %d users from %s", len(registry), path)
        return registry
    except Exception as e:
        logger.warning("Users config not loaded (%s), using defaults", e)
        return UserRegistry(DEFAULT_USERS)
