"""Per-user preferences.

UserPreferences binds the repository to one user and returns Preference
objects whose .data falls back to the caller's default.
"""
from dataclasses import dataclass
from typing import Any, Optional

from .repositories import PreferenceRepository


@dataclass
class Preference:
    """A preference value as seen by callers."""
    name: str
    data: Any
    stored: bool = False


class UserPreferences:
    """Preference store scoped to a single user."""

    def __init__(self, user_id: int, repository: Optional[PreferenceRepository] = None):
        self.user_id = user_id
        self.repository = repository or PreferenceRepository()

    def get(self, name: str, default: Any = None) -> Preference:
        row = self.repository.get(self.user_id, name)
        if row is None or row.get('data') is None:
            return Preference(name=name, data=default)
        return Preference(name=name, data=row['data'], stored=True)

    def set(self, name: str, value: Any) -> Preference:
        self.repository.set(self.user_id, name, value)
        return Preference(name=name, data=value, stored=True)


__all__ = ['Preference', 'UserPreferences', 'PreferenceRepository']
