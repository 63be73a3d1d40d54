"""User preferences repository.

Stores one JSON value per (user, name) pair in the preferences table.
"""

import json
import logging

from core.base_repository import BaseRepository

logger = logging.getLogger('ledger.core.preferences.repository')


class PreferenceRepository(BaseRepository):

    def get(self, user_id: int, name: str) -> dict | None:
        """Get a stored preference row, or None when the user never set it."""
        return self.query_one('''
            SELECT id, user_id, name, data, updated_at
            FROM preferences
            WHERE user_id = %s AND name = %s
        ''', (user_id, name))

    def set(self, user_id: int, name: str, value) -> int:
        """Insert or replace a preference value. Returns the preference id."""
        row = self.execute('''
            INSERT INTO preferences (user_id, name, data)
            VALUES (%s, %s, %s::jsonb)
            ON CONFLICT (user_id, name)
            DO UPDATE SET data = EXCLUDED.data, updated_at = CURRENT_TIMESTAMP
            RETURNING id
        ''', (user_id, name, json.dumps(value)), returning=True)
        logger.debug(f'Preference {name} stored for user {user_id}')
        return row['id']

