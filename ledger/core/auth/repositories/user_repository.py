"""User Repository - data access for sign-in and the Flask-Login user loader."""
from typing import Optional, Dict, Any
from werkzeug.security import generate_password_hash, check_password_hash

from core.base_repository import BaseRepository


class UserRepository(BaseRepository):
    """Repository for user data access operations."""

    def get_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Get a user by ID."""
        return self.query_one('''
            SELECT id, email, name, password_hash, is_active, last_login
            FROM users
            WHERE id = %s
        ''', (user_id,))

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get a user by email address (case-insensitive)."""
        return self.query_one('''
            SELECT id, email, name, password_hash, is_active, last_login
            FROM users
            WHERE LOWER(email) = LOWER(%s)
        ''', (email,))

    def create(self, email: str, name: str, password: str) -> int:
        """Create a user with a hashed password. Returns the new id."""
        row = self.execute('''
            INSERT INTO users (email, name, password_hash)
            VALUES (%s, %s, %s)
            RETURNING id
        ''', (email, name, generate_password_hash(password)), returning=True)
        return row['id']

    def update_last_login(self, user_id: int) -> bool:
        """Update the last login timestamp for a user."""
        return self.execute('''
            UPDATE users SET last_login = CURRENT_TIMESTAMP
            WHERE id = %s
        ''', (user_id,)) > 0

    def authenticate(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """Authenticate user by email and password."""
        user = self.get_by_email(email)
        if not user or not user.get('is_active', False) or not user.get('password_hash'):
            return None
        if not check_password_hash(user['password_hash'], password):
            return None
        return user
