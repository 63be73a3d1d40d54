"""Ledger core platform module.

Shared infrastructure used by every ledger section:
- Base repository on top of the connection pool
- Authentication (users, login)
- Per-user preferences
- Logging and API helpers
"""
