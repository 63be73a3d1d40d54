"""Base Repository: connection handling shared by every ledger repository.

query_one(), query_all(), query_value(), execute() and execute_many() wrap
get_db()/get_cursor()/release_db() in try/finally so subclasses only write SQL.

Usage:
    class PayeeRepository(BaseRepository):
        def find(self, payee_id):
            return self.query_one('SELECT * FROM payees WHERE id = %s', (payee_id,))

        def rename(self, payee_id, name):
            return self.execute('UPDATE payees SET name = %s WHERE id = %s', (name, payee_id))

        def merge(self, source_id, target_id):
            def _work(cursor):
                cursor.execute('UPDATE transaction_journals SET payee_id = %s WHERE payee_id = %s',
                               (target_id, source_id))
                cursor.execute('DELETE FROM payees WHERE id = %s', (source_id,))
                return cursor.rowcount > 0
            return self.execute_many(_work)
"""

from database import get_db, get_cursor, release_db, dict_from_row


class BaseRepository:

    def query_one(self, sql, params=None):
        """Execute a SELECT and return a single row as dict, or None."""
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            cursor.execute(sql, params or ())
            row = cursor.fetchone()
            return dict_from_row(row) if row else None
        finally:
            release_db(conn)

    def query_all(self, sql, params=None):
        """Execute a SELECT and return all rows as list of dicts."""
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            cursor.execute(sql, params or ())
            return [dict_from_row(r) for r in cursor.fetchall()]
        finally:
            release_db(conn)

    def query_value(self, sql, params=None, default=None):
        """Execute a SELECT and return the first column of the first row."""
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            cursor.execute(sql, params or ())
            row = cursor.fetchone()
            if not row:
                return default
            value = next(iter(row.values()))
            return default if value is None else value
        finally:
            release_db(conn)

    def execute(self, sql, params=None, returning=False):
        """Execute an INSERT/UPDATE/DELETE with auto-commit.

        Args:
            sql: SQL statement
            params: Query parameters
            returning: If True, fetchone() and return dict. If False, return rowcount.

        Returns:
            dict if returning=True, else int (rowcount)
        """
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            cursor.execute(sql, params or ())
            if returning:
                result = cursor.fetchone()
                conn.commit()
                return dict_from_row(result) if result else None
            conn.commit()
            return cursor.rowcount
        except Exception:
            conn.rollback()
            raise
        finally:
            release_db(conn)

    def execute_many(self, callback):
        """Run several statements on one connection and commit them together.

        Args:
            callback: Function that receives (cursor) and returns a result.

        Returns:
            Whatever callback returns
        """
        conn = get_db()
        try:
            conn.autocommit = False
            cursor = get_cursor(conn)
            result = callback(cursor)
            conn.commit()
            return result
        except Exception:
            conn.rollback()
            raise
        finally:
            release_db(conn)
