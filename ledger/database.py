"""Ledger database module.

Owns the PostgreSQL connection pool and the helpers every repository
builds on: get_db/release_db to check connections out and back in,
get_cursor for dict rows, dict_from_row for plain values, and init_db
for the schema.

Settings come from the environment:
    DATABASE_URL       required, libpq connection string
    DB_POOL_MIN_CONN   connections opened up front (default 2)
    DB_POOL_MAX_CONN   connections checked out at once (default 8)
    DB_POOL_TIMEOUT    seconds to wait for a free connection (default 10)
"""
import os
import logging
import threading

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

logger = logging.getLogger('ledger.database')

DATABASE_URL = os.environ.get('DATABASE_URL')
if not DATABASE_URL:
    raise ValueError('DATABASE_URL is not set; point it at the ledger PostgreSQL database.')

POOL_MIN_CONN = int(os.environ.get('DB_POOL_MIN_CONN', '2'))
POOL_MAX_CONN = int(os.environ.get('DB_POOL_MAX_CONN', '8'))
POOL_TIMEOUT = int(os.environ.get('DB_POOL_TIMEOUT', '10'))
HEALTH_CHECK_ATTEMPTS = 3

_pool = None
_pool_lock = threading.Lock()
# ThreadedConnectionPool raises instead of waiting when every connection is out
_checkouts = threading.BoundedSemaphore(POOL_MAX_CONN)


def _connection_pool():
    global _pool
    if _pool is None:
        with _pool_lock:
            if _pool is None:
                _pool = pool.ThreadedConnectionPool(
                    POOL_MIN_CONN, POOL_MAX_CONN,
                    dsn=DATABASE_URL,
                    connect_timeout=5,
                    keepalives=1,
                    keepalives_idle=30,
                )
                logger.info(f'Opened connection pool ({POOL_MIN_CONN}-{POOL_MAX_CONN} connections)')
    return _pool


def _checkout():
    if not _checkouts.acquire(timeout=POOL_TIMEOUT):
        raise psycopg2.OperationalError(f'No free database connection after waiting {POOL_TIMEOUT}s')
    try:
        return _connection_pool().getconn()
    except Exception:
        _checkouts.release()
        raise


def _discard(conn):
    try:
        _connection_pool().putconn(conn, close=True)
    except (psycopg2.Error, pool.PoolError) as e:
        logger.debug(f'Closing a dropped connection failed: {e}')
    finally:
        _checkouts.release()


def get_db():
    """Check out a live connection in autocommit mode.

    Connections the server has closed are dropped and replaced, up to
    HEALTH_CHECK_ATTEMPTS times.
    """
    error = None
    for attempt in range(1, HEALTH_CHECK_ATTEMPTS + 1):
        conn = _checkout()
        try:
            with conn.cursor() as cur:
                cur.execute('SELECT 1')
            conn.rollback()
        except psycopg2.Error as e:
            error = e
            logger.warning(f'Dropping dead connection ({attempt}/{HEALTH_CHECK_ATTEMPTS}): {e}')
            _discard(conn)
            continue
        conn.autocommit = True
        return conn

    raise psycopg2.OperationalError(f'No usable database connection: {error}')


def release_db(conn):
    """Hand conn back to the pool. Closed or broken connections are dropped."""
    if conn is None or _pool is None:
        return
    if conn.closed:
        _discard(conn)
        return
    try:
        conn.autocommit = False
        _pool.putconn(conn)
    except (psycopg2.Error, pool.PoolError):
        _discard(conn)
        return
    _checkouts.release()


def ping_db():
    """True when the database answers a trivial query."""
    try:
        conn = get_db()
    except psycopg2.Error as e:
        logger.warning(f'Database ping failed: {e}')
        return False
    release_db(conn)
    return True


def get_cursor(conn):
    return conn.cursor(cursor_factory=RealDictCursor)


def init_db():
    """Create the schema if the budgets table does not exist yet.

    Delegates to migrations.init_schema.create_schema().
    """
    conn = get_db()
    cursor = get_cursor(conn)
    try:
        cursor.execute("""
            SELECT EXISTS (
                SELECT FROM information_schema.tables
                WHERE table_schema = 'public' AND table_name = 'budgets'
            )
        """)
        if cursor.fetchone()['exists']:
            logger.info('Database schema already initialized, skipping init_db()')
            return

        from migrations.init_schema import create_schema
        conn.autocommit = False
        create_schema(conn, cursor)
        conn.commit()
        logger.info('Database schema initialized successfully')
    except Exception:
        conn.rollback()
        raise
    finally:
        release_db(conn)


def dict_from_row(row):
    """Convert a database row to a dictionary with ISO-formatted dates.

    NUMERIC columns are left as Decimal so amounts keep their precision.
    """
    if row is None:
        return None
    result = dict(row)
    for key, value in result.items():
        if hasattr(value, 'isoformat'):
            result[key] = value.isoformat()
    return result
