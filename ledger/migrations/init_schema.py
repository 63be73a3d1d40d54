"""Database schema initialization.

Contains the CREATE TABLE and CREATE INDEX statements for the ledger
database. Called by database.init_db() at application startup.
"""


def create_schema(conn, cursor):
    """Create all database tables and indexes.

    Args:
        conn: Database connection (committed by the caller)
        cursor: Database cursor from get_cursor(conn)
    """
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS users (
            id SERIAL PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            name TEXT NOT NULL,
            password_hash TEXT,
            is_active BOOLEAN DEFAULT TRUE,
            last_login TIMESTAMP,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS budgets (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')
    cursor.execute('''
        CREATE UNIQUE INDEX IF NOT EXISTS idx_budgets_user_name
        ON budgets (user_id, LOWER(name))
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS budget_limits (
            id SERIAL PRIMARY KEY,
            budget_id INTEGER NOT NULL REFERENCES budgets(id) ON DELETE CASCADE,
            startdate DATE NOT NULL,
            amount NUMERIC(15,2) NOT NULL DEFAULT 0,
            repeats BOOLEAN NOT NULL DEFAULT FALSE,
            repeat_freq TEXT NOT NULL DEFAULT 'monthly',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (budget_id, startdate, repeat_freq)
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS limit_repetitions (
            id SERIAL PRIMARY KEY,
            budget_limit_id INTEGER NOT NULL REFERENCES budget_limits(id) ON DELETE CASCADE,
            startdate DATE NOT NULL,
            enddate DATE NOT NULL,
            amount NUMERIC(15,2) NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (budget_limit_id, startdate)
        )
    ''')

    # Withdrawals carry negative amounts, deposits positive
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS transaction_journals (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            budget_id INTEGER REFERENCES budgets(id) ON DELETE SET NULL,
            description TEXT NOT NULL,
            amount NUMERIC(15,2) NOT NULL,
            date DATE NOT NULL,
            transaction_type TEXT NOT NULL DEFAULT 'withdrawal',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')
    cursor.execute('''
        CREATE INDEX IF NOT EXISTS idx_journals_budget_date
        ON transaction_journals (budget_id, date)
    ''')
    cursor.execute('''
        CREATE INDEX IF NOT EXISTS idx_journals_user_date
        ON transaction_journals (user_id, date)
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS preferences (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            data JSONB,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (user_id, name)
        )
    ''')
