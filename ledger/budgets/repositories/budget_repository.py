"""Repository for budgets, budget_limits, limit_repetitions and budget journals."""

import logging
from decimal import Decimal

from core.base_repository import BaseRepository
from database import dict_from_row
from budgets.config import budget_config
from budgets.periods import start_of_month, end_of_month
from .interface import BudgetRepositoryInterface

logger = logging.getLogger('ledger.budgets.repository')

_REPETITION_COLUMNS = '''
    lr.id, lr.budget_limit_id, lr.startdate, lr.enddate, lr.amount,
    bl.budget_id, bl.startdate AS limit_startdate, bl.amount AS limit_amount,
    bl.repeats, bl.repeat_freq
'''


def _split_repetition(row):
    """Move the joined budget_limits columns into a nested 'budget_limit' dict."""
    if row is None:
        return None
    repetition = {
        'id': row['id'],
        'budget_limit_id': row['budget_limit_id'],
        'budget_id': row['budget_id'],
        'startdate': row['startdate'],
        'enddate': row['enddate'],
        'amount': row['amount'],
    }
    repetition['budget_limit'] = {
        'id': row['budget_limit_id'],
        'budget_id': row['budget_id'],
        'startdate': row['limit_startdate'],
        'amount': row['limit_amount'],
        'repeats': row['repeats'],
        'repeat_freq': row['repeat_freq'],
        'repetitions': [{k: v for k, v in repetition.items() if k != 'budget_limit'}],
    }
    return repetition


class BudgetRepository(BaseRepository, BudgetRepositoryInterface):
    """PostgreSQL budget storage scoped to one user."""

    def __init__(self, user_id):
        self.user_id = user_id

    # ---- Budgets ----

    def get_active_budgets(self):
        return self.query_all('''
            SELECT * FROM budgets
            WHERE user_id = %s AND active = TRUE
            ORDER BY LOWER(name)
        ''', (self.user_id,))

    def get_inactive_budgets(self):
        return self.query_all('''
            SELECT * FROM budgets
            WHERE user_id = %s AND active = FALSE
            ORDER BY LOWER(name)
        ''', (self.user_id,))

    def find(self, budget_id):
        return self.query_one(
            'SELECT * FROM budgets WHERE id = %s AND user_id = %s', (budget_id, self.user_id)
        )

    def name_exists(self, name, exclude_id=None):
        sql = 'SELECT 1 FROM budgets WHERE user_id = %s AND LOWER(name) = LOWER(%s)'
        params = [self.user_id, name]
        if exclude_id is not None:
            sql += ' AND id != %s'
            params.append(exclude_id)
        return self.query_one(sql, params) is not None

    def store(self, data):
        budget = self.execute('''
            INSERT INTO budgets (user_id, name, active)
            VALUES (%s, %s, %s)
            RETURNING *
        ''', (data.get('user', self.user_id), data['name'], data.get('active', True)), returning=True)
        logger.info(f'Budget {budget["id"]} created for user {self.user_id}')
        return budget

    def update(self, budget, data):
        allowed = {'name', 'active'}
        updates = []
        params = []
        for key, val in data.items():
            if key in allowed and val is not None:
                updates.append(f'{key} = %s')
                params.append(val)
        if not updates:
            return budget

        updates.append('updated_at = CURRENT_TIMESTAMP')
        params.extend([budget['id'], self.user_id])
        updated = self.execute(
            f'UPDATE budgets SET {", ".join(updates)} WHERE id = %s AND user_id = %s RETURNING *',
            params, returning=True
        )
        return updated or budget

    def destroy(self, budget):
        deleted = self.execute(
            'DELETE FROM budgets WHERE id = %s AND user_id = %s', (budget['id'], self.user_id)
        ) > 0
        if deleted:
            logger.info(f'Budget {budget["id"]} deleted for user {self.user_id}')
        return deleted

    def cleanup_budgets(self):
        removed = self.execute('''
            DELETE FROM budget_limits bl
            USING budgets b
            WHERE b.id = bl.budget_id AND b.user_id = %s AND bl.amount = 0
        ''', (self.user_id,))
        if removed:
            logger.info(f'Cleanup: removed {removed} empty budget limits for user {self.user_id}')
        return removed

    # ---- Aggregation ----

    def spent_in_month(self, budget, day):
        total = self.query_value('''
            SELECT COALESCE(SUM(amount), 0) AS total
            FROM transaction_journals
            WHERE budget_id = %s AND user_id = %s
              AND date BETWEEN %s AND %s
              AND amount < 0
        ''', (budget['id'], self.user_id, start_of_month(day), end_of_month(day)), default=0)
        return abs(Decimal(total))

    def get_without_budget(self, start, end):
        return self.query_all('''
            SELECT * FROM transaction_journals
            WHERE user_id = %s AND budget_id IS NULL
              AND transaction_type = 'withdrawal'
              AND date BETWEEN %s AND %s
            ORDER BY date DESC, id DESC
        ''', (self.user_id, start, end))

    def get_journals(self, budget, repetition=None, page=1, per_page=50):
        conditions = ['budget_id = %s', 'user_id = %s']
        params = [budget['id'], self.user_id]
        if repetition is not None:
            conditions.append('date BETWEEN %s AND %s')
            params.extend([repetition['startdate'], repetition['enddate']])
        where = ' AND '.join(conditions)

        page = max(int(page), 1)
        total = self.query_value(
            f'SELECT COUNT(*) AS total FROM transaction_journals WHERE {where}', params, default=0
        )
        journals = self.query_all(f'''
            SELECT * FROM transaction_journals
            WHERE {where}
            ORDER BY date DESC, id DESC
            LIMIT %s OFFSET %s
        ''', params + [per_page, (page - 1) * per_page])
        return {'journals': journals, 'total': total, 'page': page, 'per_page': per_page}

    # ---- Limits ----

    def find_repetition(self, repetition_id):
        row = self.query_one(f'''
            SELECT {_REPETITION_COLUMNS}
            FROM limit_repetitions lr
            JOIN budget_limits bl ON bl.id = lr.budget_limit_id
            JOIN budgets b ON b.id = bl.budget_id
            WHERE lr.id = %s AND b.user_id = %s
        ''', (repetition_id, self.user_id))
        return _split_repetition(row)

    def get_current_repetition(self, budget, day):
        row = self.query_one(f'''
            SELECT {_REPETITION_COLUMNS}
            FROM limit_repetitions lr
            JOIN budget_limits bl ON bl.id = lr.budget_limit_id
            WHERE bl.budget_id = %s AND lr.startdate = %s
            ORDER BY lr.id
            LIMIT 1
        ''', (budget['id'], day))
        return _split_repetition(row)

    def get_budget_limits(self, budget):
        limits = self.query_all('''
            SELECT * FROM budget_limits
            WHERE budget_id = %s
            ORDER BY startdate DESC
        ''', (budget['id'],))
        if not limits:
            return []

        repetitions = self.query_all('''
            SELECT * FROM limit_repetitions
            WHERE budget_limit_id = ANY(%s)
            ORDER BY startdate DESC
        ''', ([limit['id'] for limit in limits],))
        by_limit = {}
        for rep in repetitions:
            by_limit.setdefault(rep['budget_limit_id'], []).append(rep)
        for limit in limits:
            limit['repetitions'] = by_limit.get(limit['id'], [])
        return limits

    def update_limit_amount(self, budget, day, amount):
        freq = budget_config.LIMIT_REPEAT_FREQ
        end = end_of_month(day)

        def _work(cursor):
            cursor.execute('''
                SELECT id FROM budget_limits
                WHERE budget_id = %s AND startdate = %s AND repeat_freq = %s
            ''', (budget['id'], day, freq))
            limit = cursor.fetchone()

            if limit is None:
                if amount <= 0:
                    return None
                cursor.execute('''
                    INSERT INTO budget_limits (budget_id, startdate, amount, repeats, repeat_freq)
                    VALUES (%s, %s, %s, FALSE, %s)
                    RETURNING id
                ''', (budget['id'], day, amount, freq))
                limit_id = cursor.fetchone()['id']
                logger.info(f'Limit {limit_id} created for budget {budget["id"]} starting {day}')
            elif amount <= 0:
                cursor.execute('DELETE FROM budget_limits WHERE id = %s', (limit['id'],))
                logger.info(f'Limit {limit["id"]} removed from budget {budget["id"]}')
                return None
            else:
                limit_id = limit['id']
                cursor.execute('''
                    UPDATE budget_limits SET amount = %s, updated_at = CURRENT_TIMESTAMP
                    WHERE id = %s
                ''', (amount, limit_id))
                cursor.execute('''
                    UPDATE limit_repetitions SET amount = %s, updated_at = CURRENT_TIMESTAMP
                    WHERE budget_limit_id = %s
                ''', (amount, limit_id))

            cursor.execute('''
                SELECT * FROM limit_repetitions
                WHERE budget_limit_id = %s AND startdate = %s
            ''', (limit_id, day))
            repetition = cursor.fetchone()
            if repetition is None:
                cursor.execute('''
                    INSERT INTO limit_repetitions (budget_limit_id, startdate, enddate, amount)
                    VALUES (%s, %s, %s, %s)
                    RETURNING *
                ''', (limit_id, day, end, amount))
                repetition = cursor.fetchone()
            return dict_from_row(repetition)

        return self.execute_many(_work)
