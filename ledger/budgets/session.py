"""Session-scoped state for the budget pages.

BudgetSessionContext replaces loose string keys with typed fields:
where to send the user after create/edit/delete, the one-shot flags that
keep a "create another" or "return to edit" loop from overwriting that
bookmark, form input preserved across a redirect, and the active period.

The active period lives under the shared 'start' and 'end' keys because
other ledger pages read the same range.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, MutableMapping, Optional

from budgets.periods import start_of_month, end_of_month

SESSION_KEY = 'budgets'
START_KEY = 'start'
END_KEY = 'end'


def _parse_date(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


@dataclass
class BudgetSessionContext:
    start: date
    end: date
    create_url: Optional[str] = None
    create_from_store: bool = False
    edit_url: Optional[str] = None
    edit_from_update: bool = False
    delete_url: Optional[str] = None
    create_input: Dict[str, Any] = field(default_factory=dict)
    edit_input: Dict[str, Any] = field(default_factory=dict)
    edit_input_budget_id: Optional[int] = None
    # Only a period the user picked is written back; defaults follow the calendar
    period_pinned: bool = False

    @classmethod
    def load(cls, store: MutableMapping, today: Optional[date] = None) -> 'BudgetSessionContext':
        today = today or date.today()
        data = store.get(SESSION_KEY) or {}
        stored_start = _parse_date(store.get(START_KEY))
        start = stored_start or start_of_month(today)
        end = _parse_date(store.get(END_KEY)) or end_of_month(start)
        return cls(
            start=start,
            end=end,
            create_url=data.get('create_url'),
            create_from_store=data.get('create_from_store') is True,
            edit_url=data.get('edit_url'),
            edit_from_update=data.get('edit_from_update') is True,
            delete_url=data.get('delete_url'),
            create_input=dict(data.get('create_input') or {}),
            edit_input=dict(data.get('edit_input') or {}),
            edit_input_budget_id=data.get('edit_input_budget_id'),
            period_pinned=stored_start is not None,
        )

    def save(self, store: MutableMapping) -> None:
        store[SESSION_KEY] = {
            'create_url': self.create_url,
            'create_from_store': self.create_from_store,
            'edit_url': self.edit_url,
            'edit_from_update': self.edit_from_update,
            'delete_url': self.delete_url,
            'create_input': self.create_input,
            'edit_input': self.edit_input,
            'edit_input_budget_id': self.edit_input_budget_id,
        }
        if self.period_pinned:
            store[START_KEY] = self.start.isoformat()
            store[END_KEY] = self.end.isoformat()

    # ---- Create ----

    def remember_create_origin(self, url: str) -> None:
        """Bookmark url unless the last store asked to keep the old bookmark."""
        if not self.create_from_store:
            self.create_url = url
        self.create_from_store = False

    def suppress_create_bookmark(self) -> None:
        self.create_from_store = True

    # ---- Edit ----

    def remember_edit_origin(self, url: str) -> None:
        """Bookmark url unless the last update asked to keep the old bookmark."""
        if not self.edit_from_update:
            self.edit_url = url
        self.edit_from_update = False

    def suppress_edit_bookmark(self) -> None:
        self.edit_from_update = True

    # ---- Delete ----

    def remember_delete_origin(self, url: str) -> None:
        self.delete_url = url

    # ---- Preserved input ----

    def preserve_create_input(self, data: Dict[str, Any]) -> None:
        self.create_input = dict(data)

    def pop_create_input(self) -> Dict[str, Any]:
        data, self.create_input = self.create_input, {}
        return data

    def preserve_edit_input(self, budget_id: int, data: Dict[str, Any]) -> None:
        self.edit_input = dict(data)
        self.edit_input_budget_id = budget_id

    def pop_edit_input(self, budget_id: int) -> Dict[str, Any]:
        """Input saved for this budget's edit form; input for another budget is kept."""
        if self.edit_input_budget_id != budget_id:
            return {}
        data, self.edit_input = self.edit_input, {}
        self.edit_input_budget_id = None
        return data

    # ---- Period ----

    def select_period(self, start: date, end: Optional[date] = None) -> None:
        self.start = start
        self.end = end or end_of_month(start)
        self.period_pinned = True
