"""Budget repository contract.

The request handlers only talk to this interface. Budgets, limits,
repetitions and journals are plain dicts keyed by column name.
"""
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional


class BudgetRepositoryInterface(ABC):
    """Persistence and aggregation for one user's budgets."""

    # ---- Budgets ----

    @abstractmethod
    def get_active_budgets(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def get_inactive_budgets(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def find(self, budget_id: int) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def name_exists(self, name: str, exclude_id: Optional[int] = None) -> bool:
        ...

    @abstractmethod
    def store(self, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def update(self, budget: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def destroy(self, budget: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def cleanup_budgets(self) -> int:
        """Remove zero-amount limits. Returns the number removed."""

    # ---- Aggregation ----

    @abstractmethod
    def spent_in_month(self, budget: Dict[str, Any], day: date) -> Decimal:
        """Money spent in the budget during the calendar month of day (>= 0)."""

    @abstractmethod
    def get_without_budget(self, start: date, end: date) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def get_journals(self, budget: Dict[str, Any], repetition: Optional[Dict[str, Any]] = None,
                     page: int = 1, per_page: int = 50) -> Dict[str, Any]:
        """Page of journals: {'journals', 'total', 'page', 'per_page'}."""

    # ---- Limits ----

    @abstractmethod
    def find_repetition(self, repetition_id: int) -> Optional[Dict[str, Any]]:
        """Repetition with its parent limit under 'budget_limit' and 'budget_id'."""

    @abstractmethod
    def get_current_repetition(self, budget: Dict[str, Any], day: date) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def get_budget_limits(self, budget: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Limits newest first, each carrying its 'repetitions'."""

    @abstractmethod
    def update_limit_amount(self, budget: Dict[str, Any], day: date,
                            amount: int) -> Optional[Dict[str, Any]]:
        """Create, change or (amount 0) remove the limit starting on day.

        Returns the affected repetition, or None when no limit remains.
        """
