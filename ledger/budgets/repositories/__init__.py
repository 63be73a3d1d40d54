"""Budget repositories."""
from .interface import BudgetRepositoryInterface
from .budget_repository import BudgetRepository

__all__ = ['BudgetRepositoryInterface', 'BudgetRepository']
