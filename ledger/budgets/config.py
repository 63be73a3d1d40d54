"""
Budgets section configuration.

Defaults for preferences, paging and form limits used by the budget routes.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BudgetConfig:
    """Budget section settings."""

    # Preferences
    INCOME_PREFERENCE_PREFIX: str = 'budgetIncomeTotal'
    MAXIMUM_PREFERENCE: str = 'budgetMaximum'
    DEFAULT_PREFERENCE_AMOUNT: int = 1000

    # Budget detail page
    JOURNALS_PER_PAGE: int = 50

    # Forms
    NAME_MAX_LENGTH: int = 100

    # Limits created from the index page
    LIMIT_REPEAT_FREQ: str = 'monthly'


budget_config = BudgetConfig()
