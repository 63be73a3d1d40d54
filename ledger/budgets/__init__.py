"""Ledger Budgets Section.

Budgets are spending categories with monthly limits. This section lists
them with their spending for the active period, manages them, and edits
the per-period income target.

The handlers get their storage through init_budgets(), which registers a
repository factory and a preferences factory on the app. Both are called
with the signed-in user's id.
"""
from dataclasses import dataclass
from typing import Callable

from flask import Blueprint

from core.preferences import UserPreferences
from .repositories import BudgetRepository, BudgetRepositoryInterface

budgets_bp = Blueprint('budgets', __name__, template_folder='../templates')


@dataclass
class BudgetServices:
    repository_factory: Callable[[int], BudgetRepositoryInterface]
    preferences_factory: Callable[[int], UserPreferences]


def init_budgets(app, repository_factory=None, preferences_factory=None):
    """Register the storage used by the budget routes on app."""
    app.extensions['budgets'] = BudgetServices(
        repository_factory=repository_factory or BudgetRepository,
        preferences_factory=preferences_factory or UserPreferences,
    )


from . import routes  # noqa: E402, F401
