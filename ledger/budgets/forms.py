"""Input validation for the budget forms and amount fields."""
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Mapping, Optional, Tuple

from budgets.config import budget_config


def int_flag(value) -> bool:
    """True when a checkbox/hidden field was submitted as 1."""
    try:
        return int(value) == 1
    except (TypeError, ValueError):
        return False


def parse_amount(raw) -> int:
    """Parse a submitted amount into whole currency units.

    Accepts integers and decimals ("250", "250.75"); the fraction is
    truncated. Empty, non-numeric, infinite and negative values raise
    ValueError.
    """
    if raw is None or str(raw).strip() == '':
        raise ValueError('The amount is required.')
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        raise ValueError('The amount must be a number.') from None
    if not value.is_finite():
        raise ValueError('The amount must be a number.')
    if value < 0:
        raise ValueError('The amount cannot be negative.')
    return int(value)


def validate_budget_form(form: Mapping, repository,
                         budget_id: Optional[int] = None) -> Tuple[Dict, List[str]]:
    """Validate the create/edit budget form.

    Returns (data, errors). data holds the cleaned name and active flag.
    """
    errors = []
    name = (form.get('name') or '').strip()

    if not name:
        errors.append('The name field is required.')
    elif len(name) > budget_config.NAME_MAX_LENGTH:
        errors.append(f'The name may not be greater than {budget_config.NAME_MAX_LENGTH} characters.')
    elif repository.name_exists(name, exclude_id=budget_id):
        errors.append(f'A budget named "{name}" already exists.')

    data = {'name': name, 'active': int_flag(form.get('active'))}
    return data, errors
