"""Budget pages: list, create, edit, delete, detail, income target and limit amounts."""

import logging
from datetime import date
from decimal import Decimal
from urllib.parse import urlparse

from flask import (
    abort, current_app, flash, jsonify, redirect, render_template, request, session, url_for,
)
from flask_login import login_required, current_user

from budgets import budgets_bp
from budgets.config import budget_config
from budgets.forms import int_flag, parse_amount, validate_budget_form
from budgets.periods import (
    income_preference_key, long_date, month_label, parse_month, spent_percentage,
)
from budgets.session import BudgetSessionContext
from core.utils.api_helpers import error_response, safe_error_response
from core.utils.logging_config import log_with_context

logger = logging.getLogger('ledger.budgets.routes')


@budgets_bp.context_processor
def _budget_view_defaults():
    return {'title': 'Budgets', 'main_title_icon': 'fa-tasks', 'hide_budgets': True}


# ============== Helpers ==============

def _repository():
    return current_app.extensions['budgets'].repository_factory(current_user.id)


def _preferences():
    return current_app.extensions['budgets'].preferences_factory(current_user.id)


def _budget_or_404(repository, budget_id):
    budget = repository.find(budget_id)
    if budget is None:
        abort(404)
    return budget


def _previous_url():
    """The referring page if it is on this site, else the budget list."""
    referrer = request.referrer
    if referrer:
        parsed = urlparse(referrer)
        if not parsed.netloc or parsed.netloc == request.host:
            return referrer
    return url_for('budgets.index')


def _as_date(value):
    return value if isinstance(value, date) else date.fromisoformat(str(value)[:10])


def _log(message, **context):
    log_with_context(logger, logging.INFO, message, user_id=current_user.id, **context)


# ============== Overview ==============

@budgets_bp.route('/')
@login_required
def index():
    """Active budgets with spending for the active period against the income target."""
    repository = _repository()
    preferences = _preferences()
    ctx = BudgetSessionContext.load(session)

    budgets = repository.get_active_budgets()
    inactive = repository.get_inactive_budgets()
    repository.cleanup_budgets()

    for budget in budgets:
        budget['spent'] = repository.spent_in_month(budget, ctx.start)
        budget['current_rep'] = repository.get_current_repetition(budget, ctx.start)

    spent = sum((budget['spent'] for budget in budgets), Decimal('0'))
    amount = preferences.get(income_preference_key(ctx.start),
                             budget_config.DEFAULT_PREFERENCE_AMOUNT).data
    overspent = spent > Decimal(str(amount))
    spent_pct = spent_percentage(spent, amount)
    budget_maximum = preferences.get(budget_config.MAXIMUM_PREFERENCE,
                                     budget_config.DEFAULT_PREFERENCE_AMOUNT).data

    return render_template('budgets/index.html',
                           budgets=budgets,
                           inactive=inactive,
                           spent=spent,
                           spent_pct=spent_pct,
                           overspent=overspent,
                           amount=amount,
                           budget_maximum=budget_maximum,
                           period=month_label(ctx.start),
                           period_value=ctx.start.strftime('%Y-%m'))


@budgets_bp.route('/period', methods=['POST'])
@login_required
def select_period():
    """Switch the active period to the submitted month."""
    ctx = BudgetSessionContext.load(session)
    try:
        ctx.select_period(parse_month(request.form.get('month')))
    except ValueError as e:
        flash(str(e), 'error')
    else:
        ctx.save(session)
    return redirect(_previous_url())


# ============== Create ==============

@budgets_bp.route('/create')
@login_required
def create():
    """New budget form."""
    ctx = BudgetSessionContext.load(session)
    ctx.remember_create_origin(_previous_url())
    old_input = ctx.pop_create_input()
    ctx.save(session)

    return render_template('budgets/create.html',
                           sub_title='Create a new budget',
                           old_input=old_input)


@budgets_bp.route('/store', methods=['POST'])
@login_required
def store():
    """Save a new budget."""
    repository = _repository()
    ctx = BudgetSessionContext.load(session)

    data, errors = validate_budget_form(request.form, repository)
    if errors:
        for message in errors:
            flash(message, 'error')
        ctx.suppress_create_bookmark()
        ctx.preserve_create_input(request.form.to_dict())
        ctx.save(session)
        return redirect(url_for('budgets.create'))

    budget = repository.store({'name': data['name'], 'user': current_user.id})
    _log('Budget stored', budget_id=budget['id'])
    flash(f'New budget "{budget["name"]}" stored!', 'success')

    if int_flag(request.form.get('create_another')):
        # keep the bookmark from before the first create form
        ctx.suppress_create_bookmark()
        ctx.preserve_create_input(request.form.to_dict())
        ctx.save(session)
        return redirect(url_for('budgets.create'))

    return redirect(ctx.create_url or url_for('budgets.index'))


# ============== Edit ==============

@budgets_bp.route('/edit/<int:budget_id>')
@login_required
def edit(budget_id):
    """Edit budget form."""
    budget = _budget_or_404(_repository(), budget_id)

    ctx = BudgetSessionContext.load(session)
    ctx.remember_edit_origin(_previous_url())
    old_input = ctx.pop_edit_input(budget['id'])
    ctx.save(session)

    return render_template('budgets/edit.html',
                           budget=budget,
                           sub_title=f'Edit budget "{budget["name"]}"',
                           old_input=old_input)


@budgets_bp.route('/update/<int:budget_id>', methods=['POST'])
@login_required
def update(budget_id):
    """Save changes to a budget."""
    repository = _repository()
    budget = _budget_or_404(repository, budget_id)
    ctx = BudgetSessionContext.load(session)

    data, errors = validate_budget_form(request.form, repository, budget_id=budget['id'])
    if errors:
        for message in errors:
            flash(message, 'error')
        ctx.suppress_edit_bookmark()
        # unchecked boxes are not submitted
        ctx.preserve_edit_input(budget['id'], dict(request.form.to_dict(), active=data['active']))
        ctx.save(session)
        return redirect(url_for('budgets.edit', budget_id=budget['id']))

    budget = repository.update(budget, {'name': data['name'], 'active': data['active']})
    _log('Budget updated', budget_id=budget['id'], active=data['active'])
    flash(f'Budget "{budget["name"]}" updated.', 'success')

    if int_flag(request.form.get('return_to_edit')):
        ctx.suppress_edit_bookmark()
        ctx.preserve_edit_input(budget['id'], {'return_to_edit': 1})
        ctx.save(session)
        return redirect(url_for('budgets.edit', budget_id=budget['id']))

    return redirect(ctx.edit_url or url_for('budgets.index'))


# ============== Delete ==============

@budgets_bp.route('/delete/<int:budget_id>')
@login_required
def delete(budget_id):
    """Ask for confirmation before deleting a budget."""
    budget = _budget_or_404(_repository(), budget_id)

    ctx = BudgetSessionContext.load(session)
    ctx.remember_delete_origin(_previous_url())
    ctx.save(session)

    return render_template('budgets/delete.html',
                           budget=budget,
                           sub_title=f'Delete budget "{budget["name"]}"')


@budgets_bp.route('/destroy/<int:budget_id>', methods=['POST'])
@login_required
def destroy(budget_id):
    """Delete a budget."""
    repository = _repository()
    budget = _budget_or_404(repository, budget_id)
    name = budget['name']

    repository.destroy(budget)
    _log('Budget deleted', budget_id=budget_id)
    flash(f'The budget "{name}" was deleted.', 'success')

    ctx = BudgetSessionContext.load(session)
    return redirect(ctx.delete_url or url_for('budgets.index'))


# ============== Detail ==============

@budgets_bp.route('/show/<int:budget_id>')
@budgets_bp.route('/show/<int:budget_id>/<int:repetition_id>')
@login_required
def show(budget_id, repetition_id=None):
    """Journals and limits of a budget, optionally narrowed to one period."""
    repository = _repository()
    budget = _budget_or_404(repository, budget_id)

    repetition = None
    if repetition_id is not None:
        repetition = repository.find_repetition(repetition_id)
        if repetition is None:
            abort(404)
        if repetition['budget_id'] != budget['id']:
            logger.warning(f'Repetition {repetition_id} does not belong to budget {budget_id}')
            return render_template('error.html', message='Invalid selection.'), 400

    page = max(request.args.get('page', 1, type=int), 1)
    journals = repository.get_journals(budget, repetition, page=page,
                                       per_page=budget_config.JOURNALS_PER_PAGE)

    if repetition is not None:
        limits = [repetition['budget_limit']]
        sub_title = f'{budget["name"]} in {month_label(_as_date(repetition["startdate"]))}'
    else:
        limits = repository.get_budget_limits(budget)
        sub_title = budget['name']

    return render_template('budgets/show.html',
                           budget=budget,
                           repetition=repetition,
                           limits=limits,
                           journals=journals,
                           sub_title=sub_title)


@budgets_bp.route('/no-budget')
@login_required
def no_budget():
    """Withdrawals in the active period that have no budget."""
    ctx = BudgetSessionContext.load(session)
    journals = _repository().get_without_budget(ctx.start, ctx.end)
    sub_title = (f'Transactions without a budget between '
                 f'{long_date(ctx.start)} and {long_date(ctx.end)}')
    return render_template('budgets/no_budget.html', journals=journals, sub_title=sub_title)


# ============== Income target ==============

@budgets_bp.route('/income')
@login_required
def income():
    """Form for the expected income of the active period."""
    ctx = BudgetSessionContext.load(session)
    amount = _preferences().get(income_preference_key(ctx.start),
                                budget_config.DEFAULT_PREFERENCE_AMOUNT)
    return render_template('budgets/income.html',
                           amount=amount,
                           period=month_label(ctx.start))


@budgets_bp.route('/income', methods=['POST'])
@login_required
def update_income():
    """Store the expected income of the active period."""
    try:
        amount = parse_amount(request.form.get('amount'))
    except ValueError as e:
        flash(str(e), 'error')
        return redirect(url_for('budgets.income'))

    ctx = BudgetSessionContext.load(session)
    key = income_preference_key(ctx.start)
    _preferences().set(key, amount)
    _log('Income target updated', preference=key, amount=amount)

    return redirect(url_for('budgets.index'))


# ============== Limit amount (AJAX) ==============

@budgets_bp.route('/amount/<int:budget_id>', methods=['POST'])
@login_required
def amount(budget_id):
    """Set the limit of a budget for the active period. Returns JSON."""
    repository = _repository()
    budget = _budget_or_404(repository, budget_id)

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = request.form
    try:
        value = parse_amount(payload.get('amount'))
    except ValueError as e:
        return error_response(str(e), 400)

    ctx = BudgetSessionContext.load(session)
    try:
        repetition = repository.update_limit_amount(budget, ctx.start, value)
    except Exception as e:
        return safe_error_response(e)

    _log('Budget limit amount set', budget_id=budget['id'], period=ctx.start.isoformat(), amount=value)
    return jsonify({'name': budget['name'], 'repetition': repetition['id'] if repetition else 0})
