"""Ledger core authentication module.

Sign-in and sign-out for the web interface, backed by Flask-Login.
"""
from flask import Blueprint

auth_bp = Blueprint('auth', __name__, template_folder='../../templates')

from . import routes  # noqa: E402, F401
