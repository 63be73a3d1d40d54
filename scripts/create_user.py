#!/usr/bin/env python3
"""
Create a ledger user.

Initializes the schema if needed, then inserts a user with a hashed password.

Usage:
    DATABASE_URL='postgresql://...' python scripts/create_user.py EMAIL NAME

The password is read from the LEDGER_PASSWORD environment variable or
prompted for interactively.
"""

import os
import sys
import argparse
import getpass

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'ledger'))


def main(argv=None):
    parser = argparse.ArgumentParser(description='Create a ledger user')
    parser.add_argument('email')
    parser.add_argument('name')
    args = parser.parse_args(argv)

    if not os.environ.get('DATABASE_URL'):
        print("ERROR: DATABASE_URL environment variable not set")
        return 1

    from database import init_db
    from core.auth.repositories import UserRepository

    password = os.environ.get('LEDGER_PASSWORD') or getpass.getpass('Password: ')
    if not password:
        print("ERROR: a password is required")
        return 1

    init_db()
    repo = UserRepository()
    if repo.get_by_email(args.email):
        print(f"ERROR: a user with email {args.email} already exists")
        return 1

    user_id = repo.create(args.email, args.name, password)
    print(f"Created user {user_id} ({args.email})")
    return 0


if __name__ == '__main__':
    sys.exit(main())
