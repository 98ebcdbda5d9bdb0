"""
WSGI entry point and Flask-Migrate / Alembic target.

Usage:
    flask --app wsgi db upgrade
    flask --app wsgi seed-groups
    flask --app wsgi run-conformance --operation create
    gunicorn wsgi:app
"""

from groupadmin import create_app

app = create_app()
