"""
WSGI / Flask CLI entry point.

Usage:
    flask --app wsgi run
    flask --app wsgi db upgrade
    flask --app wsgi seed-sample
"""

from casehub import create_app

app = create_app()
