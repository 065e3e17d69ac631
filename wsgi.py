"""
WSGI entry point.

    gunicorn --bind 0.0.0.0:8000 wsgi:application
"""

from catalog.app import create_app

application = create_app()
