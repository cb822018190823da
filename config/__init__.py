"""Top-level package for Django configuration.

Holds the settings modules for each environment, the URL configuration,
the WSGI/ASGI entry points and the Celery application.
"""

# Import the Celery application as soon as Django starts so that shared
# tasks are registered against it.
from .celery import app as celery_app  # noqa: F401
