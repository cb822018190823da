"""WSGI config for ParkingHub.

Exposes the WSGI application used by ``runserver`` and production WSGI
servers, pointing at the project settings package.
"""

import os
from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_wsgi_application()
