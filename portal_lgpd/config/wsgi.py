"""WSGI config do Portal LGPD."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'portal_lgpd.config.settings')

application = get_wsgi_application()
