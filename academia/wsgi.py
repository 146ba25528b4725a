"""
WSGI config for the academia project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'academia.settings')

application = get_wsgi_application()
