"""
WSGI config for the confeccao project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'confeccao.config.settings')

application = get_wsgi_application()
