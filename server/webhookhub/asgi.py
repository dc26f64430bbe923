"""
ASGI config for webhookhub project.
"""
import os
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'webhookhub.settings')
application = get_asgi_application()
