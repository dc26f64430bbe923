"""
Celery configuration for Webhook Hub.
"""
import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'webhookhub.settings')

app = Celery('webhookhub')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
