import os

from celery import Celery


os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'companion.settings')

app = Celery('companion')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks in installed apps
app.autodiscover_tasks()

