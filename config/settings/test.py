"""
Test settings

SQLite database, local-memory cache and eager Celery so the suite runs
without Postgres, Redis or a broker.
"""
import os

for _name, _value in {
    'SECRET_KEY': 'test-secret-key-for-testing-only',
    'DB_NAME': 'salon_test',
    'DB_USER': 'salon',
    'DB_PASSWORD': 'salon',
    'DB_HOST': 'localhost',
    'DB_PORT': '5432',
    'STRIPE_SECRET_KEY': 'sk_test_dummy',
    'STRIPE_PUBLISHABLE_KEY': 'pk_test_dummy',
    'STRIPE_WEBHOOK_SECRET': 'whsec_test_dummy',
    'REDIS_URL': 'redis://localhost:6379/15',
}.items():
    os.environ.setdefault(_name, _value)

from .base import *  # noqa: E402

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'salon-tests',
    }
}

STORAGES['staticfiles'] = {
    'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

LOGGING['root']['level'] = 'WARNING'
LOGGING['loggers']['apps']['level'] = 'WARNING'
