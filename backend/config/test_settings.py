"""
Settings for the pytest run.

Extends the main settings with a file-backed SQLite database so worker
threads in the concurrency tests share one database. IMMEDIATE transactions
take the write lock at BEGIN, which makes contending writers wait on the busy
timeout instead of failing.
"""

from .settings import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
        'OPTIONS': {
            'timeout': 20,
            'transaction_mode': 'IMMEDIATE',
        },
        'TEST': {'NAME': str(BASE_DIR / 'test_db.sqlite3')},
    }
}

STRIPE_USE_STUB = True
