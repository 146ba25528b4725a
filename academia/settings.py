# academia/settings.py

"""
Django settings for the academia project.

Configuration is read from environment variables. A `.env` file at the
project root (or next to this package) is loaded first when present, so
local development does not need exported variables.

Relevant variables:
    DJANGO_SECRET_KEY, DJANGO_DEBUG, DJANGO_ALLOWED_HOSTS
    DB_ENGINE, DB_NAME, DB_USER, DB_PASSWORD, DB_HOST, DB_PORT
    DB_TIMEOUT, DB_TEST_NAME (SQLite only)
    TIME_ZONE, LOG_LEVEL
    API_PAGE_SIZE, API_MAX_PAGE_SIZE, RECIBO_PREFIX
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# Apps live under apps/ and are imported by their bare label (core, planes, pagos, utils)
APPS_DIR = BASE_DIR / 'apps'
if str(APPS_DIR) not in sys.path:
    sys.path.insert(0, str(APPS_DIR))

env_path = BASE_DIR / '.env'
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv()


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# =============================================================================
# CORE
# =============================================================================

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-academia-dev-key')

DEBUG = env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')
    if host.strip()
]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Project apps
    'utils',
    'core',
    'planes',
    'pagos.apps.PagosConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',

    # Audit context (user, IP) for BaseModel and FinancialAuditLog
    'utils.middleware.AuditContextMiddleware',
]

ROOT_URLCONF = 'academia.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'academia.wsgi.application'


# =============================================================================
# DATABASE
# =============================================================================

DB_ENGINE = os.getenv('DB_ENGINE', 'django.db.backends.sqlite3')

if DB_ENGINE.endswith('sqlite3'):
    # No row locks in SQLite: IMMEDIATE takes the write lock at BEGIN and
    # concurrent writers wait up to the timeout. Tests need a file database
    # for that wait; shared-cache memory databases fail at once.
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.getenv('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
            'OPTIONS': {
                'transaction_mode': 'IMMEDIATE',
                'timeout': int(os.getenv('DB_TIMEOUT', '20')),
            },
            'TEST': {
                'NAME': os.getenv('DB_TEST_NAME', str(BASE_DIR / 'test_db.sqlite3')),
            },
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.getenv('DB_NAME', 'academia'),
            'USER': os.getenv('DB_USER', ''),
            'PASSWORD': os.getenv('DB_PASSWORD', ''),
            'HOST': os.getenv('DB_HOST', 'localhost'),
            'PORT': os.getenv('DB_PORT', ''),
            'ATOMIC_REQUESTS': False,
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# =============================================================================
# INTERNATIONALIZATION
# =============================================================================

LANGUAGE_CODE = 'es'

TIME_ZONE = os.getenv('TIME_ZONE', 'America/Mexico_City')

USE_I18N = True

USE_TZ = True


# =============================================================================
# STATIC FILES
# =============================================================================

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# =============================================================================
# API
# =============================================================================

API_PAGE_SIZE = int(os.getenv('API_PAGE_SIZE', '20'))
API_MAX_PAGE_SIZE = int(os.getenv('API_MAX_PAGE_SIZE', '100'))

# Receipt numbers: RECIBO_PREFIX-000001
RECIBO_PREFIX = os.getenv('RECIBO_PREFIX', 'REC')


# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} [{levelname}] {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django.db.backends': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}
