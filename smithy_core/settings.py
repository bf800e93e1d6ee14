import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'smithy-development-key')

DEBUG = os.environ.get('DJANGO_DEBUG', '') == '1'

ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    'repos_app',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'smithy_core.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
            ],
        },
    },
]

WSGI_APPLICATION = 'smithy_core.wsgi.application'

# Nothing is persisted: repositories are read straight from disk.
DATABASES = {}

USE_TZ = True
TIME_ZONE = 'UTC'

STATIC_URL = '/static/'

# Smithy

SMITHY_ROOT = os.environ.get('SMITHY_ROOT', os.path.join(os.path.expanduser('~'), 'Projects'))
SMITHY_TITLE = os.environ.get('SMITHY_TITLE', 'Smithy')
SMITHY_DESCRIPTION = os.environ.get('SMITHY_DESCRIPTION', 'Smithy - A tiny git forge')
SMITHY_HOST = os.environ.get('SMITHY_HOST', 'localhost')
SMITHY_STATIC_ROOT = BASE_DIR / 'repos_app' / 'static'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
        },
        'repos_app': {
            'handlers': ['console'],
            'level': os.environ.get('SMITHY_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
