"""
Django settings for command_center project.
"""

from datetime import timedelta
from pathlib import Path

from celery.schedules import crontab
from decouple import config

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-change-this-in-production')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = config('DEBUG', default=True, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=lambda v: [s.strip() for s in v.split(',')])


# Application definition

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'rest_framework_simplejwt',
    'corsheaders',
    'django_filters',
    'jobs',
    'staff',
    'servicem8',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'command_center.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'command_center.wsgi.application'


# Database

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': config('DB_NAME', default='command_center'),
        'USER': config('DB_USER', default='postgres'),
        'PASSWORD': config('DB_PASSWORD', default='postgres'),
        'HOST': config('DB_HOST', default='localhost'),
        'PORT': config('DB_PORT', default='5432'),
    }
}


# Password validation

AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]


# Internationalization

LANGUAGE_CODE = 'en-us'

TIME_ZONE = config('TIME_ZONE', default='UTC')

USE_I18N = True

USE_TZ = True


# Static files (CSS, JavaScript, Images)

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# REST Framework settings
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_PAGINATION_CLASS': 'rest_framework.pagination.PageNumberPagination',
    'PAGE_SIZE': 50,
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
        'rest_framework.filters.OrderingFilter',
    ],
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(hours=24),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=7),
    'ROTATE_REFRESH_TOKENS': True,
}

# CORS Settings
CORS_ALLOWED_ORIGINS = config(
    'CORS_ALLOWED_ORIGINS',
    default='http://localhost:5000,http://127.0.0.1:5000',
    cast=lambda v: [s.strip() for s in v.split(',') if s.strip()],
)

CORS_ALLOW_CREDENTIALS = True

# ServiceM8 REST API Settings
SERVICEM8_BASE_URL = config('SERVICEM8_BASE_URL', default='https://api.servicem8.com/api_1.0')
SERVICEM8_WEB_URL = config('SERVICEM8_WEB_URL', default='https://go.servicem8.com')
SERVICEM8_API_KEY = config('SERVICEM8_API_KEY', default='')
# OAuth access token; takes precedence over the API key when set
SERVICEM8_ACCESS_TOKEN = config('SERVICEM8_ACCESS_TOKEN', default='')
SERVICEM8_TIMEOUT = config('SERVICEM8_TIMEOUT', default=30, cast=int)
SERVICEM8_JOB_LIMIT = config('SERVICEM8_JOB_LIMIT', default=1000, cast=int)
SERVICEM8_BULK_LIMIT = config('SERVICEM8_BULK_LIMIT', default=5000, cast=int)
SERVICEM8_MAX_WORKERS = config('SERVICEM8_MAX_WORKERS', default=4, cast=int)
SERVICEM8_SYNC_COMMUNICATIONS = config('SERVICEM8_SYNC_COMMUNICATIONS', default=True, cast=bool)
SERVICEM8_SYNC_CUSTOM_FIELDS = config('SERVICEM8_SYNC_CUSTOM_FIELDS', default=True, cast=bool)
SERVICEM8_AUTO_SYNC_MINUTES = max(1, config('SERVICEM8_AUTO_SYNC_MINUTES', default=15, cast=int))
SERVICEM8_LOG_RETENTION_DAYS = config('SERVICEM8_LOG_RETENTION_DAYS', default=30, cast=int)

# Scheduler Settings
# Confirmed installs may only be booked this many days ahead
SCHEDULE_WINDOW_DAYS = config('SCHEDULE_WINDOW_DAYS', default=14, cast=int)

# Base URL the notes dialog fetches job history from
DASHBOARD_API_URL = config('DASHBOARD_API_URL', default='http://localhost:8000/api')

# Celery Configuration
CELERY_BROKER_URL = config('CELERY_BROKER_URL', default='redis://localhost:6379/0')
CELERY_RESULT_BACKEND = config('CELERY_RESULT_BACKEND', default='redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_ALWAYS_EAGER = config('CELERY_TASK_ALWAYS_EAGER', default=False, cast=bool)
CELERY_TASK_EAGER_PROPAGATES = config('CELERY_TASK_EAGER_PROPAGATES', default=True, cast=bool)

# Celery Beat Schedule (Periodic Tasks)
CELERY_BEAT_SCHEDULE = {
    'sync-servicem8-jobs': {
        'task': 'servicem8.tasks.sync_servicem8_jobs_task',
        'schedule': timedelta(minutes=SERVICEM8_AUTO_SYNC_MINUTES),
    },
    'cleanup-servicem8-sync-logs-daily': {
        'task': 'servicem8.tasks.cleanup_sync_logs_task',
        'schedule': crontab(hour=3, minute=0),
    },
}

# Logging Configuration
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
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
        'level': 'INFO',
    },
    'loggers': {
        'servicem8': {
            'handlers': ['console'],
            'level': config('SERVICEM8_LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
        'jobs': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
