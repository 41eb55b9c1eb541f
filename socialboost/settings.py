# socialboost/settings.py
from pathlib import Path
from datetime import timedelta
from decouple import config, Csv
import dj_database_url

BASE_DIR = Path(__file__).resolve().parent.parent

# -------------------------------------------------------------------
# Core / Environment
# -------------------------------------------------------------------
ENV = config("ENV", default="development")  # "development" | "production" | "staging"
DEBUG = config("DEBUG", default=(ENV != "production"), cast=bool)
SECRET_KEY = config("SECRET_KEY", default="django-insecure-dev-only" if DEBUG else "")

ALLOWED_HOSTS = config("ALLOWED_HOSTS", cast=Csv(), default="localhost,127.0.0.1,testserver")
CSRF_TRUSTED_ORIGINS = config(
    "CSRF_TRUSTED_ORIGINS",
    cast=Csv(),
    default="http://localhost:5000,http://127.0.0.1:5000",
)

SITE_ID = 1

# -------------------------------------------------------------------
# Installed Apps
# -------------------------------------------------------------------
INSTALLED_APPS = [
    # Django core
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django.contrib.sites",

    # Third-party
    "allauth",
    "allauth.account",
    "allauth.socialaccount",
    "allauth.socialaccount.providers.google",
    "rest_framework",
    "rest_framework_simplejwt",
    "drf_spectacular",
    "corsheaders",
    "django_filters",

    # Project apps
    "core",
    "users",
    "services",
    "orders.apps.OrdersConfig",
    "payments.apps.PaymentsConfig",
    "notifications",
    "affiliates",
]

# -------------------------------------------------------------------
# Middleware
# -------------------------------------------------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",

    "corsheaders.middleware.CorsMiddleware",

    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "allauth.account.middleware.AccountMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# -------------------------------------------------------------------
# URLs / Templates / WSGI
# -------------------------------------------------------------------
ROOT_URLCONF = "socialboost.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "socialboost.wsgi.application"

# -------------------------------------------------------------------
# Database (Render/Heroku-style via DATABASE_URL)
# -------------------------------------------------------------------
DATABASES = {
    "default": dj_database_url.config(
        default=config("DATABASE_URL", default=f"sqlite:///{BASE_DIR/'db.sqlite3'}"),
        conn_max_age=600,
        ssl_require=config("DB_SSL_REQUIRE", default=(ENV == "production"), cast=bool),
    )
}

# -------------------------------------------------------------------
# Cache (rate cache + throttling)
# -------------------------------------------------------------------
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "socialboost",
    }
}

# -------------------------------------------------------------------
# Password Validators
# -------------------------------------------------------------------
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator", "OPTIONS": {"min_length": 6}},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
]

# -------------------------------------------------------------------
# I18N / TZ
# -------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# -------------------------------------------------------------------
# Static & Media (WhiteNoise)
# -------------------------------------------------------------------
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STATICFILES_DIRS = [BASE_DIR / "static"] if (BASE_DIR / "static").exists() else []
WHITENOISE_MAX_AGE = 60 if DEBUG else 60 * 60 * 24 * 30  # 30 days in prod
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage",
    },
}

# Service images are public, digital products are served only through the
# gated download endpoint, so both live under MEDIA_ROOT but only images get a URL.
MEDIA_URL = "/media/"
MEDIA_ROOT = Path(config("MEDIA_ROOT", default=str(BASE_DIR / "media")))

SERVICE_IMAGE_MAX_BYTES = 5 * 1024 * 1024
DIGITAL_FILE_MAX_BYTES = 500 * 1024 * 1024
DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -------------------------------------------------------------------
# Auth / Allauth
# -------------------------------------------------------------------
AUTH_USER_MODEL = "users.User"
ACCOUNT_USER_MODEL_USERNAME_FIELD = None
ACCOUNT_ADAPTER = "users.adapters.NoUsernameAccountAdapter"
SOCIALACCOUNT_ADAPTER = "users.adapters.StorefrontSocialAccountAdapter"
AUTHENTICATION_BACKENDS = [
    "django.contrib.auth.backends.ModelBackend",
    "allauth.account.auth_backends.AuthenticationBackend",
]
ACCOUNT_LOGIN_METHODS = {"email"}
ACCOUNT_SIGNUP_FIELDS = ["email*", "password1*", "password2*"]
ACCOUNT_EMAIL_VERIFICATION = config("ACCOUNT_EMAIL_VERIFICATION", default="none")
SOCIALACCOUNT_PROVIDERS = {
    "google": {
        "SCOPE": ["profile", "email"],
        "APP": {
            "client_id": config("GOOGLE_CLIENT_ID", default=""),
            "secret": config("GOOGLE_CLIENT_SECRET", default=""),
        },
    }
}

# -------------------------------------------------------------------
# Email
# -------------------------------------------------------------------
EMAIL_BACKEND = config("EMAIL_BACKEND", default="django.core.mail.backends.console.EmailBackend")
DEFAULT_FROM_EMAIL = config("DEFAULT_FROM_EMAIL", default="no-reply@socialboost.app")
RECEIPT_EMAILS_ENABLED = config("RECEIPT_EMAILS_ENABLED", default=True, cast=bool)

# -------------------------------------------------------------------
# DRF / Schema / Throttling
# -------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.UserRateThrottle",
        "rest_framework.throttling.AnonRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "user": config("DRF_USER_THROTTLE", default="2000/day"),
        "anon": config("DRF_ANON_THROTTLE", default="500/day"),
    },
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_PAGINATION_CLASS": None,
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.SearchFilter",
        "rest_framework.filters.OrderingFilter",
    ],
}

SPECTACULAR_SETTINGS = {
    "TITLE": "SocialBoost API",
    "DESCRIPTION": "Social media services storefront: catalog, checkout, Payoneer payments, affiliates",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

# -------------------------------------------------------------------
# JWT
# -------------------------------------------------------------------
SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=config("JWT_ACCESS_MIN", default=60, cast=int)),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=config("JWT_REFRESH_DAYS", default=7, cast=int)),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

# -------------------------------------------------------------------
# CORS / CSRF
# -------------------------------------------------------------------
CORS_ALLOWED_ORIGINS = config(
    "CORS_ALLOWED_ORIGINS",
    cast=Csv(),
    default="http://localhost:5000,http://127.0.0.1:5000",
)
CORS_ALLOW_CREDENTIALS = True

# Only allow all origins in dev
CORS_ALLOW_ALL_ORIGINS = config("CORS_ALLOW_ALL_ORIGINS", default=DEBUG, cast=bool)

# -------------------------------------------------------------------
# Security
# -------------------------------------------------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = config("SECURE_SSL_REDIRECT", default=(ENV == "production"), cast=bool)

SESSION_COOKIE_SECURE = (ENV == "production")
CSRF_COOKIE_SECURE = (ENV == "production")

SECURE_CONTENT_TYPE_NOSNIFF = True

SECURE_HSTS_SECONDS = 60 * 60 * 24 * 7 if ENV == "production" else 0
SECURE_HSTS_INCLUDE_SUBDOMAINS = (ENV == "production")
SECURE_HSTS_PRELOAD = False

X_FRAME_OPTIONS = "DENY"
REFERRER_POLICY = "same-origin"

# -------------------------------------------------------------------
# Storefront
# -------------------------------------------------------------------
FRONTEND_URL = config("FRONTEND_URL", default="http://localhost:5000").rstrip("/")
BACKEND_URL = config("BACKEND_URL", default="http://localhost:8000").rstrip("/")
STORE_CURRENCY = "USD"
DEFAULT_TAX_RATE = config("DEFAULT_TAX_RATE", default="15")  # percent, overridable via SiteSetting "taxRate"
MIN_PAYOUT_CENTS = config("MIN_PAYOUT_CENTS", default=2500, cast=int)
AFFILIATE_DEFAULT_COMMISSION_RATE = config("AFFILIATE_DEFAULT_COMMISSION_RATE", default="10")
PENDING_PAYMENT_EXPIRY_HOURS = config("PENDING_PAYMENT_EXPIRY_HOURS", default=48, cast=int)

# -------------------------------------------------------------------
# Payoneer (read from .env)
# -------------------------------------------------------------------
PAYONEER_ENABLED = config("PAYONEER_ENABLED", default=True, cast=bool)
PAYONEER_MODE = config("PAYONEER_MODE", default="mock").lower()  # live | mock
PAYONEER_ENV = config("PAYONEER_ENV", default="sandbox").lower()  # sandbox | production
PAYONEER_BASE_URL = config("PAYONEER_BASE_URL", default="https://api.sandbox.payoneer.com/v4")
PAYONEER_CLIENT_ID = config("PAYONEER_CLIENT_ID", default="")
PAYONEER_API_KEY = config("PAYONEER_API_KEY", default="")
PAYONEER_PROGRAM_ID = config("PAYONEER_PROGRAM_ID", default="")

# -------------------------------------------------------------------
# Currency rates (display only; served stale when the upstream fails)
# -------------------------------------------------------------------
CURRENCY_RATES_URL = config("CURRENCY_RATES_URL", default="https://open.er-api.com/v6/latest/USD")
CURRENCY_RATES_TTL = config("CURRENCY_RATES_TTL", default=12 * 60 * 60, cast=int)

# -------------------------------------------------------------------
# Logging (mask PII in your own log calls; avoid logging raw payloads)
# -------------------------------------------------------------------
LOG_LEVEL = "DEBUG" if DEBUG else "INFO"
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "app": {
            "format": "[{levelname}] {asctime} {name} - {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "app",
        },
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django.db.backends": {"level": "WARNING" if not DEBUG else "INFO"},
        "django.request": {"level": "WARNING"},
        "payments": {"level": LOG_LEVEL},
        "orders": {"level": LOG_LEVEL},
    },
}
