import os


def _env_flag(name, default=""):
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _database_url():
    # Heroku/Railway still hand out "postgres://", which SQLAlchemy rejects.
    url = os.environ.get("DATABASE_URL", "")
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url or None


class Config:
    """Settings shared by every environment; read from the process env."""

    SECRET_KEY = os.environ.get("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = _database_url()
    APP_VERSION = os.environ.get("APP_VERSION", "1.0.0")

    # Env vars that must be set outside testing
    REQUIRED_ENV = ["SECRET_KEY", "DATABASE_URL"]
    FIREBASE_ENV = ["FIREBASE_PROJECT_ID", "FIREBASE_CLIENT_EMAIL", "FIREBASE_PRIVATE_KEY"]

    # --- Firebase (ID token verification + Cloud Messaging) ---
    FIREBASE_PROJECT_ID = os.environ.get("FIREBASE_PROJECT_ID")
    FIREBASE_CLIENT_EMAIL = os.environ.get("FIREBASE_CLIENT_EMAIL")
    FIREBASE_PRIVATE_KEY = os.environ.get("FIREBASE_PRIVATE_KEY")  # may contain escaped \n

    # Push is best-effort; when off, notifications are only stored.
    PUSH_NOTIFICATIONS_ENABLED = _env_flag("PUSH_NOTIFICATIONS_ENABLED", "true")

    # --- Notification inbox ---
    NOTIFICATION_RETENTION_DAYS = int(os.environ.get("NOTIFICATION_RETENTION_DAYS", 30))
    NOTIFICATION_CLEANUP_BATCH = int(os.environ.get("NOTIFICATION_CLEANUP_BATCH", 500))
    NOTIFICATION_PAGE_SIZE = int(os.environ.get("NOTIFICATION_PAGE_SIZE", 20))

    # --- Database ---
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": int(os.environ.get("DB_POOL_RECYCLE", 300)),
    }

    # --- Cookies (session callers only; token callers send none) ---
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = "Lax"

    # --- CSRF ---
    # Enforced per blueprint for session callers (X-CSRFToken header);
    # bearer-token callers are exempt.
    WTF_CSRF_ENABLED = True
    WTF_CSRF_CHECK_DEFAULT = False

    @classmethod
    def validate(cls):
        """Raise RuntimeError naming every required env var that is unset."""
        names = list(cls.REQUIRED_ENV)
        if _env_flag("PUSH_NOTIFICATIONS_ENABLED", "true"):
            names += cls.FIREBASE_ENV
        missing = [name for name in names if not os.environ.get(name)]
        if missing:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


class DevConfig(Config):
    """Local development against a SQLite file unless DATABASE_URL is set."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI or "sqlite:///fundbridge-dev.db"
    REQUIRED_ENV = ["SECRET_KEY"]
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False


class TestConfig(Config):
    """Testing — in-memory SQLite, CSRF disabled, no push."""

    TESTING = True
    DEBUG = True
    SECRET_KEY = "test-secret-key-not-for-production"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    FIREBASE_PROJECT_ID = None
    FIREBASE_CLIENT_EMAIL = None
    FIREBASE_PRIVATE_KEY = None
    PUSH_NOTIFICATIONS_ENABLED = False  # patch send_push per-test instead
    NOTIFICATION_RETENTION_DAYS = 30
    NOTIFICATION_CLEANUP_BATCH = 500
    NOTIFICATION_PAGE_SIZE = 20
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False
    SERVER_NAME = "localhost"

    @classmethod
    def validate(cls):
        """Nothing to check; every value above is fixed."""


class ProdConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True


config_by_name = {
    "development": DevConfig,
    "production": ProdConfig,
    "testing": TestConfig,
}
