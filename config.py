# config.py
import os

from dotenv import load_dotenv

load_dotenv()


def _getenv(key: str, default: str | None = None) -> str | None:
    """Small wrapper to read environment variables."""
    val = os.getenv(key)
    return val if (val is not None and val != "") else default


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _as_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)


def _as_int_tuple(value: str | None, default: tuple[int, ...]) -> tuple[int, ...]:
    if value is None or value == "":
        return default
    return tuple(int(v) for v in value.split(",") if v.strip())


def _normalize_db_url(db_url: str) -> str:
    # Render/Heroku sometimes provide "postgres://"; SQLAlchemy wants "postgresql://"
    if db_url.startswith("postgres://"):
        return db_url.replace("postgres://", "postgresql://", 1)
    return db_url


class BaseConfig:
    # -------------------
    # Core / Flask
    # -------------------
    ENV = _getenv("FLASK_ENV", "development")
    DEBUG = _as_bool(_getenv("FLASK_DEBUG"), default=(ENV != "production"))
    TESTING = _as_bool(_getenv("FLASK_TESTING"), default=False)

    SECRET_KEY = _getenv("SECRET_KEY", "dev-secret-key")
    LOG_LEVEL = _getenv("LOG_LEVEL", "INFO")

    # JSON API: forms are validated from request bodies, no CSRF cookie
    WTF_CSRF_ENABLED = False

    # -------------------
    # Database
    # -------------------
    _db_url = _getenv("DATABASE_URL", "sqlite:///instance/adpay.db")
    SQLALCHEMY_DATABASE_URI = _normalize_db_url(_db_url)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
    }

    # -------------------
    # Sessions (bearer tokens)
    # -------------------
    SESSION_TOKEN_MAX_AGE = _as_int(_getenv("SESSION_TOKEN_MAX_AGE"), default=7 * 24 * 3600)
    ADMIN_TOKEN_MAX_AGE = _as_int(_getenv("ADMIN_TOKEN_MAX_AGE"), default=12 * 3600)

    # Single shared admin identity. Prefer ADMIN_PASSWORD_HASH (werkzeug hash);
    # ADMIN_PASSWORD is the legacy plaintext option.
    ADMIN_EMAIL = _getenv("ADMIN_EMAIL", "")
    ADMIN_PASSWORD_HASH = _getenv("ADMIN_PASSWORD_HASH", "")
    ADMIN_PASSWORD = _getenv("ADMIN_PASSWORD", "")

    # -------------------
    # Tiers (naira, integer units)
    # -------------------
    AD_EARNINGS_BASIC = _as_int(_getenv("AD_EARNINGS_BASIC"), default=15)
    AD_EARNINGS_PREMIUM = _as_int(_getenv("AD_EARNINGS_PREMIUM"), default=20)
    BASIC_DAILY_AD_LIMIT = _as_int(_getenv("BASIC_DAILY_AD_LIMIT"), default=50)

    MIN_WITHDRAWAL_BASIC = _as_int(_getenv("MIN_WITHDRAWAL_BASIC"), default=5_000)
    MIN_WITHDRAWAL_PREMIUM = _as_int(_getenv("MIN_WITHDRAWAL_PREMIUM"), default=10_000)

    REFERRAL_BONUS_BASIC = _as_int(_getenv("REFERRAL_BONUS_BASIC"), default=500)
    REFERRAL_BONUS_PREMIUM = _as_int(_getenv("REFERRAL_BONUS_PREMIUM"), default=1_000)

    TOKEN_PRICE_BASIC = _as_int(_getenv("TOKEN_PRICE_BASIC"), default=3_000)
    TOKEN_PRICE_PREMIUM = _as_int(_getenv("TOKEN_PRICE_PREMIUM"), default=5_000)
    TOKEN_TTL_DAYS = _as_int(_getenv("TOKEN_TTL_DAYS"), default=30)
    CODE_GENERATION_ATTEMPTS = _as_int(_getenv("CODE_GENERATION_ATTEMPTS"), default=10)

    # -------------------
    # Payout window
    # -------------------
    PAYOUT_DAYS = _as_int_tuple(_getenv("PAYOUT_DAYS"), default=(5, 17))
    PAYOUT_START_HOUR = _as_int(_getenv("PAYOUT_START_HOUR"), default=5)
    PAYOUT_END_HOUR_BASIC = _as_int(_getenv("PAYOUT_END_HOUR_BASIC"), default=8)
    PAYOUT_END_HOUR_PREMIUM = _as_int(_getenv("PAYOUT_END_HOUR_PREMIUM"), default=12)
    # Lagos is UTC+1 all year
    PAYOUT_UTC_OFFSET_HOURS = _as_int(_getenv("PAYOUT_UTC_OFFSET_HOURS"), default=1)

    # -------------------
    # Mail / SendGrid
    # -------------------
    MAIL_DEFAULT_SENDER = _getenv("MAIL_DEFAULT_SENDER", "")
    SENDGRID_API_KEY = _getenv("SENDGRID_API_KEY", "")

    # -------------------
    # Paystack (bank directory)
    # -------------------
    PAYSTACK_SECRET_KEY = _getenv("PAYSTACK_SECRET_KEY", "")


class DevelopmentConfig(BaseConfig):
    ENV = "development"
    DEBUG = True


class TestingConfig(BaseConfig):
    ENV = "testing"
    DEBUG = False
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}

    ADMIN_EMAIL = "admin@adpay.ng"
    ADMIN_PASSWORD_HASH = ""
    ADMIN_PASSWORD = "admin-pass"

    SENDGRID_API_KEY = ""
    PAYSTACK_SECRET_KEY = "sk_test_dummy"


class ProductionConfig(BaseConfig):
    ENV = "production"
    DEBUG = False
