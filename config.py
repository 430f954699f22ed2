import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/organisations")
    # The unique contact.email index is the only duplicate-organisation guard
    MONGO_ENSURE_INDEXES = _env_bool("MONGO_ENSURE_INDEXES", True)
    # Needs a replica set; standalone servers reject transactions
    MONGO_TRANSACTIONS = _env_bool("MONGO_TRANSACTIONS", False)

    JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
    JWT_EXPIRES_IN = int(os.getenv("JWT_EXPIRES_IN", 90 * 24 * 60 * 60))
    JWT_COOKIE_SECURE = _env_bool("JWT_COOKIE_SECURE", False)

    # "nearest" or "farthest"
    ORGANISATION_PROXIMITY_ORDER = os.getenv("ORGANISATION_PROXIMITY_ORDER", "nearest")


class TestConfig(Config):
    TESTING = True
    MONGO_URI = "mongodb://localhost:27017/organisations_test"
    MONGO_ENSURE_INDEXES = False
    MONGO_TRANSACTIONS = False
    JWT_SECRET = "test-secret"
    JWT_EXPIRES_IN = 3600
    ORGANISATION_PROXIMITY_ORDER = "nearest"
