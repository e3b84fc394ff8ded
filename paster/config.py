import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class BaseConfig:
    """Base application configuration shared across environments."""

    APP_NAME: str = "paster"

    # Database
    DATABASE_PATH: str = os.getenv(
        "PASTERD_DATABASE_PATH",
        str(BASE_DIR / "var" / "paster.db"),
    )
    # Seconds a request waits for another writer's lock before failing.
    LOCK_TIMEOUT_SECONDS: float = float(os.getenv("PASTERD_LOCK_TIMEOUT", "30"))
    DATABASE_ECHO: bool = False

    # Expiration sweep
    SWEEP_WORKER_ENABLED: bool = _env_bool("PASTERD_SWEEP_WORKER", True)
    SWEEP_INTERVAL_SECONDS: float = float(os.getenv("PASTERD_SWEEP_INTERVAL", "60"))

    # Listings
    RECENT_LIMIT: int = 10
    MAX_LIST_LIMIT: int = 100

    LOG_LEVEL: str = os.getenv("PASTERD_LOG_LEVEL", "INFO").upper()

    # Other Flask-style config flags
    TESTING: bool = False
    DEBUG: bool = False


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    SWEEP_WORKER_ENABLED = False
    LOCK_TIMEOUT_SECONDS = 5.0

    DATABASE_PATH: str = os.getenv(
        "PASTERD_TEST_DATABASE_PATH",
        str(BASE_DIR / "var" / "paster-test.db"),
    )


CONFIG_BY_NAME = {
    "development": DevelopmentConfig,
    "dev": DevelopmentConfig,
    "production": ProductionConfig,
    "prod": ProductionConfig,
    "testing": TestingConfig,
    "test": TestingConfig,
}


def get_config(env_name: str | None) -> type[BaseConfig]:
    """Return a config class for the given environment name."""
    if not env_name:
        return DevelopmentConfig
    return CONFIG_BY_NAME.get(env_name, DevelopmentConfig)
