from __future__ import annotations

import os
from pathlib import Path

from alembic import command
from alembic.config import Config

from paster.db import sqlite_url


MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def alembic_config(database_path: str | os.PathLike[str]) -> Config:
    """Build an Alembic configuration for the SQLite file at ``database_path``."""

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    # ConfigParser interpolation treats '%' specially.
    config.set_main_option("sqlalchemy.url", sqlite_url(database_path).replace("%", "%%"))
    return config


def upgrade_database(database_path: str | os.PathLike[str], revision: str = "head") -> None:
    command.upgrade(alembic_config(database_path), revision)
