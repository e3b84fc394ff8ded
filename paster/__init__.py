from __future__ import annotations

import atexit
import os
from pathlib import Path

from flask import Flask
from flask_cors import CORS

from .config import get_config
from .observability import init_observability
from .api.pastes import STORE_EXTENSION, api_bp
from .store import PasteStore
from .worker.sweep_worker import start_sweep_worker


def create_app(env_name: str | None = None, **overrides) -> Flask:
    """
    Application factory for the paster JSON service.

    The configuration is selected based on the provided ``env_name`` or,
    if not given, the ``APP_ENV`` environment variable (falling back to
    ``development``). Keyword ``overrides`` are applied on top of it.

    The paste store is opened once here and kept in ``app.extensions``;
    request handlers reach it through ``paster.api.pastes.get_store``.
    It is closed at interpreter exit.
    """
    if env_name is None:
        env_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__)
    app_config = get_config(env_name)
    app.config.from_object(app_config)
    app.config.update(overrides)

    CORS(
        app
    )

    # Initialize infrastructure layers
    init_observability(app)

    database_path = app.config["DATABASE_PATH"]
    Path(database_path).parent.mkdir(parents=True, exist_ok=True)
    store = PasteStore.open(
        database_path,
        lock_timeout=float(app.config["LOCK_TIMEOUT_SECONDS"]),
        echo=bool(app.config.get("DATABASE_ECHO", False)),
    )
    app.extensions[STORE_EXTENSION] = store
    atexit.register(store.close)

    # Register API blueprints
    app.register_blueprint(api_bp)

    # Start background sweep worker (disabled in testing)
    if app.config.get("SWEEP_WORKER_ENABLED", False):
        start_sweep_worker(app)

    return app
