from __future__ import annotations

import os

from paster import create_app


def main() -> None:
    env = os.getenv("APP_ENV", "development")
    app = create_app(env)

    host = os.getenv("FLASK_RUN_HOST", "127.0.0.1")
    port = int(os.getenv("FLASK_RUN_PORT", "5000"))

    # The reloader would fork a second process with its own sweep worker.
    app.run(host=host, port=port, use_reloader=False)


if __name__ == "__main__":
    main()
