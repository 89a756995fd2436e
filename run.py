"""Development server entry point."""

import logging
import os

from paste.translogger import TransLogger  # type: ignore[import-untyped]
from waitress import serve

from app import create_app
from app.config import get_settings


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    settings = get_settings()
    app = create_app(settings)

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 5000))

    # Enable debug mode for development and testing environments
    debug_mode = settings.FLASK_ENV in ("development", "testing")

    if debug_mode:
        app.logger.info("Running in debug mode")
        app.run(host=host, port=port, debug=True)
    else:
        # Production: Use Waitress WSGI server
        wsgi = TransLogger(app, setup_console_handler=False)

        # Each thread may hold a pooled connection while its row locks are held,
        # so keep threads within pool_size + max_overflow.
        threads = int(os.getenv("WAITRESS_THREADS", settings.DB_POOL_SIZE + settings.DB_POOL_MAX_OVERFLOW))
        wsgi.logger.info(f"Using Waitress WSGI server with {threads} threads")
        serve(wsgi, host=host, port=port, threads=threads)


if __name__ == "__main__":
    main()
