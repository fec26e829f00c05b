"""HTTP service entrypoint."""

from __future__ import annotations

import uvicorn

from src.app import create_app
from src.config.logging import configure_logging
from src.config.settings import load_settings
from src.web.server import create_web_app


def main() -> None:
    """Run the HTTP service with uvicorn."""

    settings = load_settings()
    configure_logging(settings.log_level)

    web = create_web_app(create_app(settings))
    uvicorn.run(web, host=settings.http_host, port=settings.http_port, log_config=None)


if __name__ == "__main__":
    main()
