"""Entry point for running the bridge server via ``python -m bridgecoop``."""

from __future__ import annotations

import uvicorn

from .logger import setup_logging
from .settings import Settings
from .web import create_app


def main() -> None:
    """Start the FastAPI-powered bridge relay."""

    settings = Settings.from_env()
    setup_logging(settings.log_level)
    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
