"""Run the Jokebox API with uvicorn: ``python -m jokebox``."""

from __future__ import annotations

import logging

import uvicorn

from jokebox.core.config import get_settings


def _configure_logging() -> None:
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def main() -> None:
    _configure_logging()
    settings = get_settings()
    logging.getLogger(__name__).info(
        "Server running at http://localhost:%s", settings.port
    )
    uvicorn.run(
        "jokebox.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_config=None,
    )


if __name__ == "__main__":
    main()
