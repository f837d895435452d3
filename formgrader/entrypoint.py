from __future__ import annotations

import logging

import uvicorn

from .app import create_app
from .config import load_settings
from .log_config import setup_logging

logger = logging.getLogger(__name__)

settings = load_settings()
setup_logging(settings)

app = create_app(settings)


def main() -> None:
    logger.info(f"Server running on port {settings.port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
