from __future__ import annotations

import logging

import uvicorn

from daybook.api.app import create_app
from daybook.config import SETTINGS
from daybook.infra.logging import setup_logging
from daybook.services.container import build_container

logger = logging.getLogger(__name__)


def main() -> None:
    setup_logging(SETTINGS)
    try:
        container = build_container(SETTINGS)
    except Exception:
        logger.exception("Failed to initialize the store")
        raise

    app = create_app(container)
    uvicorn.run(app, host=SETTINGS.host, port=SETTINGS.port, log_config=None)


if __name__ == "__main__":
    main()
