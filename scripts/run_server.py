from __future__ import annotations

import uvicorn

from growup.infrastructure.config import get_settings
from growup.infrastructure.db import create_database_engine
from growup.infrastructure.logging import setup_logging
from growup.utils.seed import initialise_database


def configure_logging() -> None:
    """Apply the LOG_* settings over the ENVIRONMENT profile picked at import."""
    setup_logging(**get_settings().logging.as_setup_kwargs())


def ensure_database() -> bool:
    """Create any missing tables before the server starts serving requests."""
    engine = create_database_engine(get_settings().database)
    try:
        existed = initialise_database(engine)
    finally:
        engine.dispose()
    if not existed:
        print("[run-server] Database tables created.")
    return existed


def main() -> None:
    configure_logging()
    ensure_database()
    uvicorn.run(
        "growup.web.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().is_development(),
    )


if __name__ == "__main__":
    main()
