"""Serve the research API: ``eachie`` or ``python -m eachie``."""

import uvicorn

from eachie.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "eachie.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_dev,
        # configure_logging() owns the root logger
        log_config=None,
    )


if __name__ == "__main__":
    main()
