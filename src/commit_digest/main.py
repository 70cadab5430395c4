"""Console entry point: ``commit-digest`` serves the API with uvicorn."""

from __future__ import annotations

import logging

import uvicorn

from commit_digest.infrastructure.config import get_settings

_LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)
    # httpx logs every paginated GitHub request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    """Start the uvicorn ASGI server (HOST / PORT come from settings)."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "commit_digest.interface.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
