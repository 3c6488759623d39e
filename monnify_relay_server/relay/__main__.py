"""
Run the relay with uvicorn: `python -m relay`.
"""

import uvicorn

from .config import settings


def run() -> None:
    uvicorn.run(
        "relay.main:app",
        host=settings.server_host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.is_development
    )


if __name__ == "__main__":
    run()
