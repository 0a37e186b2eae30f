# guidebook/run.py
"""
Server runner.

Usage:
    guidebook-api            # or: python -m guidebook.run
"""

import uvicorn

from .core.config import settings


def main() -> None:
    uvicorn.run(
        "guidebook.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
