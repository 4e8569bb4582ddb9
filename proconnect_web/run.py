#!/usr/bin/env python3
"""Run the ProConnect web frontend"""
import uvicorn

from proconnect_web.core.config import settings


def main() -> None:
    uvicorn.run(
        "proconnect_web.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
