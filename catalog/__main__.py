"""Serve the catalog API: `python -m catalog` or the `library-catalog` script.

Single uvicorn process; host, port and log level come from Settings.
"""

import uvicorn

from catalog.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "catalog.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
