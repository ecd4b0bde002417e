"""Run the API server with uvicorn."""

import uvicorn

from pdfshare.server.core.config import settings


def main() -> None:
    uvicorn.run(
        "pdfshare.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
