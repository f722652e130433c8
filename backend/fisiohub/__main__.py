"""Run the API with uvicorn: ``python -m fisiohub``."""

import uvicorn

from fisiohub.core.config import settings


def main() -> None:
    uvicorn.run(
        "fisiohub.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
        workers=None if settings.is_development else settings.API_WORKERS,
        log_config=None,
    )


if __name__ == "__main__":
    main()
