"""Run the console with uvicorn: ``python -m kartflow``."""

import uvicorn

from .config import settings


def main() -> None:
    uvicorn.run(
        "kartflow.app:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    main()
