import uvicorn

from core.config import get_settings
from core.logging import logger, setup_logging
from gateway.api import create_app


def main() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    app = create_app(settings=settings)
    logger.info(f"Maka gateway running on port {settings.PORT}")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()
