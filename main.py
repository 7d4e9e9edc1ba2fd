"""
User & Role Dashboard entry point.
Serves the dashboard routes backed by the cached user/role services.
"""

import uvicorn
from loguru import logger

from dashboard.settings import global_settings
from dashboard.web import create_app


def main() -> None:
    logger.info(
        f"Starting dashboard on {global_settings.host}:{global_settings.port} "
        f"(API: {global_settings.api_url})"
    )
    uvicorn.run(
        create_app(settings=global_settings),
        host=global_settings.host,
        port=global_settings.port,
    )


if __name__ == "__main__":
    main()
