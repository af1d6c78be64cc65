"""
Team Finder service entry point
SERVICE_ROLE selects the user, team_matching or notification service
"""

# Load environment variables from .env file FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

from teamfinder.app import create_app  # noqa: E402
from teamfinder.core.config import config  # noqa: E402
from teamfinder.core.logger import logger  # noqa: E402

app = create_app(config)


if __name__ == "__main__":
    import uvicorn

    logger.info(
        f"Starting {config.service_name} on port {config.port}",
        metadata={
            "service_name": config.service_name,
            "role": config.service_role,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port,
        },
    )

    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.environment == "development",
    )
