import os

import uvicorn

from station_insight.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


if __name__ == "__main__":
    setup_logging(level=os.getenv("LOG_LEVEL", "INFO"), job_name="station_insight")
    if not settings.api_key:
        logger.warning("STATION_API_KEY is not set; PWS requests will fail")
    logger.info("Starting server", extra={"station_id": settings.station_id})

    uvicorn.run(
        "station_insight.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
