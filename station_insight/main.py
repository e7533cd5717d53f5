"""FastAPI application setup for the station dashboard service."""

from fastapi import FastAPI

from .api import router as api_router
from .config import settings

app = FastAPI(title="Station Insight")


@app.get("/health")
def health():
    """Liveness probe; does not touch the station API."""
    return {"status": "ok", "station_id": settings.station_id}


# API routes
app.include_router(api_router, prefix="/v1")
