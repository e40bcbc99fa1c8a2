"""
Traffic Routing Rule Engine Entry Point

Registers the traffic management endpoints on the API server app.

  uvicorn main:app --host 0.0.0.0 --port $PORT
"""

import logging
import os

from api_server import app
from netrules.api.router import router as traffic_router

logger = logging.getLogger(__name__)

app.include_router(traffic_router)
logger.info("Traffic management endpoints registered")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
