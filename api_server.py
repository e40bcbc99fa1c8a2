"""
Traffic Routing Rule Engine API Server
Declarative traffic rules for the network console: CRUD with validation,
flow graph, dry-run testing and statistics.
Version 1.4.0
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from netrules.api.commands import describe_errors
from netrules.shared.config import API_VERSION, CORS_ALLOW_ORIGINS, LOG_LEVEL
from netrules.shared.errors import InvalidCommandError, TrafficRuleError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# ============================================
# App Configuration
# ============================================
app = FastAPI(
    title="Traffic Routing Rule Engine",
    description="Traffic rule management for the network console",
    version=API_VERSION,
)

# ============================================
# CORS Configuration
# ============================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)


# ============================================
# Error Envelope
# ============================================

@app.exception_handler(TrafficRuleError)
async def traffic_rule_error_handler(request: Request, exc: TrafficRuleError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    error = InvalidCommandError(describe_errors(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_envelope())


@app.get("/")
def root():
    return {"service": "traffic-rule-engine", "version": API_VERSION}
