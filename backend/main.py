"""Estimation rooms backend: FastAPI application."""

import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from config import limiter, settings

logger = logging.getLogger(__name__)

# Ensure the application loggers output to console
_app_logger = logging.getLogger("estimation")
if not _app_logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)
    for _log in (_app_logger, logger):
        _log.addHandler(console_handler)
        _log.setLevel(settings.log_level.upper())

if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
        ],
        traces_sample_rate=0.1,
        environment=settings.environment,
    )

from estimation import RoomRegistry, estimation_router

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = FastAPI(title="Estimation Rooms", version="0.1.0")

app.state.registry = RoomRegistry(
    broadcast_capacity=settings.broadcast_capacity,
    id_min=settings.room_id_min,
    id_max=settings.room_id_max,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(estimation_router)


@app.get("/")
def root():
    return {"message": "Estimation Rooms API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy", "rooms": len(app.state.registry)}


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting server on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
