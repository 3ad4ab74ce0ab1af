# campaign_service/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from campaign_service.api.v1.api import api_router
from campaign_service.core.config import settings
from campaign_service.core.exceptions import CampaignServiceError
from campaign_service.core.limiter import limiter
from campaign_service.core.logging import configure_logging
from campaign_service.scheduler import init_scheduler, shutdown_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Campaign service starting up (env=%s)", settings.ENV)
    if settings.SCHEDULER_ENABLED:
        init_scheduler()
    yield
    if settings.SCHEDULER_ENABLED:
        shutdown_scheduler()
    logger.info("Campaign service shutting down")


app = FastAPI(
    title="Campaign Generation & Scheduling Service",
    version="1.0.0",
    description="""
        **Campaign Service**

        AI campaign generation and smart post scheduling for link-in-bio pages.

        ## Features

        * **Campaigns**: Generate social posts, email sequences and landing page variants
        * **Bulk Scheduling**: Spread posts evenly, at optimal times, or at chosen times
        * **Optimal Times**: Rank posting times from your audience's click history

        ## Authentication

        All endpoints except health checks require JWT authentication via the
        `Authorization: Bearer <token>` header.
        """,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(CampaignServiceError)
async def campaign_service_error_handler(request: Request, exc: CampaignServiceError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


origins = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Campaign Service is running"}
