# campaign_service/api/v1/api.py

from fastapi import APIRouter

from campaign_service.api.v1.endpoints import campaigns, health, schedule

# This is the main router for the v1 API.
api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(campaigns.router)
api_router.include_router(schedule.router)
