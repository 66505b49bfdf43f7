"""Main API router for v1."""
from fastapi import APIRouter

from meetpoll.api.v1.endpoints import auth, availability, polls, voting, webhooks

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(polls.router, tags=["Polls"])
api_router.include_router(voting.router, tags=["Voting"])
api_router.include_router(availability.router, prefix="/availability", tags=["Availability"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
