"""API router aggregation."""

from fastapi import APIRouter

from reviewscout.api.health import router as health_router
from reviewscout.api.identity import router as identity_router
from reviewscout.api.reviewers import router as reviewers_router

api_router = APIRouter()
api_router.include_router(health_router)
# Reviewer recommendation endpoints
api_router.include_router(reviewers_router)
# Duplicate detection and merge endpoints
api_router.include_router(identity_router)
