"""
API v1 routes.
"""

from fastapi import APIRouter

from .endpoints.reporting import reports

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(reports.router)
