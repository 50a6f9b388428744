"""
Main API Router
Aggregates all API endpoints for v1
"""

from fastapi import APIRouter
from pixstay.api.v1.endpoints import (
    bookings,
    payment,
    health
)

api_router = APIRouter()

# Include all routers
api_router.include_router(payment.router, prefix="/payments", tags=["payments"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
