"""
API v1 router setup
Organized into: public (booking calendar) and dashboard (admin) routes
"""
from fastapi import APIRouter

from app.api.v1.public import availability, appointments
from app.api.v1.dashboard import (
    schedule,
    blocked_dates,
    appointments as dashboard_appointments,
)

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (booking calendar, no authentication)
# ============================================================================
api_v1_router.include_router(
    availability.router,
    tags=["Public"]
)

api_v1_router.include_router(
    appointments.router,
    # appointments.router already has "/appointments" prefix
    tags=["Public"]
)

# ============================================================================
# DASHBOARD ROUTES (admin; authentication is enforced in front of the service)
# ============================================================================
api_v1_router.include_router(
    schedule.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    blocked_dates.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    dashboard_appointments.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    """
    return {
        "version": "1.0",
        "public": ["/schedule", "/available-slots/{date}", "/blocked-dates/active", "/appointments"],
        "dashboard": ["/dashboard/schedule", "/dashboard/blocked-dates", "/dashboard/appointments"]
    }
