"""
Aggregate v1 API routes.

Convention: Use "" (not "/") for the root path of a segment (e.g. @router.get(""), @router.post(""))
so the route is /api/v1/reports not /api/v1/reports/. This avoids 307 redirects when the
request arrives without a trailing slash.
"""

from fastapi import APIRouter

from weathercraft.api.v1.endpoints import auth, reports, verify

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(verify.router, prefix="")
api_router.include_router(reports.router, prefix="")
