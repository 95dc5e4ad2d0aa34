from fastapi import APIRouter

from bookstore.api.v1.endpoints import (
    promotions,
    reports,
    rules,
)

# Create main API router
api_router = APIRouter(prefix="/api/v1")

# ==================== Promotions ====================
api_router.include_router(
    promotions.router,
    prefix="/promotions",
    tags=["Promotions"]
)

# ==================== Reports (dashboard charts) ====================
api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["Reports"]
)

# ==================== Rules ====================
api_router.include_router(
    rules.router,
    prefix="/rules",
    tags=["Rules"]
)
