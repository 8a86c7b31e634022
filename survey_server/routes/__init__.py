"""Register all route modules on the FastAPI app."""

from fastapi import FastAPI

from .root import router as root_router
from .recommendations import router as recommendations_router
from .sessions import router as sessions_router
from .analytics import router as analytics_router
from .users import router as users_router


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the app."""
    app.include_router(root_router)
    app.include_router(recommendations_router, prefix="/api/recommendations", tags=["recommendations"])
    app.include_router(sessions_router, prefix="/api/sessions", tags=["sessions"])
    app.include_router(analytics_router, prefix="/api/analytics", tags=["analytics"])
    app.include_router(users_router, prefix="/api", tags=["users"])
