"""Root and health endpoints."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "AI Video Survey API",
        "version": "1.0.0",
        "status": "ok",
        "backends": state.describe(),
        "endpoints": {
            "recommendations": ["/api/recommendations"],
            "sessions": [
                "/api/sessions/create",
                "/api/sessions/{id}",
                "/api/sessions/{id}/recommended",
                "/api/sessions/{id}/track",
                "/api/sessions/{id}/summary",
                "/api/sessions/{id}/reset",
            ],
            "analytics": ["/api/analytics"],
            "users": ["/api/categories", "/api/users/{user_id}/preferences", "/api/ab-testing/selected-videos"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    service_ok = state.recommendation_client.is_available()
    return {
        "status": "healthy",
        "data_source": state.config.data_source,
        "recommendation_service": {
            "url": state.config.recommender_url,
            "available": service_ok,
        },
        "catalog_videos": state.catalog.count(),
    }
