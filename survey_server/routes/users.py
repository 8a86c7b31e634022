"""Category checklist, participant preferences and survey submissions."""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from recommender.errors import PersistenceError

from ..categories import CATEGORIES, categories_to_topic, topic_to_categories
from ..models import PreferencesRequest, PreferencesResponse, SelectedVideosRequest
from ..services import DEFAULT_PREFERENCES
from ..state import get_state

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/categories")
def list_categories():
    return {"categories": CATEGORIES, "count": len(CATEGORIES)}


@router.get("/users/{user_id}/preferences", response_model=PreferencesResponse)
def get_preferences(user_id: str):
    """Stored topic preferences, or the defaults for users who have not chosen yet."""
    try:
        prefs = get_state().user_store.get_preferences(user_id)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    topic = (prefs or DEFAULT_PREFERENCES).get("topic") or DEFAULT_PREFERENCES["topic"]
    return PreferencesResponse(user_id=user_id, topic=topic, categories=topic_to_categories(topic))


@router.put("/users/{user_id}/preferences", response_model=PreferencesResponse)
def put_preferences(user_id: str, request: PreferencesRequest):
    """Replace the user's topic with the chosen categories (custom entries are normalized)."""
    topic = categories_to_topic(request.categories)
    if not topic:
        raise HTTPException(status_code=400, detail="Select at least one category")
    store = get_state().user_store
    try:
        store.ensure_user(user_id, email=request.email)
        store.update_preferences(user_id, {"topic": topic})
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    logger.info("[users] user=%s preferences updated: %s", user_id, topic)
    return PreferencesResponse(user_id=user_id, topic=topic, categories=topic_to_categories(topic))


@router.post("/ab-testing/selected-videos")
def selected_videos(request: SelectedVideosRequest):
    """Store the participant's final selection for the survey."""
    if not request.user_id:
        raise HTTPException(status_code=400, detail="user_id is required")
    try:
        row = get_state().interaction_store.save_submission(
            request.user_id, request.selected_videos, request.email
        )
    except PersistenceError as e:
        logger.error("[users] failed to store selection for user=%r: %s", request.user_id, e)
        return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(e)})
    logger.info("[users] user=%s submitted %d selected videos", request.user_id, len(request.selected_videos))
    return {"message": "selected videos stored successfully", "id": row["id"], "timestamp": row["timestamp"]}
