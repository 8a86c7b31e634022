"""Analytics ingest, read-back, daily summary and CSV export."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse, Response

from recommender import compute_accuracy
from recommender.aggregator import new_session_id
from recommender.errors import PersistenceError
from recommender.models import InteractionEvent, InteractionType, SessionSummary
from recommender.models.interaction import utc_now_iso

from ..models import AnalyticsRequest
from ..services.interaction_store import INTERACTIONS_TABLE, SESSIONS_TABLE, SUBMISSIONS_TABLE
from ..state import get_state
from ..utils import csv_filename, rows_to_csv

logger = logging.getLogger(__name__)

router = APIRouter()

AVAILABLE_QUERIES = {
    "GET ?type=interactions": "Get video interactions",
    "GET ?type=sessions": "Get recommendation sessions",
    "GET ?type=summary": "Get analytics summary",
    "GET ?type=download&file=interactions": "Download interactions as CSV",
    "GET ?type=download&file=sessions": "Download sessions as CSV",
    "POST": "Insert new analytics data",
}


def _server_error(e: Exception, **extra) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(e), **extra})


def _events_from_request(request: AnalyticsRequest):
    events = []
    for i in request.interactions:
        try:
            kind = InteractionType(i.interaction_type)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown interaction type: {i.interaction_type!r}")
        events.append(
            InteractionEvent(
                user_id=i.user_id or request.user_id,
                video_id=i.video_id,
                interaction_type=kind,
                is_recommended=i.is_recommended,
                session_id=i.session_id or "",
                timestamp=i.timestamp or utc_now_iso(),
            )
        )
    return events


def _summary_from_request(request: AnalyticsRequest) -> Optional[SessionSummary]:
    data = request.session_data
    if data is None:
        return None
    session_id = (request.interactions[0].session_id if request.interactions else None) or new_session_id()
    accuracy, hits, total = compute_accuracy(data.recommended_videos, data.selected_videos)
    if data.recommendation_accuracy is not None:
        accuracy = data.recommendation_accuracy
    return SessionSummary(
        user_id=request.user_id,
        session_id=session_id,
        recommended_video_ids=list(dict.fromkeys(data.recommended_videos)),
        selected_video_ids=list(dict.fromkeys(data.selected_videos)),
        accuracy_percent=accuracy,
        selected_recommended_count=hits,
        total_recommended=total,
    )


@router.post("")
def ingest(request: AnalyticsRequest):
    """
    Store a client-side batch of interactions and, optionally, its session summary.

    Every row is built before the first write. When a later write fails, the 500
    body lists the tables already written under "saved".
    """
    if not request.user_id:
        raise HTTPException(status_code=400, detail="user_id is required")
    store = get_state().interaction_store
    events = _events_from_request(request)
    summary = _summary_from_request(request)
    results = []
    try:
        if events:
            store.save_interactions(request.user_id, events)
            results.append({"success": True, "type": "interactions", "count": len(events), "table": INTERACTIONS_TABLE})
        if summary is not None:
            store.save_session(summary)
            results.append({
                "success": True,
                "type": "session",
                "table": SESSIONS_TABLE,
                "metrics": {
                    "total_recommended": summary.total_recommended,
                    "selected_recommended": summary.selected_recommended_count,
                    "accuracy": f"{summary.accuracy_percent:g}%",
                },
            })
    except PersistenceError as e:
        saved = [r["table"] for r in results]
        logger.error("[analytics] ingest failed for user=%r (saved=%s): %s", request.user_id, saved, e)
        return _server_error(e, saved=saved)

    return {
        "success": True,
        "message": "Analytics data saved",
        "results": results,
        "tables": {"interactions": INTERACTIONS_TABLE, "sessions": SESSIONS_TABLE},
        "summary": {"total_interactions": len(events), "tables_updated": len(results)},
    }


@router.get("")
def read(
    query_type: Optional[str] = Query(None, alias="type"),
    file: str = "interactions",
    user_id: Optional[str] = None,
    session_id: Optional[str] = None,
    limit: int = Query(100, ge=1),
):
    """Read back stored analytics. Without a type, report store status."""
    store = get_state().interaction_store
    try:
        if query_type == "download":
            if file == "sessions":
                rows = store.list_sessions(user_id, limit=None)
            else:
                file = "interactions"
                rows = store.list_interactions(user_id, limit=None)
            if not rows:
                return JSONResponse(status_code=404, content={"error": "No data found"})
            return Response(
                content=rows_to_csv(rows),
                media_type="text/csv",
                headers={"Content-Disposition": f'attachment; filename="{csv_filename(file)}"'},
            )

        if query_type == "interactions":
            data = store.list_interactions(user_id, session_id, limit=limit)
        elif query_type == "sessions":
            data = store.list_sessions(user_id, limit=limit)
        elif query_type == "summary":
            data = store.daily_summary(user_id or "", limit=limit)
        else:
            counts = store.counts()
            return {
                "success": True,
                "message": "Analytics system active",
                "tables": {
                    table: {"exists": True, "total_records": counts.get(table, 0)}
                    for table in (INTERACTIONS_TABLE, SESSIONS_TABLE, SUBMISSIONS_TABLE)
                },
                "available_endpoints": AVAILABLE_QUERIES,
            }
    except PersistenceError as e:
        logger.error("[analytics] read failed (type=%s): %s", query_type, e)
        return _server_error(e)

    return {"success": True, "data": data, "count": len(data)}
