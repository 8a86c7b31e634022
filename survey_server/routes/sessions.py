"""Session (analytics cycle) endpoints: recommended set, tracking, summary, reset."""

from fastapi import APIRouter, HTTPException

from recommender.models import SessionContext, SessionPhase

from ..models import (
    CreateSessionRequest,
    SessionInfo,
    SetRecommendedRequest,
    SummaryRequest,
    SummaryResponse,
    TrackRequest,
    TrackResponse,
)
from ..state import get_state

router = APIRouter()


def _session_or_404(session_id: str) -> SessionContext:
    ctx = get_state().get_session(session_id)
    if ctx is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return ctx


def _session_info(ctx: SessionContext) -> SessionInfo:
    stats = get_state().aggregator.session_stats(ctx)
    return SessionInfo(
        session_id=ctx.session_id,
        user_id=ctx.user_id,
        phase=SessionPhase(ctx.phase).value,
        recommended_videos=stats.recommended_videos,
        total_interactions=stats.total_interactions,
        interactions_by_type=stats.interactions_by_type,
        created_at=ctx.created_at,
    )


@router.post("/create", response_model=SessionInfo)
def create_session(request: CreateSessionRequest):
    """Start a new cycle, optionally with its recommended set already known."""
    state = get_state()
    ctx = state.aggregator.new_session(request.user_id)
    if request.recommended_video_ids is not None:
        ctx = state.aggregator.set_recommended(ctx, request.recommended_video_ids)
    return _session_info(state.put_session(ctx))


@router.get("/{session_id}", response_model=SessionInfo)
def get_session(session_id: str):
    return _session_info(_session_or_404(session_id))


@router.post("/{session_id}/recommended", response_model=SessionInfo)
def set_recommended(session_id: str, request: SetRecommendedRequest):
    state = get_state()
    ctx = state.aggregator.set_recommended(_session_or_404(session_id), request.video_ids)
    return _session_info(state.put_session(ctx))


@router.post("/{session_id}/track", response_model=TrackResponse)
def track(session_id: str, request: TrackRequest):
    """Record one interaction. is_recommended is decided against the session's recommended set."""
    state = get_state()
    ctx = _session_or_404(session_id)
    user_id = request.user_id or ctx.user_id
    try:
        ctx, event = state.aggregator.track(
            ctx,
            user_id,
            request.video_id,
            request.interaction_type,
            current_selection=request.selected_videos,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    state.put_session(ctx)
    return TrackResponse(
        session_id=ctx.session_id,
        video_id=event.video_id,
        interaction_type=event.interaction_type,
        is_recommended=event.is_recommended,
        total_interactions=len(ctx.events),
    )


@router.post("/{session_id}/summary", response_model=SummaryResponse)
def summary(session_id: str, request: SummaryRequest):
    """Compute accuracy for the final selection and persist events plus summary."""
    state = get_state()
    ctx = _session_or_404(session_id)
    user_id = request.user_id or ctx.user_id
    try:
        ctx, result = state.aggregator.summarize(ctx, user_id, request.selected_videos)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    state.put_session(ctx)
    return SummaryResponse(
        session_id=result.session_id,
        user_id=result.user_id,
        recommended_videos=result.recommended_video_ids,
        selected_videos=result.selected_video_ids,
        selected_recommended=result.selected_recommended_count,
        total_recommended=result.total_recommended,
        recommendation_accuracy=result.accuracy_percent,
        persisted=result.persisted,
    )


@router.post("/{session_id}/reset", response_model=SessionInfo)
def reset(session_id: str):
    """Replace the session with a fresh cycle under a new id."""
    state = get_state()
    old = _session_or_404(session_id)
    ctx = state.aggregator.reset(old)
    state.sessions.pop(old.session_id, None)
    return _session_info(state.put_session(ctx))
