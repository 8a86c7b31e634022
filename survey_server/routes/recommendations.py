"""Recommendation page endpoint."""

from fastapi import APIRouter, HTTPException

from ..models import RecommendationRequest, RecommendationResponse, SourceInfo
from ..state import get_state
from ..utils import result_cards


router = APIRouter()


@router.post("", response_model=RecommendationResponse)
def get_recommendations(request: RecommendationRequest):
    """
    Assemble the survey page for a user: recommended videos first, then random
    catalog filler and fallbacks. Opens an analytics session whose recommended
    set is the service-originated prefix of the page.
    """
    state = get_state()
    config = state.config
    if not request.user_id:
        raise HTTPException(status_code=400, detail="user_id is required")
    top_k = config.recommended_target if request.top_k is None else request.top_k
    total = config.recommendation_total if request.total is None else request.total
    if top_k > total:
        raise HTTPException(status_code=400, detail=f"top_k must be <= total ({total})")

    try:
        result = state.assembler.assemble(request.user_id, target_total=total, recommended_target=top_k)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    ctx = state.aggregator.new_session(request.user_id)
    ctx = state.put_session(state.aggregator.set_recommended(ctx, result.recommended_ids))

    counts = result.source_counts
    return RecommendationResponse(
        user_id=request.user_id,
        session_id=ctx.session_id,
        videos=result_cards(result),
        count=len(result.videos),
        recommended_count=result.recommended_count,
        additional_count=len(result.videos) - result.recommended_count,
        source_info=SourceInfo(
            from_microservice=counts.from_service,
            from_catalog=counts.from_catalog_random,
            from_fallback=counts.from_fallback,
        ),
    )
