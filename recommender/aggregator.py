"""
Interaction / accuracy aggregation

Tracks survey interactions against the set of videos the service recommended
and computes the session's recommendation accuracy:

    accuracy = 100 * |selected ∩ recommended| / |recommended|   (0 when nothing was recommended)

Session state is an explicit SessionContext value. Every operation returns a new
context; callers store it wherever the session lives (request state, a dict
keyed by session id, a test variable).
"""

import logging
import time
import uuid
from collections import Counter
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from .errors import PersistenceError
from .models import (
    InteractionEvent,
    InteractionType,
    SessionContext,
    SessionPhase,
    SessionStats,
    SessionSummary,
)

logger = logging.getLogger(__name__)


class InteractionSink(Protocol):
    """Where tracked events and session summaries are sent."""

    def save_interactions(self, user_id: str, events: Sequence[InteractionEvent]) -> None:
        ...

    def save_session(self, summary: SessionSummary) -> None:
        ...


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _unique(ids: Iterable[str]) -> List[str]:
    out: List[str] = []
    for vid in ids or []:
        if vid and vid not in out:
            out.append(vid)
    return out


def compute_accuracy(recommended_ids: Iterable[str], selected_ids: Iterable[str]) -> Tuple[float, int, int]:
    """Return (accuracy_percent, selected_recommended, total_recommended)."""
    recommended = set(recommended_ids or [])
    if not recommended:
        return 0.0, 0, 0
    hits = len(recommended & set(selected_ids or []))
    return 100.0 * hits / len(recommended), hits, len(recommended)


def new_session(user_id: Optional[str] = None) -> SessionContext:
    return SessionContext(session_id=new_session_id(), user_id=user_id)


def set_recommended(ctx: SessionContext, video_ids: Sequence[str]) -> SessionContext:
    """Establish the ground-truth recommended set for this cycle."""
    ids = _unique(video_ids)
    logger.info("[analytics] session=%s recommended set: %s", ctx.session_id, ids)
    return ctx.model_copy(update={"recommended_video_ids": ids, "phase": SessionPhase.RECOMMENDED_SET})


def reset(ctx: SessionContext) -> SessionContext:
    """Start a new cycle: new session id, no events, no recommended set."""
    session_id = new_session_id()
    while session_id == ctx.session_id:
        session_id = new_session_id()
    logger.info("[analytics] session reset %s -> %s", ctx.session_id, session_id)
    return SessionContext(session_id=session_id, user_id=ctx.user_id)


def session_stats(ctx: SessionContext) -> SessionStats:
    by_type = Counter(e.interaction_type for e in ctx.events)
    return SessionStats(
        session_id=ctx.session_id,
        total_interactions=len(ctx.events),
        recommended_videos=list(ctx.recommended_video_ids),
        interactions_by_type=dict(by_type),
    )


class InteractionAggregator:
    """
    Session operations bound to a persistence sink.

    Persistence is fire-and-forget for single events: a failed write is logged and
    the interaction still counts locally. Summaries clear the event log only when
    the batch write succeeds.
    """

    def __init__(self, sink: Optional[InteractionSink] = None):
        self._sink = sink

    new_session = staticmethod(new_session)
    set_recommended = staticmethod(set_recommended)
    reset = staticmethod(reset)
    session_stats = staticmethod(session_stats)

    def track(
        self,
        ctx: SessionContext,
        user_id: str,
        video_id: str,
        interaction_type: str,
        current_selection: Sequence[str] = (),
    ) -> Tuple[SessionContext, InteractionEvent]:
        """Append one interaction to the session log and send it to the sink."""
        if not user_id or not video_id:
            raise ValueError("user_id and video_id are required")
        try:
            kind = InteractionType(interaction_type)
        except ValueError:
            raise ValueError(f"Unknown interaction type: {interaction_type!r}")
        if not ctx.has_recommended_set:
            logger.warning(
                "[analytics] session=%s tracked %s before the recommended set was established; "
                "is_recommended will be false",
                ctx.session_id, kind.value,
            )
        event = InteractionEvent(
            user_id=user_id,
            video_id=video_id,
            interaction_type=kind,
            is_recommended=video_id in ctx.recommended_video_ids,
            session_id=ctx.session_id,
            recommended_videos=list(ctx.recommended_video_ids),
            selected_videos=list(current_selection or []),
        )
        phase = SessionPhase.TRACKING if ctx.has_recommended_set else ctx.phase
        ctx = ctx.model_copy(update={"events": [*ctx.events, event], "phase": phase})
        logger.debug(
            "[analytics] tracked type=%s video=%s recommended=%s session=%s",
            event.interaction_type, video_id, event.is_recommended, ctx.session_id,
        )
        if self._sink is not None:
            try:
                self._sink.save_interactions(user_id, [event])
            except PersistenceError as e:
                logger.error("[analytics] failed to send interaction for session=%s: %s", ctx.session_id, e)
        return ctx, event

    def summarize(
        self,
        ctx: SessionContext,
        user_id: str,
        selected_video_ids: Sequence[str],
    ) -> Tuple[SessionContext, SessionSummary]:
        """
        Compute the session's accuracy and send events + summary as one batch.

        The event log is cleared only when the batch was persisted; otherwise it is
        kept so a later call can retry. Never raises for persistence failures.
        """
        if not user_id:
            raise ValueError("user_id is required")
        selected = _unique(selected_video_ids)
        accuracy, hits, total = compute_accuracy(ctx.recommended_video_ids, selected)
        summary = SessionSummary(
            user_id=user_id,
            session_id=ctx.session_id,
            recommended_video_ids=list(ctx.recommended_video_ids),
            selected_video_ids=selected,
            accuracy_percent=accuracy,
            selected_recommended_count=hits,
            total_recommended=total,
        )
        logger.info(
            "[analytics] session=%s summary: recommended=%d selected=%d hits=%d accuracy=%.2f%%",
            ctx.session_id, total, len(selected), hits, accuracy,
        )
        events = list(ctx.events)
        if self._sink is not None:
            try:
                if events:
                    self._sink.save_interactions(user_id, events)
                self._sink.save_session(summary)
            except PersistenceError as e:
                logger.error("[analytics] failed to send session summary for session=%s: %s", ctx.session_id, e)
            else:
                summary = summary.model_copy(update={"persisted": True})
                events = []
        return ctx.model_copy(update={"events": events, "phase": SessionPhase.SUMMARIZED}), summary
