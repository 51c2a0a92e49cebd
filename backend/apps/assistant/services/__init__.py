"""Service layer for the documentation assistant."""

from .assistant import AssistantReply, answer_question, classify_query
from .guard import (
    BLOCK_HOURS,
    MAX_OUT_OF_CONTEXT,
    WINDOW_HOURS,
    AssistantBlocked,
    GuardDecision,
    LimitPolicy,
    LimitState,
    LimitUnavailable,
    OutOfContextGuard,
)
from .retrieval import (
    Retrieval,
    fallback_overview,
    load_chunks,
    needs_dynamic_analysis,
    related_files,
    retrieve,
    score_chunk,
)

__all__ = [
    "BLOCK_HOURS",
    "MAX_OUT_OF_CONTEXT",
    "WINDOW_HOURS",
    "AssistantBlocked",
    "AssistantReply",
    "GuardDecision",
    "LimitPolicy",
    "LimitState",
    "LimitUnavailable",
    "OutOfContextGuard",
    "Retrieval",
    "answer_question",
    "classify_query",
    "fallback_overview",
    "load_chunks",
    "needs_dynamic_analysis",
    "related_files",
    "retrieve",
    "score_chunk",
]
