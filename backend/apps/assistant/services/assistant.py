"""Answer user questions about the application from its documentation."""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

import httpx

from apps.ai.services import (
    AIRequest,
    ProviderConfig,
    call_ai,
    default_provider_config,
    user_message,
)
from apps.assistant import models, prompts

from .guard import AssistantBlocked, OutOfContextGuard
from .retrieval import (
    find_route_chunk,
    load_chunks,
    needs_dynamic_analysis,
    related_files,
    retrieve,
)

logger = logging.getLogger(__name__)

CLASSIFY_MAX_TOKENS = 10
ANSWER_MAX_TOKENS = 500

_LABEL = re.compile(r"[a-z_]+")


@dataclass
class AssistantReply:
    answer: str
    query_type: str
    feedback_id: Optional[UUID] = None
    chunks_used: int = 0
    needs_investigation: bool = False
    remaining_rights: Optional[int] = None
    blocked: bool = False
    blocked_until: Optional[datetime] = None
    chunk_ids: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def classify_query(
    question: str,
    *,
    element_context: str = "",
    route_context: str = "",
    config: Optional[ProviderConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> str:
    """Label ``question`` as business, technical or out_of_context.

    Labels the model invents are treated as ``business`` so that a confused
    classifier never counts against the user.
    """

    prompt = prompts.build_classification_prompt(question, element_context, route_context)
    response = call_ai(
        config or default_provider_config(),
        AIRequest(messages=user_message(prompt), max_tokens=CLASSIFY_MAX_TOKENS),
        transport=transport,
    )
    match = _LABEL.search(response.first_content().strip().lower())
    label = match.group(0) if match else ""
    if label not in models.QueryType.values:
        logger.info("Unrecognised query label %r, defaulting to business", label)
        return models.QueryType.BUSINESS
    return label


def answer_question(
    user_id: UUID | str,
    question: str,
    *,
    clicked_element: Optional[dict] = None,
    current_route: Optional[str] = None,
    guard: Optional[OutOfContextGuard] = None,
    config: Optional[ProviderConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> AssistantReply:
    """Classify, rate-limit and answer one question.

    Raises :class:`AssistantBlocked` before any model call while the user is
    blocked; provider failures propagate as ``AIError`` subclasses.
    """

    guard = guard or OutOfContextGuard()
    config = config or default_provider_config()

    decision = guard.check(user_id)
    if decision.blocked:
        raise AssistantBlocked(decision.blocked_until)

    logger.info("Assistant question from %s (route=%s)", user_id, current_route)

    chunks = load_chunks()
    route_chunk = find_route_chunk(chunks, current_route)
    element_context = prompts.build_element_context(clicked_element)
    route_context = prompts.build_route_context(current_route, route_chunk)

    query_type = classify_query(
        question,
        element_context=element_context,
        route_context=route_context,
        config=config,
        transport=transport,
    )
    logger.info("Query classified as %s", query_type)

    if query_type == models.QueryType.OUT_OF_CONTEXT:
        return _handle_out_of_scope(user_id, question, guard)

    retrieval = retrieve(chunks, question, query_type=query_type, current_route=current_route)
    dynamic = needs_dynamic_analysis(retrieval, query_type)
    files = related_files(
        retrieval,
        route_chunk,
        question=question,
        current_route=current_route,
        dynamic_analysis=dynamic,
    )
    prompt = prompts.build_answer_prompt(
        question=question,
        query_type=query_type,
        chunks=retrieval.chunks,
        has_good_documentation=retrieval.has_good_documentation,
        related_files=files,
        dynamic_analysis=prompts.build_dynamic_analysis(files, current_route) if dynamic else "",
        element_context=element_context,
        route_context=route_context,
    )
    response = call_ai(
        config,
        AIRequest(messages=user_message(prompt), max_tokens=ANSWER_MAX_TOKENS),
        transport=transport,
    )

    answer = response.first_content() or prompts.EMPTY_ANSWER
    answer += prompts.format_sources(retrieval.chunks)
    needs_investigation = not retrieval.has_good_documentation and not retrieval.chunks

    feedback = models.AssistantFeedback.objects.create(
        user_id=user_id,
        question=question,
        answer=answer,
        query_type=query_type,
        chunk_ids_used=retrieval.chunk_ids,
        needs_investigation=needs_investigation,
    )

    return AssistantReply(
        answer=answer,
        query_type=query_type,
        feedback_id=feedback.id,
        chunks_used=len(retrieval.chunks),
        needs_investigation=needs_investigation,
        chunk_ids=retrieval.chunk_ids,
    )


def _handle_out_of_scope(
    user_id: UUID | str, question: str, guard: OutOfContextGuard
) -> AssistantReply:
    decision = guard.register_out_of_context(user_id)
    feedback = models.AssistantFeedback.objects.create(
        user_id=user_id,
        question=question,
        answer=prompts.OUT_OF_SCOPE_FEEDBACK_ANSWER,
        query_type=models.QueryType.OUT_OF_CONTEXT,
        needs_investigation=False,
    )
    block_hours = int(guard.policy.block.total_seconds() // 3600)

    if decision.blocked:
        return AssistantReply(
            answer=prompts.out_of_scope_blocked(block_hours),
            query_type=models.QueryType.OUT_OF_CONTEXT,
            feedback_id=feedback.id,
            blocked=True,
            blocked_until=decision.blocked_until,
            remaining_rights=0,
        )

    return AssistantReply(
        answer=prompts.out_of_scope_warning(decision.remaining, block_hours),
        query_type=models.QueryType.OUT_OF_CONTEXT,
        feedback_id=feedback.id,
        remaining_rights=decision.remaining,
    )
