"""Keyword scoring of documentation chunks against a user question."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from apps.assistant import models

logger = logging.getLogger(__name__)

MIN_RELEVANT_SCORE = 2
MAX_RELEVANT_CHUNKS = 5
GOOD_DOCUMENTATION_SCORE = 4
GOOD_DOCUMENTATION_CHUNKS = 2
DYNAMIC_ANALYSIS_MIN_CHUNKS = 2
MAX_RELATED_FILES = 8

PHRASE_SCORE = 10
CONTENT_WORD_SCORE = 2
TITLE_WORD_SCORE = 3
KEYWORD_WORD_SCORE = 4
ROUTE_SCORE = 5
CATEGORY_SCORE = 2

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def fallback_overview() -> models.KnowledgeChunk:
    """Built-in overview used until the documentation corpus has been loaded."""

    return models.KnowledgeChunk(
        chunk_id="fallback_overview",
        category="General",
        audience=["business", "technical"],
        title="Application Overview (Fallback)",
        business_description=(
            "The Account Planning System is a corporate banking portfolio management app for "
            "relationship/portfolio managers. It includes a Dashboard portfolio overview, "
            "customer journey tracking, product performance (HGO/target achievement), primary "
            "bank analytics (share of wallet), an actions agenda for planning, and an AI "
            "assistant."
        ),
        route="/",
        keywords=[
            "account",
            "planning",
            "system",
            "dashboard",
            "customers",
            "actions",
            "primary",
            "bank",
            "hgo",
        ],
        metadata={"source": "fallback"},
    )


def load_chunks() -> list[models.KnowledgeChunk]:
    chunks = list(models.KnowledgeChunk.objects.filter(is_active=True))
    if not chunks:
        logger.info("No active documentation chunks, using the fallback overview")
        return [fallback_overview()]
    return chunks


def find_route_chunk(
    chunks: Iterable[models.KnowledgeChunk], route: Optional[str]
) -> Optional[models.KnowledgeChunk]:
    if not route:
        return None
    return next((chunk for chunk in chunks if chunk.route == route), None)


def question_words(question: str) -> list[str]:
    words = []
    for raw in question.lower().split():
        if len(raw) <= 2:
            continue
        word = _NON_ALNUM.sub("", raw)
        if word:
            words.append(word)
    return words


def score_chunk(
    chunk: models.KnowledgeChunk,
    question: str,
    *,
    query_type: str,
    current_route: Optional[str] = None,
) -> int:
    keywords = [keyword.lower() for keyword in chunk.keywords or []]
    title = chunk.title.lower()
    content = " ".join(
        [
            chunk.title,
            chunk.business_description or "",
            chunk.technical_description or "",
            " ".join(chunk.keywords or []),
        ]
    ).lower()

    score = 0
    if question.lower() in content:
        score += PHRASE_SCORE

    for word in question_words(question):
        if word in content:
            score += CONTENT_WORD_SCORE
        if word in title:
            score += TITLE_WORD_SCORE
        if any(word in keyword for keyword in keywords):
            score += KEYWORD_WORD_SCORE

    if current_route and chunk.route == current_route:
        score += ROUTE_SCORE

    category = (chunk.category or "").lower()
    if query_type == models.QueryType.TECHNICAL and "technical" in category:
        score += CATEGORY_SCORE
    if query_type == models.QueryType.BUSINESS and ("business" in category or "kpi" in category):
        score += CATEGORY_SCORE

    return score


@dataclass(frozen=True)
class Retrieval:
    chunks: list[models.KnowledgeChunk]
    top_score: int

    @property
    def has_good_documentation(self) -> bool:
        return (
            len(self.chunks) >= GOOD_DOCUMENTATION_CHUNKS
            and self.top_score >= GOOD_DOCUMENTATION_SCORE
        )

    @property
    def chunk_ids(self) -> list[str]:
        return [chunk.chunk_id for chunk in self.chunks]


def retrieve(
    chunks: Sequence[models.KnowledgeChunk],
    question: str,
    *,
    query_type: str,
    current_route: Optional[str] = None,
) -> Retrieval:
    """Rank ``chunks`` and keep the best few that clear the relevance floor."""

    scored = sorted(
        (
            (score_chunk(chunk, question, query_type=query_type, current_route=current_route), chunk)
            for chunk in chunks
        ),
        key=lambda item: item[0],
        reverse=True,
    )
    relevant = [chunk for score, chunk in scored if score >= MIN_RELEVANT_SCORE]
    top_score = scored[0][0] if scored else 0
    logger.info("Found %s relevant chunks (top score %s)", len(relevant), top_score)
    return Retrieval(chunks=relevant[:MAX_RELEVANT_CHUNKS], top_score=top_score)


# Source files behind each page of the planning app.
ROUTE_FILES: dict[str, tuple[str, ...]] = {
    "/": (
        "src/pages/Index.tsx",
        "src/pages/Dashboard.tsx",
        "src/components/dashboard/SummaryCards.tsx",
        "src/components/dashboard/InsightsPanel.tsx",
    ),
    "/dashboard": (
        "src/pages/Dashboard.tsx",
        "src/components/dashboard/SummaryCards.tsx",
        "src/components/dashboard/InsightsPanel.tsx",
        "src/components/dashboard/DailyPlanPanel.tsx",
        "src/hooks/usePortfolioSummary.ts",
    ),
    "/product-performance": (
        "src/pages/ProductPerformance.tsx",
        "src/components/dashboard/ProductPerformanceTable.tsx",
        "src/hooks/usePortfolioTargets.ts",
    ),
    "/customer-journey": (
        "src/pages/CustomerJourney.tsx",
        "src/hooks/useCustomers.ts",
        "src/hooks/useActions.ts",
    ),
    "/primary-bank": (
        "src/pages/PrimaryBank.tsx",
        "src/hooks/usePrimaryBankData.ts",
        "src/components/customer/PrimaryBankPanel.tsx",
    ),
    "/primary-bank-engine": (
        "src/pages/PrimaryBankEngine.tsx",
        "src/hooks/usePrimaryBankData.ts",
    ),
    "/customers": (
        "src/pages/Customers.tsx",
        "src/hooks/useCustomers.ts",
        "src/components/customer/CreateCustomerModal.tsx",
    ),
    "/actions": (
        "src/pages/ActionsAgenda.tsx",
        "src/hooks/useActions.ts",
        "src/components/actions/ActionPlanningModal.tsx",
        "src/components/actions/AddActionModal.tsx",
    ),
    "/ai-assistant": ("src/pages/AIAssistant.tsx", "src/hooks/useAIChatSessions.ts"),
    "/settings": (
        "src/pages/Settings.tsx",
        "src/components/settings/AIProviderSettings.tsx",
        "src/components/settings/PromptManagementPanel.tsx",
        "src/components/settings/RAGManagementPanel.tsx",
    ),
    "/preferences": ("src/pages/Preferences.tsx", "src/hooks/useUserSettings.ts"),
    "/thresholds": ("src/pages/Thresholds.tsx", "src/hooks/useProductThresholds.ts"),
}

# Matched as substrings of the lowercased question, in this order.
KEYWORD_FILES: dict[str, tuple[str, ...]] = {
    "customer": ("src/hooks/useCustomers.ts", "src/data/customers.ts", "src/types/index.ts"),
    "action": (
        "src/hooks/useActions.ts",
        "src/data/actions.ts",
        "src/components/actions/ActionPlanningModal.tsx",
    ),
    "product": (
        "src/hooks/useProducts.ts",
        "src/data/products.ts",
        "src/hooks/useCustomerProducts.ts",
    ),
    "portfolio": (
        "src/hooks/usePortfolioSummary.ts",
        "src/hooks/usePortfolioTargets.ts",
        "src/data/portfolio.ts",
    ),
    "primary bank": (
        "src/hooks/usePrimaryBankData.ts",
        "src/components/customer/PrimaryBankPanel.tsx",
    ),
    "principality": (
        "src/components/customer/PrincipalityScoreModal.tsx",
        "src/hooks/useCustomers.ts",
    ),
    "insight": ("src/hooks/useInsights.ts", "src/components/dashboard/InsightsPanel.tsx"),
    "autopilot": ("src/components/customer/AutoPilotPanel.tsx", "src/data/autopilot.ts"),
    "threshold": ("src/hooks/useProductThresholds.ts", "src/pages/Thresholds.tsx"),
    "benchmark": (
        "src/hooks/usePortfolioSummary.ts",
        "src/components/dashboard/SummaryCards.tsx",
    ),
    "hgo": (
        "src/hooks/usePortfolioTargets.ts",
        "src/components/dashboard/ProductPerformanceTable.tsx",
    ),
    "target": ("src/hooks/usePortfolioTargets.ts", "src/pages/ProductPerformance.tsx"),
    "dashboard": ("src/pages/Dashboard.tsx", "src/components/dashboard/SummaryCards.tsx"),
    "ai": ("src/pages/AIAssistant.tsx", "supabase/functions/ai-action-assistant/index.ts"),
    "auth": (
        "src/contexts/AuthContext.tsx",
        "src/pages/Auth.tsx",
        "src/components/ProtectedRoute.tsx",
    ),
    "setting": ("src/pages/Settings.tsx", "src/hooks/useUserSettings.ts"),
}


def needs_dynamic_analysis(retrieval: Retrieval, query_type: str) -> bool:
    """Thin documentation or a technical question means the code map is consulted too."""

    return (
        len(retrieval.chunks) < DYNAMIC_ANALYSIS_MIN_CHUNKS
        or query_type == models.QueryType.TECHNICAL
    )


def _extend(files: list[str], paths: Iterable[str]) -> None:
    for path in paths:
        if path not in files:
            files.append(path)


def related_files(
    retrieval: Retrieval,
    route_chunk: Optional[models.KnowledgeChunk],
    *,
    question: str = "",
    current_route: Optional[str] = None,
    dynamic_analysis: bool = False,
) -> list[str]:
    """Source files for the answer prompt, deduplicated in order of discovery.

    Files referenced by the matched chunks and the current page's chunk always
    come first. With ``dynamic_analysis`` the page's entry in ``ROUTE_FILES``
    and every ``KEYWORD_FILES`` entry found in the question are appended, and
    the list is capped at ``MAX_RELATED_FILES``.
    """

    files: list[str] = []
    sources = list(retrieval.chunks)
    if route_chunk is not None:
        sources.append(route_chunk)
    for chunk in sources:
        _extend(files, chunk.related_files or [])

    if not dynamic_analysis:
        return files

    if current_route:
        _extend(files, ROUTE_FILES.get(current_route, ()))
    question_lower = question.lower()
    for keyword, paths in KEYWORD_FILES.items():
        if keyword in question_lower:
            _extend(files, paths)
    return files[:MAX_RELATED_FILES]
