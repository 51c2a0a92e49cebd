"""Tests for documentation chunk scoring."""

from __future__ import annotations

import pytest

from apps.assistant import models
from apps.assistant.services import (
    Retrieval,
    fallback_overview,
    load_chunks,
    needs_dynamic_analysis,
    related_files,
    retrieve,
    score_chunk,
)


def _chunk(**overrides) -> models.KnowledgeChunk:
    fields = {
        "chunk_id": "chunk",
        "category": "General",
        "title": "Untitled",
        "business_description": "",
        "technical_description": "",
        "route": "",
        "keywords": [],
    }
    fields.update(overrides)
    return models.KnowledgeChunk(**fields)


def test_exact_phrase_outranks_word_matches():
    chunk = _chunk(business_description="The benchmark score compares portfolios.")

    assert score_chunk(chunk, "benchmark score", query_type="technical") == 10 + 2 + 2


def test_title_and_keyword_hits_add_up():
    chunk = _chunk(title="Primary Bank", keywords=["wallet"])

    # "primary": content +2, title +3; "wallet": content +2, keyword +4
    assert score_chunk(chunk, "primary wallet", query_type="technical") == 11


def test_short_words_and_punctuation_are_ignored():
    chunk = _chunk(title="HGO targets")

    assert score_chunk(chunk, "is it ?? hgo?", query_type="technical") == 2 + 3


def test_route_and_category_bonuses():
    chunk = _chunk(category="Business KPI", route="/dashboard")

    assert score_chunk(chunk, "zzz", query_type="business", current_route="/dashboard") == 7
    assert score_chunk(chunk, "zzz", query_type="technical", current_route="/dashboard") == 5
    assert score_chunk(_chunk(category="Technical"), "zzz", query_type="technical") == 2


def test_retrieve_keeps_top_five_above_floor():
    chunks = [
        _chunk(chunk_id=f"c{index}", title=f"Dashboard panel {index}", keywords=["dashboard"])
        for index in range(7)
    ]
    chunks.append(_chunk(chunk_id="noise", title="Unrelated"))

    retrieval = retrieve(chunks, "dashboard", query_type="technical")

    assert len(retrieval.chunks) == 5
    assert "noise" not in retrieval.chunk_ids
    assert retrieval.top_score == 10 + 2 + 3 + 4
    assert retrieval.has_good_documentation is True


def test_retrieve_with_no_matches_has_no_documentation():
    retrieval = retrieve([_chunk(title="Unrelated")], "weather tomorrow", query_type="business")

    assert retrieval.chunks == []
    assert retrieval.has_good_documentation is False


@pytest.mark.django_db()
def test_load_chunks_falls_back_to_overview():
    chunks = load_chunks()

    assert [chunk.chunk_id for chunk in chunks] == [fallback_overview().chunk_id]


@pytest.mark.django_db()
def test_load_chunks_skips_inactive_rows():
    models.KnowledgeChunk.objects.create(chunk_id="live", category="General", title="Live")
    models.KnowledgeChunk.objects.create(
        chunk_id="retired", category="General", title="Retired", is_active=False
    )

    assert [chunk.chunk_id for chunk in load_chunks()] == ["live"]


def test_dynamic_analysis_for_thin_documentation_or_technical_questions():
    pair = Retrieval(chunks=[_chunk(chunk_id="a"), _chunk(chunk_id="b")], top_score=12)
    single = Retrieval(chunks=[_chunk(chunk_id="a")], top_score=12)

    assert needs_dynamic_analysis(pair, "business") is False
    assert needs_dynamic_analysis(pair, "technical") is True
    assert needs_dynamic_analysis(single, "business") is True


def test_related_files_without_dynamic_analysis_come_from_chunks_only():
    retrieval = Retrieval(
        chunks=[
            _chunk(related_files=["src/a.ts", "src/b.ts"]),
            _chunk(related_files=["src/a.ts"]),
        ],
        top_score=8,
    )
    page = _chunk(route="/dashboard", related_files=["src/page.tsx"])

    files = related_files(retrieval, page, question="customer portfolio", current_route="/dashboard")

    assert files == ["src/a.ts", "src/b.ts", "src/page.tsx"]


def test_dynamic_analysis_adds_route_and_keyword_files_up_to_eight():
    retrieval = Retrieval(chunks=[_chunk(related_files=["src/pages/Custom.tsx"])], top_score=3)

    files = related_files(
        retrieval,
        None,
        question="Where is the customer portfolio loaded?",
        current_route="/dashboard",
        dynamic_analysis=True,
    )

    assert files == [
        "src/pages/Custom.tsx",
        "src/pages/Dashboard.tsx",
        "src/components/dashboard/SummaryCards.tsx",
        "src/components/dashboard/InsightsPanel.tsx",
        "src/components/dashboard/DailyPlanPanel.tsx",
        "src/hooks/usePortfolioSummary.ts",
        "src/hooks/useCustomers.ts",
        "src/data/customers.ts",
    ]


def test_dynamic_analysis_ignores_unknown_routes():
    retrieval = Retrieval(chunks=[], top_score=0)

    files = related_files(
        retrieval,
        None,
        question="How are thresholds stored?",
        current_route="/nowhere",
        dynamic_analysis=True,
    )

    assert files == ["src/hooks/useProductThresholds.ts", "src/pages/Thresholds.tsx"]
