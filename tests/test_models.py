from datetime import datetime, timedelta, timezone

import pytest

from fakes import code_item, repo_payload
from models.comparison_result import AnalysisFields
from models.enriched_result import CodeSnippet, EnrichedResult, FetchStatus
from models.errors import RateLimited
from models.hits import ContentHit, RepositoryHit, RepositorySummary
from models.search_plan import SearchTarget


class TestSearchTarget:
    @pytest.mark.parametrize(
        "wire,target",
        [
            ("code", SearchTarget.CONTENT),
            (" Code ", SearchTarget.CONTENT),
            ("repositories", SearchTarget.REPOSITORY),
            ("none", SearchTarget.NONE),
        ],
    )
    def test_from_wire(self, wire, target):
        assert SearchTarget.from_wire(wire) is target

    def test_unknown_wire_value(self):
        with pytest.raises(ValueError):
            SearchTarget.from_wire("issues")


class TestHits:
    def test_repository_summary_defaults(self):
        summary = RepositorySummary.from_api({"name": "forms", "full_name": "acme/forms"})
        assert summary.owner == "unknown"
        assert summary.stars == 0
        assert summary.description is None

    def test_content_hit_requires_repository(self):
        item = code_item(0)
        item["repository"] = None
        with pytest.raises(ValueError):
            ContentHit.from_api(item)

    def test_repository_hit_ignores_bad_counts(self):
        hit = RepositoryHit.from_api(repo_payload("acme/forms", stars="lots", forks_count=True))
        assert hit.stars == 0
        assert hit.forks == 0


def test_rate_limited_retry_after():
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert RateLimited("x", reset_at=now + timedelta(seconds=90)).retry_after_seconds(now) == 90
    assert RateLimited("x", reset_at=now - timedelta(seconds=5)).retry_after_seconds(now) == 0
    assert RateLimited("x").retry_after_seconds(now) is None


def test_error_result_gets_default_message():
    result = EnrichedResult(
        id="r",
        repository=RepositorySummary(name="forms", full_name="acme/forms"),
        path="a.js",
        name="a.js",
        url="",
        html_url="",
        snippet=CodeSnippet(code="", language="javascript", line_start=1, line_end=1),
        match_score=0.0,
        full_content="",
        fetch_status=FetchStatus.ERROR,
    )
    assert result.fetch_error
    assert not result.is_fetched
    assert result.to_dict()["fetch_status"] == "error"


def test_analysis_fields_score_clamped():
    analysis = AnalysisFields.from_payload(
        {
            "insights": "i",
            "technicalDetails": "t",
            "implementationApproach": "a",
            "bestPractices": "b",
            "similarityScore": 140,
        }
    )
    assert analysis.similarity_score == 100
    assert analysis.to_dict()["schema_version"] == "1"
