"""
Tests for PlanSanitizer

Planning responses are loosely formatted model output. These tests pin down
what is accepted (fenced or bare JSON, endpoint aliases) and what is rejected
as a whole (missing fields, unknown endpoints, empty queries).
"""

import json

import pytest

from fakes import plan_json
from models.errors import PlanParseError
from models.search_plan import SearchTarget
from orchestrator.plan_sanitizer import (
    PlanSanitizer,
    normalize_query_string,
    parse_json_object,
    strip_code_fences,
)


@pytest.fixture
def sanitizer():
    return PlanSanitizer()


class TestStripCodeFences:
    def test_json_fence_removed(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence_removed(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_unfenced_text_only_trimmed(self):
        assert strip_code_fences('  {"a": 1}\n') == '{"a": 1}'

    def test_none_is_empty(self):
        assert strip_code_fences(None) == ""


class TestParseJsonObject:
    def test_rejects_array(self):
        with pytest.raises(ValueError):
            parse_json_object("[1, 2]")

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            parse_json_object("```json\n```")

    def test_rejects_trailing_prose(self):
        with pytest.raises(ValueError):
            parse_json_object('{"a": 1} Hope this helps!')


class TestNormalizeQueryString:
    def test_strips_q_prefix_and_plus_separators(self):
        assert normalize_query_string("q=house+robber+language:python") == "house robber language:python"

    def test_terms_moved_before_qualifiers(self):
        assert normalize_query_string("language:go user:octocat http server") == (
            "http server language:go user:octocat"
        )

    def test_drops_term_duplicating_language_qualifier(self):
        assert normalize_query_string("python house robber language:python") == (
            "house robber language:python"
        )

    def test_language_dedupe_is_case_insensitive(self):
        assert normalize_query_string("Python sorting language:python") == "sorting language:python"

    def test_plain_terms_untouched(self):
        assert normalize_query_string("  react hooks  ") == "react hooks"

    def test_plus_inside_language_value_kept(self):
        assert normalize_query_string("smart pointer language:c++") == (
            "smart pointer language:c++"
        )

    def test_plus_inside_term_kept(self):
        assert normalize_query_string("c++ templates") == "c++ templates"

    def test_scoped_name_is_a_term_not_a_qualifier(self):
        assert normalize_query_string("language:cpp std::vector reserve") == (
            "std::vector reserve language:cpp"
        )


class TestPlanSanitizerParse:
    def test_fenced_and_unfenced_give_same_plan(self, sanitizer):
        fenced = sanitizer.parse(plan_json(fenced=True))
        bare = sanitizer.parse(plan_json(fenced=False))
        assert fenced == bare
        assert fenced.target is SearchTarget.CONTENT
        assert fenced.query_string == "useForm validation language:javascript"
        assert fenced.quality == "high"

    def test_repositories_endpoint(self, sanitizer):
        plan = sanitizer.parse(plan_json(endpoint="repositories", constructed_url="user:octocat"))
        assert plan.target is SearchTarget.REPOSITORY
        assert plan.query_string == "user:octocat"

    def test_query_string_is_normalized(self, sanitizer):
        plan = sanitizer.parse(
            plan_json(constructed_url="q=python+house+robber+problem+language:python")
        )
        assert plan.query_string == "house robber problem language:python"

    def test_none_target_has_empty_query(self, sanitizer):
        plan = sanitizer.parse(
            plan_json(endpoint="none", constructed_url="", feedback="Issues are not searchable here")
        )
        assert plan.target is SearchTarget.NONE
        assert plan.query_string == ""
        assert not plan.is_searchable
        assert plan.assessment == "Issues are not searchable here"

    def test_none_target_discards_query(self, sanitizer):
        plan = sanitizer.parse(plan_json(endpoint="none", constructed_url="something"))
        assert plan.query_string == ""

    def test_unknown_quality_dropped(self, sanitizer):
        plan = sanitizer.parse(plan_json(quality="excellent"))
        assert plan.quality is None

    def test_missing_evaluation_is_allowed(self, sanitizer):
        plan = sanitizer.parse(plan_json(quality=None))
        assert plan.quality is None

    def test_plan_fields_mapped(self, sanitizer):
        plan = sanitizer.parse(plan_json())
        assert plan.rationale == "Looking for hook implementations"
        assert plan.assessment == "Query maps well onto code search"
        assert plan.intent == "Find React form validation hooks"

    @pytest.mark.parametrize("missing", ["endpoint", "constructed_url", "reasoning", "feedback", "intention"])
    def test_missing_field_rejects_whole_plan(self, sanitizer, missing):
        payload = json.loads(plan_json())
        del payload["decision_details"][missing]
        with pytest.raises(PlanParseError) as exc_info:
            sanitizer.parse(json.dumps(payload))
        assert exc_info.value.raw_text == json.dumps(payload)

    def test_unknown_endpoint_rejected(self, sanitizer):
        with pytest.raises(PlanParseError):
            sanitizer.parse(plan_json(endpoint="issues"))

    def test_empty_query_for_searchable_target_rejected(self, sanitizer):
        with pytest.raises(PlanParseError):
            sanitizer.parse(plan_json(constructed_url="   "))

    def test_missing_decision_details_rejected(self, sanitizer):
        with pytest.raises(PlanParseError):
            sanitizer.parse('{"evaluation": {"quality": "high"}}')

    def test_prose_response_rejected(self, sanitizer):
        with pytest.raises(PlanParseError) as exc_info:
            sanitizer.parse("Sorry, I cannot help with that.")
        assert exc_info.value.raw_text == "Sorry, I cannot help with that."
