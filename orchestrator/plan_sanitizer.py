import json
import re
from typing import Any

from models.errors import PlanParseError
from models.search_plan import PLAN_QUALITIES, SearchPlan, SearchTarget
from utils.logger import get_logger

logger = get_logger(__name__)

_FENCE_OPEN = re.compile(r"^\s*```[a-zA-Z0-9_-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```\s*$")
_QUALIFIER = re.compile(r"^-?[a-zA-Z_]+:[^:\s]\S*$")
# A `+` joining two words, as in `q=house+robber`; leaves `c++` alone
_PLUS_SEPARATOR = re.compile(r"(?<=[\w\"'])\+(?=[\w\"'-])")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```) and trim."""
    cleaned = (text or "").strip()
    cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_object(text: str) -> dict[str, Any]:
    """
    Sanitize a model response and parse it as exactly one JSON object.

    Raises:
        ValueError: the cleaned text is not a single JSON object
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        raise ValueError("empty response")
    payload = json.loads(cleaned)
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


def normalize_query_string(query: str) -> str:
    """
    Normalize a planner-built GitHub search query.

    Drops a leading `q=`, turns `+` word separators into spaces, places free terms
    before qualifiers, and removes bare terms that repeat the `language:`
    qualifier value.
    """
    text = (query or "").strip()
    if text.lower().startswith("q="):
        text = text[2:]
    text = _PLUS_SEPARATOR.sub(" ", text)

    tokens = text.split()
    qualifiers = [t for t in tokens if _QUALIFIER.match(t) and not t.startswith("http")]
    terms = [t for t in tokens if t not in qualifiers]

    languages = {
        q.split(":", 1)[1].lower() for q in qualifiers if q.lower().startswith("language:")
    }
    if languages:
        terms = [t for t in terms if t.lower() not in languages]

    return " ".join(terms + qualifiers)


def _require_text(section: dict[str, Any], key: str, allow_empty: bool = False) -> str:
    value = section.get(key)
    if not isinstance(value, str):
        raise PlanParseError(f"Plan field '{key}' is missing or not a string")
    value = value.strip()
    if not value and not allow_empty:
        raise PlanParseError(f"Plan field '{key}' is empty")
    return value


class PlanSanitizer:
    """Turns raw planning-service text into a validated SearchPlan."""

    def parse(self, raw_text: str) -> SearchPlan:
        """
        Parse a planner response; either the whole plan is valid or PlanParseError is raised.
        """
        try:
            payload = parse_json_object(raw_text)
        except ValueError as e:
            logger.warning(
                "Failed to parse planning response",
                extra={"extra_fields": {"error": str(e), "response_head": (raw_text or "")[:200]}},
            )
            raise PlanParseError(f"Failed to parse planning response: {e}", raw_text=raw_text) from e

        try:
            return self._build_plan(payload)
        except PlanParseError as e:
            e.raw_text = raw_text
            logger.warning(
                "Planning response failed validation",
                extra={"extra_fields": {"error": e.message}},
            )
            raise

    def _build_plan(self, payload: dict[str, Any]) -> SearchPlan:
        details = payload.get("decision_details")
        if not isinstance(details, dict):
            raise PlanParseError("Plan is missing 'decision_details'")

        endpoint = details.get("endpoint")
        try:
            target = SearchTarget.from_wire(endpoint if isinstance(endpoint, str) else "")
        except ValueError as e:
            raise PlanParseError(f"Invalid plan endpoint: {endpoint!r}") from e

        query_string = normalize_query_string(
            _require_text(details, "constructed_url", allow_empty=True)
        )
        if target is not SearchTarget.NONE and not query_string:
            raise PlanParseError("Plan has an empty query string")

        quality = None
        evaluation = payload.get("evaluation")
        if isinstance(evaluation, dict) and isinstance(evaluation.get("quality"), str):
            candidate = evaluation["quality"].strip().lower()
            quality = candidate if candidate in PLAN_QUALITIES else None

        return SearchPlan(
            target=target,
            query_string=query_string if target is not SearchTarget.NONE else "",
            rationale=_require_text(details, "reasoning", allow_empty=True),
            assessment=_require_text(details, "feedback", allow_empty=True),
            intent=_require_text(details, "intention", allow_empty=True),
            quality=quality,
        )
