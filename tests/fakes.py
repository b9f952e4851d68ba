"""
Offline stand-ins for the planning service and the GitHub API.

FakeLLMClient follows the BaseAIClient contract (never raises, always returns a
UnifiedResponse). GitHubStub serves canned JSON through httpx.MockTransport so
the real GitHubClient code path is exercised end to end.
"""

import base64
import json
import threading
import time
from collections.abc import Callable
from typing import Any

import httpx

from api.base_client import BaseAIClient
from api.github_client import GitHubClient
from models.unified_response import NormalizedError, TokenUsage, UnifiedResponse

API_ROOT = "https://api.github.com"


class FakeLLMClient(BaseAIClient):
    provider_name = "fake"

    def __init__(
        self,
        responses: list[Any] | None = None,
        error: NormalizedError | None = None,
        delay_s: float = 0.0,
    ):
        # Each response is either text or a callable(prompt) -> text
        self.responses = list(responses or [])
        self.error = error
        self.delay_s = delay_s
        self.model_name = "fake-model"
        self.prompts: list[str] = []
        self.calls: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    def get_completion(self, prompt: str, **kwargs) -> UnifiedResponse:
        with self._lock:
            self.prompts.append(prompt)
            self.calls.append(kwargs)
            index = len(self.prompts) - 1

        if self.delay_s:
            time.sleep(self.delay_s)

        if self.error is not None:
            return self._create_error_response("req-fake", self.error, 1, self.model_name)

        if self.responses:
            response = self.responses[min(index, len(self.responses) - 1)]
        else:
            response = ""
        text = response(prompt) if callable(response) else response

        return UnifiedResponse(
            request_id=f"req-fake-{index}",
            text=text,
            provider=self.provider_name,
            model=self.model_name,
            latency_ms=1,
            token_usage=TokenUsage(prompt_tokens=10, completion_tokens=20, total_tokens=30),
            finish_reason="stop",
        )


class GitHubStub:
    """
    Route table for httpx.MockTransport keyed by URL path.

    A route value is either a dict/list (served as 200 JSON), an httpx.Response,
    or a callable(request) -> httpx.Response. Unknown paths return 404.
    """

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes: dict[str, Any] = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    def client(self, token: str | None = "test-token") -> GitHubClient:
        return GitHubClient(
            token=token, base_url=API_ROOT, transport=httpx.MockTransport(self.handler)
        )

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def search_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith("/search/")]


# --- Payload builders ---


def repo_payload(full_name: str = "acme/forms", stars: int = 42, **overrides) -> dict[str, Any]:
    owner, name = full_name.split("/", 1)
    payload = {
        "name": name,
        "full_name": full_name,
        "description": f"{name} library",
        "html_url": f"https://github.com/{full_name}",
        "url": f"{API_ROOT}/repos/{full_name}",
        "owner": {"login": owner},
        "stargazers_count": stars,
        "forks_count": 7,
        "language": "JavaScript",
        "score": 1.0,
    }
    payload.update(overrides)
    return payload


def contents_path(full_name: str, path: str) -> str:
    return f"/repos/{full_name}/contents/{path}"


def code_item(
    index: int, full_name: str = "acme/forms", path: str | None = None, fragment: str | None = None
) -> dict[str, Any]:
    path = path or f"src/hooks/useForm{index}.js"
    item = {
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "sha": f"sha{index}",
        "url": f"{API_ROOT}{contents_path(full_name, path)}",
        "html_url": f"https://github.com/{full_name}/blob/main/{path}",
        "score": float(100 - index),
        "repository": repo_payload(full_name),
    }
    if fragment is not None:
        item["text_matches"] = [{"fragment": fragment}]
    return item


def search_payload(items: list[dict[str, Any]], total_count: int | None = None) -> dict[str, Any]:
    return {
        "total_count": len(items) if total_count is None else total_count,
        "incomplete_results": False,
        "items": items,
    }


def contents_payload(text: str) -> dict[str, Any]:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    # GitHub wraps base64 bodies at 60 columns
    wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
    return {"type": "file", "encoding": "base64", "content": wrapped}


def plan_json(
    endpoint: str = "code",
    constructed_url: str = "useForm validation language:javascript",
    quality: str | None = "high",
    fenced: bool = False,
    **details,
) -> str:
    decision = {
        "endpoint": endpoint,
        "constructed_url": constructed_url,
        "feedback": "Query maps well onto code search",
        "reasoning": "Looking for hook implementations",
        "intention": "Find React form validation hooks",
    }
    decision.update(details)
    payload: dict[str, Any] = {"decision_details": decision}
    if quality is not None:
        payload["evaluation"] = {"quality": quality}
    text = json.dumps(payload, indent=2)
    return f"```json\n{text}\n```" if fenced else text


def analysis_json(score: Any = 80, **overrides) -> str:
    payload = {
        "insights": "Both snippets debounce user input.",
        "technicalDetails": "Uses setTimeout and clearTimeout.",
        "implementationApproach": "Target wraps the timer in a hook.",
        "bestPractices": "Cleans up the timer on unmount.",
        "similarityScore": score,
    }
    payload.update(overrides)
    return json.dumps(payload)


def error_response(status: int, message: str, headers: dict[str, str] | None = None) -> Callable:
    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"message": message}, headers=headers)

    return respond
