import asyncio

import pytest

from fakes import code_item, repo_payload, search_payload
from models.hits import ContentHit, RepositoryHit
from models.search_plan import SearchPlan, SearchTarget
from orchestrator.search_dispatcher import SearchDispatcher


def run(coro):
    return asyncio.run(coro)


def make_plan(target: SearchTarget, query_string: str) -> SearchPlan:
    return SearchPlan(
        target=target,
        query_string=query_string,
        rationale="r",
        assessment="a",
        intent="i",
    )


async def _dispatch(stub, plan, per_page=None):
    async with stub.client() as github:
        return await SearchDispatcher(github, per_page=per_page).dispatch(plan)


def test_content_plan_hits_code_endpoint(github_stub):
    github_stub.routes["/search/code"] = search_payload(
        [code_item(0, fragment="const useForm = () => {"), code_item(1)], total_count=120
    )

    results = run(_dispatch(github_stub, make_plan(SearchTarget.CONTENT, "useForm language:javascript")))

    assert github_stub.paths() == ["/search/code"]
    assert results.target is SearchTarget.CONTENT
    assert results.total_count == 120
    assert len(results) == 2
    first = results.hits[0]
    assert isinstance(first, ContentHit)
    assert first.path == "src/hooks/useForm0.js"
    assert first.repository.full_name == "acme/forms"
    assert first.text_fragment == "const useForm = () => {"
    assert results.hits[1].text_fragment is None


def test_repository_plan_hits_repositories_endpoint(github_stub):
    github_stub.routes["/search/repositories"] = search_payload(
        [repo_payload("octocat/hello-world", stars=1500)]
    )

    results = run(_dispatch(github_stub, make_plan(SearchTarget.REPOSITORY, "user:octocat")))

    assert github_stub.paths() == ["/search/repositories"]
    hit = results.hits[0]
    assert isinstance(hit, RepositoryHit)
    assert hit.full_name == "octocat/hello-world"
    assert hit.owner == "octocat"
    assert hit.stars == 1500
    assert results.content_hits == []


def test_empty_items(github_stub):
    github_stub.routes["/search/code"] = {"total_count": 0, "incomplete_results": False, "items": []}

    results = run(_dispatch(github_stub, make_plan(SearchTarget.CONTENT, "nothing matches this")))

    assert len(results) == 0
    assert results.total_count == 0


def test_missing_items_and_total_count(github_stub):
    github_stub.routes["/search/code"] = {}

    results = run(_dispatch(github_stub, make_plan(SearchTarget.CONTENT, "x")))

    assert results.hits == ()
    assert results.total_count == 0
    assert results.incomplete_results is False


def test_malformed_items_skipped_in_order(github_stub):
    broken = code_item(1)
    del broken["path"]
    github_stub.routes["/search/code"] = search_payload(
        [code_item(0), broken, "not-an-object", code_item(3)], total_count=4
    )

    results = run(_dispatch(github_stub, make_plan(SearchTarget.CONTENT, "useForm")))

    assert [h.sha for h in results.hits] == ["sha0", "sha3"]
    assert results.total_count == 4


def test_per_page_forwarded(github_stub):
    github_stub.routes["/search/code"] = search_payload([])

    run(_dispatch(github_stub, make_plan(SearchTarget.CONTENT, "useForm"), per_page=50))

    assert github_stub.requests[0].url.params["per_page"] == "50"


def test_none_plan_cannot_be_dispatched(github_stub):
    with pytest.raises(ValueError):
        run(_dispatch(github_stub, make_plan(SearchTarget.NONE, "")))
    assert github_stub.requests == []
