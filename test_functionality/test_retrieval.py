import asyncio

import pytest

from agent.tools.registry import ToolRegistry
from agent.tools.retrieval import NO_RESULTS, RetrievalTool
from domain.exceptions import RetrievalError
from infrastructure.rag.document_index import QueryEngine
from infrastructure.rag.filters import PermissionFilter, generate_filters

from conftest import FakeVectorStore, doc


def test_scoped_filter_only_allows_listed_documents():
    f = generate_filters(["d1", "d2"])
    assert f.allows({"doc_id": "d1", "private": "true"})
    assert f.allows({"doc_id": "d2"})
    assert not f.allows({"doc_id": "d3", "private": "true"})
    assert not f.allows({"doc_id": "pricing", "private": "false"})


def test_empty_scope_only_allows_public_documents():
    f = generate_filters(None)
    assert not f.is_scoped
    assert f.allows({"doc_id": "pricing", "private": "false"})
    assert f.allows({"doc_id": "legacy"})
    assert not f.allows({"doc_id": "d1", "private": "true"})
    assert not f.allows({"doc_id": "d1", "private": True})
    assert generate_filters([" ", ""]) == PermissionFilter()


def test_filter_copies_caller_list():
    ids = ["d1"]
    f = generate_filters(ids)
    ids.append("d2")
    assert f.document_ids == frozenset({"d1"})


def test_top_k_passages_from_scoped_documents(corpus):
    engine = QueryEngine(corpus, similarity_top_k=3, pre_filters=generate_filters(["d1", "d2"]))
    passages = asyncio.run(engine.query("acme"))

    assert len(passages) == 3
    assert {p.doc_id for p in passages} <= {"d1", "d2"}
    assert [p.text for p in passages] == [
        "Acme contract renewal terms",
        "Globex onboarding notes",
        "Acme contract signatories",
    ]
    # over-fetches so the filter does not starve the top-K
    assert corpus.requests == [("acme", 30)]


def test_public_scope_skips_private_documents(corpus):
    engine = QueryEngine(corpus, similarity_top_k=3, pre_filters=generate_filters([]))
    passages = engine.retrieve("policy")
    assert [p.doc_id for p in passages] == ["pricing", "refunds"]


def test_scoped_document_ranked_far_down_is_still_found():
    store = FakeVectorStore(
        [doc(f"Public article {i}", f"public-{i}") for i in range(40)]
        + [doc("Acme contract renewal terms", "d1", private=True)]
    )
    engine = QueryEngine(store, similarity_top_k=3, pre_filters=generate_filters(["d1"]))

    assert [p.doc_id for p in engine.retrieve("acme")] == ["d1"]
    # window doubles until the store runs out
    assert [k for _, k in store.requests] == [30, 60]


def test_invalid_top_k_rejected(corpus):
    with pytest.raises(ValueError):
        QueryEngine(corpus, similarity_top_k=0, pre_filters=PermissionFilter())


def test_uninitialized_index_raises():
    engine = QueryEngine(None, similarity_top_k=3, pre_filters=PermissionFilter())
    with pytest.raises(RetrievalError):
        engine.retrieve("anything")


def test_retrieval_tool_formats_passages(corpus, ctx):
    engine = QueryEngine(corpus, similarity_top_k=2, pre_filters=generate_filters(["d2"]))
    registry = ToolRegistry()
    registry.register(RetrievalTool(engine, description="Look up user queries for relevant information"))

    outcome = asyncio.run(registry.invoke("queryEngineTool", ctx, {"query": "globex"}))
    assert outcome.ok
    assert outcome.text == (
        "[1] (source: d2)\nGlobex onboarding notes\n\n"
        "[2] (source: d2)\nGlobex escalation contacts"
    )


def test_retrieval_tool_no_results(ctx):
    engine = QueryEngine(FakeVectorStore([doc("secret", "d9", private=True)]), 3, generate_filters(["d1"]))
    outcome = asyncio.run(RetrievalTool(engine, description="x").execute(ctx, query="q"))
    assert outcome.ok and outcome.text == NO_RESULTS


def test_retrieval_error_becomes_failure(ctx):
    engine = QueryEngine(None, 3, PermissionFilter())
    registry = ToolRegistry()
    registry.register(RetrievalTool(engine, description="x"))
    outcome = asyncio.run(registry.invoke("queryEngineTool", ctx, {"query": "q"}))
    assert not outcome.ok
    assert outcome.text == "The queryEngineTool tool could not complete the request."
