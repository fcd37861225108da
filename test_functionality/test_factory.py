"""Agent assembly: variants, isolation between agents, identity resolution."""
import asyncio
from dataclasses import replace

import pytest

from domain.exceptions import ConfigurationError
from factory import ServiceFactory

from conftest import FakeChatModel, FakeGateway, FakeIndex, FakeSigner

DEFAULT_TOOLS = [
    "summarizeTranscript",
    "draftSlackMessage",
    "confirmAndSendSlackMessage",
    "draftSalesforceContact",
    "confirmAndCreateSalesforceContact",
    "draftSalesforceOpportunity",
    "confirmAndCreateSalesforceOpportunity",
    "draftAsanaTask",
    "confirmAndCreateAsanaTask",
    "getAsanaMemberId",
    "getSdrSchedule",
    "convertUtcDatetimeToPstDatetime",
    "createMeeting",
    "sendSlackMeetingNotification",
    "createSalesforceTask",
    "createNotionPage",
    "queryEngineTool",
]


@pytest.fixture
def factory(settings, corpus):
    return ServiceFactory(
        settings,
        gateway=FakeGateway(),
        signer=FakeSigner(),
        index=FakeIndex(corpus),
        llm=FakeChatModel(),
    )


def test_customer_service_variant_is_retrieval_only(factory):
    agent = factory.create_agent("alice", variant="customer_service")
    assert agent.tools.names() == ["queryEngineTool"]
    assert agent.tools.get("queryEngineTool").description == "Look up user queries for relevant information"


def test_default_variant_has_every_tool(factory):
    agent = factory.create_agent("alice", variant="default")
    assert agent.tools.names() == DEFAULT_TOOLS
    assert agent.tools.get("queryEngineTool").description == "query engine to pinecone database"


def test_variant_defaults_to_settings(settings, corpus):
    factory = ServiceFactory(
        replace(settings, agent_variant="customer_service"),
        gateway=FakeGateway(), signer=FakeSigner(), index=FakeIndex(corpus), llm=FakeChatModel(),
    )
    assert factory.create_agent("alice").tools.names() == ["queryEngineTool"]


def test_unknown_variant_rejected(factory):
    with pytest.raises(ConfigurationError):
        factory.create_agent("alice", variant="sales")


def test_empty_identity_rejected(factory):
    with pytest.raises(ConfigurationError):
        factory.create_agent("")


def test_retrieval_uses_configured_top_k(settings, corpus):
    index = FakeIndex(corpus)
    factory = ServiceFactory(replace(settings, top_k=5), index=index, llm=FakeChatModel())
    factory.create_agent("alice", ["d1"], variant="customer_service")
    assert index.engines[0].similarity_top_k == 5


def test_two_agents_have_identical_schemas_but_separate_state(factory):
    a = factory.create_agent("alice", ["d1"], variant="default")
    b = factory.create_agent("bob", ["d2"], variant="default")

    assert a.tools.to_function_schemas() == b.tools.to_function_schemas()
    assert a.tools is not b.tools
    assert a.ctx.drafts is not b.ctx.drafts
    assert a.memory is not b.memory

    assert a.tools.get("queryEngineTool").query_engine.filters.document_ids == frozenset({"d1"})
    assert b.tools.get("queryEngineTool").query_engine.filters.document_ids == frozenset({"d2"})


def test_draft_in_one_agent_cannot_be_confirmed_in_another(factory):
    a = factory.create_agent("alice", variant="default")
    b = factory.create_agent("alice", variant="default")

    asyncio.run(a.tools.invoke("draftSlackMessage", a.ctx, {"message": "hi"}))
    outcome = asyncio.run(b.tools.invoke(
        "confirmAndSendSlackMessage", b.ctx, {"message": "hi", "confirmation": "yes"},
    ))
    assert not outcome.ok


def test_changing_document_list_after_build_has_no_effect(factory):
    ids = ["d1"]
    agent = factory.create_agent("alice", ids, variant="customer_service")
    ids.append("d3")
    assert agent.tools.get("queryEngineTool").query_engine.filters.document_ids == frozenset({"d1"})


def test_identity_resolved_once_and_used_for_every_call(settings, corpus):
    gateway, signer = FakeGateway(), FakeSigner()
    factory = ServiceFactory(settings, gateway=gateway, signer=signer, index=FakeIndex(corpus), llm=FakeChatModel())
    calls = []

    def provider():
        calls.append(1)
        return "carol"

    agent = factory.create_agent(provider, variant="default")
    asyncio.run(agent.tools.invoke("getAsanaMemberId", agent.ctx, {"name": "Ana"}))
    asyncio.run(agent.tools.invoke("createNotionPage", agent.ctx, {"title": "t", "text": "x"}))

    assert len(calls) == 1
    assert signer.signed == ["carol", "carol"]
    assert [token for _, _, token in gateway.calls] == ["token-for-carol", "token-for-carol"]


def test_require_drafts_setting_reaches_confirm_tools(settings, corpus):
    gateway = FakeGateway()
    factory = ServiceFactory(
        replace(settings, require_drafts=False),
        gateway=gateway, signer=FakeSigner(), index=FakeIndex(corpus), llm=FakeChatModel(),
    )
    agent = factory.create_agent("alice", variant="default")
    outcome = asyncio.run(agent.tools.invoke(
        "confirmAndSendSlackMessage", agent.ctx, {"message": "hi", "confirmation": "yes"},
    ))
    assert outcome.ok
    assert len(gateway.calls) == 1


def test_uninitialized_factory_refuses_to_build(settings):
    factory = ServiceFactory(settings, llm=FakeChatModel())
    with pytest.raises(RuntimeError):
        factory.create_agent("alice")


def test_prompt_mentions_only_registered_tools(factory):
    cs = factory.create_agent("alice", variant="customer_service")
    full = factory.create_agent("alice", variant="default")
    assert "confirmAnd" not in cs.system_prompt
    assert "getSdrSchedule" in full.system_prompt
    assert "getAsanaMemberId" in full.system_prompt
