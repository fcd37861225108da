"""Tool-calling loop with a scripted chat model."""
import asyncio

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from agent.executor import ERROR_REPLY, ITERATION_LIMIT_REPLY, AgentExecutor, message_text
from agent.memory import ConversationMemory
from agent.tools.registry import ToolRegistry
from agent.tools.slack import ConfirmAndSendSlackMessageTool, DraftSlackMessageTool

from conftest import FakeChatModel, make_ctx


def tool_call(name, args, call_id):
    return AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": call_id}])


def build(llm, gateway, signer, max_iterations=8, memory=None):
    registry = ToolRegistry()
    registry.register(DraftSlackMessageTool())
    registry.register(ConfirmAndSendSlackMessageTool(gateway, signer))
    return AgentExecutor(
        llm=llm,
        tools=registry,
        ctx=make_ctx(),
        memory=memory or ConversationMemory(),
        system_prompt="You are a test assistant.",
        max_iterations=max_iterations,
    )


def test_plain_answer_without_tools(gateway, signer):
    llm = FakeChatModel(default="Hello!")
    agent = build(llm, gateway, signer)

    assert asyncio.run(agent.run("hi")) == "Hello!"
    assert [s["function"]["name"] for s in llm.bound_tools] == ["draftSlackMessage", "confirmAndSendSlackMessage"]
    # schema surface reaches the model unchanged
    confirm = llm.bound_tools[1]["function"]["parameters"]
    assert list(confirm["properties"]) == ["message", "confirmation"]
    assert confirm["required"] == ["confirmation", "message"]
    first = llm.seen[0]
    assert isinstance(first[0], SystemMessage) and first[0].content == "You are a test assistant."
    assert isinstance(first[-1], HumanMessage) and first[-1].content == "hi"


def test_tool_outcomes_are_fed_back(gateway, signer):
    llm = FakeChatModel([
        tool_call("draftSlackMessage", {"message": "Launch Friday"}, "call_1"),
        AIMessage(content="Here is the draft. Send it?"),
    ])
    agent = build(llm, gateway, signer)

    reply = asyncio.run(agent.run("Tell the team we launch Friday"))
    assert reply == "Here is the draft. Send it?"

    second_turn = llm.seen[1]
    tool_msg = second_turn[-1]
    assert isinstance(tool_msg, ToolMessage)
    assert tool_msg.content == "Message: Launch Friday"
    assert tool_msg.tool_call_id == "call_1"
    assert gateway.calls == []


def test_draft_survives_to_next_turn(gateway, signer):
    llm = FakeChatModel([
        tool_call("draftSlackMessage", {"message": "Launch Friday"}, "call_1"),
        AIMessage(content="Send it?"),
        tool_call("confirmAndSendSlackMessage", {"message": "Launch Friday", "confirmation": "yes"}, "call_2"),
        AIMessage(content="Sent."),
    ])
    agent = build(llm, gateway, signer)

    asyncio.run(agent.run("Tell the team we launch Friday"))
    assert asyncio.run(agent.run("yes")) == "Sent."
    assert gateway.calls == [("send_slack", "Launch Friday", "token-for-alice")]
    assert len(agent.memory) == 4
    # history of the first turn is replayed on the second
    assert [m.content for m in llm.seen[2][1:3]] == ["Tell the team we launch Friday", "Send it?"]


def test_unknown_tool_is_reported_to_model(gateway, signer):
    llm = FakeChatModel([tool_call("deleteEverything", {}, "call_x"), AIMessage(content="Sorry.")])
    agent = build(llm, gateway, signer)
    asyncio.run(agent.run("do it"))
    assert llm.seen[1][-1].content.startswith("deleteEverything is not a valid tool")


def test_invalid_arguments_reach_registry_not_runtime(gateway, signer):
    llm = FakeChatModel([
        tool_call("confirmAndSendSlackMessage", {"confirmation": "yes"}, "call_1"),
        AIMessage(content="Which message?"),
    ])
    agent = build(llm, gateway, signer)

    assert asyncio.run(agent.run("send it")) == "Which message?"
    assert llm.seen[1][-1].content.startswith("Invalid arguments for confirmAndSendSlackMessage")
    assert gateway.calls == []


def test_iteration_limit(gateway, signer):
    llm = FakeChatModel([tool_call("draftSlackMessage", {"message": str(i)}, f"c{i}") for i in range(5)])
    agent = build(llm, gateway, signer, max_iterations=3)
    assert asyncio.run(agent.run("loop")) == ITERATION_LIMIT_REPLY


def test_model_error_returns_apology(gateway, signer):
    llm = FakeChatModel([RuntimeError("rate limited")])
    agent = build(llm, gateway, signer)
    assert asyncio.run(agent.run("hi")) == ERROR_REPLY
    assert len(agent.memory) == 2


def test_memory_is_bounded():
    memory = ConversationMemory(max_messages=3)
    for i in range(4):
        memory.add_user_message(f"u{i}")
    assert [m.content for m in memory.messages] == ["u1", "u2", "u3"]


def test_message_text_handles_content_blocks():
    assert message_text("plain") == "plain"
    assert message_text([{"type": "text", "text": "a"}, {"type": "tool_use"}, "b"]) == "ab"
    assert message_text(None) == ""
