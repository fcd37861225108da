"""
agent.executor - Agent execution engine.

Runs the LLM + tool-calling loop for one agent instance on LangChain's
tool-calling agent. Tool selection is the chat model's; every call it
makes goes through ToolRegistry.invoke, and the outcome text comes back
to it as the tool observation until it answers in text.
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_classic.agents import AgentExecutor as LangChainAgentExecutor
from langchain_classic.agents import create_tool_calling_agent
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import SystemMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from application.context import SessionContext
from agent.memory import ConversationMemory
from agent.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

ERROR_REPLY = (
    "I'm sorry, I ran into a problem while processing your request. "
    "Please try again, or rephrase your question."
)
ITERATION_LIMIT_REPLY = (
    "I wasn't able to finish that request in a reasonable number of steps. "
    "Could you break it into smaller parts?"
)


class AgentExecutor:
    """Runs the LLM + tool selection loop.

    Constructed by factory.py with all dependencies injected. The session
    context, tools and memory belong to this instance alone.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        tools: ToolRegistry,
        ctx: SessionContext,
        memory: ConversationMemory,
        system_prompt: str,
        max_iterations: int = 8,
    ):
        self._llm = llm
        self._tools = tools
        self._ctx = ctx
        self._memory = memory
        self._system_prompt = system_prompt
        self._max_iterations = max_iterations
        self._executor: LangChainAgentExecutor | None = None
        self._stopped_output: str | None = None

    @property
    def ctx(self) -> SessionContext:
        return self._ctx

    @property
    def tools(self) -> ToolRegistry:
        return self._tools

    @property
    def memory(self) -> ConversationMemory:
        return self._memory

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def _build_executor(self) -> LangChainAgentExecutor:
        """Build the LangChain agent executor with tools bound to this context."""
        lc_tools = self._tools.to_langchain_tools(self._ctx)

        # A message, not a template: the prompt may contain braces.
        prompt = ChatPromptTemplate.from_messages([
            SystemMessage(content=self._system_prompt),
            MessagesPlaceholder(variable_name="chat_history"),
            ("human", "{input}"),
            MessagesPlaceholder(variable_name="agent_scratchpad"),
        ])

        agent = create_tool_calling_agent(
            llm=self._llm,
            tools=lc_tools,
            prompt=prompt,
        )

        executor = LangChainAgentExecutor(
            agent=agent,
            tools=lc_tools,
            handle_parsing_errors=True,
            max_iterations=self._max_iterations,
            early_stopping_method="force",
            return_intermediate_steps=True,
        )
        self._stopped_output = executor.agent.return_stopped_response(
            "force", [],
        ).return_values["output"]
        return executor

    async def run(self, user_input: str) -> str:
        """Process a user message and return the agent's response.

        Never raises: model errors produce an apology, and tool errors were
        already turned into Failure outcomes by the registry.
        """
        ctx = self._ctx
        ctx.new_request()
        logger.info(
            "Agent processing (user=%s, conversation=%s): %s",
            ctx.user_id, ctx.conversation_id, user_input[:80],
        )

        if self._executor is None:
            self._executor = self._build_executor()

        try:
            response = await self._executor.ainvoke(
                {"input": user_input, "chat_history": self._memory.messages},
            )
        except Exception:
            logger.exception(
                "Agent execution failed for user %s, returning friendly error", ctx.user_id,
            )
            output = ERROR_REPLY
        else:
            output = self._final_output(response)

        self._memory.add_user_message(user_input)
        self._memory.add_ai_message(output)
        logger.debug("Agent response: %s", output[:100])
        return output

    def _final_output(self, response: dict[str, Any]) -> str:
        steps = response.get("intermediate_steps", [])
        for action, observation in steps:
            logger.info(
                "Step: tool=%s observation=%s",
                getattr(action, "tool", ""), str(observation)[:80],
            )

        output = response.get("output")
        if output == self._stopped_output:
            logger.warning("Agent hit max_iterations=%d", self._max_iterations)
            return ITERATION_LIMIT_REPLY

        logger.info("Agent finished: %d tool step(s)", len(steps))
        return message_text(output) or "I couldn't generate a response."


def message_text(content: Any) -> str:
    """Plain text of a message whose content is a string or a list of content blocks."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return str(content or "")
