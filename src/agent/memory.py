"""
agent.memory - Per-agent conversation memory.

Stores messages as a plain list[BaseMessage], bounded to the most recent
max_messages. Held in process memory only; each agent instance gets its
own memory.
"""

from __future__ import annotations

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage


class ConversationMemory:
    """Per-conversation memory. NOT global; each agent gets its own instance."""

    def __init__(self, max_messages: int = 50):
        self._max_messages = max_messages
        self._messages: list[BaseMessage] = []

    @property
    def messages(self) -> list[BaseMessage]:
        """Current history, oldest first."""
        return list(self._messages)

    def add_user_message(self, content: str) -> None:
        self._messages.append(HumanMessage(content=content))
        self._trim()

    def add_ai_message(self, content: str) -> None:
        self._messages.append(AIMessage(content=content))
        self._trim()

    def _trim(self) -> None:
        if len(self._messages) > self._max_messages:
            self._messages = self._messages[-self._max_messages:]

    def clear(self) -> None:
        """Clear all conversation history."""
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)
