"""
agent.prompt - System prompt for the business action agent.

Built from the registered tools: a rule is only included when the tools
it talks about are registered, so the customer service agent never hears
about Slack or Salesforce.
"""

from __future__ import annotations

from agent.tools.registry import ToolRegistry

_BASE = (
    "You are a helpful assistant for a sales and customer-success team. "
    "Answer questions using the knowledge base when they concern company, product "
    "or customer information, and say so plainly when the knowledge base has no answer."
)

_DRAFT_RULES = (
    "\n\nACTIONS THAT CHANGE EXTERNAL SYSTEMS:\n"
    "- Always call the matching draft tool first and show the user the draft.\n"
    "- Only call a confirmAnd... tool after the user has explicitly approved that draft "
    "in their latest message. Pass their approval as 'confirmation'.\n"
    "- If the user asks for changes, draft again before confirming.\n"
    "- If a tool reports a failure, tell the user what failed. Do not retry on your own."
)

_ASANA_RULE = (
    "\n- For Asana tasks, resolve an assignee's name with getAsanaMemberId before confirming. "
    "If it returns 'Cannot be found', ask the user to pick someone from the team list."
)

_SCHEDULING_RULES = (
    "\n\nSCHEDULING A MEETING WITH THE SDR:\n"
    "1. Call getSdrSchedule; the times returned are when the SDR is BUSY, in UTC.\n"
    "2. Convert them with convertUtcDatetimeToPstDatetime and offer free one-hour slots in Pacific time.\n"
    "3. Ask for the attendee's email, then call createMeeting.\n"
    "4. After the meeting exists, call sendSlackMeetingNotification and createSalesforceTask."
)

_TRANSCRIPT_RULE = (
    "\n\nWhen given a meeting transcript, summarize it and offer to draft a Salesforce "
    "Opportunity, a Slack message, or an Asana task from it."
)


def build_system_prompt(registry: ToolRegistry) -> str:
    """Build the system prompt for the tools registered in this agent."""
    names = set(registry.names())

    parts = [_BASE]
    if any(n.startswith("confirmAnd") for n in names):
        parts.append(_DRAFT_RULES)
        if "getAsanaMemberId" in names:
            parts.append(_ASANA_RULE)
    if "getSdrSchedule" in names and "createMeeting" in names:
        parts.append(_SCHEDULING_RULES)
    if "summarizeTranscript" in names:
        parts.append(_TRANSCRIPT_RULE)
    return "".join(parts)
