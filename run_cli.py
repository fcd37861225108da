"""
Run the Business Action Assistant CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    chat       Interactive chat session (--user, --doc, --variant)
    ask        One-shot question        (--user, --doc, --variant)
    tools      List the tools an agent variant exposes (--json for schemas)
    index      build [--rebuild] | add PATH [--doc-id ID] [--public]

Examples:
    python run_cli.py index build
    python run_cli.py ask "Summarize our refund policy" --user alice
    python run_cli.py chat --user alice --doc acme-contract

Environment variables (all optional):
    LLM_PROVIDER            "openai", "groq", or "ollama" (default: openai)
    LLM_MODEL_OPENAI        Model name when LLM_PROVIDER=openai (default: gpt-4o-mini)
    LLM_MODEL_GROQ          Model name when LLM_PROVIDER=groq (default: llama-3.3-70b-versatile)
    LLM_MODEL_OLLAMA        Model name when LLM_PROVIDER=ollama (default: llama3.2)
    OPENAI_API_KEY          Required when LLM_PROVIDER=openai
    GROQ_API_KEY            Required when LLM_PROVIDER=groq
    OLLAMA_BASE_URL         Ollama server URL (default: http://localhost:11434/)
    TOP_K                   Passages returned per lookup (default: 3)
    AGENT_VARIANT           "default" or "customer_service" (default: default)
    INTEGRATIONS_BASE_URL   Slack/Salesforce/Asana/Calendar/Notion backend
    JWT_SECRET              Secret used to sign per-call credentials
    DRAFT_TTL_SECONDS       How long a draft can be confirmed (default: 900)
    REQUIRE_DRAFTS          Refuse confirmations without a live draft (default: true)
    DATA_DIR                Documents to index (default: data/)
    ASSISTANT_USER_ID       Default for --user
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app

if __name__ == "__main__":
    app()
