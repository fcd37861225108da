"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment or passed
explicitly in tests. Only adapters call from_env(); everything below them
receives a Settings instance, so no tool or index reads the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3

AGENT_VARIANTS = ("default", "customer_service")


def parse_top_k(raw: Optional[str], default: int = DEFAULT_TOP_K) -> int:
    """Parse the TOP_K setting. Anything unusable falls back to the default."""
    if raw is None or not str(raw).strip():
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        logger.warning("Ignoring non-numeric TOP_K=%r - using %d", raw, default)
        return default
    if value < 1:
        logger.warning("Ignoring non-positive TOP_K=%r - using %d", raw, default)
        return default
    return value


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _parse_int(raw: Optional[str], default: int) -> int:
    try:
        return int(raw) if raw is not None and raw.strip() else default
    except ValueError:
        logger.warning("Ignoring non-numeric setting %r - using %d", raw, default)
        return default


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the business action assistant.

    All paths are absolute. No module-level globals. Construct via from_env()
    or pass explicitly in tests.
    """
    project_root: Path

    # Documents and vector index
    data_dir: Path
    vectorstore_path: Path

    # Retrieval
    top_k: int = DEFAULT_TOP_K
    embedding_model: str = "sentence-transformers/all-mpnet-base-v2"
    chunk_size: int = 1000
    chunk_overlap: int = 150

    # ── Centralized LLM Provider ────────────────────────────────
    # Allowed: "openai", "groq", "ollama"
    llm_provider: str = "openai"
    llm_model_openai: str = "gpt-4o-mini"
    llm_model_groq: str = "llama-3.3-70b-versatile"
    llm_model_ollama: str = "llama3.2"
    ollama_base_url: str = "http://localhost:11434/"
    openai_api_key: str = ""
    groq_api_key: str = ""

    # Agent
    agent_variant: str = "default"
    agent_max_iterations: int = 8
    memory_max_messages: int = 50

    # Integrations backend (Slack, Salesforce, Asana, Google Calendar, Notion)
    integrations_base_url: str = "http://localhost:3000/api/integrations"

    # Per-call credentials
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiry_seconds: int = 300

    # Draft/confirm gating
    draft_ttl_seconds: int = 900
    require_drafts: bool = True

    log_level: str = "INFO"

    @property
    def active_llm_model(self) -> str:
        """Return the model name for the currently active LLM provider."""
        if self.llm_provider == "groq":
            return self.llm_model_groq
        elif self.llm_provider == "ollama":
            return self.llm_model_ollama
        return self.llm_model_openai

    @classmethod
    def from_env(cls, project_root: Optional[Path] = None) -> Settings:
        """Build Settings from .env and the process environment."""
        from dotenv import load_dotenv
        load_dotenv()

        root = project_root or Path(__file__).resolve().parent.parent.parent
        data_dir = Path(os.getenv("DATA_DIR", str(root / "data")))
        vectorstore_path = Path(
            os.getenv("VECTORSTORE_PATH", str(root / "vector_databases" / "documents"))
        )

        variant = os.getenv("AGENT_VARIANT", "default").strip().lower()
        if variant not in AGENT_VARIANTS:
            logger.warning("Unknown AGENT_VARIANT=%r - using 'default'", variant)
            variant = "default"

        return cls(
            project_root=root,
            data_dir=data_dir.resolve(),
            vectorstore_path=vectorstore_path.resolve(),

            top_k=parse_top_k(os.getenv("TOP_K")),
            embedding_model=os.getenv("EMBEDDING_MODEL", "sentence-transformers/all-mpnet-base-v2"),
            chunk_size=_parse_int(os.getenv("CHUNK_SIZE"), 1000),
            chunk_overlap=_parse_int(os.getenv("CHUNK_OVERLAP"), 150),

            llm_provider=os.getenv("LLM_PROVIDER", "openai"),
            llm_model_openai=os.getenv("LLM_MODEL_OPENAI", "gpt-4o-mini"),
            llm_model_groq=os.getenv("LLM_MODEL_GROQ", "llama-3.3-70b-versatile"),
            llm_model_ollama=os.getenv("LLM_MODEL_OLLAMA", "llama3.2"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/"),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            groq_api_key=os.getenv("GROQ_API_KEY", ""),

            agent_variant=variant,
            agent_max_iterations=_parse_int(os.getenv("AGENT_MAX_ITERATIONS"), 8),
            memory_max_messages=_parse_int(os.getenv("MEMORY_MAX_MESSAGES"), 50),

            integrations_base_url=os.getenv(
                "INTEGRATIONS_BASE_URL", "http://localhost:3000/api/integrations",
            ),

            jwt_secret=os.getenv("JWT_SECRET", "change-me-in-production"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expiry_seconds=_parse_int(os.getenv("JWT_EXPIRY_SECONDS"), 300),

            draft_ttl_seconds=_parse_int(os.getenv("DRAFT_TTL_SECONDS"), 900),
            require_drafts=_parse_bool(os.getenv("REQUIRE_DRAFTS"), True),

            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
