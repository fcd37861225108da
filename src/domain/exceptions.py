"""
domain.exceptions - Custom exception hierarchy for the business action assistant.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed. None of these ever reach the
dispatch loop: the tool registry converts them into Failure outcomes.
"""


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class ToolSpecError(DomainError):
    """Raised when a tool declaration is inconsistent (bad schema, duplicate name)."""


class IntegrationError(DomainError):
    """Raised when the integrations backend cannot be reached or returns garbage."""


class RetrievalError(DomainError):
    """Raised when the document index fails to load or to answer a query."""


class ConfigurationError(DomainError):
    """Raised when required configuration (identity, secrets, provider) is missing."""
