"""
Error taxonomy for the CMS Agent system.

Every failure degrades into an error ToolResult or a user-visible notice;
these exceptions only travel inside a tool body or the pre-save hook.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of failure a tool or hook can report."""

    VALIDATION = "validation"
    TYPE_MISMATCH = "type_mismatch"
    REFERENCE_VALIDATION = "reference_validation"
    NOT_FOUND = "not_found"
    AGENT_FAILURE = "agent_failure"
    AGENT_TIMEOUT = "agent_timeout"
    EXECUTION = "execution"


class CmsAgentError(Exception):
    """Base class for errors raised inside the CMS Agent system."""

    kind: ErrorKind = ErrorKind.EXECUTION


class ToolValidationError(CmsAgentError, ValueError):
    """Raised when tool arguments do not satisfy the tool schema."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        kind: ErrorKind = ErrorKind.VALIDATION,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.kind = kind


class ReferenceValidationError(CmsAgentError, ValueError):
    """Raised when a reference id does not resolve into the expected vocabulary."""

    kind = ErrorKind.REFERENCE_VALIDATION

    def __init__(self, reference_id: str, vocabulary: str):
        super().__init__(
            f"Invalid term ID {reference_id} for vocabulary {vocabulary}."
        )
        self.reference_id = reference_id
        self.vocabulary = vocabulary


class RecordNotFoundError(CmsAgentError, LookupError):
    """Raised when a referenced record is absent from the store."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"No {kind} found with ID {record_id}")
        self.record_kind = kind
        self.record_id = record_id


class AgentFailure(CmsAgentError):
    """Raised when talking to the agent fails."""

    kind = ErrorKind.AGENT_FAILURE


class AgentTimeout(AgentFailure):
    """Raised when the agent does not answer within the configured timeout."""

    kind = ErrorKind.AGENT_TIMEOUT

    def __init__(self, agent_name: str, timeout: float):
        super().__init__(
            f"Agent {agent_name} did not respond within {timeout} seconds"
        )
        self.agent_name = agent_name
        self.timeout = timeout
