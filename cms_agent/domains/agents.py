"""
Domain models for agents.

This module defines agent profiles, the solvability verdict an agent
reports, and the request-scoped context handed to every tool.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class Solvability(str, Enum):
    """Verdict an agent gives on the task it was handed."""

    SOLVABLE = "solvable"
    NOT_SOLVABLE = "not_solvable"
    NEEDS_ANSWERS = "needs_answers"


class AgentProfile(BaseModel):
    """A named agent context with its instructions and tools."""

    name: str = Field(..., description="Unique agent identifier name")
    instructions: str = Field(..., description="Base instructions for the agent")
    tools: List[str] = Field(default_factory=list, description="Assigned tool names")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        """Validate that the name is not empty."""
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("instructions")
    @classmethod
    def instructions_not_empty(cls, v: str) -> str:
        """Validate that instructions are not empty."""
        if not v.strip():
            raise ValueError("Instructions cannot be empty")
        if len(v) < 10:
            raise ValueError("Instructions must be at least 10 characters")
        return v


class AgentVerdict(BaseModel):
    """Final structured answer an agent gives after using its tools."""

    verdict: Solvability = Field(..., description="Whether the task was solved")
    summary: str = Field("", description="Short summary of what was done")


class ToolContext(BaseModel):
    """Request-scoped context injected into every tool execution.

    Not visible to the agent. Carries the record and reference collaborators
    plus the identity of the user whose save triggered the agent.
    """

    model_config = {"arbitrary_types_allowed": True}

    records: Any = Field(..., description="RecordService used for create/load/save")
    references: Any = Field(None, description="ReferenceResolver for vocabularies")
    user_id: Optional[str] = Field(None, description="Current user id")
    langcode: str = Field("en", description="Language of created records")
    bindings: Dict[str, Any] = Field(
        default_factory=dict, description="Working context, e.g. the node being saved"
    )
