"""
Domain models for function-call tools.

This module defines the declarative argument schema an agent sees for a
tool, the transient invocation built from it, and the result every tool
execution produces.
"""
import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from cms_agent.domains.errors import ErrorKind, ToolValidationError

logger = logging.getLogger(__name__)


class ParameterType(str, Enum):
    """Data types a tool parameter can declare."""

    STRING = "string"
    INTEGER = "integer"
    LIST_OF_STRING = "list_of_string"
    LIST_OF_OBJECT = "list_of_object"


_JSON_SCHEMA_TYPES = {
    ParameterType.STRING: {"type": "string"},
    ParameterType.INTEGER: {"type": "integer"},
    ParameterType.LIST_OF_STRING: {"type": "array", "items": {"type": "string"}},
    ParameterType.LIST_OF_OBJECT: {"type": "array", "items": {}},
}


def is_empty(value: Any) -> bool:
    """Return True for values that count as "not supplied"."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


class ToolParameter(BaseModel):
    """A single named, typed argument of a tool."""

    model_config = {"frozen": True}

    name: str = Field(..., description="Argument name, unique within a tool")
    type: ParameterType = Field(..., description="Declared data type")
    label: str = Field("", description="Human readable label")
    description: str = Field("", description="What the agent should supply")
    required: bool = Field(False, description="Whether the argument is mandatory")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        """Validate that the parameter name is not empty."""
        if not v.strip():
            raise ValueError("Parameter name cannot be empty")
        return v

    def coerce(self, value: Any) -> Any:
        """Coerce a supplied value to the declared type.

        Raises:
            ToolValidationError: with kind TYPE_MISMATCH if the value cannot
                be represented as the declared type.
        """
        if self.type == ParameterType.STRING:
            if isinstance(value, str):
                return value
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return str(value)
        elif self.type == ParameterType.INTEGER:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
            if isinstance(value, float) and value.is_integer():
                return int(value)
            if isinstance(value, str):
                try:
                    return int(value.strip())
                except ValueError:
                    pass
        elif self.type == ParameterType.LIST_OF_STRING:
            if isinstance(value, list) and all(
                isinstance(item, (str, int)) and not isinstance(item, bool)
                for item in value
            ):
                return [str(item) for item in value]
        elif self.type == ParameterType.LIST_OF_OBJECT:
            if isinstance(value, list):
                return list(value)

        raise ToolValidationError(
            f"Parameter '{self.name}' expects type {self.type.value}",
            parameter=self.name,
            kind=ErrorKind.TYPE_MISMATCH,
        )

    def to_json_schema(self) -> Dict[str, Any]:
        """Return the JSON schema fragment describing this parameter."""
        schema = dict(_JSON_SCHEMA_TYPES[self.type])
        if self.label:
            schema["title"] = self.label
        if self.description:
            schema["description"] = self.description
        return schema


class ToolSchema(BaseModel):
    """Declarative description of a tool and its ordered parameters."""

    model_config = {"frozen": True}

    id: str = Field(..., description="Stable plugin id, e.g. ai_agent:create_recipe_node")
    function_name: str = Field(..., description="Name the agent calls the tool by")
    label: str = Field("", description="Human readable tool name")
    description: str = Field(..., description="What the tool does")
    group: str = Field("modification_tools", description="Tool group")
    parameters: List[ToolParameter] = Field(default_factory=list)

    @field_validator("id", "function_name", "description")
    @classmethod
    def not_empty(cls, v: str) -> str:
        """Validate that string fields are not empty."""
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v

    @field_validator("parameters")
    @classmethod
    def unique_names(cls, parameters: List[ToolParameter]) -> List[ToolParameter]:
        """Validate that parameter names are unique."""
        seen = set()
        for parameter in parameters:
            if parameter.name in seen:
                raise ValueError(f"Duplicate parameter name: {parameter.name}")
            seen.add(parameter.name)
        return parameters

    def get_parameter(self, name: str) -> Optional[ToolParameter]:
        """Get a parameter by name."""
        return next((p for p in self.parameters if p.name == name), None)

    def validate_arguments(self, raw_args: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and coerce raw arguments against this schema.

        Required parameters are checked first, then every supplied value is
        coerced to its declared type. Absent or empty optional parameters are
        left out of the result.

        Args:
            raw_args: Arguments as supplied by the agent

        Returns:
            Mapping of parameter name to coerced value

        Raises:
            ToolValidationError: if a required parameter is missing or a
                value does not match its declared type
        """
        raw_args = raw_args or {}

        for parameter in self.parameters:
            if parameter.required and is_empty(raw_args.get(parameter.name)):
                raise ToolValidationError(
                    f"Parameter '{parameter.name}' is required",
                    parameter=parameter.name,
                )

        unknown = set(raw_args) - {p.name for p in self.parameters}
        if unknown:
            logger.warning(
                f"Ignoring unknown arguments for tool {self.function_name}: {sorted(unknown)}"
            )

        validated: Dict[str, Any] = {}
        for parameter in self.parameters:
            value = raw_args.get(parameter.name)
            if is_empty(value):
                continue
            validated[parameter.name] = parameter.coerce(value)
        return validated

    def to_json_schema(self) -> Dict[str, Any]:
        """Serialize the parameters as a JSON schema object."""
        return {
            "type": "object",
            "properties": {p.name: p.to_json_schema() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
        }

    def to_function_definition(self) -> Dict[str, Any]:
        """Return the OpenAI function-calling definition for this tool."""
        return {
            "type": "function",
            "function": {
                "name": self.function_name,
                "description": self.description,
                "parameters": self.to_json_schema(),
            },
        }


class ToolInvocation(BaseModel):
    """A single call of a tool with validated arguments."""

    tool_name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ResultStatus(str, Enum):
    """Outcome of a tool execution."""

    SUCCESS = "success"
    ERROR = "error"


class ToolResult(BaseModel):
    """Outcome of executing a tool invocation."""

    status: ResultStatus
    message: str = ""
    tool_id: str = ""
    tool_name: str = ""
    payload: Optional[Union[Dict[str, Any], str]] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def success(
        cls,
        message: str,
        payload: Optional[Union[Dict[str, Any], str]] = None,
        **kwargs,
    ) -> "ToolResult":
        return cls(status=ResultStatus.SUCCESS, message=message, payload=payload, **kwargs)

    @classmethod
    def error(
        cls,
        message: str,
        kind: ErrorKind = ErrorKind.EXECUTION,
        **kwargs,
    ) -> "ToolResult":
        return cls(status=ResultStatus.ERROR, message=message, error_kind=kind, **kwargs)

    @property
    def is_success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    def decode_payload(self) -> Dict[str, Any]:
        """Return the payload as a dict, decoding a JSON-encoded payload.

        Raises:
            ValueError: if the payload is not a JSON object
        """
        if self.payload is None:
            return {}
        if isinstance(self.payload, dict):
            return self.payload
        decoded = json.loads(self.payload)
        if not isinstance(decoded, dict):
            raise ValueError(f"Payload of tool {self.tool_name} is not an object")
        return decoded

    def readable_output(self) -> str:
        """Text handed back to the agent for this result."""
        if self.payload is None:
            return self.message
        payload = self.payload if isinstance(self.payload, str) else json.dumps(self.payload)
        return f"{self.message}\n{payload}" if self.message else payload
