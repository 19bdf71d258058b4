"""
OpenAI agent adapter for the CMS Agent system.

Implements the Agent interface on top of OpenAI chat completions with
function calling. Tool calls are executed through the AgentService so
the agent only reaches the tools assigned to its profile.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import logfire
from openai import AsyncOpenAI
from pydantic import ValidationError

from cms_agent.domains.agents import AgentProfile, AgentVerdict, Solvability, ToolContext
from cms_agent.domains.errors import ErrorKind
from cms_agent.domains.records import Record
from cms_agent.domains.tools import ToolResult
from cms_agent.interfaces.providers.agent import Agent
from cms_agent.interfaces.providers.records import ReferenceResolver

logger = logging.getLogger(__name__)

DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TURNS = 8

VERDICT_INSTRUCTIONS = (
    "When you are done using tools, reply with only a JSON object of the form "
    '{"verdict": "solvable" | "not_solvable" | "needs_answers", "summary": "..."}. '
    'Use "solvable" only if you completed the task with your tools.'
)


def create_openai_client(
    api_key: str,
    base_url: Optional[str] = None,
    logfire_api_key: Optional[str] = None,
) -> AsyncOpenAI:
    """Create the OpenAI client, instrumented with Logfire when a key is given."""
    client = AsyncOpenAI(api_key=api_key, base_url=base_url)
    if logfire_api_key:
        try:
            logfire.configure(token=logfire_api_key)
            logfire.instrument_openai(client)
            logger.info("Logfire configured and OpenAI client instrumented successfully.")
        except Exception as e:
            logger.error(f"Failed to configure Logfire: {e}")
    return client


class OpenAIAgent(Agent):
    """Agent that solves a task with OpenAI function calling."""

    def __init__(
        self,
        profile: AgentProfile,
        agent_service,
        client: AsyncOpenAI,
        records,
        references: Optional[ReferenceResolver] = None,
        model: Optional[str] = None,
        max_turns: int = DEFAULT_MAX_TURNS,
    ):
        self.profile = profile
        self.agent_service = agent_service
        self.client = client
        self.records = records
        self.references = references
        self.model = model or DEFAULT_CHAT_MODEL
        self.max_turns = max_turns
        self._messages: List[Dict[str, Any]] = []
        self._bindings: Dict[str, Any] = {}
        self._tool_results: List[List[ToolResult]] = []
        self.summary = ""

    @property
    def name(self) -> str:
        return self.profile.name

    def set_context(self, messages: List[Dict[str, Any]]) -> None:
        self._messages = list(messages)

    def set_model_config(self, provider: str, model: Optional[str] = None) -> None:
        if provider != "openai":
            raise ValueError(f"Unsupported chat provider: {provider}")
        if model:
            self.model = model

    def set_working_context(self, bindings: Dict[str, Any]) -> None:
        self._bindings = dict(bindings)

    def get_tool_results(self, flatten: bool = True) -> List[Any]:
        if flatten:
            return [result for turn in self._tool_results for result in turn]
        return [list(turn) for turn in self._tool_results]

    def _system_prompt(self) -> str:
        prompt = self.agent_service.get_agent_system_prompt(self.name)
        records = {
            key: value for key, value in self._bindings.items() if isinstance(value, Record)
        }
        if records:
            prompt += "\n\nWORKING CONTEXT:"
            for key, record in records.items():
                prompt += f"\n- {key}: {record.model_dump_json()}"
        return f"{prompt}\n\n{VERDICT_INSTRUCTIONS}"

    def _tool_context(self) -> ToolContext:
        return ToolContext(
            records=self.records,
            references=self.references,
            user_id=self._bindings.get("user_id"),
            bindings=self._bindings,
        )

    async def determine_solvability(self) -> Solvability:
        """Run the tool-calling loop and return the agent's verdict."""
        self._tool_results = []
        messages = [{"role": "system", "content": self._system_prompt()}, *self._messages]
        tools = [
            {
                "type": "function",
                "function": {
                    "name": tool["name"],
                    "description": tool.get("description", ""),
                    "parameters": tool.get("parameters", {}),
                },
            }
            for tool in self.agent_service.get_agent_tools(self.name)
        ]
        context = self._tool_context()

        for turn in range(self.max_turns):
            request: Dict[str, Any] = {"model": self.model, "messages": messages}
            if tools:
                request["tools"] = tools
            response = await self.client.chat.completions.create(**request)
            message = response.choices[0].message

            if not message.tool_calls:
                return self._parse_verdict(message.content)

            messages.append(
                {
                    "role": "assistant",
                    "content": message.content or "",
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.function.name,
                                "arguments": call.function.arguments,
                            },
                        }
                        for call in message.tool_calls
                    ],
                }
            )

            turn_results = []
            for call in message.tool_calls:
                result = await self._run_tool_call(call.function.name, call.function.arguments, context)
                turn_results.append(result)
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": result.readable_output(),
                    }
                )
            self._tool_results.append(turn_results)
            logger.debug(f"Agent {self.name} turn {turn + 1}: {[r.status.value for r in turn_results]}")

        logger.warning(f"Agent {self.name} gave no verdict within {self.max_turns} turns")
        return Solvability.NOT_SOLVABLE

    async def _run_tool_call(
        self, tool_name: str, arguments: Optional[str], context: ToolContext
    ) -> ToolResult:
        try:
            parameters = json.loads(arguments or "{}")
        except json.JSONDecodeError as e:
            logger.warning(f"Agent {self.name} sent malformed arguments for {tool_name}: {e}")
            return ToolResult.error(
                f"Error: arguments are not valid JSON: {e}",
                kind=ErrorKind.VALIDATION,
                tool_name=tool_name,
            )
        if not isinstance(parameters, dict):
            return ToolResult.error(
                "Error: arguments must be a JSON object",
                kind=ErrorKind.VALIDATION,
                tool_name=tool_name,
            )
        return await self.agent_service.execute_tool(self.name, tool_name, parameters, context)

    def _parse_verdict(self, content: Optional[str]) -> Solvability:
        text = (content or "").strip()
        if text.startswith("```"):
            text = text.strip("`")
            if text.startswith("json"):
                text = text[len("json"):]
        try:
            verdict = AgentVerdict.model_validate_json(text.strip())
        except ValidationError as e:
            logger.warning(f"Agent {self.name} returned an unreadable verdict: {e}")
            return Solvability.NOT_SOLVABLE
        self.summary = verdict.summary
        logger.info(f"Agent {self.name} verdict: {verdict.verdict.value} ({verdict.summary})")
        return verdict.verdict
