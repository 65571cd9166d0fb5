"""Extraction of actionable content from host tool calls.

A tool call is reduced to the pieces of content worth assessing: at most one
shell command and any number of URLs. Extraction never fails; anything it
does not recognize simply yields no items.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class ContentKind(Enum):
    """Kinds of content the gate can display or assess."""
    COMMAND = "command"
    URL = "url"
    SKILL = "skill"
    MESSAGE = "message"


# Host tool names grouped by the action they perform
EXECUTE_TOOLS = {"exec", "execute"}
FETCH_TOOLS = {"web_fetch", "fetch-url"}
BROWSE_TOOLS = {"browser", "browse"}

# URL-bearing browser parameters, in evaluation order
BROWSE_URL_PARAMETERS = ("targetUrl", "url")


@dataclass(frozen=True)
class ActionRequest:
    """A host-mediated action awaiting a gate decision."""

    tool: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_tool_call(cls, tool_call: Dict[str, Any]) -> 'ActionRequest':
        """Create from the host's tool call dict ({"tool": ..., "parameters": ...})."""
        parameters = tool_call.get("parameters") or {}
        if not isinstance(parameters, dict):
            parameters = {}
        return cls(tool=str(tool_call.get("tool", "")), parameters=parameters)


@dataclass(frozen=True)
class ActionableItem:
    kind: ContentKind
    value: str


def _string_param(parameters: Dict[str, Any], name: str) -> str:
    value = parameters.get(name)
    if isinstance(value, str):
        return value
    return ""


def extract_command(action: ActionRequest) -> List[ActionableItem]:
    """Return the command item of an execute action, if any."""
    if action.tool not in EXECUTE_TOOLS:
        return []
    command = _string_param(action.parameters, "command")
    if not command:
        return []
    return [ActionableItem(ContentKind.COMMAND, command)]


def extract_urls(action: ActionRequest) -> List[ActionableItem]:
    """Return URL items for fetch and browse actions.

    Browse actions contribute one item per URL-bearing parameter present.
    Duplicates are not suppressed.
    """
    if action.tool in FETCH_TOOLS:
        names = ("url",)
    elif action.tool in BROWSE_TOOLS:
        names = BROWSE_URL_PARAMETERS
    else:
        return []

    items = []
    for name in names:
        url = _string_param(action.parameters, name)
        if url:
            items.append(ActionableItem(ContentKind.URL, url))
    return items


def extract_items(action: ActionRequest) -> List[ActionableItem]:
    """Return every actionable item of a request, command first."""
    return extract_command(action) + extract_urls(action)
