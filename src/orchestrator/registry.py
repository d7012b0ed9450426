"""
src/orchestrator/registry.py

Tool registry: the fixed catalog of window-automation tools, the text catalog used
in the system message, and OpenAI function specs for providers that accept them.
"""


from typing import Any, Dict, List, Optional, Sequence

from orchestrator.models import Message, ParameterType, Role, ToolDefinition, ToolParameter
from orchestrator import prompts


# -------- Catalog --------------------------------------------------------------

TOOLS: List[ToolDefinition] = [
    ToolDefinition(
        name="capture_screenshot",
        summary="Capture a screenshot of the currently selected window.",
        requires_follow_up=True,
    ),
    ToolDefinition(
        name="type_text",
        summary="Type arbitrary text into the selected window.",
        parameters=(
            ToolParameter(name="text", type=ParameterType.STRING, description="The text to type into the window.", required=True),
        ),
    ),
    ToolDefinition(
        name="send_shortcut",
        summary="Send a keyboard shortcut to the selected window (e.g. command+c).",
        parameters=(
            ToolParameter(name="key", type=ParameterType.STRING, description="The key to press (for example: c, enter, escape).", required=True),
            ToolParameter(name="command", type=ParameterType.BOOLEAN, description="Include the Command modifier."),
            ToolParameter(name="option", type=ParameterType.BOOLEAN, description="Include the Option modifier."),
            ToolParameter(name="control", type=ParameterType.BOOLEAN, description="Include the Control modifier."),
            ToolParameter(name="shift", type=ParameterType.BOOLEAN, description="Include the Shift modifier."),
        ),
    ),
]

_BY_NAME: Dict[str, ToolDefinition] = {tool.name: tool for tool in TOOLS}


def available_tools() -> List[ToolDefinition]:

    return list(TOOLS)

def tool_definition(name: str) -> Optional[ToolDefinition]:

    return _BY_NAME.get(name)


# -------- System message -------------------------------------------------------

def _render_parameter(parameter: ToolParameter) -> str:

    marker = " [required]" if parameter.required else ""

    return f"- {parameter.name} ({parameter.type.value}){marker}: {parameter.description}"

def render_tool_catalog(tools: Sequence[ToolDefinition] = TOOLS) -> str:
    """
    Human-readable list of tools, one block per tool:

        • type_text: Type arbitrary text into the selected window.
        - text (string) [required]: The text to type into the window.
    """

    blocks = []

    for tool in tools:
        lines = [_render_parameter(p) for p in tool.parameters]
        parameter_section = "\n".join(lines) if lines else prompts.NO_PARAMETERS
        blocks.append(f"• {tool.name}: {tool.summary}\n{parameter_section}")

    return "\n\n".join(blocks)

def tooling_message(prompt: str, tools: Sequence[ToolDefinition] = TOOLS) -> Message:
    """Build the system preamble sent ahead of every turn (never stored in history)."""

    content = prompts.TOOLING_TEMPLATE.format(
        prompt=prompt,
        tool_list=render_tool_catalog(tools),
        instructions=prompts.TOOL_CALL_INSTRUCTIONS,
    )

    return Message.from_text(Role.SYSTEM, content)


# -------- OpenAI function specs ------------------------------------------------

def _tool_spec(tool: ToolDefinition) -> Dict[str, Any]:
    """Build an OpenAI function spec."""

    properties = {
        p.name: {"type": p.type.value, "description": p.description}
        for p in tool.parameters
    }

    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.summary,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": [p.name for p in tool.parameters if p.required],
            },
        },
    }

def get_tool_specs(tools: Sequence[ToolDefinition] = TOOLS) -> List[Dict[str, Any]]:

    return [_tool_spec(t) for t in tools]
