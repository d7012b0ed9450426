"""
src/orchestrator/parser.py

Response parser: turns model output into tool invocations.
- decode_tool_calls(): structured tool-call entries (name + JSON argument string)
- parse_tool_invocation(): fallback scan of assistant text for a JSON object, bare or fenced
- resolve_invocations(): structured calls first, else the text fallback

Nothing here raises on bad model output; unparseable input means "no invocation".
"""


import re
import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

from orchestrator.models import AIResponse, ToolInvocation


_FENCE = re.compile(r"```(.*?)```", re.DOTALL)
# Info string on the opening fence, e.g. ```json
_FENCE_LANGUAGE = re.compile(r"^[A-Za-z][A-Za-z0-9_+-]*\s+")


def coerce_argument(value: Any) -> Optional[str]:
    """
    Canonical string form of a primitive JSON value.
    Booleans become "true"/"false"; null and containers are dropped (None).
    """

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)

    return None

def coerce_arguments(raw: Dict[str, Any]) -> Dict[str, str]:

    out = {}

    for key, value in raw.items():
        coerced = coerce_argument(value)
        if coerced is not None:
            out[str(key)] = coerced

    return out

def _invocation_from_object(obj: Any) -> Optional[ToolInvocation]:

    if not isinstance(obj, dict):
        return None

    name = obj.get("tool") or obj.get("name")
    if not isinstance(name, str) or not name.strip():
        return None

    arguments = obj.get("arguments", {})
    # Some models echo the OpenAI shape and send arguments as a JSON string
    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments) if arguments.strip() else {}
        except ValueError:
            return None
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        return None

    return ToolInvocation(name=name.strip(), arguments=coerce_arguments(arguments))

def decode_invocation(payload: str) -> Optional[ToolInvocation]:
    """Decode `{"tool"|"name": ..., "arguments": {...}}`; None if it isn't one."""

    try:
        obj = json.loads(payload)
    except ValueError:
        return None

    return _invocation_from_object(obj)

def extract_candidate(text: str) -> Optional[str]:
    """
    Region of `text` that should hold the JSON object:
    the interior of the first fenced block, else first "{" through last "}".
    """

    fence = _FENCE.search(text)
    if fence:
        interior = fence.group(1).strip()
        return _FENCE_LANGUAGE.sub("", interior, count=1)

    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]

    return None

def parse_tool_invocation(text: Optional[str]) -> Optional[ToolInvocation]:

    if not text or not text.strip():
        return None

    candidate = extract_candidate(text)
    if candidate is None:
        return None

    return decode_invocation(candidate)

def decode_tool_calls(tool_calls: Iterable[Tuple[str, Optional[str]]]) -> List[ToolInvocation]:
    """
    Decode structured (name, argument-JSON) pairs independently.
    Entries with a missing or malformed payload are skipped.
    """

    out = []

    for name, raw_arguments in tool_calls:
        if not name or raw_arguments is None:
            continue
        try:
            arguments = json.loads(raw_arguments)
        except ValueError:
            continue
        if not isinstance(arguments, dict):
            continue
        out.append(ToolInvocation(name=name, arguments=coerce_arguments(arguments)))

    return out

def resolve_invocations(response: AIResponse) -> List[ToolInvocation]:

    if response.tool_invocations:
        return list(response.tool_invocations)

    invocation = parse_tool_invocation(response.text)

    return [invocation] if invocation else []

def encode_invocation(name: str, arguments: Dict[str, Any]) -> str:
    """Wire form the model is asked to produce."""

    return json.dumps({"tool": name, "arguments": arguments}, ensure_ascii=False)
# EOF
