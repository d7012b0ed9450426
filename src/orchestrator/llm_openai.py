"""
src/orchestrator/llm_openai.py

OpenAI client wrapper for chat completions with function calling.
- list_models(): GET models, keep the GPT family, annotate context windows
- generate_response(): one turn; text plus any structured tool calls
- extract_tool_calls(): normalize tool calls from a response choice
"""


import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import openai
from openai import OpenAI

from config import AIConfiguration, Provider
from orchestrator.errors import EmptyResponseError, InvalidResponseError, MissingAPIKeyError, UnreachableEndpointError
from orchestrator.models import AIModel, AIResponse, Message, ToolDefinition
from orchestrator.parser import decode_tool_calls
from orchestrator.registry import get_tool_specs


logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7

# Substring of the model id -> context window (tokens)
CONTEXT_WINDOWS: List[Tuple[str, int]] = [
    ("gpt-4", 128_000),
    ("gpt-3.5", 16_000),
]

ClientFactory = Callable[[str, str], Any]


def context_window(model_id: str) -> Optional[int]:

    for marker, size in CONTEXT_WINDOWS:
        if marker in model_id:
            return size

    return None

def _default_factory(api_key: str, base_url: str) -> OpenAI:

    return OpenAI(api_key=api_key, base_url=base_url)

def _message_payload(message: Message) -> Dict[str, Any]:
    """Plain string when possible, else a list of typed parts."""

    if message.is_plain_text:
        return {"role": message.role.value, "content": message.parts[0].text or ""}

    content = []
    for part in message.parts:
        if part.type == "text":
            content.append({"type": "text", "text": part.text or ""})
        else:
            content.append({"type": "image_url", "image_url": {"url": part.image_url}})

    return {"role": message.role.value, "content": content}

def _field(obj: Any, name: str) -> Any:
    """Read from SDK objects and plain dicts alike."""

    if isinstance(obj, dict):
        return obj.get(name)

    return getattr(obj, name, None)

def content_text(content: Any) -> Optional[str]:
    """
    Flatten message content to a single string.
    Content may be a string or a list of typed blocks; block text may be a
    string or {"value": ...}. Blocks are concatenated in order.
    """

    if content is None or isinstance(content, str):
        return content

    collected = []
    for block in content:
        text = _field(block, "text")
        if isinstance(text, str):
            collected.append(text)
        elif text is not None and isinstance(_field(text, "value"), str):
            collected.append(_field(text, "value"))

    return "".join(collected)

def extract_tool_calls(choice) -> List[Tuple[str, Optional[str]]]:
    """
    Normalize tool calls from the OpenAI response choice to (name, arguments JSON).
    """

    out = []
    tcs = _field(_field(choice, "message"), "tool_calls")

    if not tcs:
        return out

    for tc in tcs:
        function = _field(tc, "function")
        if _field(tc, "type") == "function" and function:
            out.append((_field(function, "name"), _field(function, "arguments")))

    return out


class OpenAIClient:

    def __init__(self, client_factory: Optional[ClientFactory] = None, temperature: float = DEFAULT_TEMPERATURE):

        self.client_factory = client_factory or _default_factory
        self.temperature = temperature

    def describe_target(self, config: AIConfiguration) -> str:

        return config.openai_endpoint

    def _client(self, config: AIConfiguration):

        if not config.openai_api_key:
            raise MissingAPIKeyError()

        return self.client_factory(config.openai_api_key, config.openai_endpoint)

    @contextmanager
    def _translate_errors(self, config: AIConfiguration):

        try:
            yield
        except openai.APIConnectionError as e:
            raise UnreachableEndpointError(self.describe_target(config)) from e

    def check_availability(self, config: AIConfiguration) -> bool:

        if not config.openai_api_key:
            return False

        try:
            self.list_models(config)
        except Exception as e:
            logger.debug("OpenAI availability check failed: %s", e)
            return False

        return True

    def list_models(self, config: AIConfiguration) -> List[AIModel]:

        client = self._client(config)

        with self._translate_errors(config):
            models = list(client.models.list())

        out = [
            AIModel(id=m.id, name=m.id, provider=Provider.OPENAI, context_length=context_window(m.id))
            for m in models
            if "gpt" in m.id.lower()
        ]
        logger.info("OpenAI reported %d GPT model(s)", len(out))

        return out

    def generate_response(
        self,
        config: AIConfiguration,
        model: str,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition] = (),
    ) -> AIResponse:

        client = self._client(config)
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [_message_payload(m) for m in messages],
            "temperature": self.temperature,
        }
        if tools:
            kwargs["tools"] = get_tool_specs(tools)

        logger.debug("chat.completions model=%s messages=%d tools=%d", model, len(messages), len(tools))
        with self._translate_errors(config):
            resp = client.chat.completions.create(**kwargs)

        choices = _field(resp, "choices")
        if not choices:
            raise EmptyResponseError()

        choice = choices[0]
        message = _field(choice, "message")
        if message is None:
            raise InvalidResponseError("OpenAI returned an unexpected response.")

        text = content_text(_field(message, "content"))
        raw_calls = extract_tool_calls(choice)

        if text is None and not raw_calls:
            raise EmptyResponseError()

        # calls with unreadable arguments are dropped, the turn itself survives
        return AIResponse(text=text, tool_invocations=decode_tool_calls(raw_calls))
# EOF
