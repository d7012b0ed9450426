"""
src/orchestrator/llm_ollama.py

Ollama client (no credential). Talks to the local HTTP API:
- GET  /api/tags  -> availability check and model list
- POST /api/chat  -> one non-streaming chat turn
"""


import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlsplit, urlunsplit

import requests

from config import AIConfiguration, Provider
from orchestrator.errors import InvalidHostError, InvalidResponseError, UnreachableEndpointError
from orchestrator.models import AIModel, AIResponse, Message, ToolDefinition


logger = logging.getLogger(__name__)

DATA_URL_MARKER = ";base64,"


def resolve_url(host: str, port: int, path: str) -> str:
    """
    Build the request URL from the configured host and port.
    A host without a scheme is treated as plain HTTP; port and path always
    come from the arguments, whatever the host string carried.
    """

    raw = (host or "").strip()
    parts = urlsplit(raw if "://" in raw else f"http://{raw}")

    try:
        hostname = parts.hostname
    except ValueError:
        hostname = None
    if not hostname:
        raise InvalidHostError(host)

    if ":" in hostname:
        hostname = f"[{hostname}]"

    return urlunsplit((parts.scheme or "http", f"{hostname}:{port}", path, "", ""))

def _message_payload(message: Message) -> Dict[str, Any]:
    """Ollama takes a plain string plus bare base64 images."""

    payload: Dict[str, Any] = {"role": message.role.value, "content": message.text}
    images = [url.split(DATA_URL_MARKER, 1)[-1] for url in message.image_urls]

    if images:
        payload["images"] = images

    return payload


class OllamaClient:

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None):

        self.session = session or requests.Session()
        self.timeout = timeout

    def describe_target(self, config: AIConfiguration) -> str:

        return f"Ollama at {config.ollama_host}:{config.ollama_port}"

    @contextmanager
    def _translate_errors(self, config: AIConfiguration):

        try:
            yield
        except (requests.ConnectionError, requests.Timeout) as e:
            raise UnreachableEndpointError(self.describe_target(config)) from e

    def check_availability(self, config: AIConfiguration) -> bool:

        try:
            url = resolve_url(config.ollama_host, config.ollama_port, "/api/tags")
            resp = self.session.get(url, timeout=self.timeout)
        except Exception as e:
            logger.debug("Ollama availability check failed: %s", e)
            return False

        return 200 <= resp.status_code < 300

    def list_models(self, config: AIConfiguration) -> List[AIModel]:

        url = resolve_url(config.ollama_host, config.ollama_port, "/api/tags")

        with self._translate_errors(config):
            resp = self.session.get(url, timeout=self.timeout)

        if resp.status_code != 200:
            raise InvalidResponseError("Ollama returned an unexpected response.")

        try:
            models = resp.json()["models"]
            names = [m["name"] for m in models]
        except (ValueError, KeyError, TypeError):
            raise InvalidResponseError("Ollama returned an unexpected response.") from None

        logger.info("Ollama reported %d model(s)", len(names))

        return [AIModel(id=name, name=name, provider=Provider.OLLAMA) for name in names]

    def generate_response(
        self,
        config: AIConfiguration,
        model: str,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition] = (),
    ) -> AIResponse:
        """
        One chat turn. Ollama gets no tool schemas; the system message describes
        the tools and the reply is parsed from text.
        """

        url = resolve_url(config.ollama_host, config.ollama_port, "/api/chat")
        payload = {
            "model": model,
            "messages": [_message_payload(m) for m in messages],
            "stream": False,
        }

        logger.debug("POST %s model=%s messages=%d", url, model, len(messages))
        with self._translate_errors(config):
            resp = self.session.post(url, json=payload, timeout=self.timeout)

        if resp.status_code != 200:
            raise InvalidResponseError("Ollama returned an unexpected response.")

        try:
            content = (resp.json().get("message") or {}).get("content")
        except (ValueError, AttributeError):
            content = None

        if content is None:
            raise InvalidResponseError("Ollama returned an unexpected response.")

        return AIResponse(text=content)
# EOF
