"""
src/orchestrator/service.py

AI service: the single entry point the session and the app use to reach a model.
Owns the configuration cache and picks the provider client; prepends the tooling
system message to every turn.
"""


import logging
from typing import Dict, List, Optional, Sequence

from config import AIConfiguration, Provider
from context.settings_store import SettingsStore
from orchestrator import registry
from orchestrator.errors import MissingAPIKeyError, MissingModelSelectionError
from orchestrator.llm_base import ProviderClient
from orchestrator.llm_ollama import OllamaClient
from orchestrator.llm_openai import OpenAIClient
from orchestrator.models import AIModel, AIResponse, ConnectionTestResult, Message, ToolDefinition


logger = logging.getLogger(__name__)


def sync_selected_model(selected: Optional[str], models: Sequence[AIModel]) -> Optional[str]:
    """Keep a selection that is still listed, otherwise fall back to the first model."""

    if selected is None:
        return None
    if any(m.id == selected for m in models):
        return selected

    return models[0].id if models else None


class AIService:

    def __init__(
        self,
        settings_store: SettingsStore,
        clients: Optional[Dict[Provider, ProviderClient]] = None,
        tools: Optional[Sequence[ToolDefinition]] = None,
    ):

        self.settings_store = settings_store
        self.clients: Dict[Provider, ProviderClient] = clients or {
            Provider.OLLAMA: OllamaClient(),
            Provider.OPENAI: OpenAIClient(),
        }
        self.tools: List[ToolDefinition] = list(tools) if tools is not None else registry.available_tools()
        self._configuration: Optional[AIConfiguration] = None

    # -------- Configuration ----------------------------------------------------

    def load_configuration(self) -> AIConfiguration:

        if self._configuration is None:
            self._configuration = self.settings_store.load()

        return self._configuration

    def update_configuration(self, configuration: AIConfiguration) -> None:

        self.settings_store.save(configuration)
        self._configuration = configuration
        logger.info("Configuration saved (provider=%s, model=%s)", configuration.provider.value, configuration.selected_model_id)

    # -------- Tools ------------------------------------------------------------

    def available_tools(self) -> List[ToolDefinition]:

        return list(self.tools)

    def tool_definition(self, name: str) -> Optional[ToolDefinition]:

        return next((t for t in self.tools if t.name == name), None)

    # -------- Provider calls ---------------------------------------------------

    def _require_credentials(self, config: AIConfiguration, provider: Provider) -> None:

        if provider.requires_api_key and not config.openai_api_key:
            raise MissingAPIKeyError()

    def list_models(self, provider: Optional[Provider] = None) -> List[AIModel]:

        config = self.load_configuration()
        provider = provider or config.provider
        self._require_credentials(config, provider)

        return self.clients[provider].list_models(config)

    def test_connection(self, provider: Optional[Provider] = None) -> ConnectionTestResult:
        """Check the provider; failures come back as an unsuccessful result."""

        try:
            config = self.load_configuration()
        except Exception:
            logger.exception("Could not load configuration; testing with defaults")
            config = AIConfiguration()

        provider = provider or config.provider
        client = self.clients[provider]
        target = f"{config.ollama_host}:{config.ollama_port}"

        if provider is Provider.OLLAMA:
            reachable = client.check_availability(config)
            message = f"Ollama is reachable at {target}." if reachable else f"Unable to reach Ollama at {target}."
            return ConnectionTestResult(success=reachable, message=message)

        if not config.openai_api_key:
            return ConnectionTestResult(success=False, message="Provide an OpenAI API key.")

        reachable = client.check_availability(config)
        message = (
            "OpenAI credentials are valid."
            if reachable
            else "OpenAI validation failed. Check your API key and endpoint."
        )

        return ConnectionTestResult(success=reachable, message=message)

    def generate_response(self, messages: Sequence[Message], override_model_id: Optional[str] = None) -> AIResponse:
        """
        Request one model turn over `messages`.
        The tooling system message is prepended here and never stored by the caller.
        """

        config = self.load_configuration()
        self._require_credentials(config, config.provider)

        model = override_model_id or config.selected_model_id
        if not model:
            raise MissingModelSelectionError()

        payload = [registry.tooling_message(config.prompt, self.tools)] + list(messages)

        return self.clients[config.provider].generate_response(config, model, payload, self.tools)
# EOF
