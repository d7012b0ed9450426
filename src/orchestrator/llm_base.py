"""
src/orchestrator/llm_base.py

Contract shared by the provider clients. The service picks a client by provider
and never branches on the provider inside a call.
"""


from typing import List, Protocol, Sequence

from config import AIConfiguration
from orchestrator.models import AIModel, AIResponse, Message, ToolDefinition


class ProviderClient(Protocol):

    def describe_target(self, config: AIConfiguration) -> str:
        """Where requests go, for messages such as "Unable to contact ..."."""
        ...

    def check_availability(self, config: AIConfiguration) -> bool:
        """Never raises; any failure is False."""
        ...

    def list_models(self, config: AIConfiguration) -> List[AIModel]: ...

    def generate_response(
        self,
        config: AIConfiguration,
        model: str,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
    ) -> AIResponse: ...
