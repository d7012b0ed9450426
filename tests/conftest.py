"""
tests/conftest.py

Shared fakes: in-memory settings, scripted provider client, recording automation.
"""


from typing import Dict, List, Optional

import pytest
from PIL import Image

from config import AIConfiguration, Provider
from context.windows import WindowInfo
from orchestrator.models import AIModel, AIResponse, ToolInvocation
from orchestrator.service import AIService
from orchestrator.session import AutomationSession


class InMemorySettingsStore:

    def __init__(self, configuration: Optional[AIConfiguration] = None):

        self.configuration = configuration or AIConfiguration()
        self.loads = 0
        self.saves = 0

    def load(self) -> AIConfiguration:

        self.loads += 1
        return self.configuration

    def save(self, configuration: AIConfiguration) -> None:

        self.saves += 1
        self.configuration = configuration


class DictCredentialStore:

    def __init__(self):

        self.storage: Dict[str, str] = {}

    def read(self, key: str) -> Optional[str]:

        return self.storage.get(key)

    def save(self, key: str, value: Optional[str]) -> None:

        if value:
            self.storage[key] = value
        else:
            self.storage.pop(key, None)


class ScriptedClient:
    """Provider client that replays queued responses (or raises queued errors)."""

    def __init__(self, responses=None, models=None, available=True):

        self.responses = list(responses or [])
        self.models = list(models or [])
        self.available = available
        self.calls: List[dict] = []
        self.list_calls = 0

    def describe_target(self, config):

        return "scripted"

    def check_availability(self, config):

        return self.available

    def list_models(self, config):

        self.list_calls += 1
        return list(self.models)

    def generate_response(self, config, model, messages, tools):

        self.calls.append({"model": model, "messages": list(messages), "tools": list(tools)})
        if not self.responses:
            return AIResponse(text="Done.")
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


class FakeAutomation:

    def __init__(self):

        self.captures = 0
        self.typed: List[str] = []
        self.shortcuts: List[tuple] = []
        self.windows: List[Optional[WindowInfo]] = []

    def capture_screenshot(self, window):

        self.captures += 1
        self.windows.append(window)
        return Image.new("RGB", (4, 3), color=(200, 10, 10))

    def type_text(self, window, text):

        self.windows.append(window)
        self.typed.append(text)

    def send_shortcut(self, window, key, modifiers):

        self.windows.append(window)
        self.shortcuts.append((key, modifiers))


def text(content: str) -> AIResponse:

    return AIResponse(text=content)

def calls(*invocations: ToolInvocation, content: Optional[str] = None) -> AIResponse:

    return AIResponse(text=content, tool_invocations=list(invocations))


@pytest.fixture
def window() -> WindowInfo:

    return WindowInfo(id=42, title="Untitled Document", owner_name="TextEdit", process_id=311, bounds=(0, 0, 800, 600))

@pytest.fixture
def configuration() -> AIConfiguration:

    return AIConfiguration(provider=Provider.OLLAMA, selected_model_id="llama3")

@pytest.fixture
def client() -> ScriptedClient:

    return ScriptedClient(models=[AIModel(id="llama3", name="llama3", provider=Provider.OLLAMA)])

@pytest.fixture
def service(configuration, client) -> AIService:

    return AIService(
        InMemorySettingsStore(configuration),
        clients={Provider.OLLAMA: client, Provider.OPENAI: ScriptedClient()},
    )

@pytest.fixture
def automation() -> FakeAutomation:

    return FakeAutomation()

@pytest.fixture
def session(service, automation, window, tmp_path) -> AutomationSession:

    s = AutomationSession(service, automation)
    s.dispatcher.scratch_dir = tmp_path / "scratch"
    s.selected_window = window
    return s
