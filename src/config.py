"""
src/config.py

Provider selection, AI configuration defaults and environment loading.
"""


import os
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


load_dotenv()


class Provider(str, Enum):

    OLLAMA = "ollama"
    OPENAI = "openai"

    @property
    def display_name(self) -> str:

        return {"ollama": "Ollama", "openai": "OpenAI"}[self.value]

    @property
    def requires_api_key(self) -> bool:

        return self is Provider.OPENAI


# Defaults
DEFAULT_PROVIDER: Provider = Provider.OLLAMA
DEFAULT_OLLAMA_HOST: str = "http://localhost"
DEFAULT_OLLAMA_PORT: int = 11434
DEFAULT_OPENAI_ENDPOINT: str = "https://api.openai.com/v1"
DEFAULT_PROMPT: str = (
    "You are a helpful assistant. You can capture screenshots and type text or send "
    "shortcuts into the selected app. Use the available tools to perform the actions "
    "requested by the user within the chosen application."
)

DATA_DIR: Path = Path(os.getenv("WINDOW_ASSISTANT_HOME", Path.home() / ".window_assistant"))
SETTINGS_FILE: Path = DATA_DIR / "configuration.json"
KEYRING_SERVICE: str = "window-assistant"
OPENAI_API_KEY_ENV: str = "OPENAI_API_KEY"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AIConfiguration(BaseModel):

    provider: Provider = DEFAULT_PROVIDER
    selected_model_id: Optional[str] = None
    ollama_host: str = DEFAULT_OLLAMA_HOST
    ollama_port: int = DEFAULT_OLLAMA_PORT
    openai_endpoint: str = DEFAULT_OPENAI_ENDPOINT
    openai_api_key: Optional[str] = None
    prompt: str = DEFAULT_PROMPT

    def without_secrets(self) -> "AIConfiguration":
        """Copy safe to write to a plain settings file."""

        return self.model_copy(update={"openai_api_key": None})


class InvalidPortError(ValueError):

    def __init__(self):

        super().__init__("Provide a valid port number for Ollama.")


def sanitize_host(host: str) -> str:

    trimmed = (host or "").strip()

    return trimmed or DEFAULT_OLLAMA_HOST

def sanitize_endpoint(endpoint: str) -> str:

    trimmed = (endpoint or "").strip()

    return trimmed or DEFAULT_OPENAI_ENDPOINT

def sanitize_prompt(prompt: str) -> str:

    trimmed = (prompt or "").strip()

    return trimmed or DEFAULT_PROMPT

def sanitize_port(port) -> int:
    """Parse a port typed by the user; must be a positive integer."""

    try:
        value = int(str(port).strip())
    except ValueError:
        raise InvalidPortError() from None

    if value <= 0:
        raise InvalidPortError()

    return value


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the app process."""

    level_name = (level or os.getenv("WINDOW_ASSISTANT_LOG_LEVEL", "INFO")).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
# EOF
