"""
src/context/settings_store.py

Persistence for AIConfiguration.

Non-secret fields go to a JSON file under the data directory; the API key goes to
the OS keyring. The JSON file never holds the key (see AIConfiguration.without_secrets).

Usage:
    store = JsonSettingsStore()
    config = store.load()
    store.save(config.model_copy(update={"selected_model_id": "llama3"}))
"""


import os
import json
import logging
from pathlib import Path
from typing import Optional, Protocol

import keyring
from keyring.errors import KeyringError, PasswordDeleteError
from pydantic import ValidationError

from config import AIConfiguration, DEFAULT_PROMPT, KEYRING_SERVICE, OPENAI_API_KEY_ENV, SETTINGS_FILE


logger = logging.getLogger(__name__)

OPENAI_API_KEY_ENTRY = "ai.configuration.openai.apiKey"


class SettingsStore(Protocol):

    def load(self) -> AIConfiguration: ...

    def save(self, configuration: AIConfiguration) -> None: ...


class CredentialStore(Protocol):

    def read(self, key: str) -> Optional[str]: ...

    def save(self, key: str, value: Optional[str]) -> None: ...


class KeyringCredentialStore:
    """Secrets in the OS keyring; the OPENAI_API_KEY env var is a read fallback."""

    def __init__(self, service_name: str = KEYRING_SERVICE, env_fallback: Optional[str] = OPENAI_API_KEY_ENV):

        self.service_name = service_name
        self.env_fallback = env_fallback

    def read(self, key: str) -> Optional[str]:

        value = None
        try:
            value = keyring.get_password(self.service_name, key)
        except KeyringError as e:
            logger.debug("Failed to access keyring: %s", e)

        if not value and self.env_fallback:
            value = os.getenv(self.env_fallback)

        return value or None

    def save(self, key: str, value: Optional[str]) -> None:

        if value:
            try:
                keyring.set_password(self.service_name, key, value)
            except KeyringError as e:
                logger.warning("Failed to store %s in keyring: %s", key, e)
            return

        try:
            keyring.delete_password(self.service_name, key)
        except PasswordDeleteError:
            pass  # nothing stored
        except KeyringError as e:
            logger.debug("Failed to clear %s from keyring: %s", key, e)


class JsonSettingsStore:

    def __init__(self, path: Path = SETTINGS_FILE, credentials: Optional[CredentialStore] = None):

        self.path = Path(path)
        self.credentials = credentials or KeyringCredentialStore()

    def load(self) -> AIConfiguration:

        if not self.path.exists():
            return self._with_credential(AIConfiguration())

        try:
            with self.path.open("r", encoding="utf-8") as f:
                stored = AIConfiguration.model_validate(json.load(f))
        except (ValueError, ValidationError) as e:
            logger.warning("Discarding unreadable settings file %s: %s", self.path, e)
            self.path.unlink(missing_ok=True)
            return self._with_credential(AIConfiguration())

        if not stored.prompt.strip():
            stored = stored.model_copy(update={"prompt": DEFAULT_PROMPT})

        return self._with_credential(stored)

    def save(self, configuration: AIConfiguration) -> None:

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            f.write(configuration.without_secrets().model_dump_json(indent=2))

        self.credentials.save(OPENAI_API_KEY_ENTRY, configuration.openai_api_key)

    def _with_credential(self, configuration: AIConfiguration) -> AIConfiguration:

        return configuration.model_copy(update={"openai_api_key": self.credentials.read(OPENAI_API_KEY_ENTRY)})
# EOF
