"""
src/tools/dispatcher.py - executes parsed tool invocations against the selected window

Provides:
- ToolDispatcher.execute(invocation): validate arguments, act, describe the outcome
- save_screenshot(...): write a PNG with a readable, timestamped file name

Key ideas:

1) Validation happens before any side effect
   Unknown tools and missing/blank required arguments raise before the
   automation backend is touched.

2) Screenshots are for humans
   A capture is stored in a scratch folder and sent back as a data URL, with a
   note that nobody has looked at it yet. If the file cannot be written the
   tool still succeeds, just without the image.
"""


import logging
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Optional

from context.windows import WindowInfo
from orchestrator import prompts
from orchestrator.errors import MissingToolArgumentError, UnknownToolError
from orchestrator.models import ToolExecutionResult, ToolInvocation
from orchestrator.registry import tool_definition
from tools.automation import Automation, KeyboardModifier, capture_with_deadline, png_bytes, png_data_url


logger = logging.getLogger(__name__)

SCRATCH_DIR: Path = Path(tempfile.gettempdir()) / "window_assistant"
TRUE_VALUES = {"true", "1", "yes"}


# --- Helpers -------------------------------------------------------------------
def is_true(value: Optional[str]) -> bool:
    """Case-insensitive "true" / "1" / "yes"; anything else (or None) is False."""

    return value is not None and value.strip().lower() in TRUE_VALUES

def _required(arguments: Dict[str, str], name: str) -> str:

    value = (arguments.get(name) or "").strip()
    if not value:
        raise MissingToolArgumentError(name)

    return value

def screenshot_filename(window: Optional[WindowInfo], now: Optional[datetime] = None) -> str:
    """e.g. WindowAssistant_Untitled_Document_2025-01-31_09-15-02.png"""

    name_part = window.display_title.replace(" ", "_") if window else "Window"
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")

    return f"WindowAssistant_{name_part}_{stamp}.png"

def save_screenshot(data: bytes, directory: Path, window: Optional[WindowInfo]) -> Path:

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / screenshot_filename(window)
    path.write_bytes(data)

    return path


# --- Dispatcher ----------------------------------------------------------------
class ToolDispatcher:

    def __init__(
        self,
        automation: Automation,
        window_provider: Callable[[], Optional[WindowInfo]],
        scratch_dir: Path = SCRATCH_DIR,
    ):

        self.automation = automation
        self.window_provider = window_provider
        self.scratch_dir = Path(scratch_dir)

    def execute(self, invocation: ToolInvocation) -> ToolExecutionResult:

        if tool_definition(invocation.name) is None:
            raise UnknownToolError(invocation.name)

        handler = getattr(self, f"_{invocation.name}")
        logger.info("Executing tool %s", invocation.name)

        return handler(invocation.arguments)

    def _capture_screenshot(self, arguments: Dict[str, str]) -> ToolExecutionResult:

        window = self.window_provider()
        image = capture_with_deadline(lambda: self.automation.capture_screenshot(window))
        data = png_bytes(image)

        try:
            path = save_screenshot(data, self.scratch_dir, window)
        except OSError as e:
            logger.warning("Could not store screenshot in %s: %s", self.scratch_dir, e)
            return ToolExecutionResult(message=prompts.SCREENSHOT_NOT_SAVED.format(error=e))

        message = "\n".join([prompts.SCREENSHOT_SAVED.format(path=path), prompts.SCREENSHOT_DISCLAIMER])

        return ToolExecutionResult(message=message, image_data_url=png_data_url(data))

    def _type_text(self, arguments: Dict[str, str]) -> ToolExecutionResult:

        text = _required(arguments, "text")
        self.automation.type_text(self.window_provider(), text)

        return ToolExecutionResult(message="Typed text in the selected window.")

    def _send_shortcut(self, arguments: Dict[str, str]) -> ToolExecutionResult:

        key = _required(arguments, "key")
        modifiers: FrozenSet[KeyboardModifier] = frozenset(
            m for m in KeyboardModifier if is_true(arguments.get(m.value))
        )
        self.automation.send_shortcut(self.window_provider(), key, modifiers)

        combo = "+".join([m.value for m in KeyboardModifier if m in modifiers] + [key])

        return ToolExecutionResult(message=f"Shortcut sent: {combo}.")
# EOF
