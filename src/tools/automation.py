"""
src/tools/automation.py - the window-automation capability the tools act through

Provides:
- Automation: protocol for the three OS primitives (capture, type, shortcut)
- KeyboardModifier: modifier keys a shortcut may hold
- AutomationError and friends: what a backend raises when an action fails
- capture_with_deadline(): bound a capture call in time
- png_bytes() / png_data_url(): encode a captured image for the model

The concrete desktop backend lives in tools.desktop; tests use a fake.
"""


import io
import base64
import logging
from enum import Enum
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Callable, FrozenSet, Optional, Protocol

from PIL import Image

from context.windows import WindowInfo


logger = logging.getLogger(__name__)

CAPTURE_TIMEOUT_SECONDS: float = 5.0


class KeyboardModifier(str, Enum):

    COMMAND = "command"
    OPTION = "option"
    CONTROL = "control"
    SHIFT = "shift"


class AutomationError(Exception):
    pass


class NoWindowSelectedError(AutomationError):

    def __init__(self):

        super().__init__("Select a window before performing this action.")


class ScreenshotFailedError(AutomationError):

    def __init__(self, detail: Optional[str] = None):

        message = "Failed to capture a screenshot for the selected window."
        super().__init__(f"{message} {detail}" if detail else message)


class EmptyTextError(AutomationError):

    def __init__(self):

        super().__init__("Provide text to send to the window.")


class UnsupportedKeyError(AutomationError):

    def __init__(self, key: str):

        self.key = key
        super().__init__(f'The key "{key}" is not recognized. Try a single character or a supported key name.')


class Automation(Protocol):

    def capture_screenshot(self, window: Optional[WindowInfo]) -> Image.Image: ...

    def type_text(self, window: Optional[WindowInfo], text: str) -> None: ...

    def send_shortcut(self, window: Optional[WindowInfo], key: str, modifiers: FrozenSet[KeyboardModifier]) -> None: ...


def capture_with_deadline(capture: Callable[[], Image.Image], timeout: float = CAPTURE_TIMEOUT_SECONDS) -> Image.Image:
    """
    Run `capture` on a worker thread and wait at most `timeout` seconds.
    A capture that overruns is reported as a screenshot failure; the worker is abandoned.
    """

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="capture")
    future = executor.submit(capture)

    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        logger.warning("Screenshot capture exceeded %.1fs", timeout)
        raise ScreenshotFailedError("The capture timed out.") from None
    finally:
        executor.shutdown(wait=False)

def png_bytes(image: Image.Image) -> bytes:

    buffered = io.BytesIO()
    image.save(buffered, format="PNG")

    return buffered.getvalue()

def png_data_url(data: bytes) -> str:

    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")
