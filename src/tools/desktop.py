"""
src/tools/desktop.py - pyautogui backend for the Automation protocol

Window discovery uses pyautogui's window helpers where the platform has them
(Windows); elsewhere the whole screen is offered as a single target.
"""


import sys
import time
import logging
from typing import FrozenSet, List, Optional

import pyautogui
from PIL import Image

from context.windows import WindowInfo
from tools.automation import (
    EmptyTextError,
    KeyboardModifier,
    NoWindowSelectedError,
    ScreenshotFailedError,
    UnsupportedKeyError,
)


logger = logging.getLogger(__name__)

IS_MAC = sys.platform == "darwin"
ACTIVATE_PAUSE_SEC = 0.12
SCREEN_WINDOW_ID = 0

MODIFIER_KEYS = {
    KeyboardModifier.COMMAND: "command" if IS_MAC else "win",
    KeyboardModifier.OPTION: "option" if IS_MAC else "alt",
    KeyboardModifier.CONTROL: "ctrl",
    KeyboardModifier.SHIFT: "shift",
}


def list_windows() -> List[WindowInfo]:

    get_all = getattr(pyautogui, "getAllWindows", None)

    if get_all is None:
        width, height = pyautogui.size()
        return [WindowInfo(id=SCREEN_WINDOW_ID, title="Entire screen", owner_name="Desktop", bounds=(0, 0, width, height))]

    windows = []
    for w in get_all():
        if not w.title.strip() or w.width <= 0 or w.height <= 0:
            continue
        windows.append(WindowInfo(
            id=int(w._hWnd),
            title=w.title,
            owner_name=w.title,
            bounds=(w.left, w.top, w.width, w.height),
        ))

    return windows

def key_name(key: str) -> str:

    name = key.strip().lower()
    if name not in pyautogui.KEYBOARD_KEYS:
        raise UnsupportedKeyError(key.strip() or "(blank)")

    return name


class DesktopAutomation:

    def _activate(self, window: Optional[WindowInfo]) -> WindowInfo:

        if window is None:
            raise NoWindowSelectedError()

        get_with_title = getattr(pyautogui, "getWindowsWithTitle", None)
        if get_with_title and window.id != SCREEN_WINDOW_ID:
            for w in get_with_title(window.title):
                if int(w._hWnd) == window.id:
                    w.activate()
                    time.sleep(ACTIVATE_PAUSE_SEC)
                    break

        return window

    def capture_screenshot(self, window: Optional[WindowInfo]) -> Image.Image:

        window = self._activate(window)
        left, top, width, height = window.bounds
        region = (left, top, width, height) if width > 0 and height > 0 else None

        try:
            return pyautogui.screenshot(region=region)
        except OSError as e:
            raise ScreenshotFailedError(str(e)) from e

    def type_text(self, window: Optional[WindowInfo], text: str) -> None:

        if not text:
            raise EmptyTextError()

        self._activate(window)
        pyautogui.write(text)

    def send_shortcut(self, window: Optional[WindowInfo], key: str, modifiers: FrozenSet[KeyboardModifier]) -> None:

        name = key_name(key)
        self._activate(window)

        keys = [MODIFIER_KEYS[m] for m in KeyboardModifier if m in modifiers] + [name]
        logger.debug("hotkey %s", "+".join(keys))
        pyautogui.hotkey(*keys)
