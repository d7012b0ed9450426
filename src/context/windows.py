"""
src/context/windows.py

Window descriptors handed over by window discovery, and selection helpers.
"""


from typing import Optional, Sequence, Tuple
from pydantic import BaseModel


class WindowInfo(BaseModel):

    id: int
    title: str
    owner_name: str
    process_id: int = 0
    bounds: Tuple[int, int, int, int] = (0, 0, 0, 0)   # left, top, width, height

    @property
    def display_title(self) -> str:

        return self.title if self.title.strip() else self.owner_name

    @property
    def subtitle(self) -> str:

        return f"{self.owner_name} · PID {self.process_id}"


def find_window(windows: Sequence[WindowInfo], window_id: Optional[int]) -> Optional[WindowInfo]:

    if window_id is None:
        return None

    return next((w for w in windows if w.id == window_id), None)

def refresh_selection(windows: Sequence[WindowInfo], selected_id: Optional[int]) -> Optional[int]:
    """
    Selection after the window list is refreshed: keep it if the window still
    exists, otherwise pick the first window (or None when there are none).
    """

    if selected_id is not None and find_window(windows, selected_id):
        return selected_id

    return windows[0].id if windows else None
