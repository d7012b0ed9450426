"""
src/orchestrator/session.py

Automation session: seeds the conversation with the user's instruction, runs the
model/tool loop against the selected window and keeps a transcript of every step.

Loop per turn:
- ask the model (tooling system message is prepended by the service, not stored)
- record any assistant text
- parse tool invocations; none means the model answered in plain language -> stop
- same invocations as the previous turn -> stop with a notice
- dispatch each invocation; tools that need follow-up feed their result back
- no follow-up needed -> stop, otherwise go round again
"""


import logging
import threading
from typing import Callable, FrozenSet, List, Optional, Tuple

from context.windows import WindowInfo
from orchestrator import prompts
from orchestrator.models import (
    ContentPart,
    Message,
    Role,
    SessionState,
    ToolInvocation,
    TranscriptAuthor,
    TranscriptEntry,
    image_part,
    invocation_set,
    text_part,
)
from orchestrator.parser import encode_invocation, resolve_invocations
from orchestrator.service import AIService
from tools.automation import Automation
from tools.dispatcher import ToolDispatcher


logger = logging.getLogger(__name__)

TranscriptListener = Callable[[TranscriptEntry], None]


class AutomationSession:

    def __init__(
        self,
        service: AIService,
        automation: Automation,
        dispatcher: Optional[ToolDispatcher] = None,
        listener: Optional[TranscriptListener] = None,
    ):

        self.service = service
        self.dispatcher = dispatcher or ToolDispatcher(automation, lambda: self.selected_window)
        self.listener = listener
        self.selected_window: Optional[WindowInfo] = None
        self.state: SessionState = SessionState.IDLE
        self.last_error: Optional[str] = None

        self._transcript: List[TranscriptEntry] = []
        self._history: List[Message] = []
        self._previous: Optional[FrozenSet] = None
        self._lock = threading.Lock()

    # -------- Read-only views --------------------------------------------------

    @property
    def transcript(self) -> Tuple[TranscriptEntry, ...]:

        return tuple(self._transcript)

    @property
    def history(self) -> Tuple[Message, ...]:

        return tuple(self._history)

    @property
    def is_running(self) -> bool:

        return self.state is SessionState.RUNNING

    def refusal(self, instruction: str) -> Optional[str]:
        """User-facing reason `start(instruction)` would do nothing, else None."""

        if self.selected_window is None:
            return prompts.NO_WINDOW_SELECTED
        if not (instruction or "").strip():
            return prompts.NO_INSTRUCTION
        if self.is_running:
            return prompts.ALREADY_RUNNING

        return None

    # -------- Commands ---------------------------------------------------------

    def start(self, instruction: str) -> bool:
        """
        Run the automation loop to completion for `instruction`.
        Returns False without doing anything when no window is selected, the
        instruction is blank or a run is already in progress (see `refusal`).
        """

        instruction = (instruction or "").strip()
        if self.selected_window is None or not instruction:
            return False

        with self._lock:
            if self.is_running:
                return False
            self.state = SessionState.RUNNING

        try:
            self._clear()
            self._record(TranscriptAuthor.USER, instruction)
            self._history.append(Message.from_text(Role.USER, instruction))
            logger.info("Automation started for window %s", self.selected_window.display_title)
            self._run_loop()
        except Exception as e:
            logger.exception("Automation failed")
            self.last_error = str(e)
            self.state = SessionState.FAILED
        else:
            logger.info("Automation finished after %d transcript entries", len(self._transcript))
            self.state = SessionState.IDLE

        return True

    def reset_conversation(self) -> bool:
        """Clear transcript, history and repeat guard; refused while running."""

        with self._lock:
            if self.is_running:
                return False
            self._clear()
            self.state = SessionState.IDLE

        return True

    # -------- Internals --------------------------------------------------------

    def _clear(self) -> None:

        self._transcript.clear()
        self._history.clear()
        self._previous = None
        self.last_error = None

    def _record(self, author: TranscriptAuthor, content: str) -> None:

        entry = TranscriptEntry(author=author, content=content)
        self._transcript.append(entry)

        if self.listener:
            self.listener(entry)

    def _run_loop(self) -> None:

        while True:
            response = self.service.generate_response(self._history)

            text = (response.text or "").strip()
            if text:
                self._record(TranscriptAuthor.ASSISTANT, text)
                self._history.append(Message.from_text(Role.ASSISTANT, text))

            invocations = resolve_invocations(response)
            if not invocations:
                break

            current = invocation_set(invocations)
            if current == self._previous:
                logger.warning("Repeated tool request: %s", sorted(current))
                self._record(TranscriptAuthor.SYSTEM, prompts.REPEATED_TOOL_REQUEST)
                break

            follow_up = False
            for invocation in invocations:
                follow_up = self._dispatch(invocation) or follow_up

            self._previous = current
            if not follow_up:
                break

    def _dispatch(self, invocation: ToolInvocation) -> bool:
        """Execute one invocation; True when its result goes back to the model."""

        logger.debug("Dispatching %s", encode_invocation(invocation.name, invocation.arguments))
        result = self.dispatcher.execute(invocation)
        self._record(TranscriptAuthor.TOOL, f"{invocation.name}: {result.message}")

        definition = self.service.tool_definition(invocation.name)
        if not (definition and definition.requires_follow_up):
            return False

        parts: List[ContentPart] = [text_part(result.message)]
        if result.image_data_url:
            parts.append(image_part(result.image_data_url))
        self._history.append(Message(role=Role.USER, parts=tuple(parts)))

        return True
# EOF
