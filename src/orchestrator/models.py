"""
src/orchestrator/models.py

Pydantic models for chat messages, tool definitions/invocations and the session transcript.
"""


from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from config import Provider


class Role(str, Enum):

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ContentPart(BaseModel):
    """Either a text fragment or an image reference (data URL)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text", "image_url"]
    text: Optional[str] = None
    image_url: Optional[str] = None


def text_part(text: str) -> ContentPart:

    return ContentPart(type="text", text=text)

def image_part(data_url: str) -> ContentPart:

    return ContentPart(type="image_url", image_url=data_url)


class Message(BaseModel):

    model_config = ConfigDict(frozen=True)

    role: Role
    parts: Tuple[ContentPart, ...] = ()

    @classmethod
    def from_text(cls, role: Role, text: str) -> "Message":

        return cls(role=role, parts=(text_part(text),))

    @property
    def text(self) -> str:
        """All text parts joined with newlines."""

        return "\n".join(p.text for p in self.parts if p.type == "text" and p.text)

    @property
    def image_urls(self) -> List[str]:

        return [p.image_url for p in self.parts if p.type == "image_url" and p.image_url]

    @property
    def is_plain_text(self) -> bool:
        """True when the message can be sent as a single string."""

        return len(self.parts) == 1 and self.parts[0].type == "text"


class AIModel(BaseModel):

    id: str
    name: str
    provider: Provider
    context_length: Optional[int] = None


class ParameterType(str, Enum):

    STRING = "string"
    BOOLEAN = "boolean"


class ToolParameter(BaseModel):

    model_config = ConfigDict(frozen=True)

    name: str
    type: ParameterType
    description: str
    required: bool = False


class ToolDefinition(BaseModel):

    model_config = ConfigDict(frozen=True)

    name: str
    summary: str
    parameters: Tuple[ToolParameter, ...] = ()
    requires_follow_up: bool = False


class ToolInvocation(BaseModel):

    name: str
    arguments: Dict[str, str] = Field(default_factory=dict)

    def key(self) -> Tuple[str, Tuple[Tuple[str, str], ...]]:
        """Order-independent identity used by the repeat guard."""

        return self.name, tuple(sorted(self.arguments.items()))


def invocation_set(invocations: Iterable[ToolInvocation]) -> FrozenSet[Tuple[str, Tuple[Tuple[str, str], ...]]]:

    return frozenset(inv.key() for inv in invocations)


class ToolExecutionResult(BaseModel):

    message: str
    image_data_url: Optional[str] = None


class AIResponse(BaseModel):

    text: Optional[str] = None
    tool_invocations: List[ToolInvocation] = Field(default_factory=list)


class TranscriptAuthor(str, Enum):

    USER = "You"
    ASSISTANT = "Assistant"
    TOOL = "Tool"
    SYSTEM = "System"


class TranscriptEntry(BaseModel):

    model_config = ConfigDict(frozen=True)

    author: TranscriptAuthor
    content: str


class SessionState(str, Enum):

    IDLE = "idle"
    RUNNING = "running"
    FAILED = "failed"


class ConnectionTestResult(BaseModel):

    success: bool
    message: str
# EOF
