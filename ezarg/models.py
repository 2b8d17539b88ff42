"""Core types shared by the adapters and the dispatcher."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .content import ResponseContent


class ProviderId(str, Enum):
    """The fixed set of providers a query fans out to."""

    CLAUDE = "claude"
    CHATGPT = "chatgpt"
    GROK = "grok"
    PERPLEXITY = "perplexity"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


DISPLAY_NAMES = {
    ProviderId.CLAUDE: "Claude",
    ProviderId.CHATGPT: "ChatGPT",
    ProviderId.GROK: "Grok",
    ProviderId.PERPLEXITY: "Perplexity",
}

ROLES = ("user", "assistant")


@dataclass(frozen=True)
class ChatTurn:
    role: str
    text: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown role '{self.role}'. Expected one of {ROLES}")


@dataclass(frozen=True)
class QueryRequest:
    """
    One user query.

    When `history` is given it is the full transcript sent to the provider
    and replaces the single-message form built from `text`.
    """

    text: str
    history: Optional[Tuple[ChatTurn, ...]] = None

    def __post_init__(self):
        if not self.text or not self.text.strip():
            raise ValueError("Query text must not be empty")
        if self.history is not None:
            object.__setattr__(self, "history", tuple(self.history))

    @classmethod
    def build(cls, text: str, history: Optional[Sequence[Dict[str, str]]] = None) -> "QueryRequest":
        """Build a request from plain {'role', 'content'} dicts."""
        turns = None
        if history:
            turns = tuple(ChatTurn(turn["role"], turn["content"]) for turn in history)
        return cls(text, turns)

    def turns(self) -> List[ChatTurn]:
        """The conversation to send, as ordered turns."""
        if self.history:
            return list(self.history)
        return [ChatTurn("user", self.text)]


@dataclass(frozen=True)
class Pending:
    status = "pending"


@dataclass(frozen=True)
class Success:
    content: ResponseContent
    status = "success"


@dataclass(frozen=True)
class Failure:
    """
    A provider's terminal error.

    `message` is the reason as reported (e.g. the provider's own error
    text); `display` prefixes it with the provider name.
    """

    provider: ProviderId
    message: str
    kind: str = "ProviderError"
    status = "failure"

    @property
    def display(self) -> str:
        return f"{self.provider.display_name}: {self.message}"


ProviderOutcome = Union[Pending, Success, Failure]

PENDING = Pending()


def is_terminal(outcome: ProviderOutcome) -> bool:
    return not isinstance(outcome, Pending)
