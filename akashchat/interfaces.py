"""Core types and interfaces shared by the client and the chat session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Protocol, Tuple, Union

from akashchat.config import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE

ROLES = ("system", "user", "assistant")

MODEL_ACCESS_MARKER = "Team not allowed to access model"


@dataclass(frozen=True)
class Message:
    role: str
    content: str

    def as_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class CompletionOptions:
    """Sampling knobs sent with every completion request."""

    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS


@dataclass(frozen=True)
class Success:
    content: str


@dataclass(frozen=True)
class Failure:
    """A completion that did not produce content.

    ``suggested_model`` is the model the caller should switch to, or ``None``
    when the fault had nothing to do with model access (e.g. a malformed
    response body).
    """

    message: str
    suggested_model: Optional[str] = None
    allowed_models: Tuple[str, ...] = ()

    @property
    def reply(self) -> str:
        """Assistant-facing text describing the failure."""
        if MODEL_ACCESS_MARKER in self.message:
            return (
                "I'm sorry, but this model isn't available with your current API key. "
                "I'll automatically switch to another available model for you. "
                "Please try again."
            )
        return (
            "I'm sorry, but I couldn't process your request. "
            "Please try again or use a different model. Error: " + self.message
        )


CompletionResult = Union[Success, Failure]

# Loosely shaped chat messages as they arrive from callers.
RawMessage = Union[Message, Mapping[str, Any]]


class ChatClient(Protocol):
    """Protocol for chat completion clients used by the session and prompt builder.

    Implementations must never raise from ``complete``: every fault is reported
    as a :class:`Failure`.
    """

    @property
    def model(self) -> str:
        """Return the model used when ``complete`` is called without one."""
        ...

    def complete(
        self,
        messages: Iterable[RawMessage],
        model: Optional[str] = None,
        options: Optional[CompletionOptions] = None,
    ) -> CompletionResult:
        """Execute a chat completion request.

        Args:
            messages: Iterable of messages with 'role' and 'content'
            model: Model identifier; unknown models fall back to the registry default
            options: Sampling options; defaults are used when omitted

        Returns:
            ``Success`` with sanitized content, or ``Failure`` describing the fault
        """
        ...


__all__ = [
    "ROLES",
    "ChatClient",
    "CompletionOptions",
    "CompletionResult",
    "Failure",
    "Message",
    "RawMessage",
    "Success",
]
