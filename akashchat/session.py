"""Chat session orchestrator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from akashchat.config import DEFAULT_REGISTRY, ModelRegistry
from akashchat.interfaces import ChatClient, CompletionOptions, CompletionResult, Failure, Message

logger = logging.getLogger(__name__)

GREETING = (
    "Hello! I'm your AkashChat behavioral analysis assistant. How can I help you today? "
    "Feel free to ask about behavioral patterns, habit formation, or any questions you "
    "might have."
)
APOLOGY = (
    "I apologize, but I encountered an error processing your request. "
    "Please try using a different model or try again later."
)


@dataclass(frozen=True)
class TurnOutcome:
    """What a single ``send`` call did to the session."""

    result: CompletionResult
    switched_from: Optional[str] = None

    @property
    def switched(self) -> bool:
        return self.switched_from is not None


class ChatSession:
    """Holds one conversation and applies the model-fallback policy per turn.

    The transcript only grows. A rejected model is swapped for the suggested
    one and the user is asked to resend; the session never resubmits on its
    own. Calls to ``send`` are expected to be sequential.
    """

    def __init__(
        self,
        client: ChatClient,
        registry: ModelRegistry = DEFAULT_REGISTRY,
        model: Optional[str] = None,
        greeting: Optional[str] = GREETING,
        api_key_present: bool = True,
        options: Optional[CompletionOptions] = None,
    ) -> None:
        self._client = client
        self._registry = registry
        self._model = registry.resolve(model or client.model)
        self._api_key_present = api_key_present
        self._options = options or CompletionOptions()
        self._messages: List[Message] = []
        self._error: Optional[str] = None
        if greeting:
            self._messages.append(Message(role="assistant", content=greeting))

    @property
    def transcript(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def model(self) -> str:
        return self._model

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def can_send(self) -> bool:
        return self._api_key_present

    def select_model(self, model: str) -> str:
        """Switch the active model, falling back to the default for unknown names."""
        self._model = self._registry.resolve(model)
        return self._model

    def send(self, text: str) -> Optional[TurnOutcome]:
        """Append ``text`` as a user turn and ask the model for a reply.

        Returns ``None`` without touching the transcript when there is nothing
        to send or no API key is configured.
        """
        if not text.strip() or not self._api_key_present:
            return None

        self._messages.append(Message(role="user", content=text))
        self._error = None

        result = self._client.complete(self.transcript, model=self._model, options=self._options)

        if isinstance(result, Failure):
            return self._handle_failure(result)

        self._messages.append(Message(role="assistant", content=result.content))
        return TurnOutcome(result=result)

    def _handle_failure(self, failure: Failure) -> TurnOutcome:
        suggested = failure.suggested_model
        if suggested and suggested != self._model:
            previous = self._model
            self._model = suggested
            self._error = (
                f"Model '{previous}' is not available. "
                f"Switched to '{suggested}'. Please try again."
            )
            logger.warning(f"Switched model from {previous} to {suggested}")
            return TurnOutcome(result=failure, switched_from=previous)

        logger.error(f"Error sending message: {failure.message}")
        self._error = failure.message or "Failed to get a response. Please try again later."
        self._messages.append(Message(role="assistant", content=APOLOGY))
        return TurnOutcome(result=failure)


__all__ = ["APOLOGY", "GREETING", "ChatSession", "TurnOutcome"]
