"""Akash Chat API client built on the OpenAI-compatible chat completions endpoint."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Optional, Tuple

import httpx
import openai
from openai import APIStatusError, OpenAIError

from akashchat.config import DEFAULT_REGISTRY, AkashSettings, ModelRegistry
from akashchat.interfaces import (
    ROLES,
    CompletionOptions,
    CompletionResult,
    Failure,
    Message,
    RawMessage,
    Success,
)
from akashchat.sanitize import sanitize

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful behavioral analysis assistant that provides evidence-based advice. "
    "Be concise, practical, and friendly. Format your responses with clear headings and "
    "bullet points when appropriate. Make your responses look professional and don't "
    "include any internal thinking or markdown symbols in your output that would make "
    "your response look raw or unformatted."
)
EMPTY_RESPONSE_TEXT = "I apologize, but I couldn't generate a response. Please try again."
INVALID_RESPONSE_MESSAGE = "Invalid response format from API"
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"

ALLOWED_MODELS_RE = re.compile(r"Allowed team models = \[(.*?)\]")


def parse_allowed_models(message: str) -> Tuple[str, ...]:
    """Recover the ``Allowed team models = [...]`` list from an error message.

    Returns an empty tuple when the message does not carry the list, which is
    indistinguishable from an upstream phrasing change.
    """
    match = ALLOWED_MODELS_RE.search(message or "")
    if not match or not match.group(1):
        return ()
    models = (item.replace("'", "").strip() for item in match.group(1).split(","))
    return tuple(model for model in models if model)


def normalize_messages(messages: Iterable[RawMessage]) -> List[Message]:
    """Coerce caller messages into a well-formed payload.

    Unknown roles become ``user``, missing content becomes an empty string, and
    a default system message is prepended when none is present.
    """
    formatted: List[Message] = []
    for raw in messages:
        if isinstance(raw, Message):
            role, content = raw.role, raw.content
        else:
            role, content = raw.get("role"), raw.get("content")
        formatted.append(
            Message(
                role=role if role in ROLES else "user",
                content=str(content) if content else "",
            )
        )
    if not any(message.role == "system" for message in formatted):
        formatted.insert(0, Message(role="system", content=DEFAULT_SYSTEM_PROMPT))
    return formatted


class AkashChatClient:
    """Thin wrapper around the Akash chat completions API.

    One request per ``complete`` call, no retries. Faults never escape; they
    come back as :class:`~akashchat.interfaces.Failure`.
    """

    def __init__(
        self,
        settings: AkashSettings,
        registry: ModelRegistry = DEFAULT_REGISTRY,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._settings = settings
        self._registry = registry
        self._client = openai.OpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            max_retries=0,
            http_client=http_client,
        )

    @property
    def model(self) -> str:
        return self._settings.model

    @property
    def registry(self) -> ModelRegistry:
        return self._registry

    def complete(
        self,
        messages: Iterable[RawMessage],
        model: Optional[str] = None,
        options: Optional[CompletionOptions] = None,
    ) -> CompletionResult:
        options = options or CompletionOptions()
        try:
            effective_model = self._registry.resolve(model or self._settings.model)
            payload = [message.as_dict() for message in normalize_messages(messages)]
            logger.debug(f"Sending {len(payload)} messages to {effective_model}")
            client: Any = self._client.chat.completions
            response = client.create(
                model=effective_model,
                messages=payload,
                temperature=options.temperature,
                max_tokens=options.max_tokens,
            )
            return self._interpret(response)
        except OpenAIError as exc:
            logger.error(f"Error in chat completion: {exc}")
            return self._failure(_extract_error_message(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error in chat completion")
            return self._failure(str(exc) or UNKNOWN_ERROR_MESSAGE)

    def _interpret(self, response: Any) -> CompletionResult:
        choices = getattr(response, "choices", None)
        if not isinstance(choices, list) or not choices:
            logger.error("Completion response carried no choices")
            return Failure(message=INVALID_RESPONSE_MESSAGE)
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content:
            return Success(content=EMPTY_RESPONSE_TEXT)
        return Success(content=sanitize(content))

    def _failure(self, message: str) -> Failure:
        allowed = parse_allowed_models(message)
        if allowed:
            return Failure(message=message, suggested_model=allowed[0], allowed_models=allowed)
        default = self._registry.default
        return Failure(message=message, suggested_model=default, allowed_models=(default,))


def _extract_error_message(exc: OpenAIError) -> str:
    """Pull a displayable message out of an SDK error.

    Structured bodies (``{"error": {"message": ...}}`` or ``{"message": ...}``)
    win over bare string bodies, which win over the exception text.
    """
    if isinstance(exc, APIStatusError):
        body = exc.body
        if isinstance(body, dict):
            error = body.get("error", body)
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str) and error:
                return error
        if isinstance(body, str) and body.strip():
            return body.strip()
    return str(exc) or UNKNOWN_ERROR_MESSAGE


def create_client(
    settings: AkashSettings, registry: ModelRegistry = DEFAULT_REGISTRY
) -> AkashChatClient:
    return AkashChatClient(settings, registry)


__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "AkashChatClient",
    "create_client",
    "normalize_messages",
    "parse_allowed_models",
]
