"""Integration tests for ChatSession with a scripted client."""

from typing import Iterable, List, Optional

import pytest
from akashchat.config import DEFAULT_MODEL, DEFAULT_REGISTRY
from akashchat.interfaces import CompletionOptions, CompletionResult, Failure, Message, Success
from akashchat.provider_akash import INVALID_RESPONSE_MESSAGE
from akashchat.session import APOLOGY, GREETING, ChatSession

ACTIVE_MODEL = "DeepSeek-R1"


class ScriptedClient:
    """Mock chat client that replays queued results and records every call."""

    def __init__(self, *results: CompletionResult, model: str = ACTIVE_MODEL):
        self._results = list(results)
        self._model = model
        self.calls: List[tuple] = []

    @property
    def model(self) -> str:
        return self._model

    def complete(
        self,
        messages: Iterable[Message],
        model: Optional[str] = None,
        options: Optional[CompletionOptions] = None,
    ) -> CompletionResult:
        self.calls.append((list(messages), model))
        return self._results.pop(0)


@pytest.fixture
def session_factory():
    """Build a session around a scripted client."""

    def build(*results, greeting=GREETING, **kwargs):
        client = ScriptedClient(*results)
        return ChatSession(client, DEFAULT_REGISTRY, greeting=greeting, **kwargs), client

    return build


class TestChatSession:
    """Integration tests for ChatSession turn handling."""

    def test_starts_with_greeting(self, session_factory):
        """Test the transcript opens with the assistant greeting."""
        session, _ = session_factory()
        assert session.transcript == (Message(role="assistant", content=GREETING),)
        assert session.model == ACTIVE_MODEL

    def test_success_appends_assistant_reply(self, session_factory):
        """Test a successful turn appends user and assistant messages."""
        session, client = session_factory(Success(content="Hello!"))

        outcome = session.send("Hi")

        assert outcome is not None
        assert not outcome.switched
        assert session.transcript[-2:] == (
            Message(role="user", content="Hi"),
            Message(role="assistant", content="Hello!"),
        )
        assert session.error is None

    def test_full_history_is_sent(self, session_factory):
        """Test each call carries the whole accumulated transcript."""
        session, client = session_factory(Success(content="one"), Success(content="two"))

        session.send("first")
        session.send("second")

        history, model = client.calls[1]
        assert [m.content for m in history] == [GREETING, "first", "one", "second"]
        assert model == ACTIVE_MODEL

    def test_rejected_model_switches_without_reply(self, session_factory):
        """Test a suggested model is applied and no assistant turn is added."""
        session, _ = session_factory(
            Failure(message="Team not allowed to access model", suggested_model="A")
        )

        outcome = session.send("Hi")

        assert outcome.switched
        assert outcome.switched_from == ACTIVE_MODEL
        assert session.model == "A"
        assert session.transcript[-1] == Message(role="user", content="Hi")
        assert session.error == (
            f"Model '{ACTIVE_MODEL}' is not available. Switched to 'A'. Please try again."
        )

    def test_switch_is_not_resubmitted(self, session_factory):
        """Test the session waits for the user after switching models."""
        session, client = session_factory(
            Failure(message="denied", suggested_model=DEFAULT_MODEL),
            Success(content="Hello!"),
        )

        session.send("Hi")
        assert len(client.calls) == 1

        session.send("Hi again")
        _, model = client.calls[1]
        assert model == DEFAULT_MODEL

    def test_same_suggestion_appends_apology(self, session_factory):
        """Test a failure suggesting the current model apologizes instead."""
        session, _ = session_factory(
            Failure(message="model overloaded", suggested_model=ACTIVE_MODEL)
        )

        outcome = session.send("Hi")

        assert not outcome.switched
        assert session.model == ACTIVE_MODEL
        assert session.transcript[-1] == Message(role="assistant", content=APOLOGY)
        assert session.error == "model overloaded"

    def test_malformed_response_appends_apology(self, session_factory):
        """Test a failure without a suggestion apologizes."""
        session, _ = session_factory(Failure(message=INVALID_RESPONSE_MESSAGE))

        session.send("Hi")

        assert session.transcript[-1] == Message(role="assistant", content=APOLOGY)
        assert session.error == INVALID_RESPONSE_MESSAGE

    def test_error_cleared_on_next_turn(self, session_factory):
        """Test a new turn clears the previous notice."""
        session, _ = session_factory(
            Failure(message="Invalid response format from API"), Success(content="ok")
        )

        session.send("Hi")
        session.send("Hi again")

        assert session.error is None

    def test_blank_input_is_ignored(self, session_factory):
        """Test whitespace-only input sends nothing."""
        session, client = session_factory()

        assert session.send("   ") is None
        assert client.calls == []
        assert len(session.transcript) == 1

    def test_missing_api_key_blocks_sending(self, session_factory):
        """Test sending is disabled without an API key."""
        session, client = session_factory(api_key_present=False)

        assert not session.can_send
        assert session.send("Hi") is None
        assert client.calls == []

    def test_transcript_only_grows(self, session_factory):
        """Test earlier entries are never rewritten."""
        session, _ = session_factory(
            Success(content="one"), Failure(message="boom"), Success(content="three")
        )

        snapshots = []
        for text in ("a", "b", "c"):
            session.send(text)
            snapshots.append(session.transcript)

        for earlier, later in zip(snapshots, snapshots[1:]):
            assert later[: len(earlier)] == earlier

    def test_unknown_initial_model_falls_back(self, session_factory):
        """Test an unknown starting model resolves to the registry default."""
        session, _ = session_factory(model="mystery-model")
        assert session.model == DEFAULT_MODEL

    def test_select_model(self, session_factory):
        """Test explicit model selection goes through the registry."""
        session, _ = session_factory(greeting=None)
        assert session.transcript == ()
        assert session.select_model("DeepSeek-R1-Distill-Qwen-14B") == "DeepSeek-R1-Distill-Qwen-14B"
        assert session.select_model("nope") == DEFAULT_MODEL
