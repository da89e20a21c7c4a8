"""
Tests for the generation request handler.
"""
import asyncio

import pytest

from sitesmith.core.exceptions import (
    IncompleteResultError,
    MalformedResponseError,
    StoreError,
    TransportError,
    ValidationError,
)
from sitesmith.services.generation_handler import GenerationHandler
from tests.conftest import FakeGenerator


class TestHandleSuccess:
    """A successful generation appends exactly two messages."""

    def test_persists_user_and_assistant_messages(self, store, blog_website):
        """Test a completed request stores the prompt and the reply."""
        handler = GenerationHandler(store, FakeGenerator(website=blog_website))

        result = asyncio.run(handler.handle("Make a blog", "s1"))

        messages = store.list_by_session("s1")
        assert len(messages) == 2
        user, assistant = messages
        assert user.role == "user"
        assert user.content == "Make a blog"
        assert user.generated_code is None
        assert assistant.role == "assistant"
        assert assistant.generated_code == blog_website
        assert assistant.content == "I've generated a My Blog for you. Here's the complete code:"

        assert result.user_message == user
        assert result.ai_message == assistant
        assert result.generated_code == blog_website

    def test_appends_to_existing_history(self, store, blog_website):
        """Test new messages follow the existing history."""
        handler = GenerationHandler(store, FakeGenerator(website=blog_website))
        asyncio.run(handler.handle("Make a blog", "s1"))
        asyncio.run(handler.handle("Make it darker", "s1"))

        contents = [m.content for m in store.list_by_session("s1") if m.role == "user"]
        assert contents == ["Make a blog", "Make it darker"]


class TestHandleValidation:
    """Empty input is rejected before the generator is called."""

    @pytest.mark.parametrize("prompt,session_id", [("", "s1"), ("Make a blog", "")])
    def test_empty_input(self, store, blog_website, prompt, session_id):
        """Test empty prompt or session id fails validation."""
        generator = FakeGenerator(website=blog_website)
        handler = GenerationHandler(store, generator)

        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(handler.handle(prompt, session_id))

        assert exc_info.value.status_code == 400
        assert generator.prompts == []
        assert store.list_by_session("s1") == []


class TestHandleFailure:
    """A failed generation leaves the log untouched."""

    @pytest.mark.parametrize(
        "error",
        [
            TransportError("connection refused"),
            MalformedResponseError("not json"),
            IncompleteResultError("missing css"),
        ],
    )
    def test_generation_error_persists_nothing(self, store, blog_website, error):
        """Test generation failures leave the store unchanged."""
        handler = GenerationHandler(store, FakeGenerator(website=blog_website))
        asyncio.run(handler.handle("Make a blog", "s1"))
        before = len(store.list_by_session("s1"))

        failing = GenerationHandler(store, FakeGenerator(error=error))
        with pytest.raises(type(error)):
            asyncio.run(failing.handle("Make a shop", "s1"))

        assert len(store.list_by_session("s1")) == before

    def test_store_failure_propagates(self, blog_website):
        """Test store errors reach the caller."""
        class FailingStore:
            def create_many(self, messages):
                raise StoreError("Failed to save messages")

        handler = GenerationHandler(FailingStore(), FakeGenerator(website=blog_website))
        with pytest.raises(StoreError):
            asyncio.run(handler.handle("Make a blog", "s1"))
