"""
Generation request handler - orchestrates one user turn.

Validating -> Generating -> Persisting -> Completed, with any failure
leaving the session's message log untouched.
"""
import logging
from dataclasses import dataclass
from enum import Enum

from sitesmith.core.exceptions import GenerationError, ValidationError
from sitesmith.schemas.message import GeneratedWebsite, Message, NewMessage
from sitesmith.services.message_store import MessageStore
from sitesmith.services.website_generator import WebsiteGenerator

logger = logging.getLogger(__name__)

ASSISTANT_REPLY_TEMPLATE = "I've generated a {title} for you. Here's the complete code:"


class RequestState(str, Enum):
    VALIDATING = "validating"
    GENERATING = "generating"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class GenerationResult:
    user_message: Message
    ai_message: Message
    generated_code: GeneratedWebsite


class GenerationHandler:
    """Runs a generation request against a generator and a message store."""

    def __init__(self, store: MessageStore, generator: WebsiteGenerator):
        self.store = store
        self.generator = generator

    async def handle(self, prompt: str, session_id: str) -> GenerationResult:
        """
        Generate a website and record the exchange.

        Nothing is persisted unless generation succeeds; on success the user
        prompt and the assistant reply are written in one store call.

        Raises:
            ValidationError: Empty prompt or session_id
            GenerationError: The generator failed
            StoreError: The store rejected the write
        """
        state = RequestState.VALIDATING
        if not prompt or not session_id:
            self._advance(state, RequestState.FAILED, session_id)
            raise ValidationError(
                "Prompt is required" if not prompt else "Session ID is required"
            )

        state = self._advance(state, RequestState.GENERATING, session_id)
        try:
            website = await self.generator.generate(prompt)
        except GenerationError as e:
            self._advance(state, RequestState.FAILED, session_id)
            logger.warning(f"Generation failed for session {session_id}: {e.detail}")
            raise

        state = self._advance(state, RequestState.PERSISTING, session_id)
        user_message, ai_message = self.store.create_many(
            [
                NewMessage(
                    content=prompt,
                    role="user",
                    session_id=session_id,
                    generated_code=None,
                ),
                NewMessage(
                    content=ASSISTANT_REPLY_TEMPLATE.format(title=website.title),
                    role="assistant",
                    session_id=session_id,
                    generated_code=website,
                ),
            ]
        )

        self._advance(state, RequestState.COMPLETED, session_id)
        return GenerationResult(
            user_message=user_message,
            ai_message=ai_message,
            generated_code=website,
        )

    @staticmethod
    def _advance(current: RequestState, target: RequestState, session_id: str) -> RequestState:
        logger.debug(f"Session {session_id}: {current.value} -> {target.value}")
        return target
