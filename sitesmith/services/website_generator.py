"""
Website generator - turns a natural-language description into a website bundle.

Issues exactly one model call per request with a fixed system prompt and
JSON response mode, then validates the decoded object against a schema.
No retries, caching or streaming.
"""
import logging
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from sitesmith.core.config import settings
from sitesmith.core.exceptions import (
    IncompleteResultError,
    MalformedResponseError,
    TransportError,
)
from sitesmith.schemas.message import GeneratedWebsite
from sitesmith.services.json_parser import parse_llm_json_object
from sitesmith.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Generated Website"
DEFAULT_DESCRIPTION = "Generated website"

CODE_FIELDS = ("html", "css", "javascript")

SYSTEM_PROMPT = """You are Sitesmith, an expert web developer and AI assistant that generates complete, modern websites.

Your task is to create a complete website based on the user's request. Generate:
1. Complete HTML structure with semantic markup
2. Modern CSS with responsive design, animations, and professional styling
3. Interactive JavaScript for enhanced user experience
4. A descriptive title for the website
5. A brief description of what was created

Requirements:
- Use modern CSS features (flexbox, grid, custom properties, animations)
- Ensure responsive design for all screen sizes
- Include smooth animations and transitions
- Use professional color schemes and typography
- Generate clean, well-commented code
- Make the website fully functional and interactive

Respond with JSON in this exact format:
{
  "html": "complete HTML code",
  "css": "complete CSS code",
  "javascript": "complete JavaScript code",
  "description": "brief description of the website",
  "title": "website title"
}"""


class WebsiteOutput(BaseModel):
    """Shape the model is instructed to return."""
    html: Optional[str] = None
    css: Optional[str] = None
    javascript: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


def validate_website_output(data: dict) -> GeneratedWebsite:
    """
    Validate a decoded model response and fill in defaults.

    Raises:
        MalformedResponseError: A field has the wrong type
        IncompleteResultError: html, css or javascript is absent or empty
    """
    try:
        output = WebsiteOutput.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Unexpected field types in model output: {e}") from e

    missing = [name for name in CODE_FIELDS if not getattr(output, name)]
    if missing:
        raise IncompleteResultError(
            f"Model output is missing: {', '.join(missing)}"
        )

    return GeneratedWebsite(
        html=output.html,
        css=output.css,
        javascript=output.javascript,
        title=output.title or DEFAULT_TITLE,
        description=output.description or DEFAULT_DESCRIPTION,
    )


class WebsiteGenerator:
    """
    Gateway in front of the language model.

    Args:
        client: LLM client used for the single outbound call
        temperature: Sampling temperature
        max_tokens: Upper bound on generated tokens
    """

    def __init__(
        self,
        client: LLMClient,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self.client = client
        self.temperature = (
            temperature if temperature is not None else settings.GENERATION_TEMPERATURE
        )
        self.max_tokens = max_tokens or settings.GENERATION_MAX_TOKENS

    async def generate(self, prompt: str) -> GeneratedWebsite:
        """
        Generate a website from a description.

        Args:
            prompt: Non-empty natural-language description

        Returns:
            Validated website bundle

        Raises:
            TransportError: The model call failed
            MalformedResponseError: The response is not the expected JSON object
            IncompleteResultError: html, css or javascript is missing
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

        try:
            content = await self.client.chat(
                messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Model call failed: {e!r}")
            raise TransportError(f"Model call failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected model response envelope: {e!r}")
            raise MalformedResponseError(f"Unexpected model response envelope: {e}") from e

        data = parse_llm_json_object(content)
        website = validate_website_output(data)
        logger.info(f"Generated website '{website.title}'")
        return website


# Default generator instance
_default_generator: Optional[WebsiteGenerator] = None


def get_website_generator() -> WebsiteGenerator:
    """Get the default website generator (singleton)."""
    global _default_generator
    if _default_generator is None:
        _default_generator = WebsiteGenerator(
            LLMClient(
                max_tokens=settings.GENERATION_MAX_TOKENS,
                timeout=float(settings.LLM_TIMEOUT),
            )
        )
    return _default_generator
