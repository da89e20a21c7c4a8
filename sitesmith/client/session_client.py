"""
Session client for the website generator API.

Holds one session id for its lifetime, mirrors the session's message log
locally and allows at most one generation in flight at a time.
"""
import logging
import secrets
import string
import time
import urllib.parse
from collections import deque
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from threading import Lock
from typing import Deque, Dict, List, Optional

import httpx

from sitesmith.schemas.message import GenerateResponse, Message
from sitesmith.services.website_bundle import (
    build_preview_document,
    bundle_files,
    combined_source,
    single_file,
    slugify_title,
)

logger = logging.getLogger(__name__)

QUICK_ACTIONS: Dict[str, str] = {
    "E-commerce": (
        "Create a modern e-commerce website with a product catalog, shopping cart, "
        "and checkout process. Use a clean design with purple accents."
    ),
    "Blog": (
        "Create a modern blog website with a clean layout, article cards, and "
        "responsive design. Include a hero section and about page."
    ),
    "Portfolio": (
        "Create a modern portfolio website with a hero section, about section, "
        "projects showcase, and contact form. Use a dark theme with purple accents."
    ),
    "Landing Page": (
        "Create a modern landing page with a hero section, features, testimonials, "
        "and call-to-action. Use gradients and smooth animations."
    ),
}

MAX_NOTIFICATIONS = 20

_BASE36 = string.digits + string.ascii_lowercase


def new_session_id() -> str:
    """Return an id like ``session_1718000000000_k3j9x0a1b``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class ClientState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    ERROR = "error"


@dataclass
class Notice:
    """Transient local notification."""
    title: str
    description: str
    variant: str = "default"


class ClientBusyError(RuntimeError):
    """A generation is already in flight for this client."""


class ClientRequestError(RuntimeError):
    """The API answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SessionClient:
    """
    Client bound to a single chat session.

    Args:
        base_url: Server root, e.g. ``http://localhost:8000``
        http_client: Pre-built client (takes precedence over base_url)
        session_id: Reuse an existing session instead of starting a new one
        api_prefix: Path prefix of the API routes
        timeout: Request timeout in seconds; generation can be slow
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http_client: Optional[httpx.Client] = None,
        session_id: Optional[str] = None,
        api_prefix: str = "/api",
        timeout: float = 180.0,
    ):
        self.http = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self.session_id = session_id or new_session_id()
        self.api_prefix = api_prefix.rstrip("/")
        self.state = ClientState.IDLE
        self.last_error: Optional[str] = None
        self.messages: List[Message] = []
        self.notifications: Deque[Notice] = deque(maxlen=MAX_NOTIFICATIONS)
        self._in_flight = Lock()

    @property
    def can_send(self) -> bool:
        return self.state != ClientState.SENDING

    def _url(self, path: str) -> str:
        return f"{self.api_prefix}{path}"

    def _session_path(self) -> str:
        # Session ids are opaque; reserved characters must not leak into the URL
        return f"/messages/{urllib.parse.quote(self.session_id, safe='')}"

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = self.http.request(method, self._url(path), **kwargs)
        except httpx.HTTPError as e:
            raise ClientRequestError(f"Could not reach server: {e}") from e

        if resp.is_error:
            try:
                message = resp.json().get("message") or resp.reason_phrase
            except ValueError:
                message = resp.reason_phrase
            raise ClientRequestError(message, resp.status_code)
        return resp

    def _notify(self, title: str, description: str, variant: str = "default") -> None:
        self.notifications.append(Notice(title, description, variant))

    # =========================================================================
    # Session operations
    # =========================================================================

    def refresh(self) -> List[Message]:
        """Reload the session's message log from the server."""
        resp = self._request("GET", self._session_path())
        self.messages = [Message.model_validate(m) for m in resp.json()]
        return self.messages

    def send(self, prompt: str) -> GenerateResponse:
        """
        Generate a website from a free-text prompt.

        Raises:
            ClientBusyError: Another generation is still running
            ClientRequestError: The server rejected or failed the request
        """
        if not self._in_flight.acquire(blocking=False):
            raise ClientBusyError("A website is already being generated")

        self.state = ClientState.SENDING
        self.last_error = None
        try:
            resp = self._request(
                "POST",
                "/generate",
                json={"prompt": prompt, "sessionId": self.session_id},
            )
            result = GenerateResponse.model_validate(resp.json())
            self.messages.extend([result.user_message, result.ai_message])
            self.state = ClientState.IDLE
            return result
        except ClientRequestError as e:
            self.state = ClientState.ERROR
            self.last_error = e.message
            logger.warning(f"Generation request failed: {e.message}")
            raise
        finally:
            if self.state == ClientState.SENDING:
                self.state = ClientState.ERROR
            self._in_flight.release()

    def quick_action(self, action: str) -> GenerateResponse:
        """Send one of the canned QUICK_ACTIONS prompts."""
        try:
            prompt = QUICK_ACTIONS[action]
        except KeyError:
            raise ValueError(f"Unknown quick action: {action}") from None
        return self.send(prompt)

    def clear(self) -> None:
        """Delete the session's history on the server and empty the local view."""
        self._request("DELETE", self._session_path())
        self.messages = []
        self._notify("Chat cleared", "Chat history has been cleared")

    # =========================================================================
    # Generated code actions
    # =========================================================================

    def copy_text(self, message: Message) -> str:
        """All generated code of a message as one text block."""
        if message.generated_code is None:
            raise ValueError("Message has no generated code")
        return combined_source(message.generated_code)

    def download(self, message: Message, directory: Path) -> List[Path]:
        """
        Write the html, css and js files of a message into ``directory``.

        File system failures become a notice; an empty list is returned.
        """
        if message.generated_code is None:
            raise ValueError("Message has no generated code")

        directory = Path(directory)
        written = []
        try:
            directory.mkdir(parents=True, exist_ok=True)
            for filename, content in bundle_files(message.generated_code):
                path = directory / filename
                path.write_text(content, encoding="utf-8")
                written.append(path)
        except OSError as e:
            logger.warning(f"Download failed: {e}")
            self._notify("Error", "Failed to download files", "destructive")
            return []

        self._notify("Downloaded!", "All files have been downloaded")
        return written

    def copy_file(self, message: Message, kind: str) -> str:
        """Content of a single generated file (html, css or javascript)."""
        if message.generated_code is None:
            raise ValueError("Message has no generated code")
        filename, content = single_file(message.generated_code, kind)
        self._notify("Copied!", f"{filename} copied to clipboard")
        return content

    def download_file(self, message: Message, kind: str, directory: Path) -> Optional[Path]:
        """
        Write one generated file under its fixed name (index.html, styles.css
        or script.js). Returns None and records a notice if the write fails.
        """
        if message.generated_code is None:
            raise ValueError("Message has no generated code")

        filename, content = single_file(message.generated_code, kind)
        path = Path(directory) / filename
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Download of {filename} failed: {e}")
            self._notify("Error", f"Failed to download {filename}", "destructive")
            return None

        self._notify("Downloaded!", f"{filename} has been downloaded")
        return path

    def save_preview(self, message: Message, directory: Path) -> Optional[Path]:
        """Write a standalone preview document; returns None on failure."""
        if message.generated_code is None:
            raise ValueError("Message has no generated code")

        slug = slugify_title(message.generated_code.title)
        path = Path(directory) / f"{slug}-preview.html"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(build_preview_document(message.generated_code), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Preview could not be written: {e}")
            self._notify("Error", "Failed to open preview", "destructive")
            return None

        self._notify("Preview Opened", f"Website preview saved to {path}")
        return path

    def close(self) -> None:
        self.http.close()
