"""
Tests for the session client.
"""
import re

import httpx
import pytest
from fastapi.testclient import TestClient

from sitesmith.client.session_client import (
    QUICK_ACTIONS,
    ClientBusyError,
    ClientRequestError,
    ClientState,
    SessionClient,
    new_session_id,
)
from sitesmith.core.exceptions import TransportError


@pytest.fixture
def session(client: TestClient) -> SessionClient:
    return SessionClient(http_client=client, session_id="s1")


class TestSessionId:
    """Tests for client-side session ids."""

    def test_format(self):
        """Test session id format."""
        assert re.fullmatch(r"session_\d+_[0-9a-z]{9}", new_session_id())

    def test_generated_once_per_client(self, client: TestClient):
        """Test a client keeps one session id."""
        session = SessionClient(http_client=client)
        first = session.session_id
        session.refresh()
        assert session.session_id == first
        assert SessionClient(http_client=client).session_id != first


class TestSend:
    """Tests for sending prompts."""

    def test_send_appends_both_messages(self, session: SessionClient):
        """Test send mirrors both new messages locally."""
        result = session.send("Make a blog")

        assert session.state == ClientState.IDLE
        assert result.generated_code.title == "My Blog"
        assert [m.role for m in session.messages] == ["user", "assistant"]
        assert session.messages == session.refresh()

    def test_quick_action_sends_canned_prompt(self, session: SessionClient, generator):
        """Test quick actions send their canned prompt."""
        session.quick_action("Portfolio")
        assert generator.prompts == [QUICK_ACTIONS["Portfolio"]]

    def test_quick_actions_available(self):
        """Test the four quick actions."""
        assert set(QUICK_ACTIONS) == {"E-commerce", "Blog", "Portfolio", "Landing Page"}

    def test_unknown_quick_action(self, session: SessionClient, generator):
        """Test an unknown quick action sends nothing."""
        with pytest.raises(ValueError):
            session.quick_action("Forum")
        assert generator.prompts == []

    def test_second_send_refused_while_in_flight(self, session: SessionClient, generator):
        """Test only one generation runs at a time."""
        session._in_flight.acquire()
        try:
            with pytest.raises(ClientBusyError):
                session.send("Make a blog")
        finally:
            session._in_flight.release()
        assert generator.prompts == []

    def test_generation_failure_sets_error_state(self, session: SessionClient, generator):
        """Test a failed generation moves the client to error."""
        generator.error = TransportError("connection refused")

        with pytest.raises(ClientRequestError) as exc_info:
            session.send("Make a blog")

        assert exc_info.value.status_code == 500
        assert session.state == ClientState.ERROR
        assert session.last_error == "Failed to generate website. Please try again."
        assert session.messages == []
        assert session.can_send

    def test_recovers_after_error(self, session: SessionClient, generator):
        """Test the client can send again after an error."""
        generator.error = TransportError("connection refused")
        with pytest.raises(ClientRequestError):
            session.send("Make a blog")

        generator.error = None
        session.send("Make a blog")
        assert session.state == ClientState.IDLE
        assert session.last_error is None

    def test_validation_error_message(self, session: SessionClient):
        """Test validation errors surface the server message."""
        with pytest.raises(ClientRequestError) as exc_info:
            session.send("")
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid request data"

    def test_server_unreachable(self):
        """Test an unreachable server sets the error state."""
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        http = httpx.Client(base_url="http://sitesmith.test", transport=httpx.MockTransport(handler))
        session = SessionClient(http_client=http)

        with pytest.raises(ClientRequestError):
            session.send("Make a blog")
        assert session.state == ClientState.ERROR


class TestClear:
    """Tests for clearing history."""

    def test_clear_empties_server_and_local_view(self, session: SessionClient, store):
        """Test clear empties both server and local history."""
        session.send("Make a blog")

        session.clear()

        assert session.messages == []
        assert store.list_by_session("s1") == []
        assert session.notifications[-1].title == "Chat cleared"

    def test_reserved_characters_stay_in_own_session(self, client: TestClient, store):
        """Test that ids with URL-reserved characters only touch their own session."""
        team = SessionClient(http_client=client, session_id="team")
        other = SessionClient(http_client=client, session_id="team#1")
        team.send("Make a blog")
        other.send("Make a blog")

        assert [m.session_id for m in other.refresh()] == ["team#1", "team#1"]

        other.clear()

        assert store.list_by_session("team#1") == []
        assert len(store.list_by_session("team")) == 2
        assert len(team.refresh()) == 2

    @pytest.mark.parametrize("session_id", ["a?b=1", "50%off", "with space"])
    def test_reserved_characters_round_trip(self, client: TestClient, store, session_id):
        """Test refresh and clear address the exact session id."""
        session = SessionClient(http_client=client, session_id=session_id)
        session.send("Make a blog")

        assert len(session.refresh()) == 2
        session.clear()
        assert store.list_by_session(session_id) == []


class TestArtifactActions:
    """Tests for copy, download and preview of generated code."""

    def test_copy_text(self, session: SessionClient):
        """Test copy text combines the three files."""
        result = session.send("Make a blog")
        assert session.copy_text(result.ai_message).startswith("<!-- HTML -->\n<h1>Blog</h1>")

    def test_copy_text_requires_code(self, session: SessionClient):
        """Test copy text rejects messages without code."""
        result = session.send("Make a blog")
        with pytest.raises(ValueError):
            session.copy_text(result.user_message)

    def test_download_writes_files(self, session: SessionClient, tmp_path):
        """Test download writes the three slug-named files."""
        result = session.send("Make a blog")

        paths = session.download(result.ai_message, tmp_path / "out")

        assert [p.name for p in paths] == ["my-blog.html", "my-blog.css", "my-blog.js"]
        assert (tmp_path / "out" / "my-blog.css").read_text(encoding="utf-8") == "h1{color:red}"
        assert session.notifications[-1].title == "Downloaded!"

    def test_download_failure_becomes_notice(self, session: SessionClient, tmp_path):
        """Test a failed download records a destructive notice."""
        result = session.send("Make a blog")
        blocker = tmp_path / "taken"
        blocker.write_text("not a directory")

        paths = session.download(result.ai_message, blocker)

        assert paths == []
        notice = session.notifications[-1]
        assert notice.variant == "destructive"
        assert notice.description == "Failed to download files"
        assert session.state == ClientState.IDLE

    def test_save_preview(self, session: SessionClient, tmp_path):
        """Test saving a standalone preview document."""
        result = session.send("Make a blog")

        path = session.save_preview(result.ai_message, tmp_path)

        assert path.name == "my-blog-preview.html"
        assert "<h1>Blog</h1>" in path.read_text(encoding="utf-8")

    def test_copy_single_file(self, session: SessionClient):
        """Test copying one file returns its content and names it in the notice."""
        result = session.send("Make a blog")

        assert session.copy_file(result.ai_message, "css") == "h1{color:red}"
        notice = session.notifications[-1]
        assert notice.title == "Copied!"
        assert notice.description == "styles.css copied to clipboard"

    def test_download_single_file(self, session: SessionClient, tmp_path):
        """Test downloading one file writes it under its fixed name."""
        result = session.send("Make a blog")

        path = session.download_file(result.ai_message, "html", tmp_path)

        assert path == tmp_path / "index.html"
        assert path.read_text(encoding="utf-8") == "<h1>Blog</h1>"
        notice = session.notifications[-1]
        assert notice.title == "Downloaded!"
        assert notice.description == "index.html has been downloaded"

    def test_download_single_file_failure_becomes_notice(self, session: SessionClient, tmp_path):
        """Test a failed single-file write records a destructive notice."""
        result = session.send("Make a blog")
        blocker = tmp_path / "taken"
        blocker.write_text("not a directory")

        assert session.download_file(result.ai_message, "javascript", blocker) is None
        notice = session.notifications[-1]
        assert notice.variant == "destructive"
        assert notice.description == "Failed to download script.js"

    def test_single_file_actions_require_code(self, session: SessionClient, tmp_path):
        """Test single-file actions reject messages without generated code."""
        result = session.send("Make a blog")
        with pytest.raises(ValueError):
            session.copy_file(result.user_message, "html")
        with pytest.raises(ValueError):
            session.download_file(result.user_message, "html", tmp_path)
