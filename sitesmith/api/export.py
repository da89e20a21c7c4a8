"""
Export endpoints for previewing and downloading a generated website.
"""
import urllib.parse

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, Response

from sitesmith.core.deps import get_message_store
from sitesmith.core.exceptions import NotFoundError
from sitesmith.schemas.message import GeneratedWebsite
from sitesmith.services.message_store import MessageStore
from sitesmith.services.website_bundle import (
    build_preview_document,
    build_zip,
    slugify_title,
)

router = APIRouter(prefix="/messages", tags=["export"])

# Run generated scripts in an opaque origin, cut off from this API
PREVIEW_CSP = "sandbox allow-scripts"


def _encode_filename(filename: str) -> str:
    """Encode filename for Content-Disposition header (RFC 5987)."""
    safe_filename = filename.replace('"', "'").replace("\\", "_")
    encoded = urllib.parse.quote(safe_filename, safe="")
    return f"attachment; filename*=UTF-8''{encoded}"


def _get_website(store: MessageStore, session_id: str, message_id: int) -> GeneratedWebsite:
    message = store.get(session_id, message_id)
    if message is None or message.generated_code is None:
        raise NotFoundError("Generated website not found")
    return message.generated_code


@router.get("/{session_id}/{message_id}/preview", response_class=HTMLResponse)
def preview_website(
    session_id: str,
    message_id: int,
    store: MessageStore = Depends(get_message_store),
):
    """
    Render a generated website as a single sandboxed HTML document.
    """
    website = _get_website(store, session_id, message_id)
    return HTMLResponse(
        content=build_preview_document(website),
        headers={"Content-Security-Policy": PREVIEW_CSP},
    )


@router.get("/{session_id}/{message_id}/download")
def download_website(
    session_id: str,
    message_id: int,
    store: MessageStore = Depends(get_message_store),
):
    """
    Download a generated website as a ZIP of its html, css and js files.
    """
    website = _get_website(store, session_id, message_id)
    filename = f"{slugify_title(website.title)}.zip"

    return Response(
        content=build_zip(website),
        media_type="application/zip",
        headers={"Content-Disposition": _encode_filename(filename)},
    )
