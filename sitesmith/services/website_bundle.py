"""
Website bundle service for previewing, copying and downloading generated code.

Generated code is treated as opaque text: it is placed verbatim into the
preview document and the downloaded files, never escaped or rewritten.
"""
import io
import re
import zipfile
from typing import List, Tuple

from sitesmith.schemas.message import GeneratedWebsite

FALLBACK_SLUG = "website"

# Fixed names used when a single file is copied or downloaded on its own
FILE_NAMES = {
    "html": "index.html",
    "css": "styles.css",
    "javascript": "script.js",
}

PREVIEW_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Preview</title>
  <style>{css}</style>
</head>
<body>
{html}
<script>{javascript}</script>
</body>
</html>
"""


def slugify_title(title: str) -> str:
    """Lowercase the title and join its alphanumeric runs with dashes."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or FALLBACK_SLUG


def bundle_files(website: GeneratedWebsite) -> List[Tuple[str, str]]:
    """Return (filename, content) pairs for the html, css and js files."""
    slug = slugify_title(website.title)
    return [
        (f"{slug}.html", website.html),
        (f"{slug}.css", website.css),
        (f"{slug}.js", website.javascript),
    ]


def single_file(website: GeneratedWebsite, kind: str) -> Tuple[str, str]:
    """Return (filename, content) for one of html, css or javascript."""
    try:
        filename = FILE_NAMES[kind]
    except KeyError:
        raise ValueError(f"Unknown file kind: {kind}") from None
    return filename, getattr(website, kind)


def combined_source(website: GeneratedWebsite) -> str:
    """All three files as one clipboard-friendly text."""
    return (
        f"<!-- HTML -->\n{website.html}\n\n"
        f"/* CSS */\n{website.css}\n\n"
        f"// JavaScript\n{website.javascript}"
    )


def build_preview_document(website: GeneratedWebsite) -> str:
    """Standalone HTML document with the CSS and JS inlined."""
    # str.format does not re-scan substituted values, so braces in css/js are safe
    return PREVIEW_TEMPLATE.format(
        css=website.css,
        html=website.html,
        javascript=website.javascript,
    )


def build_zip(website: GeneratedWebsite) -> bytes:
    """ZIP archive containing the bundle files."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for filename, content in bundle_files(website):
            archive.writestr(filename, content)
    return buffer.getvalue()
