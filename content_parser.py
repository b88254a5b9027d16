"""
Content file parsing: front matter, relative reference rewriting, markdown -> HTML,
and excerpt extraction.
"""

from __future__ import annotations

import posixpath
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import frontmatter
import markdown

from highlight import CodeHighlighter
from page_models import PageConfig
from site_config import SiteBuildError


MARKDOWN_EXTENSIONS = ["extra", "smarty"]

# optional leading YYYY-MM-DD, optional "_" or "-" separator, remainder is the slug
DATE_SLUG_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})?[_-]?(.*)$", re.DOTALL)

# ![alt](smile.png) or ![alt](smile.png "title"); targets with a scheme or a slash are left alone
_MD_IMAGE_RE = re.compile(r'(!\[[^\]]*\]\()([^)"/:\s#?]+)((?:\s+"[^"]*")?\))')
# <img src="smile.png"> / <a href="photo.jpg">
_HTML_REF_RE = re.compile(r'((?<![\w-])(?:src|href)=")([^"/:#?]+)(")')
_FIRST_PARAGRAPH_RE = re.compile(r"<p>(.*?)</p>", re.DOTALL)


class UnsupportedExtensionError(SiteBuildError):
    """A content file has an extension the parser cannot convert."""


def derive_date_slug(name: str) -> Tuple[Optional[str], str]:
    """Split '2024-01-05-hello-world' into ('2024-01-05', 'hello-world')."""
    match = DATE_SLUG_RE.match(name)
    if match is None:
        return None, name
    return match.group(1), match.group(2)


def strip_extension(filename: str) -> str:
    return re.sub(r"\.\w+$", "", filename)


def rewrite_relative_references(text: str, page_path: str) -> str:
    """Prefix bare relative image/src/href targets with the page's site path."""

    def _prefix(match: re.Match[str]) -> str:
        target = posixpath.join("/", page_path, match.group(2))
        return f"{match.group(1)}{target}{match.group(3)}"

    text = _MD_IMAGE_RE.sub(_prefix, text)
    return _HTML_REF_RE.sub(_prefix, text)


def extract_excerpt(content_html: str) -> Optional[str]:
    """Inner HTML of the first <p> element, or None when there is no paragraph."""
    match = _FIRST_PARAGRAPH_RE.search(content_html)
    return match.group(1) if match else None


def convert_markdown(md_text: str, highlighter: Optional[CodeHighlighter] = None) -> str:
    """Convert markdown to HTML, optionally highlighting fenced code blocks."""
    content_html = markdown.markdown(md_text, extensions=MARKDOWN_EXTENSIONS)
    if highlighter is not None:
        content_html = highlighter.highlight_html(content_html)
    return content_html


def read_content_file(source: Path) -> Tuple[Dict[str, Any], str]:
    """Return (front matter, body) for a content file."""
    post = frontmatter.loads(Path(source).read_text(encoding="utf-8"))
    return dict(post.metadata), post.content


def render_body(page: PageConfig, body: str, highlighter: Optional[CodeHighlighter] = None) -> str:
    """Convert a content body to HTML for `page`.

    `page.path` must already be resolved; relative references are rewritten
    against it. A missing excerpt is derived from the first paragraph.
    """
    body = rewrite_relative_references(body, page.path)

    extension = Path(page.filename).suffix[1:]
    if extension == "md":
        content_html = convert_markdown(body, highlighter)
    else:
        raise UnsupportedExtensionError(f"File extension not supported: {extension}")

    if not page.excerpt:
        page.excerpt = extract_excerpt(content_html)
    return content_html
