"""
Syntax highlighting for fenced code blocks.

Markdown renders ```lang blocks as <pre><code class="language-lang">; this module
re-renders those blocks through Pygments. Lexers are looked up on first use and
cached; an unknown language is logged once and rendered unhighlighted.

markdown's `codehilite` extension is not used: it has no hook for logging a
language that fails to load and falls back to plain text silently.
"""

from __future__ import annotations

import html
import logging
import re
from typing import Dict, Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

LANGUAGE_ALIASES = {"shell": "bash"}
DEFAULT_LANGUAGE = "markup"
LANG_PREFIX = "language-"

_CODE_BLOCK_RE = re.compile(
    r'<pre><code(?: class="language-(?P<lang>[^"\s]+)")?>(?P<code>.*?)</code></pre>',
    re.DOTALL,
)


class CodeHighlighter:
    """Resolves Pygments lexers by language name and renders code blocks."""

    def __init__(self) -> None:
        self._lexers: Dict[str, Optional[Lexer]] = {}
        self._formatter = HtmlFormatter(nowrap=True)

    def lexer_for(self, lang: str) -> Optional[Lexer]:
        lang = LANGUAGE_ALIASES.get(lang, lang)
        if lang not in self._lexers:
            try:
                self._lexers[lang] = get_lexer_by_name(lang)
            except ClassNotFound as exc:
                logger.warning("Unable to load highlighter for language '%s' - %s", lang, exc)
                self._lexers[lang] = None
        return self._lexers[lang]

    def highlight_code(self, code: str, lang: str) -> str:
        """Return highlighted HTML for raw `code`, or escaped text if no lexer is available."""
        lexer = self.lexer_for(lang) if lang != DEFAULT_LANGUAGE else None
        if lexer is None:
            return html.escape(code, quote=False)
        return highlight(code, lexer, self._formatter).rstrip("\n")

    def highlight_html(self, content_html: str) -> str:
        """Re-render every <pre><code> block in rendered markdown."""

        def _repl(match: re.Match[str]) -> str:
            lang = match.group("lang") or DEFAULT_LANGUAGE
            code = html.unescape(match.group("code"))
            class_name = f"{LANG_PREFIX}{LANGUAGE_ALIASES.get(lang, lang)}"
            body = self.highlight_code(code, lang)
            return f'<pre class="{class_name}"><code class="{class_name}">{body}</code></pre>'

        return _CODE_BLOCK_RE.sub(_repl, content_html)
