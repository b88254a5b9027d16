"""Unit tests for code block highlighting."""

from __future__ import annotations

import logging

import pytest

from highlight import CodeHighlighter


@pytest.fixture
def highlighter() -> CodeHighlighter:
    return CodeHighlighter()


class TestCodeHighlighter:

    def test_shell_alias_resolves_to_bash(self, highlighter) -> None:
        lexer = highlighter.lexer_for("shell")

        assert lexer is not None
        assert "bash" in lexer.aliases

    def test_lexers_are_cached(self, highlighter) -> None:
        assert highlighter.lexer_for("python") is highlighter.lexer_for("python")

    def test_unknown_language_falls_back(self, highlighter, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="highlight"):
            out = highlighter.highlight_code("<b>x</b>", "no-such-language")

        assert out == "&lt;b&gt;x&lt;/b&gt;"
        assert "no-such-language" in caplog.text

    def test_highlight_html(self, highlighter) -> None:
        rendered = '<pre><code class="language-python">x = &quot;a&quot;\n</code></pre>'

        out = highlighter.highlight_html(rendered)

        assert out.startswith('<pre class="language-python"><code class="language-python">')
        assert "<span" in out

    def test_block_without_language(self, highlighter) -> None:
        out = highlighter.highlight_html("<pre><code>a &lt; b\n</code></pre>")

        assert out == '<pre class="language-markup"><code class="language-markup">a &lt; b\n</code></pre>'
