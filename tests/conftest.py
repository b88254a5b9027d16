"""
Shared pytest fixtures for the site generator tests.

- site: a temporary source tree, destination root and layouts folder
- site_config: a minimal read-only site configuration
- generator: a ContentGenerator wired to the temporary layouts
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

import pytest

from content_generator import ContentGenerator, GeneratorOptions
from template_manager import TemplateManager


DEFAULT_LAYOUT = """<!doctype html>
<html>
<head><title>{{ title }} | {{ site.title }}</title></head>
<body data-layout="default">{{ content_html|safe }}</body>
</html>
"""

SPECIAL_LAYOUT = """<html><body data-layout="special">{{ content_html|safe }}</body></html>
"""

AMP_LAYOUT = """<html amp><body>{{ content_html|safe }}<script src="/app.js"></script></body></html>
"""


@dataclass
class SiteTree:
    source: Path
    dest: Path
    layouts: Path
    styles: Path

    def write(self, rel: str, text: str = "") -> Path:
        path = self.source / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def read_output(self, rel: str) -> str:
        return (self.dest / rel).read_text(encoding="utf-8")


@pytest.fixture
def site(tmp_path: Path) -> SiteTree:
    tree = SiteTree(
        source=tmp_path / "content",
        dest=tmp_path / "dist",
        layouts=tmp_path / "layouts",
        styles=tmp_path / "styles",
    )
    for folder in (tree.source, tree.layouts, tree.styles):
        folder.mkdir(parents=True)
    (tree.layouts / "default.html").write_text(DEFAULT_LAYOUT, encoding="utf-8")
    (tree.layouts / "special.html").write_text(SPECIAL_LAYOUT, encoding="utf-8")
    (tree.layouts / "amp.html").write_text(AMP_LAYOUT, encoding="utf-8")
    (tree.styles / "main.css").write_text("body { color: #222; }", encoding="utf-8")
    return tree


@pytest.fixture
def site_config():
    return MappingProxyType({
        "title": "Test Site",
        "description": "A site for tests",
        "url": "https://example.test",
        "build_timestamp": "2024-01-01T00:00:00+00:00",
        "google_analytics_id": "",
        "redirects": {},
    })


@pytest.fixture
def template_manager(site: SiteTree) -> TemplateManager:
    return TemplateManager(site.layouts, site.styles)


@pytest.fixture
def generator(template_manager: TemplateManager) -> ContentGenerator:
    return ContentGenerator(template_manager, GeneratorOptions(render_amp_pages=True, code_highlight=True))
