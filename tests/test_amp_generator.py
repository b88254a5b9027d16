"""Unit tests for AMP variants."""

from __future__ import annotations

import pytest

from amp_generator import AmpGenerator, amplify


class TestAmplify:

    def test_images(self) -> None:
        assert amplify('<img src="/a.png" alt="A" />') == '<amp-img src="/a.png" alt="A" layout="responsive"></amp-img>'

    def test_explicit_layout_kept(self) -> None:
        assert amplify('<img src="/a.png" layout="fixed">') == '<amp-img src="/a.png" layout="fixed"></amp-img>'

    def test_scripts(self) -> None:
        page = (
            '<script src="/app.js"></script>'
            '<script type="application/ld+json">{"@type": "BlogPosting"}</script>'
            '<script async src="https://cdn.ampproject.org/v0.js"></script>'
        )

        assert amplify(page) == (
            '<script type="application/ld+json">{"@type": "BlogPosting"}</script>'
            '<script async src="https://cdn.ampproject.org/v0.js"></script>'
        )


class TestAmpGenerator:

    @pytest.mark.asyncio
    async def test_writes_amp_file(self, site, template_manager) -> None:
        generator = AmpGenerator(site.source, site.dest, template_manager)

        out_file = await generator.generate({"path": "blog/post", "content_html": '<p><img src="/x.png"></p>'})

        assert out_file == site.dest / "blog" / "post" / "amp.html"
        assert out_file.read_text(encoding="utf-8") == (
            '<html amp><body><p><amp-img src="/x.png" layout="responsive"></amp-img></p></body></html>'
        )

    @pytest.mark.asyncio
    async def test_falls_back_to_page_layout(self, site, template_manager) -> None:
        (site.layouts / "amp.html").unlink()
        generator = AmpGenerator(site.source, site.dest, template_manager)

        out_file = await generator.generate({"path": "p", "layout": "special", "content_html": "<p>x</p>"})

        assert 'data-layout="special"' in out_file.read_text(encoding="utf-8")
