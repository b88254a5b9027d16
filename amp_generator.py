"""
AMP variants of content pages.

Each page is re-rendered with the `amp` layout (or its own layout when no
`amp` layout exists), images become <amp-img>, non-AMP scripts are dropped,
and the result is written next to the page as `amp.html`.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Mapping

from site_config import AMP_PAGE_NAME
from template_manager import TemplateManager

logger = logging.getLogger(__name__)

AMP_LAYOUT = "amp"

_IMG_RE = re.compile(r"<img\b([^>]*?)\s*/?>", re.IGNORECASE)
_SCRIPT_RE = re.compile(r"<script\b([^>]*)>.*?</script>", re.IGNORECASE | re.DOTALL)
_ALLOWED_SCRIPT_RE = re.compile(r'type="application/ld\+json"|src="https://cdn\.ampproject\.org/', re.IGNORECASE)


def amplify(page_html: str) -> str:
    """Apply the AMP markup rules to rendered HTML."""

    def _img(match: re.Match[str]) -> str:
        attrs = match.group(1)
        if "layout=" not in attrs:
            attrs += ' layout="responsive"'
        return f"<amp-img{attrs}></amp-img>"

    def _script(match: re.Match[str]) -> str:
        return match.group(0) if _ALLOWED_SCRIPT_RE.search(match.group(1)) else ""

    return _IMG_RE.sub(_img, _SCRIPT_RE.sub(_script, page_html))


class AmpGenerator:
    """Writes `<dest>/<path>/amp.html` for a page's template data."""

    def __init__(self, base_source_dir: Path, base_dest_dir: Path, template_manager: TemplateManager):
        self.base_source_dir = Path(base_source_dir)
        self.base_dest_dir = Path(base_dest_dir)
        self.template_manager = template_manager

    async def generate(self, template_data: Mapping[str, Any]) -> Path:
        layout = AMP_LAYOUT if self.template_manager.has_template(AMP_LAYOUT) else template_data.get("layout") or "default"
        render = self.template_manager.get_template(layout)
        data = dict(template_data, is_amp=True)
        amp_html = amplify(render(data))

        out_dir = self.base_dest_dir / template_data.get("path", "")
        out_file = out_dir / AMP_PAGE_NAME
        await asyncio.to_thread(_write, out_file, amp_html)
        logger.debug("AMP %s", out_file)
        return out_file


def _write(out_file: Path, content: str) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(content, encoding="utf-8")
