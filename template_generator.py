"""
Directory template pages.

A `<name>.j2` file in a source directory is a template page: it is rendered
after the whole directory subtree has been compiled, with `pages` holding
every page produced beneath that directory (listing pages, archives, feeds).

    index.j2        -> <dest>/index.html
    feed.xml.j2     -> <dest>/feed.xml
    archive.j2      -> <dest>/archive/index.html

Front matter `paginate: N` splits `pages` into chunks of N; chunk k > 1 goes
to `<base>/page/<k>/index.html`.
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import frontmatter

from site_config import CONTENT_PAGE_NAME, IGNORE_PREFIXES, TEMPLATE_PAGE_EXTENSION
from template_manager import TemplateManager

logger = logging.getLogger(__name__)


def list_template_pages(source_dir: Path) -> List[Path]:
    suffix = f".{TEMPLATE_PAGE_EXTENSION}"
    return [
        p for p in sorted(Path(source_dir).iterdir())
        if p.is_file() and p.name.endswith(suffix) and not p.name.startswith(IGNORE_PREFIXES)
    ]


def output_target(dest_dir: Path, template_name: str) -> Path:
    """Map a template file name to the file it renders into."""
    stem = template_name[: -len(TEMPLATE_PAGE_EXTENSION) - 1]
    if stem == "index":
        return dest_dir / CONTENT_PAGE_NAME
    if "." in stem:
        return dest_dir / stem
    return dest_dir / stem / CONTENT_PAGE_NAME


class TemplateGenerator:
    """Renders a directory's template pages against the pages of its subtree."""

    def __init__(self, base_template_data: Mapping[str, Any], template_manager: TemplateManager,
                 base_dest_dir: Path):
        self.base_template_data = base_template_data
        self.template_manager = template_manager
        self.base_dest_dir = Path(base_dest_dir)

    def generate(self, source_dir: Path, dest_dir: Path, directory_config: Mapping[str, Any],
                 pages: List[Dict[str, Any]]) -> List[Path]:
        """Render every template page in `source_dir`; return the files written."""
        written: List[Path] = []
        for template_path in list_template_pages(source_dir):
            post = frontmatter.loads(template_path.read_text(encoding="utf-8"))
            render = self.template_manager.compile(post.content)
            target = output_target(Path(dest_dir), template_path.name)

            per_page = int(post.metadata.get("paginate") or 0)
            chunks = _paginate(pages, per_page)
            base_path = self._site_path(target.parent)
            for number, chunk in enumerate(chunks, start=1):
                out_file = target if number == 1 else target.parent / "page" / str(number) / CONTENT_PAGE_NAME
                data: Dict[str, Any] = dict(self.base_template_data)
                data.update(directory_config)
                data.update(post.metadata)
                data.update(
                    page=dict(post.metadata, path=self._site_path(out_file.parent)),
                    pages=chunk,
                    all_pages=pages,
                    paginator=_paginator(number, len(chunks), base_path),
                )
                out_file.parent.mkdir(parents=True, exist_ok=True)
                out_file.write_text(render(data), encoding="utf-8")
                logger.info("%s", out_file.relative_to(self.base_dest_dir).as_posix())
                written.append(out_file)
        return written

    def _site_path(self, directory: Path) -> str:
        rel = directory.relative_to(self.base_dest_dir).as_posix()
        return "" if rel == "." else rel


def _paginate(pages: List[Dict[str, Any]], per_page: int) -> List[List[Dict[str, Any]]]:
    if per_page <= 0 or not pages:
        return [list(pages)]
    return [pages[i:i + per_page] for i in range(0, len(pages), per_page)]


def _paginator(number: int, total: int, base_path: str) -> Dict[str, Optional[Any]]:
    def page_path(n: int) -> str:
        return base_path if n == 1 else posixpath.join(base_path, "page", str(n))

    return {
        "page": number,
        "total_pages": max(total, 1),
        "prev_path": page_path(number - 1) if number > 1 else None,
        "next_path": page_path(number + 1) if number < total else None,
    }
