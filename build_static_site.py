#!/usr/bin/env python3
"""
Static site generator for a nested folder of markdown content.

Features:
- Every .md file becomes <slug>/index.html; a folder holding index.md is one page
- Dated names (2024-01-05-hello-world.md) give the page its date and slug
- Per-folder _config.yml overrides, inherited by subfolders
- Jinja2 layouts (_layouts/) with CSS partials (_styles/), AMP variants
- Folder template pages (*.j2) listing every page beneath them
- Redirect pages and a JSON search index

Usage:
  python build_static_site.py --input ./content --output ./_dist
  python build_static_site.py --input ./content --output ./_dist --no-amp --title "My Site"
"""

from __future__ import annotations

import argparse
import asyncio
import html
import json
import logging
import os
import shutil
import stat
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from content_generator import ContentGenerator, GeneratorOptions
from page_models import PageConfig
from site_config import CONTENT_PAGE_NAME, SiteBuildError, build_site_config
from template_manager import TemplateManager

logger = logging.getLogger("build_static_site")

REDIRECT_TEMPLATE = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>Redirecting&hellip;</title>
    <link rel="canonical" href="{target}">
    <meta http-equiv="refresh" content="0; url={target}">
    <meta name="robots" content="noindex">
  </head>
  <body>
    <p>This page has moved to <a href="{target}">{target}</a>.</p>
  </body>
</html>
"""


# -- site-level outputs --
def write_redirects(output_root: Path, redirects: Mapping[str, str]) -> List[Path]:
    """Write a meta-refresh page at each redirect source path."""
    written: List[Path] = []
    for source, target in redirects.items():
        rel = str(source).strip("/")
        if not rel:
            logger.warning("Skipping redirect from site root to '%s'; it would replace the home page", target)
            continue
        out_dir = output_root / rel
        out_dir.mkdir(parents=True, exist_ok=True)
        out_file = out_dir / CONTENT_PAGE_NAME
        out_file.write_text(REDIRECT_TEMPLATE.format(target=html.escape(str(target), quote=True)), encoding="utf-8")
        written.append(out_file)
    return written


def write_search_index(output_root: Path, pages: List[PageConfig]) -> Path:
    # Build a minimal index: [{title, path, excerpt, date}]
    records: List[Dict[str, Any]] = []
    for page in pages:
        href = "/" + f"{page.path}/".lstrip("/")
        records.append({
            "title": page.title or "",
            "path": href,
            "excerpt": page.excerpt or "",
            "date": page.date or "",
        })

    (output_root / "assets").mkdir(parents=True, exist_ok=True)
    index_path = output_root / "assets" / "search_index.json"
    index_path.write_text(json.dumps(records), encoding="utf-8")
    return index_path


def clean_output(output_root: Path) -> None:
    """Remove and recreate the output folder."""
    if output_root.exists():
        def _handle_remove_readonly(func, path, exc):  # Windows: clear read-only then retry
            os.chmod(path, stat.S_IWRITE)
            func(path)
        shutil.rmtree(output_root, onexc=_handle_remove_readonly)
    output_root.mkdir(parents=True, exist_ok=True)


async def build_site(input_root: Path, output_root: Path, layouts_dir: Path, styles_dir: Path,
                     options: GeneratorOptions, overrides: Optional[Mapping[str, Any]] = None) -> List[PageConfig]:
    """Compile the whole content tree and write the site-level outputs."""
    site_config = build_site_config(input_root, overrides)
    generator = ContentGenerator(TemplateManager(layouts_dir, styles_dir), options)
    pages = await generator.build(site_config, input_root, output_root)

    write_redirects(output_root, site_config["redirects"])
    write_search_index(output_root, pages)
    return pages


# -- CLI --
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a static site from a folder of markdown content.")
    parser.add_argument("--input", type=Path, default=Path("./content"), help="Content folder to compile")
    parser.add_argument("--output", type=Path, default=Path("./_dist"), help="Output folder for generated site")
    parser.add_argument("--layouts", type=Path, default=None, help="Layouts folder (default: <input>/_layouts)")
    parser.add_argument("--styles", type=Path, default=None, help="Style partials folder (default: <input>/_styles)")
    parser.add_argument("--title", type=str, default="", help="Override the site title")
    parser.add_argument("--url", type=str, default="", help="Override the site base URL")
    parser.add_argument("--no-amp", action="store_true", help="Do not write AMP variants")
    parser.add_argument("--no-highlight", action="store_true", help="Do not highlight fenced code blocks")
    parser.add_argument("--no-clean", action="store_true", help="Keep existing files in the output folder")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    input_root: Path = args.input.expanduser().resolve()
    output_root: Path = args.output.expanduser().resolve()
    if not input_root.is_dir():
        logger.error("Input directory not found: %s", input_root)
        return 1

    if not args.no_clean:
        clean_output(output_root)
    else:
        output_root.mkdir(parents=True, exist_ok=True)

    options = GeneratorOptions(render_amp_pages=not args.no_amp, code_highlight=not args.no_highlight)
    try:
        pages = asyncio.run(build_site(
            input_root,
            output_root,
            layouts_dir=args.layouts or input_root / "_layouts",
            styles_dir=args.styles or input_root / "_styles",
            options=options,
            overrides={"title": args.title, "url": args.url},
        ))
    except SiteBuildError as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Site generated at: %s (%d pages)", output_root, len(pages))
    return 0


if __name__ == "__main__":
    sys.exit(main())
