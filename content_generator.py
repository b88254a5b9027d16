"""
Directory compilation: walks a content tree and writes the static site.

For every source directory, in order:
  1. merge the directory's `_config.yml` over the inherited configuration
  2. a directory holding `index.md` is a content package: one page whose date
     and slug come from the directory name
  3. resolve the destination (`dist_path` overrides the nested path)
  4. copy assets, render content files, recurse into subdirectories
  5. render the directory's template pages with every page of the subtree

Usage:
  generator = ContentGenerator(TemplateManager(layouts_dir, styles_dir))
  generator.initialize(site_config, source_root, dest_root)
  pages = await generator.compile(site_config, source_root, dest_root)
"""

from __future__ import annotations

import logging
import os
import posixpath
import shutil
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from amp_generator import AmpGenerator
from content_parser import derive_date_slug, read_content_file, render_body, strip_extension
from highlight import CodeHighlighter
from page_models import PageConfig
from site_config import (
    AMP_PAGE_NAME,
    ASSET_IGNORE_EXTENSIONS,
    CONTENT_EXTENSIONS,
    CONTENT_PAGE_NAME,
    IGNORE_PREFIXES,
    PACKAGE_INDEX,
    load_config_file,
    merge_config,
)
from template_generator import TemplateGenerator
from template_manager import TemplateManager

logger = logging.getLogger(__name__)

# site-level identity keys that pages do not inherit as their own values
SITE_IDENTITY_KEYS = ("title", "description")


@dataclass
class GeneratorOptions:
    render_amp_pages: bool = True
    code_highlight: bool = True


@dataclass
class DirectoryEntries:
    assets: List[str]
    content: List[str]
    subdirs: List[str]


def build_base_template_data(config: Mapping[str, Any], styles: List[Dict[str, str]]) -> Dict[str, Any]:
    """Site configuration plus style partials keyed by name (styles.default.content)."""
    data = dict(config)
    data["site"] = dict(config)
    data["styles"] = {style["name"]: style for style in styles}
    return data


def partition_entries(source_dir: Path, names: List[str]) -> DirectoryEntries:
    """Split a directory listing into asset files, content files and subdirectories."""
    entries = DirectoryEntries(assets=[], content=[], subdirs=[])
    for name in names:
        if name.startswith(IGNORE_PREFIXES):
            continue
        if (source_dir / name).is_dir():
            entries.subdirs.append(name)
            continue
        extension = Path(name).suffix[1:]
        if extension in CONTENT_EXTENSIONS:
            entries.content.append(name)
        if extension not in ASSET_IGNORE_EXTENSIONS:
            entries.assets.append(name)
    return entries


class ContentGenerator:
    """Compiles a source tree into `index.html` pages, assets and AMP variants."""

    def __init__(self, template_manager: TemplateManager, options: Optional[GeneratorOptions] = None):
        self.template_manager = template_manager
        self.options = options or GeneratorOptions()
        self.highlighter = CodeHighlighter() if self.options.code_highlight else None

        self.initialized = False
        self.site_config: Mapping[str, Any] = MappingProxyType({})
        self.base_source_dir = Path()
        self.base_dest_dir = Path()
        self.base_template_data: Dict[str, Any] = {}
        self.template_generator: Optional[TemplateGenerator] = None
        self.amp_generator: Optional[AmpGenerator] = None
        self._written: Dict[Path, str] = {}

    def initialize(self, config: Mapping[str, Any], source_root: Path, dest_root: Path) -> None:
        """Capture the roots and build the data shared by every page of a run."""
        self.site_config = MappingProxyType(dict(config))
        self.base_source_dir = Path(source_root)
        self.base_dest_dir = Path(dest_root)
        self.base_template_data = build_base_template_data(config, self.template_manager.load_styles())
        self.template_generator = TemplateGenerator(
            self.base_template_data, self.template_manager, self.base_dest_dir
        )
        self.amp_generator = None
        if self.options.render_amp_pages:
            self.amp_generator = AmpGenerator(self.base_source_dir, self.base_dest_dir, self.template_manager)
        self._written = {}
        self.initialized = True

    async def build(self, config: Mapping[str, Any], source_root: Path, dest_root: Path) -> List[PageConfig]:
        """Initialize for a run and compile the whole tree."""
        self.initialize(config, source_root, dest_root)
        return await self.compile(self.site_config, source_root, dest_root)

    async def compile(self, config: Mapping[str, Any], source_dir: Path, dest_dir: Path) -> List[PageConfig]:
        """Compile one directory and everything beneath it; return the pages produced."""
        if not self.initialized:
            raise RuntimeError("ContentGenerator.initialize() must be called before compile()")
        source_dir = Path(source_dir)
        dest_dir = Path(dest_dir)

        # what subdirectories inherit: never the package's own date/slug
        inherited = MappingProxyType(merge_config(config, load_config_file(source_dir)))
        current_config = dict(inherited)

        is_content_package = (source_dir / PACKAGE_INDEX).is_file()
        if is_content_package:
            date, slug = derive_date_slug(dest_dir.name)
            current_config.update(date=date, slug=slug)

        actual_dest_dir = self.resolve_dest_dir(current_config, dest_dir, is_content_package)
        actual_dest_dir.mkdir(parents=True, exist_ok=True)

        entries = partition_entries(source_dir, sorted(os.listdir(source_dir)))

        self.process_asset_files(source_dir, entries.assets, actual_dest_dir)

        pages = await self.process_content_files(
            source_dir, entries.content, actual_dest_dir, current_config, inherited
        )

        for name in entries.subdirs:
            pages.extend(await self.compile(inherited, source_dir / name, dest_dir / name))

        # template pages list the whole subtree, so they come last
        if self.template_generator is not None:
            self.template_generator.generate(
                source_dir, dest_dir, current_config, [page.as_dict(include_content=False) for page in pages]
            )

        return pages

    def resolve_dest_dir(self, config: Mapping[str, Any], dest_dir: Path, is_content_package: bool) -> Path:
        dist_path = config.get("dist_path")
        if not dist_path:
            return dest_dir
        resolved = self.base_dest_dir / str(dist_path).lstrip("/")
        if is_content_package:
            resolved = resolved / (config.get("slug") or "")
        return resolved

    def process_asset_files(self, source_dir: Path, asset_names: List[str], dest_dir: Path) -> None:
        for name in asset_names:
            shutil.copy2(source_dir / name, dest_dir / name)

    async def process_content_files(self, source_dir: Path, content_names: List[str], dest_dir: Path,
                                    current_config: Mapping[str, Any],
                                    inherited: Mapping[str, Any]) -> List[PageConfig]:
        pages: List[PageConfig] = []
        for name in content_names:
            # only the package's index.md takes the directory's date/slug
            seed = current_config if name == PACKAGE_INDEX else inherited
            page = PageConfig.from_mapping(self.page_seed(seed))
            page.filename = name
            page.source = str(source_dir / name)

            page, template_data = self.render_content_file(page, dest_dir)

            if self.amp_generator is not None:
                try:
                    await self.amp_generator.generate(template_data)
                except Exception as exc:
                    logger.error("Error generating AMP file for '%s' - %s", name, exc)

            # the rendered body is only needed for the page itself
            page.content_html = None
            pages.append(page)
        return pages

    def page_seed(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        seed = dict(config)
        for key in SITE_IDENTITY_KEYS:
            if key in seed and seed[key] == self.site_config.get(key):
                del seed[key]
        return seed

    def render_content_file(self, page: PageConfig, dest_dir: Path) -> Tuple[PageConfig, Dict[str, Any]]:
        """Resolve a page's metadata and path, then write its `index.html`."""
        is_content_package = page.filename == PACKAGE_INDEX

        metadata, body = read_content_file(Path(page.source))
        page.update(metadata)

        if not page.slug and page.permalink:
            page.slug = str(page.permalink).strip("/")

        if not page.date or not page.slug:
            date, slug = derive_date_slug(strip_extension(page.filename))
            if not page.date:
                page.date = date
            if not page.slug:
                page.slug = slug

        # front matter values may be any YAML type; paths and titles are text
        page.slug = str(page.slug)

        if not page.title:
            page.title = page.slug
        page.title = str(page.title)

        if page.date:
            page.year = page.date[:4]

        out_dir = dest_dir if is_content_package else dest_dir / page.slug
        page.path = self.site_path(out_dir)
        if self.amp_generator is not None:
            page.path_amp = posixpath.join(page.path, AMP_PAGE_NAME)

        page.content_html = render_body(page, body, self.highlighter)

        template_data = merge_config(self.base_template_data, page.as_dict())
        apply_template = self.template_manager.get_template(page.layout or "default")
        output = apply_template(template_data)

        out_dir = self.base_dest_dir / page.path
        out_dir.mkdir(parents=True, exist_ok=True)
        out_file = out_dir / CONTENT_PAGE_NAME
        self.track_output(out_file, page.source)
        out_file.write_text(output, encoding="utf-8")
        logger.info("%s", page.path or "/")

        return page, template_data

    def site_path(self, directory: Path) -> str:
        """Directory relative to the destination root, '/'-separated, no leading slash."""
        rel = Path(directory).relative_to(self.base_dest_dir).as_posix()
        return "" if rel == "." else rel

    def track_output(self, out_file: Path, source: str) -> None:
        previous = self._written.get(out_file)
        if previous is not None and previous != source:
            logger.warning("%s from '%s' overwrites output of '%s'", out_file, source, previous)
        self._written[out_file] = source
