"""
Layout templates and style partials.

Layouts are Jinja2 templates in the layouts directory (`default.html`,
`amp.html`, ...). Pages pick one with the `layout` front matter key.
Style partials are the `.css` files of the styles directory, exposed to
templates as `styles.<name>.content`.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from site_config import SiteBuildError


RenderFn = Callable[[Mapping[str, Any]], str]


class TemplateNotFoundError(SiteBuildError):
    """No layout exists with the requested name."""


# -- template filters --
def limit(items: Any, count: int) -> List[Any]:
    if not isinstance(items, (list, tuple)):
        return []
    return list(items[:count])


def where(items: Any, key: str, value: Any) -> List[Any]:
    return [item for item in items or [] if item.get(key) == value]


def iif(test: Any, true_value: Any, false_value: Any) -> Any:
    return true_value if test else false_value


def date_format(iso_date: Optional[str], fmt: str = "%m/%d/%Y") -> str:
    if not iso_date:
        return ""
    return datetime.fromisoformat(str(iso_date)).strftime(fmt)


class TemplateManager:
    """Loads layouts by name and compiles ad-hoc template sources."""

    def __init__(self, layouts_dir: Path, styles_dir: Optional[Path] = None):
        self.layouts_dir = Path(layouts_dir)
        self.styles_dir = Path(styles_dir) if styles_dir else None
        self.env = Environment(
            loader=FileSystemLoader(str(self.layouts_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )
        self.env.filters.update(limit=limit, where=where, iif=iif, date_format=date_format)
        self._cache: Dict[str, RenderFn] = {}

    def get_template(self, layout: str) -> RenderFn:
        """Return a render function for the named layout."""
        if layout not in self._cache:
            try:
                template = self.env.get_template(f"{layout}.html")
            except TemplateNotFound as exc:
                raise TemplateNotFoundError(
                    f"Layout '{layout}' not found in {self.layouts_dir}"
                ) from exc
            self._cache[layout] = lambda data, _t=template: _t.render(**data)
        return self._cache[layout]

    def has_template(self, layout: str) -> bool:
        return (self.layouts_dir / f"{layout}.html").is_file()

    def compile(self, source: str) -> RenderFn:
        """Compile a template source string; it may extend or include layouts."""
        template = self.env.from_string(source)
        return lambda data: template.render(**data)

    def load_styles(self) -> List[Dict[str, str]]:
        """Read every style partial as {name, content}, sorted by name."""
        if self.styles_dir is None or not self.styles_dir.is_dir():
            return []
        return [
            {"name": css.stem, "content": css.read_text(encoding="utf-8")}
            for css in sorted(self.styles_dir.glob("*.css"))
        ]
