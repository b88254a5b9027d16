"""Page records produced by the generator."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional


@dataclass
class PageConfig:
    """One content page: the fields the generator relies on plus any other front matter."""

    filename: str = ""
    source: str = ""
    date: Optional[str] = None
    year: Optional[str] = None
    slug: Optional[str] = None
    permalink: Optional[str] = None
    title: Optional[str] = None
    layout: Optional[str] = None
    dist_path: Optional[str] = None
    path: str = ""
    path_amp: Optional[str] = None
    excerpt: Optional[str] = None
    content_html: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PageConfig":
        page = cls()
        page.update(data)
        return page

    def update(self, data: Mapping[str, Any]) -> None:
        """Merge a mapping in place; known keys land on attributes, the rest in `extra`."""
        for key, value in data.items():
            if key in _KNOWN_FIELDS:
                if key == "date":
                    value = normalize_date(value)
                setattr(self, key, value)
            else:
                self.extra[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        if key in _KNOWN_FIELDS:
            value = getattr(self, key)
            return default if value is None else value
        return self.extra.get(key, default)

    def as_dict(self, include_content: bool = True) -> Dict[str, Any]:
        """Flatten to a plain mapping, as templates see it."""
        data = dict(self.extra)
        for name in _KNOWN_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if name == "content_html" and not include_content:
                continue
            data[name] = value
        return data


_KNOWN_FIELDS = frozenset(f.name for f in fields(PageConfig) if f.name != "extra")


def normalize_date(value: Any) -> Optional[str]:
    """YAML turns unquoted ISO dates into date objects; keep them as YYYY-MM-DD text."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
