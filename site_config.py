"""
Site and directory configuration.

The site configuration is the immutable base mapping every page sees; each
source directory may add a local `_config.yml` that overrides it for that
directory and everything beneath it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml


CONFIG_FILE_NAMES = ("_config.yml", "_config.yaml")

CONTENT_PAGE_NAME = "index.html"
AMP_PAGE_NAME = "amp.html"
IGNORE_PREFIXES = ("_", ".")
PACKAGE_INDEX = "index.md"
CONTENT_EXTENSIONS = frozenset({"md"})
ASSET_IGNORE_EXTENSIONS = frozenset({"scss", "sass", "css", "md", "j2"})
TEMPLATE_PAGE_EXTENSION = "j2"

SITE_DEFAULTS: Dict[str, Any] = {
    "title": "",
    "description": "",
    "url": "",
    "build_timestamp": "",
    "google_analytics_id": "",
    "redirects": {},
}


class SiteBuildError(Exception):
    """Base class for errors that abort a build."""


class ConfigError(SiteBuildError):
    """A configuration file could not be understood."""


def load_config_file(directory: Path) -> Dict[str, Any]:
    """Return the mapping declared in `directory`'s config file, or {} if there is none."""
    for name in CONFIG_FILE_NAMES:
        config_path = Path(directory) / name
        if not config_path.is_file():
            continue
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping, got {type(data).__name__}")
        return data
    return {}


def merge_config(base: Mapping[str, Any], *overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Shallow-merge overrides over a copy of base; later mappings win."""
    merged = dict(base)
    for override in overrides:
        merged.update(override)
    return merged


def build_site_config(source_root: Path, overrides: Optional[Mapping[str, Any]] = None,
                      now: Optional[datetime] = None) -> Mapping[str, Any]:
    """Assemble the read-only site configuration for a build.

    Defaults <- `<source_root>/_config.yml` <- non-empty CLI overrides, stamped
    with the build time.
    """
    config = merge_config(SITE_DEFAULTS, load_config_file(source_root))
    for key, value in (overrides or {}).items():
        if value:
            config[key] = value
    if not isinstance(config.get("redirects"), dict):
        raise ConfigError("'redirects' must be a mapping of source path to target URL")
    stamp = now or datetime.now(timezone.utc)
    config["build_timestamp"] = stamp.isoformat(timespec="seconds")
    return MappingProxyType(config)
