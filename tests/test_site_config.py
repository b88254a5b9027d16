"""Unit tests for configuration loading."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from site_config import ConfigError, build_site_config, load_config_file, merge_config


class TestLoadConfigFile:

    def test_missing_file(self, tmp_path) -> None:
        assert load_config_file(tmp_path) == {}

    def test_empty_file(self, tmp_path) -> None:
        (tmp_path / "_config.yml").write_text("", encoding="utf-8")

        assert load_config_file(tmp_path) == {}

    def test_mapping(self, tmp_path) -> None:
        (tmp_path / "_config.yml").write_text("dist_path: /blog\nlayout: post\n", encoding="utf-8")

        assert load_config_file(tmp_path) == {"dist_path": "/blog", "layout": "post"}

    def test_yaml_extension(self, tmp_path) -> None:
        (tmp_path / "_config.yaml").write_text("layout: post\n", encoding="utf-8")

        assert load_config_file(tmp_path) == {"layout": "post"}

    def test_not_a_mapping(self, tmp_path) -> None:
        (tmp_path / "_config.yml").write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config_file(tmp_path)

    def test_invalid_yaml(self, tmp_path) -> None:
        (tmp_path / "_config.yml").write_text("key: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config_file(tmp_path)


class TestMergeConfig:

    def test_later_mappings_win_and_base_is_untouched(self) -> None:
        base = {"a": 1, "b": 1}

        merged = merge_config(base, {"b": 2}, {"c": 3})

        assert merged == {"a": 1, "b": 2, "c": 3}
        assert base == {"a": 1, "b": 1}


class TestBuildSiteConfig:

    def test_defaults_file_and_overrides(self, tmp_path) -> None:
        (tmp_path / "_config.yml").write_text(
            "title: From File\ndescription: Notes\nredirects:\n  /old/: /new/\n", encoding="utf-8"
        )
        now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        config = build_site_config(tmp_path, {"title": "From CLI", "url": ""}, now=now)

        assert config["title"] == "From CLI"
        assert config["description"] == "Notes"
        assert config["url"] == ""
        assert config["redirects"] == {"/old/": "/new/"}
        assert config["build_timestamp"] == "2024-01-02T03:04:05+00:00"

    def test_read_only(self, tmp_path) -> None:
        config = build_site_config(tmp_path)

        with pytest.raises(TypeError):
            config["title"] = "changed"

    def test_redirects_must_be_mapping(self, tmp_path) -> None:
        (tmp_path / "_config.yml").write_text("redirects: [a, b]\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            build_site_config(tmp_path)
