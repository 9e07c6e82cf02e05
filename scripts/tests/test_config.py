"""Tests for config.py — YAML migration config loading."""

import pytest

from bazel_migrate.config import ConfigError, MigrationConfig, load_config


class TestLoadConfig:
    def test_defaults_without_file(self):
        config = load_config(None)
        assert config == MigrationConfig()
        assert config.third_party_dir == "3rdparty/jvm"
        assert config.inference_command == ["jadep", "-content_roots={content_roots}", "{targets}"]
        assert config.build_command == ["bazel", "build", "//..."]

    def test_overrides(self, write_file):
        path = write_file("tools.yaml", """\
            third_party_dir: /third_party/java/
            inference_command: [bazel, run, //cmd/jadep, --, "-content_roots={content_roots}", "{targets}"]
            excluded_modules: [docs]
        """)
        config = load_config(path)
        assert config.third_party_dir == "third_party/java"
        assert config.inference_command[2] == "//cmd/jadep"
        assert config.excluded_modules == ["docs"]
        assert config.test_command == ["bazel", "test", "//..."]

    def test_empty_file_gives_defaults(self, write_file):
        assert load_config(write_file("empty.yaml", "")) == MigrationConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_unknown_key(self, write_file):
        with pytest.raises(ConfigError, match="unknown keys: bogus"):
            load_config(write_file("bad.yaml", "bogus: 1\n"))

    def test_command_must_be_list(self, write_file):
        with pytest.raises(ConfigError, match="build_command"):
            load_config(write_file("bad.yaml", "build_command: bazel build //...\n"))

    def test_command_must_not_be_empty(self, write_file):
        with pytest.raises(ConfigError, match="must not be empty"):
            load_config(write_file("bad.yaml", "test_command: []\n"))

    def test_top_level_must_be_mapping(self, write_file):
        with pytest.raises(ConfigError, match="mapping"):
            load_config(write_file("bad.yaml", "- a\n- b\n"))

    def test_invalid_yaml(self, write_file):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(write_file("bad.yaml", "key: [unclosed\n"))

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)
