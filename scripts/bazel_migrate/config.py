"""Migration configuration: external tool commands and layout overrides.

Everything has a working default, so a config file is optional. When one
is given it is a YAML mapping whose keys are the ``MigrationConfig``
field names, e.g.::

    third_party_dir: 3rdparty/jvm
    inference_command: [bazel, run, //cmd/jadep, --, "-content_roots={content_roots}", "{targets}"]
    excluded_modules: [docs]
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Union

import yaml

from .maven_bazel_mappings import DEFAULT_THIRD_PARTY_DIR


class ConfigError(ValueError):
    """Raised when a migration config file is missing or malformed."""


def _default_generator_command() -> list:
    return [
        "bazel", "run", "@bazel_deps//:parse", "--", "generate",
        "-r", "{workspace}",
        "-s", "{third_party_root}/workspace.bzl",
        "-d", "dependencies.yaml",
    ]


def _default_inference_command() -> list:
    return ["jadep", "-content_roots={content_roots}", "{targets}"]


@dataclass
class MigrationConfig:
    """Settings for a migration run.

    Attributes:
        third_party_dir: Directory bazel-deps writes 3rd-party BUILD files to.
        generator_command: Command template that turns dependencies.yaml into BUILD files.
        inference_command: Command template run once per package to add missing deps.
        build_command: Command template that builds the workspace.
        test_command: Command template that runs the workspace's tests.
        extra_resolvers: Additional Maven repository URLs for dependencies.yaml.
        excluded_modules: Module paths (relative to the project) to leave out.
    """
    third_party_dir: str = DEFAULT_THIRD_PARTY_DIR
    generator_command: list = field(default_factory=_default_generator_command)
    inference_command: list = field(default_factory=_default_inference_command)
    build_command: list = field(default_factory=lambda: ["bazel", "build", "//..."])
    test_command: list = field(default_factory=lambda: ["bazel", "test", "//..."])
    extra_resolvers: list = field(default_factory=list)
    excluded_modules: list = field(default_factory=list)


_COMMAND_KEYS = ("generator_command", "inference_command", "build_command", "test_command")
_LIST_KEYS = ("extra_resolvers", "excluded_modules")


def load_config(path: Optional[Union[str, Path]] = None) -> MigrationConfig:
    """Load a migration config from YAML, falling back to defaults.

    Args:
        path: Path to a YAML file, or ``None`` for the defaults.

    Returns:
        A populated MigrationConfig.

    Raises:
        ConfigError: If the file is missing, is not a mapping, has unknown
            keys, or a command/list value is not a list of strings.
    """
    if path is None:
        return MigrationConfig()

    cfg_path = Path(path).expanduser()
    if not cfg_path.is_file():
        raise ConfigError(f"Config file not found: {cfg_path}")

    try:
        raw = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {cfg_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{cfg_path}: top level must be a mapping")

    known = {f.name for f in fields(MigrationConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"{cfg_path}: unknown keys: {', '.join(unknown)}")

    for key in _COMMAND_KEYS + _LIST_KEYS:
        if key in raw:
            value = raw[key]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"{cfg_path}: '{key}' must be a list of strings")
            if key in _COMMAND_KEYS and not value:
                raise ConfigError(f"{cfg_path}: '{key}' must not be empty")

    if "third_party_dir" in raw:
        if not isinstance(raw["third_party_dir"], str) or not raw["third_party_dir"].strip("/"):
            raise ConfigError(f"{cfg_path}: 'third_party_dir' must be a non-empty path")
        raw["third_party_dir"] = raw["third_party_dir"].strip("/")

    return MigrationConfig(**raw)
