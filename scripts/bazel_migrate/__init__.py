"""Maven to Bazel (bazel-deps + per-package BUILD files) migration package."""

from .config import ConfigError, MigrationConfig, load_config
from .migration_pipeline import MigrationReport, migrate, main
from .pom_parser import parse_pom
from .pom_models import Dependency, Plugin, MavenModule

__all__ = [
    "migrate", "main", "MigrationReport", "parse_pom", "load_config",
    "MigrationConfig", "ConfigError", "Dependency", "Plugin", "MavenModule",
]
