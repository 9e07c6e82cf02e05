"""Maven data model classes.

Pure data structures representing parsed Maven POM elements.
No behavior or imports from other bazel_migrate modules.
"""

from dataclasses import dataclass, field
from typing import Optional

# Maven's conventional source layout, used when <build> does not override it.
DEFAULT_SOURCE_DIRECTORY = "src/main/java"
DEFAULT_TEST_SOURCE_DIRECTORY = "src/test/java"
DEFAULT_RESOURCE_DIRECTORY = "src/main/resources"
DEFAULT_TEST_RESOURCE_DIRECTORY = "src/test/resources"


@dataclass
class Dependency:
    """A Maven ``<dependency>`` element.

    Attributes:
        group_id: Maven groupId (e.g. ``com.google.guava``).
        artifact_id: Maven artifactId (e.g. ``guava``).
        version: Explicit version string, or ``None`` if managed elsewhere.
        scope: Maven scope: compile, provided, runtime, test, system or import.
        classifier: Optional classifier (e.g. ``sources``, ``tests``).
        dep_type: Optional packaging type (e.g. ``pom`` for BOM imports).
        optional: Whether the dependency is marked ``<optional>true</optional>``.
        exclusions: List of ``(groupId, artifactId)`` tuples to exclude.
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: str = "compile"
    classifier: Optional[str] = None
    dep_type: Optional[str] = None
    optional: bool = False
    exclusions: list = field(default_factory=list)


@dataclass
class Plugin:
    """A Maven ``<plugin>`` element.

    Only the compiler plugin's configuration is consulted (for the Java
    language level); other plugins are recorded so they can be reported.
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    configuration: dict = field(default_factory=dict)


@dataclass
class MavenModule:
    """Central parse result for a single ``pom.xml`` file.

    Represents both root and child modules. For multi-module projects, the
    root module has ``packaging="pom"`` and a non-empty ``modules`` list.

    Attributes:
        group_id: Maven groupId (inherited from parent if not declared).
        artifact_id: Maven artifactId.
        version: Version string (inherited from parent if not declared).
        packaging: Packaging type: jar, pom, or war.
        name: Human-readable ``<name>`` element.
        parent_artifact_id: Parent POM artifactId, if any.
        parent_group_id: Parent POM groupId, if any.
        parent_version: Parent POM version, if any.
        properties: ``<properties>`` dict.
        dependencies: Direct ``<dependencies>`` list.
        dep_management: ``<dependencyManagement>`` dependencies.
        plugins: ``<build><plugins>`` list.
        plugin_management: ``<build><pluginManagement><plugins>`` list.
        profiles: Profile ids from ``<profiles>``. Profiles are not migrated.
        modules: Child module directory names from ``<modules>``.
        repositories: List of ``(id, url)`` tuples from ``<repositories>``.
        source_directory: Main Java content root, relative to the module.
        test_source_directory: Test Java content root, relative to the module.
        resource_directories: Main resource directories, relative to the module.
        test_resource_directories: Test resource directories, relative to the module.
        source_dir: Module path relative to the workspace root (set by the pipeline).
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    packaging: str = "jar"
    name: Optional[str] = None
    parent_artifact_id: Optional[str] = None
    parent_group_id: Optional[str] = None
    parent_version: Optional[str] = None
    properties: dict = field(default_factory=dict)
    dependencies: list = field(default_factory=list)
    dep_management: list = field(default_factory=list)
    plugins: list = field(default_factory=list)
    plugin_management: list = field(default_factory=list)
    profiles: list = field(default_factory=list)
    modules: list = field(default_factory=list)
    repositories: list = field(default_factory=list)
    source_directory: str = DEFAULT_SOURCE_DIRECTORY
    test_source_directory: str = DEFAULT_TEST_SOURCE_DIRECTORY
    resource_directories: list = field(default_factory=lambda: [DEFAULT_RESOURCE_DIRECTORY])
    test_resource_directories: list = field(default_factory=lambda: [DEFAULT_TEST_RESOURCE_DIRECTORY])
    source_dir: Optional[str] = None
