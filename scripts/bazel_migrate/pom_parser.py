"""Maven POM parsing, XML helpers, and property resolution.

Handles all interaction with pom.xml files: dependencies, plugins, modules,
repositories, the ``<build>`` source layout, and ``${...}`` property
expressions.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from .pom_models import (
    DEFAULT_RESOURCE_DIRECTORY,
    DEFAULT_SOURCE_DIRECTORY,
    DEFAULT_TEST_RESOURCE_DIRECTORY,
    DEFAULT_TEST_SOURCE_DIRECTORY,
    Dependency,
    MavenModule,
    Plugin,
)

# XML namespace used by Maven POM files (POM model version 4.0.0).
NS = {"m": "http://maven.apache.org/POM/4.0.0"}

_PROPERTY_REF = re.compile(r"\$\{([^}]+)\}")


def _find(el, tag, ns=NS):
    """Find a direct child element, trying with and without the Maven namespace.

    Args:
        el: Parent XML element to search within.
        tag: Tag name to look for (without namespace prefix).
        ns: Namespace mapping (defaults to Maven POM 4.0.0).

    Returns:
        The first matching child element, or ``None`` if not found.
    """
    result = el.find(f"m:{tag}", ns)
    if result is not None:
        return result
    return el.find(tag)


def _children(el, tag, ns=NS) -> list:
    """Return all direct children named ``tag``, namespaced or not."""
    if el is None:
        return []
    return list(el.findall(f"m:{tag}", ns)) + list(el.findall(tag))


def _text(el, tag, ns=NS):
    """Extract the stripped text of a child element, or ``None`` if absent or empty."""
    child = _find(el, tag, ns)
    if child is not None and child.text:
        return child.text.strip()
    return None


def _local_name(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _parse_dependency(dep_el) -> Dependency:
    """Parse a ``<dependency>`` element, including its ``<exclusions>``."""
    optional_text = _text(dep_el, "optional")
    exclusions = []
    for ex in _children(_find(dep_el, "exclusions"), "exclusion"):
        eg = _text(ex, "groupId")
        ea = _text(ex, "artifactId")
        if eg and ea:
            exclusions.append((eg, ea))
    return Dependency(
        group_id=_text(dep_el, "groupId") or "",
        artifact_id=_text(dep_el, "artifactId") or "",
        version=_text(dep_el, "version"),
        scope=_text(dep_el, "scope") or "compile",
        classifier=_text(dep_el, "classifier"),
        dep_type=_text(dep_el, "type"),
        optional=bool(optional_text) and optional_text.lower() == "true",
        exclusions=exclusions,
    )


def _parse_plugin_config(config_el) -> dict:
    """Recursively flatten a plugin ``<configuration>`` block into a dict.

    Nested elements whose children carry text become lists of strings;
    deeper structures become sub-dicts. Leaf elements become strings.

    Args:
        config_el: The ``<configuration>`` XML element, or ``None``.

    Returns:
        A dict mapping tag names to strings, lists, or nested dicts.
    """
    if config_el is None:
        return {}
    result = {}
    for child in config_el:
        tag = _local_name(child.tag)
        if len(child) > 0:
            items = [sub.text.strip() for sub in child if sub.text and sub.text.strip()]
            result[tag] = items if items else _parse_plugin_config(child)
        elif child.text and child.text.strip():
            result[tag] = child.text.strip()
    return result


def _parse_plugin(plugin_el) -> Plugin:
    """Parse a ``<plugin>`` element; groupId defaults to ``org.apache.maven.plugins``."""
    return Plugin(
        group_id=_text(plugin_el, "groupId") or "org.apache.maven.plugins",
        artifact_id=_text(plugin_el, "artifactId") or "",
        version=_text(plugin_el, "version"),
        configuration=_parse_plugin_config(_find(plugin_el, "configuration")),
    )


def _parse_resource_dirs(build_el, container: str, item: str, default: str) -> list:
    """Read ``<resources><resource><directory>`` style lists from ``<build>``.

    Absolute paths and ``${project.basedir}`` prefixes are reduced to
    module-relative paths. Returns ``[default]`` when the block is absent.
    """
    if build_el is None:
        return [default]
    container_el = _find(build_el, container)
    if container_el is None:
        return [default]
    dirs = []
    for res_el in _children(container_el, item):
        directory = _text(res_el, "directory")
        if directory:
            dirs.append(_module_relative(directory))
    return dirs or [default]


def _module_relative(path: str) -> str:
    for prefix in ("${project.basedir}/", "${basedir}/"):
        if path.startswith(prefix):
            path = path[len(prefix):]
    return path.strip("/") or "."


def parse_pom(pom_path: Path) -> MavenModule:
    """Parse a ``pom.xml`` file into a MavenModule.

    Handles both namespaced and non-namespaced POM files. groupId and
    version fall back to the ``<parent>`` block when not declared.

    Args:
        pom_path: Filesystem path to the pom.xml file.

    Returns:
        A populated MavenModule. ``source_dir`` is left for the caller to set.

    Raises:
        xml.etree.ElementTree.ParseError: If the file is not well-formed XML.
    """
    root = ET.parse(pom_path).getroot()

    parent_el = _find(root, "parent")
    parent_gid = parent_aid = parent_ver = None
    if parent_el is not None:
        parent_gid = _text(parent_el, "groupId")
        parent_aid = _text(parent_el, "artifactId")
        parent_ver = _text(parent_el, "version")

    properties = {}
    props_el = _find(root, "properties")
    if props_el is not None:
        for child in props_el:
            if child.text:
                properties[_local_name(child.tag)] = child.text.strip()

    dependencies = [_parse_dependency(d) for d in _children(_find(root, "dependencies"), "dependency")]

    dep_mgmt = []
    dm_el = _find(root, "dependencyManagement")
    if dm_el is not None:
        dep_mgmt = [_parse_dependency(d) for d in _children(_find(dm_el, "dependencies"), "dependency")]

    plugins = []
    plugin_management = []
    source_directory = DEFAULT_SOURCE_DIRECTORY
    test_source_directory = DEFAULT_TEST_SOURCE_DIRECTORY
    build_el = _find(root, "build")
    if build_el is not None:
        plugins = [_parse_plugin(p) for p in _children(_find(build_el, "plugins"), "plugin")]
        pm_el = _find(build_el, "pluginManagement")
        if pm_el is not None:
            plugin_management = [_parse_plugin(p) for p in _children(_find(pm_el, "plugins"), "plugin")]
        declared = _text(build_el, "sourceDirectory")
        if declared:
            source_directory = _module_relative(declared)
        declared = _text(build_el, "testSourceDirectory")
        if declared:
            test_source_directory = _module_relative(declared)

    profiles = []
    for prof_el in _children(_find(root, "profiles"), "profile"):
        profiles.append(_text(prof_el, "id") or "default")

    modules = [m.text.strip() for m in _children(_find(root, "modules"), "module") if m.text]

    repositories = []
    for repo_el in _children(_find(root, "repositories"), "repository"):
        repo_url = _text(repo_el, "url")
        if repo_url:
            repositories.append((_text(repo_el, "id") or "unknown", repo_url))

    return MavenModule(
        group_id=_text(root, "groupId") or parent_gid or "",
        artifact_id=_text(root, "artifactId") or "",
        version=_text(root, "version") or parent_ver,
        packaging=_text(root, "packaging") or "jar",
        name=_text(root, "name"),
        parent_artifact_id=parent_aid,
        parent_group_id=parent_gid,
        parent_version=parent_ver,
        properties=properties,
        dependencies=dependencies,
        dep_management=dep_mgmt,
        plugins=plugins,
        plugin_management=plugin_management,
        profiles=profiles,
        modules=modules,
        repositories=repositories,
        source_directory=source_directory,
        test_source_directory=test_source_directory,
        resource_directories=_parse_resource_dirs(
            build_el, "resources", "resource", DEFAULT_RESOURCE_DIRECTORY),
        test_resource_directories=_parse_resource_dirs(
            build_el, "testResources", "testResource", DEFAULT_TEST_RESOURCE_DIRECTORY),
    )


def resolve_property(value: Optional[str], properties: dict, _depth: int = 0) -> Optional[str]:
    """Resolve ``${property}`` references against a properties dict.

    Every reference in the string is substituted, so ``${major}.${minor}``
    resolves as well as a bare ``${version}``. Names are looked up as given
    and with a leading ``project.`` stripped. Resolved values that contain
    further references are followed up to a depth of 10, which also stops
    circular definitions.

    Args:
        value: The string potentially containing ``${...}`` references.
        properties: Merged property dict from the parsed Maven modules.
        _depth: Internal recursion counter (callers should not set this).

    Returns:
        The resolved string. Unknown references are left in place.
        Returns ``None`` if value is ``None``.
    """
    if not value or _depth > 10:
        return value

    def _lookup(match):
        name = match.group(1)
        keys = [name, name[len("project."):]] if name.startswith("project.") else [name]
        for key in keys:
            if key in properties and properties[key] is not None:
                return properties[key]
        return match.group(0)

    resolved = _PROPERTY_REF.sub(_lookup, value)
    if resolved != value and "${" in resolved:
        return resolve_property(resolved, properties, _depth + 1)
    return resolved


def is_bom_import(dep: Dependency) -> bool:
    """Check whether a dependency is a BOM import (``type=pom``, ``scope=import``)."""
    return dep.dep_type == "pom" and dep.scope == "import"
