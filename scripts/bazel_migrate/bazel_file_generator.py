"""Bazel file generators.

Produces content for dependencies.yaml (bazel-deps input), WORKSPACE,
.bazelrc, per-package BUILD skeletons, resource BUILD files, and
.gitignore entries. All functions take parsed data as input and return
strings (or BuildFile records wrapping strings); nothing here touches disk.
"""

import sys
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Optional

import yaml

from .maven_bazel_mappings import (
    DEFAULT_THIRD_PARTY_DIR,
    MAVEN_CENTRAL_URL,
    SCOPE_SKIP,
    bazel_attribute,
    third_party_root,
    to_coordinate,
    to_label,
    to_target_name,
    to_third_party_label,
    to_workspace_name,
    version_key,
)
from .pom_models import MavenModule
from .pom_parser import is_bom_import, resolve_property
from .source_layout import ContentRoot, JavaPackage
from .tech_stack_detector import (
    detect_java_version,
    is_abstract_class,
    is_test_class_file,
    needs_manual_attention,
)

HEADER = "# Generated by Maven-to-Bazel migration"
JAVA_RULES_LOAD = 'load("@rules_java//java:defs.bzl", "{rules}")'
PUBLIC = ["//visibility:public"]


@dataclass
class BuildFile:
    """A generated BUILD file for one Bazel package.

    Attributes:
        package: Workspace-relative package path.
        content: BUILD file text.
        targets: Names of the rules defined, in file order.
        flags: ``(file name, reason)`` pairs needing manual follow-up.
    """
    package: str
    content: str
    targets: list = field(default_factory=list)
    flags: list = field(default_factory=list)


class _Raw(str):
    """A Starlark expression emitted verbatim (not quoted)."""


def _format_value(value, indent: str) -> str:
    if isinstance(value, _Raw):
        return str(value)
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, list):
        if not value:
            return "[]"
        inner = indent + "    "
        items = "".join(f"{inner}{_format_value(v, inner)},\n" for v in value)
        return f"[\n{items}{indent}]"
    return f'"{value}"'


def _format_rule(kind: str, attrs: list, comments: Optional[list] = None) -> str:
    """Render a rule call in buildifier's one-attribute-per-line layout.

    Args:
        kind: Rule name (e.g. ``java_library``).
        attrs: ``(name, value)`` pairs; ``None`` values are skipped.
        comments: Lines to emit as ``#`` comments above the rule.
    """
    lines = [f"# {c}" for c in comments or []]
    lines.append(f"{kind}(")
    for name, value in attrs:
        if value is None:
            continue
        lines.append(f"    {name} = {_format_value(value, '    ')},")
    lines.append(")")
    return "\n".join(lines)


def _merged_properties(root_module: MavenModule, child_modules: list) -> dict:
    props = {}
    if root_module.version:
        props["project.version"] = root_module.version
    props["project.groupId"] = root_module.group_id
    props["project.artifactId"] = root_module.artifact_id
    props.update(root_module.properties)
    for m in child_modules:
        props.update(m.properties)
    return props


def _is_inter_module_dep(dep, root_module: MavenModule, child_modules: list) -> bool:
    """Check if a dependency refers to another module of the same project."""
    artifact_ids = {root_module.artifact_id} | {cm.artifact_id for cm in child_modules}
    group_ids = {root_module.group_id} | {cm.group_id for cm in child_modules}
    return dep.artifact_id in artifact_ids and dep.group_id in group_ids


def _collect_resolvers(root_module: MavenModule, child_modules: list, extra: list) -> list:
    resolvers = [{"id": "mavencentral", "type": "default", "url": MAVEN_CENTRAL_URL}]
    seen_urls = {MAVEN_CENTRAL_URL.rstrip("/")}
    repos = list(root_module.repositories)
    for cm in child_modules:
        repos.extend(cm.repositories)
    repos.extend((f"extra{i}", url) for i, url in enumerate(extra or [], start=1))
    for repo_id, repo_url in repos:
        normalized = repo_url.rstrip("/")
        if normalized in seen_urls or "repo1.maven.org" in normalized or "central" in repo_id.lower():
            continue
        seen_urls.add(normalized)
        resolvers.append({"id": repo_id, "type": "default", "url": normalized + "/"})
    return resolvers


def build_dependencies_yaml(
    root_module: MavenModule,
    child_modules: list,
    third_party_dir: str = DEFAULT_THIRD_PARTY_DIR,
    extra_resolvers: Optional[list] = None,
    excluded_modules: Optional[list] = None,
) -> str:
    """Build the bazel-deps ``dependencies.yaml`` from parsed Maven modules.

    The ``dependencies`` block is the flat coordinate → version mapping
    bazel-deps resolves into ``3rdparty`` BUILD files. Versions are taken
    from the dependency itself, then from ``<dependencyManagement>``, with
    ``${...}`` references resolved against all modules' properties.

    Skipped with a WARNING: inter-module dependencies, BOM imports,
    ``system``/``import`` scopes, and classified or non-jar artifacts.
    When modules disagree on a version the highest one is kept. Coordinates
    without a resolvable version are listed as ``# TODO`` comments at the
    end of the file rather than written as invalid entries.

    Args:
        root_module: The parsed root pom.xml module.
        child_modules: Parsed child module pom.xml files.
        third_party_dir: Where bazel-deps should write BUILD files.
        extra_resolvers: Additional repository URLs.
        excluded_modules: Parsed modules left out of the migration. Dependencies
            on them are skipped with a WARNING instead of becoming external coordinates.

    Returns:
        Complete ``dependencies.yaml`` content.
    """
    all_modules = [root_module] + list(child_modules)
    props = _merged_properties(root_module, child_modules)

    managed = {}
    for mod in all_modules:
        for dep in mod.dep_management:
            if not is_bom_import(dep) and dep.version:
                managed[(dep.group_id, dep.artifact_id)] = resolve_property(dep.version, props)

    versions = {}       # (group, artifact) → version
    exclusions = {}     # (group, artifact) → set of "g:a"
    unresolved = OrderedDict()  # (group, artifact) → raw version or None
    warned = set()
    excluded_coords = {(m.group_id, m.artifact_id) for m in excluded_modules or []}

    for mod in all_modules:
        for dep in mod.dependencies:
            coord = (dep.group_id, dep.artifact_id)
            if coord in excluded_coords:
                if coord not in warned:
                    warned.add(coord)
                    print(f"WARNING: Skipping {to_coordinate(*coord)}, an excluded module of this project; "
                          f"wire it into the BUILD files by hand if needed",
                          file=sys.stderr)
                continue
            if _is_inter_module_dep(dep, root_module, child_modules) or is_bom_import(dep):
                continue
            if dep.scope in SCOPE_SKIP or dep.classifier or dep.dep_type not in (None, "jar"):
                if coord not in warned:
                    warned.add(coord)
                    print(f"WARNING: Skipping {to_coordinate(*coord)} "
                          f"(scope={dep.scope}, classifier={dep.classifier}, type={dep.dep_type}); "
                          f"add it to dependencies.yaml by hand if needed",
                          file=sys.stderr)
                continue

            raw = dep.version or managed.get(coord)
            ver = resolve_property(raw, props) if raw else None
            if not ver or "${" in ver:
                if coord not in versions and coord not in unresolved:
                    print(f"WARNING: Could not resolve version '{raw}' for "
                          f"{to_coordinate(*coord)}, leaving it out of dependencies.yaml",
                          file=sys.stderr)
                    unresolved[coord] = raw
                continue

            unresolved.pop(coord, None)
            existing = versions.get(coord)
            if existing and existing != ver:
                winner = max(existing, ver, key=version_key)
                print(f"WARNING: Conflicting versions for {to_coordinate(*coord)}: "
                      f"{existing} vs {ver}, using {winner}",
                      file=sys.stderr)
                ver = winner
            versions[coord] = ver
            if dep.exclusions:
                exclusions.setdefault(coord, set()).update(
                    to_coordinate(eg, ea) for eg, ea in dep.exclusions
                )

    dependencies = {}
    for group_id, artifact_id in sorted(versions):
        entry = {"lang": "java", "version": versions[(group_id, artifact_id)]}
        if (group_id, artifact_id) in exclusions:
            entry["exclude"] = sorted(exclusions[(group_id, artifact_id)])
        dependencies.setdefault(group_id, {})[artifact_id] = entry

    doc = {
        "options": {
            "buildHeader": [JAVA_RULES_LOAD.format(rules="java_library")],
            "languages": ["java"],
            "resolverType": "coursier",
            "resolvers": _collect_resolvers(root_module, child_modules, extra_resolvers),
            "strictVisibility": True,
            "thirdPartyDirectory": third_party_dir,
            "transitivity": "runtime_deps",
            "versionConflictPolicy": "highest",
        },
        "dependencies": dependencies,
    }

    lines = [HEADER, yaml.safe_dump(doc, sort_keys=False, default_flow_style=False).rstrip()]
    if unresolved:
        lines.append("")
        for (group_id, artifact_id), raw in unresolved.items():
            source = raw or "a BOM or parent POM"
            lines.append(f"# TODO: {to_coordinate(group_id, artifact_id)}: resolve version from {source}")
    lines.append("")
    return "\n".join(lines)


def generate_workspace(root_module: MavenModule, third_party_dir: str = DEFAULT_THIRD_PARTY_DIR) -> str:
    """Generate the ``WORKSPACE`` file wiring in bazel-deps' ``workspace.bzl``."""
    package = third_party_root(third_party_dir)
    return "\n".join([
        HEADER,
        f'workspace(name = "{to_workspace_name(root_module.artifact_id)}")',
        "",
        f'load("//{package}:workspace.bzl", "maven_dependencies")',
        "",
        "maven_dependencies()",
        "",
    ])


def generate_third_party_build() -> str:
    """Generate the marker BUILD file that makes ``//3rdparty`` loadable."""
    return HEADER + "\n"


def generate_bazelrc(root_module: MavenModule, child_modules: Optional[list] = None) -> str:
    """Generate ``.bazelrc`` with the Java toolchain pinned to the Maven language level.

    Maven profiles are listed as comments; each can become a
    ``build:<profile>`` config selected with ``--config=<profile>``.
    """
    child_modules = child_modules or []
    props = _merged_properties(root_module, child_modules)
    plugins = list(root_module.plugins) + list(root_module.plugin_management)
    for cm in child_modules:
        plugins.extend(cm.plugins + cm.plugin_management)
    java_ver = detect_java_version(props, plugins)

    lines = [HEADER]
    if java_ver:
        lines += [
            f"build --java_language_version={java_ver}",
            f"build --java_runtime_version=remotejdk_{java_ver}",
            f"build --tool_java_language_version={java_ver}",
            f"build --tool_java_runtime_version=remotejdk_{java_ver}",
        ]
    else:
        lines.append("# Java version not detected in pom.xml; set --java_language_version here")
    lines.append("test --test_output=errors")

    profiles = list(root_module.profiles)
    for cm in child_modules:
        profiles.extend(p for p in cm.profiles if p not in profiles)
    if profiles:
        lines.append("")
        lines.append("# Maven profiles (not migrated); express each as build:<name> flags:")
        for profile_id in profiles:
            lines.append(f"# build:{profile_id} ...")

    lines += ["", "try-import %workspace%/.bazelrc.user", ""]
    return "\n".join(lines)


def generate_package_build(package: JavaPackage, runtime_deps: Optional[list] = None) -> BuildFile:
    """Generate a skeleton BUILD for a main (non-test) Java package.

    One ``java_library`` named after the directory globs the package's
    sources. ``deps`` is left empty for the dependency-inference tool.

    Args:
        package: The discovered package.
        runtime_deps: Labels to add as ``runtime_deps`` (resource targets).

    Returns:
        The BuildFile.
    """
    name = to_target_name(package.path)
    rule = _format_rule("java_library", [
        ("name", name),
        ("srcs", _Raw('glob(["*.java"])')),
        ("deps", []),
        ("runtime_deps", list(runtime_deps) if runtime_deps else None),
        ("visibility", PUBLIC),
    ])
    content = "\n".join([JAVA_RULES_LOAD.format(rules="java_library"), "", rule, ""])
    return BuildFile(package=package.path, content=content, targets=[name])


def generate_test_package_build(
    package: JavaPackage,
    sources: dict,
    runtime_deps: Optional[list] = None,
) -> BuildFile:
    """Generate a BUILD for a test Java package.

    Each concrete class matching Surefire's default includes becomes a
    ``java_test`` with an explicit ``test_class``. Everything else (helpers,
    fixtures, abstract base tests) goes into a ``testonly`` library that the
    tests depend on. Tests Bazel's JUnit 4 runner cannot drive are still
    generated, but carry a ``TODO(migration)`` comment and are returned as
    flags.

    Args:
        package: The discovered test package.
        sources: File name → Java source text for ``package.files``.
        runtime_deps: Labels added to every test (resources, runtime-scoped libraries).

    Returns:
        The BuildFile with its targets and flags.
    """
    tests = []
    helpers = []
    for filename in package.files:
        source = sources.get(filename, "")
        if is_test_class_file(filename) and not is_abstract_class(source):
            tests.append(filename)
        else:
            helpers.append(filename)

    rules_used = (["java_test"] if tests else []) + (["java_library"] if helpers else [])
    blocks = []
    targets = []
    flags = []

    helper_name = to_target_name(package.path)
    if helpers and helper_name in {f[:-len(".java")] for f in tests}:
        helper_name = f"{helper_name}_testlib"
    if helpers:
        blocks.append(_format_rule("java_library", [
            ("name", helper_name),
            ("testonly", True),
            ("srcs", helpers),
            ("deps", []),
            ("visibility", PUBLIC),
        ]))
        targets.append(helper_name)

    for filename in tests:
        class_name = filename[:-len(".java")]
        fqcn = f"{package.java_package}.{class_name}" if package.java_package else class_name
        reasons = needs_manual_attention(sources.get(filename, ""))
        flags.extend((f"{package.path}/{filename}", reason) for reason in reasons)
        blocks.append(_format_rule("java_test", [
            ("name", class_name),
            ("srcs", [filename]),
            ("test_class", fqcn),
            ("deps", [f":{helper_name}"] if helpers else []),
            ("runtime_deps", list(runtime_deps) if runtime_deps else None),
        ], comments=[f"TODO(migration): {r}" for r in reasons]))
        targets.append(class_name)

    load = JAVA_RULES_LOAD.replace('"{rules}"', ", ".join(f'"{r}"' for r in sorted(rules_used)))
    content = "\n\n".join([load] + blocks) + "\n"
    return BuildFile(package=package.path, content=content, targets=targets, flags=flags)


def generate_resources_build(resource_root: ContentRoot) -> BuildFile:
    """Generate a BUILD that packages a resource directory as a classpath library.

    ``resource_strip_prefix`` makes ``src/main/resources/app.properties``
    load as ``/app.properties``, matching Maven's classpath layout. Test
    resource libraries are ``testonly``.
    """
    path = resource_root.path
    rule = _format_rule("java_library", [
        ("name", "resources"),
        ("testonly", True if resource_root.is_test else None),
        ("resources", _Raw('glob(["**"], exclude = ["BUILD", "BUILD.bazel"])')),
        ("resource_strip_prefix", path),
        ("visibility", PUBLIC),
    ])
    content = "\n".join([JAVA_RULES_LOAD.format(rules="java_library"), "", rule, ""])
    return BuildFile(package=path, content=content, targets=["resources"])


def resource_label(resource_root: ContentRoot) -> str:
    """Label of the library generated by ``generate_resources_build``."""
    return to_label(resource_root.path, "resources")


def runtime_library_labels(module: MavenModule, third_party_dir: str = DEFAULT_THIRD_PARTY_DIR) -> list:
    """Labels of a module's Maven ``runtime`` scoped libraries.

    These never show up in imports, so the inference tool cannot add them;
    they are wired into the module's tests up front.
    """
    labels = []
    for dep in module.dependencies:
        if bazel_attribute(dep.scope) == "runtime_deps" and not dep.classifier:
            label = to_third_party_label(dep.group_id, dep.artifact_id, third_party_dir)
            if label not in labels:
                labels.append(label)
    return labels


def generate_bazel_gitignore_entries() -> str:
    """Generate ``.gitignore`` entries for Bazel output symlinks and user rc files."""
    return """\
# Bazel
/bazel-*
.bazelrc.user
"""

