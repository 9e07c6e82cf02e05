"""CLI entry point, multi-module orchestration, and file I/O.

Wires together POM parsing, source discovery, and generation, then hands
off to the external tools: bazel-deps for 3rd-party BUILD files, the
dependency-inference tool per package, and finally Bazel itself.
"""

import argparse
import posixpath
import sys
import xml.etree.ElementTree as ET
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .bazel_file_generator import (
    build_dependencies_yaml,
    generate_bazel_gitignore_entries,
    generate_bazelrc,
    generate_package_build,
    generate_resources_build,
    generate_test_package_build,
    generate_third_party_build,
    generate_workspace,
    resource_label,
    runtime_library_labels,
)
from .config import ConfigError, MigrationConfig, load_config
from .maven_bazel_mappings import third_party_root, to_package_path
from .pom_models import MavenModule
from .pom_parser import parse_pom
from .source_layout import content_roots_for, discover_packages, resource_roots_for
from .tool_runner import infer_dependencies, run_build, run_dependency_generator


@dataclass
class MigrationReport:
    """What a migration run produced.

    Attributes:
        files: Workspace-relative paths of generated files, in write order.
        flags: ``(path, reason)`` pairs that need a manual fix.
        tool_results: ToolResult entries for every external command run.
    """
    files: list = field(default_factory=list)
    flags: list = field(default_factory=list)
    tool_results: list = field(default_factory=list)

    @property
    def failed_tools(self) -> list:
        return [r for r in self.tool_results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed_tools


def _parse_modules_recursive(
    project_path: Path,
    module_dirs: list[str],
    parent_path: str = "",
    _visited: set = None,
) -> list[MavenModule]:
    """Recursively parse child modules, handling nested multi-module structures.

    Visited paths are tracked to prevent infinite recursion from circular
    module references. Missing or malformed child POMs are skipped with a
    WARNING.

    Args:
        project_path: Filesystem path to the root project.
        module_dirs: Module directory names from the parent's ``<modules>``.
        parent_path: Relative path prefix for nested modules.
        _visited: Internal set of visited paths (callers should not set this).

    Returns:
        Flat depth-first list of MavenModule instances, with ``source_dir``
        set to the path relative to the project root.
    """
    if _visited is None:
        _visited = set()

    result = []
    for mod_dir in module_dirs:
        relative_dir = posixpath.normpath(f"{parent_path}/{mod_dir}" if parent_path else mod_dir)
        abs_path = (project_path / relative_dir).resolve()
        if abs_path in _visited:
            continue
        _visited.add(abs_path)

        child_pom = project_path / relative_dir / "pom.xml"
        if not child_pom.exists():
            print(f"WARNING: Module '{relative_dir}' has no pom.xml, skipping",
                  file=sys.stderr)
            continue
        try:
            child = parse_pom(child_pom)
        except ET.ParseError as exc:
            print(f"WARNING: Could not parse {child_pom}: {exc}, skipping",
                  file=sys.stderr)
            continue
        child.source_dir = relative_dir
        result.append(child)
        if child.modules:
            result.extend(_parse_modules_recursive(
                project_path, child.modules, relative_dir, _visited
            ))
    return result


def _is_excluded(source_dir: str, excluded_modules: list) -> bool:
    """Check a module path against excluded module paths, nested modules included."""
    path = to_package_path(source_dir)
    for excluded in excluded_modules:
        prefix = to_package_path(excluded)
        if prefix and (path == prefix or path.startswith(prefix + "/")):
            return True
    return False


def _read_sources(project_path: Path, package) -> dict:
    directory = project_path / package.path
    return {
        name: (directory / name).read_text(encoding="utf-8", errors="replace")
        for name in package.files
    }


def _generate_module_builds(project_path: Path, module: MavenModule, config: MigrationConfig,
                            files: OrderedDict, packages: dict, flags: list, content_roots: list):
    """Generate resource and package BUILD files for one module into ``files``."""
    source_roots = content_roots_for(module)
    main_paths = {root.path for root in source_roots if not root.is_test}
    for root in [r for r in source_roots if r.is_test and r.path in main_paths]:
        print(f"WARNING: Test source directory {root.path} is also the main source directory; "
              f"its tests are only compiled into the java_library, split them out by hand",
              file=sys.stderr)
        source_roots.remove(root)
    source_paths = {root.path for root in source_roots}

    main_resources = []
    test_resources = []
    for res_root in resource_roots_for(module):
        if not (project_path / res_root.path).is_dir():
            continue
        if res_root.path in source_paths:
            print(f"WARNING: Resource directory {res_root.path} is also a source root; "
                  f"add its resources to the java_library by hand",
                  file=sys.stderr)
            continue
        build = generate_resources_build(res_root)
        files[to_package_path(build.package, "BUILD")] = build.content
        (test_resources if res_root.is_test else main_resources).append(resource_label(res_root))

    test_runtime = main_resources + test_resources + runtime_library_labels(module, config.third_party_dir)

    for root in source_roots:
        found = discover_packages(project_path, root)
        if found:
            content_roots.append(root)
        for package in found:
            if root.is_test:
                build = generate_test_package_build(package, _read_sources(project_path, package), test_runtime)
            else:
                build = generate_package_build(package, main_resources)
            files[to_package_path(build.package, "BUILD")] = build.content
            packages[build.package] = build.targets
            flags.extend(build.flags)


def migrate(
    project_path: Path,
    output_path: Optional[Path] = None,
    dry_run: bool = False,
    mode: str = "migrate",
    config: Optional[MigrationConfig] = None,
    infer_deps: bool = False,
    build: bool = False,
) -> MigrationReport:
    """Run the Maven-to-Bazel migration.

    Parses all pom.xml files, generates dependencies.yaml, WORKSPACE,
    .bazelrc and a skeleton BUILD per Java package and resource directory,
    then either prints (dry-run) or writes them. Optionally runs the
    external tools afterwards.

    Args:
        project_path: Filesystem path to the Maven project root (containing pom.xml).
        output_path: Directory to write generated files to. Defaults to ``project_path``.
        dry_run: If ``True``, print generated content and tool commands instead
            of writing files or running anything.
        mode: ``"migrate"`` for a full migration, ``"overlay"`` to keep Maven
            alongside Bazel (adds Bazel entries to .gitignore).
        config: Tool commands and layout overrides. Defaults to ``MigrationConfig()``.
        infer_deps: Run bazel-deps and the dependency-inference tool after generating.
        build: Run ``bazel build`` and ``bazel test`` at the end.

    Returns:
        A MigrationReport of generated files, manual follow-ups and tool results.
    """
    config = config or MigrationConfig()
    root_pom = project_path / "pom.xml"
    if not root_pom.exists():
        print(f"ERROR: No pom.xml found at {root_pom}", file=sys.stderr)
        sys.exit(1)
    try:
        root_module = parse_pom(root_pom)
    except ET.ParseError as exc:
        print(f"ERROR: Could not parse {root_pom}: {exc}", file=sys.stderr)
        sys.exit(1)
    root_module.source_dir = "."

    out = output_path or project_path
    child_modules = []
    if root_module.modules:
        child_modules = _parse_modules_recursive(project_path, root_module.modules)
    excluded = [cm for cm in child_modules if _is_excluded(cm.source_dir, config.excluded_modules)]
    child_modules = [cm for cm in child_modules if not _is_excluded(cm.source_dir, config.excluded_modules)]

    files = OrderedDict()
    files["dependencies.yaml"] = build_dependencies_yaml(
        root_module, child_modules, config.third_party_dir, config.extra_resolvers, excluded,
    )
    files["WORKSPACE"] = generate_workspace(root_module, config.third_party_dir)
    files[f"{third_party_root(config.third_party_dir)}/BUILD"] = generate_third_party_build()
    files[".bazelrc"] = generate_bazelrc(root_module, child_modules)

    report = MigrationReport()
    packages = {}
    content_roots = []
    for module in [root_module] + child_modules:
        _generate_module_builds(project_path, module, config, files, packages, report.flags, content_roots)

    is_overlay = mode == "overlay"
    report.files = list(files)

    if dry_run:
        for relative, content in files.items():
            print("=" * 60)
            print(relative)
            print("=" * 60)
            print(content)
            print()
        if is_overlay:
            print("=" * 60)
            print(".gitignore (append)")
            print("=" * 60)
            print(generate_bazel_gitignore_entries())
    else:
        for relative, content in files.items():
            _write(out / relative, content)
        if is_overlay:
            _append_gitignore(out / ".gitignore")

    if infer_deps or build:
        if output_path is not None and output_path.resolve() != project_path.resolve():
            print(f"WARNING: External tools run in {out}, which holds generated files "
                  f"but not the project's sources", file=sys.stderr)
        print("\nRunning external tools:")

    generator_failed = False
    if infer_deps:
        generator = run_dependency_generator(out, config, dry_run)
        report.tool_results.append(generator)
        if generator.ok:
            report.tool_results.extend(
                infer_dependencies(out, packages, content_roots, config, dry_run)
            )
        else:
            print("WARNING: Skipping dependency inference because 3rd-party generation failed",
                  file=sys.stderr)
            generator_failed = True

    if build:
        if generator_failed:
            print("WARNING: Skipping bazel build because 3rd-party generation failed",
                  file=sys.stderr)
        else:
            if report.failed_tools:
                print(f"WARNING: Dependency inference failed for {len(report.failed_tools)} package(s); "
                      f"running bazel build anyway", file=sys.stderr)
            report.tool_results.extend(run_build(out, config, dry_run))

    if not dry_run:
        _print_summary(out, report, is_overlay, infer_deps, build)
    return report


def _append_gitignore(gitignore_path: Path):
    entries = generate_bazel_gitignore_entries()
    if not gitignore_path.exists():
        _write(gitignore_path, entries)
        return
    existing = gitignore_path.read_text(encoding="utf-8")
    if "/bazel-*" in existing:
        print(f"  ⏭ {gitignore_path} (Bazel entries already present)")
        return
    with open(gitignore_path, "a", encoding="utf-8") as f:
        f.write("\n" + entries)
    print(f"  ✓ {gitignore_path} (appended Bazel entries)")


def _print_summary(out: Path, report: MigrationReport, is_overlay: bool, infer_deps: bool, build: bool):
    if is_overlay:
        print(f"\n✅ Bazel overlay complete! Generated files in: {out}")
    else:
        print(f"\n✅ Migration complete! Generated files in: {out}")
    print(f"\nGenerated {len(report.files)} files")

    if report.flags:
        print("\n⚠️  Manual follow-up needed:")
        for path, reason in report.flags:
            print(f"  {path}: {reason}")

    if report.failed_tools:
        print("\n❌ Failed tool runs:")
        for result in report.failed_tools:
            print(f"  {result.name} (exit {result.returncode})")

    print("\n⚠️  Next steps:")
    step = 1
    if not infer_deps:
        print(f"  {step}. Run bazel-deps on dependencies.yaml, then the dependency-inference tool "
              f"per package (or rerun with --infer-deps)")
        step += 1
    if not build:
        print(f"  {step}. Run: bazel build //... && bazel test //...")
        step += 1
    print(f"  {step}. Fix missing test resources and any flagged tests by hand")
    step += 1
    if is_overlay:
        print(f"  {step}. Maven and Bazel builds now live side by side;")
        print("     keep pom.xml and dependencies.yaml in sync when adding dependencies")
    else:
        print(f"  {step}. Delete pom.xml files once the Bazel build is verified")


def _write(path: Path, content: str):
    """Write content to a file, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    print(f"  ✓ {path}")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Migrate a Maven project to Bazel with bazel-deps and per-package BUILD files"
    )
    parser.add_argument("project", type=Path, help="Path to Maven project root")
    parser.add_argument("--output", "-o", type=Path, default=None, help="Output directory (default: project dir)")
    parser.add_argument("--dry-run", "-n", action="store_true",
                        help="Print output and tool commands without writing files or running tools")
    parser.add_argument(
        "--mode", "-m", choices=["migrate", "overlay"], default="migrate",
        help="'migrate' (default) for full migration, 'overlay' to keep Maven alongside Bazel"
    )
    parser.add_argument("--config", "-c", type=Path, default=None, help="YAML file with tool commands")
    parser.add_argument("--infer-deps", action="store_true",
                        help="Run bazel-deps and the dependency-inference tool after generating files")
    parser.add_argument("--build", action="store_true", help="Run bazel build and bazel test at the end")
    return parser.parse_args(argv)


def main(argv=None):
    """CLI entry point. Parses arguments and delegates to ``migrate()``."""
    args = parse_args(argv)
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    report = migrate(
        args.project, args.output, args.dry_run, args.mode,
        config=config, infer_deps=args.infer_deps, build=args.build,
    )
    if not report.ok:
        sys.exit(1)
