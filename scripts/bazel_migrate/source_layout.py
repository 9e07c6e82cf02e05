"""Content roots and Java package discovery.

A content root is a directory prefix (``src/main/java``) under which a
fully-qualified class name maps directly to a file path. BUILD files are
generated one per Java package directory found under the content roots,
and the dependency-inference tool is given the same roots so it can map
imports back to targets.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .maven_bazel_mappings import to_package_path
from .pom_models import MavenModule


@dataclass(frozen=True)
class ContentRoot:
    """A source or resource root belonging to one Maven module.

    Attributes:
        module_dir: The module's path relative to the workspace (``"."`` for root).
        relative_path: The root's path relative to the module.
        is_test: Whether the root holds test sources or test resources.
    """
    module_dir: str
    relative_path: str
    is_test: bool = False

    @property
    def path(self) -> str:
        """Workspace-relative path of the root, usable as a Bazel package path."""
        return to_package_path(self.module_dir, self.relative_path)


@dataclass
class JavaPackage:
    """A directory that directly contains ``.java`` files.

    Attributes:
        path: Workspace-relative directory, which becomes the Bazel package.
        java_package: Dotted Java package name derived from the content root.
        files: Sorted ``.java`` file names in the directory.
        content_root: The root the directory was found under.
    """
    path: str
    java_package: str
    files: list = field(default_factory=list)
    content_root: Optional[ContentRoot] = None

    @property
    def is_test(self) -> bool:
        return bool(self.content_root and self.content_root.is_test)


def content_roots_for(module: MavenModule) -> list[ContentRoot]:
    """Return the main and test Java content roots of a module."""
    module_dir = module.source_dir or "."
    return [
        ContentRoot(module_dir, module.source_directory, is_test=False),
        ContentRoot(module_dir, module.test_source_directory, is_test=True),
    ]


def resource_roots_for(module: MavenModule) -> list[ContentRoot]:
    """Return the main and test resource roots of a module, main roots first."""
    module_dir = module.source_dir or "."
    roots = [ContentRoot(module_dir, d, is_test=False) for d in module.resource_directories]
    roots += [ContentRoot(module_dir, d, is_test=True) for d in module.test_resource_directories]
    return roots


def class_to_path(fqcn: str, content_roots: list[ContentRoot], workspace: Path) -> Optional[Path]:
    """Resolve a fully-qualified class name to the ``.java`` file defining it.

    Nested classes (``com.example.Outer.Inner`` or ``com.example.Outer$Inner``)
    resolve to the file of their outermost enclosing class. Roots are tried
    in order and the first existing file wins.

    Args:
        fqcn: Fully-qualified class name.
        content_roots: Roots to search.
        workspace: Workspace directory the roots are relative to.

    Returns:
        Path to the source file, or ``None`` if no root contains it.
    """
    parts = [p for p in fqcn.replace("$", ".").split(".") if p]
    for length in range(len(parts), 0, -1):
        relative = "/".join(parts[:length]) + ".java"
        for root in content_roots:
            candidate = workspace / root.path / relative
            if candidate.is_file():
                return candidate
    return None


def path_to_class(path: Union[str, Path], content_root: Union[str, Path]) -> str:
    """Derive the fully-qualified class name of a ``.java`` file.

    Args:
        path: Path of the source file.
        content_root: The content root the file lives under. Must be
            expressed the same way as ``path`` (both relative or both absolute).

    Returns:
        The dotted class name, e.g. ``com.example.Foo``.

    Raises:
        ValueError: If ``path`` is not inside ``content_root`` or is not a ``.java`` file.
    """
    relative = Path(path).relative_to(Path(content_root))
    if relative.suffix != ".java":
        raise ValueError(f"{path} is not a Java source file")
    return ".".join(relative.with_suffix("").parts)


def discover_packages(workspace: Path, content_root: ContentRoot) -> list[JavaPackage]:
    """Find every directory under a content root that directly holds ``.java`` files.

    Args:
        workspace: The workspace directory.
        content_root: The root to walk.

    Returns:
        JavaPackage entries sorted by path. Empty if the root does not exist.
    """
    root_dir = workspace / content_root.path
    if not root_dir.is_dir():
        return []

    grouped = OrderedDict()
    for source in sorted(root_dir.rglob("*.java")):
        if not source.is_file():
            continue
        grouped.setdefault(source.parent, []).append(source.name)

    packages = []
    for directory, files in grouped.items():
        relative = directory.relative_to(root_dir)
        packages.append(JavaPackage(
            path=to_package_path(content_root.path, relative.as_posix()),
            java_package=".".join(relative.parts),
            files=sorted(files),
            content_root=content_root,
        ))
    packages.sort(key=lambda p: p.path)
    return packages
