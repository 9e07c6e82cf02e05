"""Maven-to-Bazel translation tables and label generation.

Pure mapping logic with no XML parsing, no file I/O, and no internal
package imports. All functions are stateless string transformations.
"""

import fnmatch
import re

# Maven scope → Bazel rule attribute.
# "provided" stays in deps: Bazel has no compile-only classpath for java_library
# short of neverlink, which only matters for deploy jars.
SCOPE_MAP = {
    "compile": "deps",
    "provided": "deps",
    "runtime": "runtime_deps",
    "test": "deps",
}

# Scopes that have no Bazel counterpart and are left out of dependencies.yaml.
SCOPE_SKIP = {
    "system",   # → local jar; wire up with java_import by hand
    "import",   # → BOM; versions are flattened into dependencies.yaml instead
}

# Maven Surefire's default <includes>. Files matching these are test classes.
SUREFIRE_INCLUDES = (
    "Test*.java",
    "*Test.java",
    "*Tests.java",
    "*TestCase.java",
)

MAVEN_CENTRAL_URL = "https://repo.maven.apache.org/maven2/"
DEFAULT_THIRD_PARTY_DIR = "3rdparty/jvm"


def _sanitize(segment: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_]", "_", segment)


def to_workspace_name(artifact_id: str) -> str:
    """Convert an artifactId into a valid Bazel workspace name.

    Workspace names may only contain letters, digits and underscores and
    must start with a letter.

        my-service → my_service
        2fa-server → w_2fa_server
    """
    name = re.sub(r"_+", "_", _sanitize(artifact_id)).strip("_").lower()
    if not name:
        return "workspace"
    if not name[0].isalpha():
        name = f"w_{name}"
    return name


def to_coordinate(group_id: str, artifact_id: str) -> str:
    """Return the ``group:artifact`` coordinate string."""
    return f"{group_id}:{artifact_id}"


def to_third_party_label(group_id: str, artifact_id: str,
                         third_party_dir: str = DEFAULT_THIRD_PARTY_DIR) -> str:
    """Build the label bazel-deps generates for a Maven artifact.

    The group's dots become package path separators and the artifact
    becomes the target name, with anything outside ``[a-zA-Z0-9_]``
    replaced by an underscore:

        com.google.guava : guava          → //3rdparty/jvm/com/google/guava:guava
        org.apache.commons : commons-lang3 → //3rdparty/jvm/org/apache/commons:commons_lang3

    Args:
        group_id: Maven groupId.
        artifact_id: Maven artifactId.
        third_party_dir: Workspace-relative directory bazel-deps writes to.

    Returns:
        A fully-qualified Bazel label string.
    """
    group_path = "/".join(_sanitize(part) for part in group_id.split("."))
    return f"//{third_party_dir.strip('/')}/{group_path}:{_sanitize(artifact_id)}"


def third_party_root(third_party_dir: str) -> str:
    """Return the top-level package holding ``workspace.bzl`` (``3rdparty/jvm`` → ``3rdparty``)."""
    return third_party_dir.strip("/").split("/")[0]


def to_package_path(*parts: str) -> str:
    """Join path fragments into a Bazel package path.

    ``.`` and empty segments are dropped so that the root module (whose
    ``source_dir`` is ``"."``) does not leak into labels.

        to_package_path(".", "src/main/java", "com/example") → src/main/java/com/example
    """
    segments = []
    for part in parts:
        for seg in str(part).replace("\\", "/").split("/"):
            if seg and seg != ".":
                segments.append(seg)
    return "/".join(segments)


def to_label(package_path: str, target: str) -> str:
    """Return ``//package:target``, using the short form when they coincide."""
    if package_path.split("/")[-1] == target:
        return f"//{package_path}"
    return f"//{package_path}:{target}"


def to_target_name(directory: str) -> str:
    """Name a package's primary target after its last directory segment."""
    last = to_package_path(directory).split("/")[-1]
    return _sanitize(last) or "lib"


def is_surefire_test(filename: str) -> bool:
    """Check a ``.java`` file name against Surefire's default includes."""
    return any(fnmatch.fnmatchcase(filename, pattern) for pattern in SUREFIRE_INCLUDES)


def version_key(version: str) -> list:
    """Sort key approximating Maven's version ordering.

    Numeric segments compare numerically and outrank qualifiers, and a
    release outranks its own pre-releases (``1.0 > 1.0-SNAPSHOT``). The
    qualifiers ``ga``, ``final`` and ``release`` count as a plain release.
    Tokens split into digit and letter runs, so ``M10`` outranks ``M9``.

        1.0-SNAPSHOT < 1.0 < 1.0.1 < 1.2 < 1.10
        2.0-M9 < 2.0-M10 < 2.0-RC1 < 2.0
    """
    key = []
    for token in re.findall(r"\d+|[^\d.\-_]+", version.strip()):
        if token.isdigit():
            key.append((2, int(token), ""))
        elif token.lower() in ("ga", "final", "release"):
            continue
        else:
            key.append((0, 0, token.lower()))
    # Trailing slot so that "1.0" sorts above "1.0-alpha" but below "1.0.1".
    key.append((1, 0, ""))
    return key


def bazel_attribute(scope: str) -> str:
    """Map a Maven dependency scope to the Bazel attribute that carries it.

    Args:
        scope: Maven scope string.

    Returns:
        ``"deps"`` or ``"runtime_deps"``. Unknown scopes default to ``"deps"``.
    """
    return SCOPE_MAP.get(scope, "deps")
