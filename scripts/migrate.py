#!/usr/bin/env python3
"""Maven to Bazel migration script.

Parses Maven pom.xml files (single or multi-module) and generates a Bazel
workspace whose 3rd-party dependencies are managed by bazel-deps.

Generated files:
    - dependencies.yaml   : bazel-deps input, one entry per Maven coordinate
    - WORKSPACE           : loads the bazel-deps generated workspace.bzl
    - 3rdparty/BUILD      : package marker for workspace.bzl
    - .bazelrc            : Java toolchain pinned to the Maven language level
    - <package>/BUILD     : java_library / java_test skeleton per Java package
    - <resources>/BUILD   : classpath resource library per resource directory

Usage:
    python migrate.py <path-to-maven-project> [--output <output-dir>] [--dry-run]
    python migrate.py <path-to-maven-project> --infer-deps --build [--config tools.yaml]
    python migrate.py <path-to-maven-project> --mode overlay [--dry-run]

Modes:
    migrate (default): full migration, suggests removing pom.xml after verification
    overlay:           dual-build, keeps Maven and Bazel side by side

--infer-deps runs bazel-deps, then the dependency-inference tool once per
package to fill in the empty ``deps`` of the generated rules. --build runs
``bazel build //...`` and ``bazel test //...`` afterwards.
"""

from bazel_migrate.migration_pipeline import main

if __name__ == "__main__":
    main()
