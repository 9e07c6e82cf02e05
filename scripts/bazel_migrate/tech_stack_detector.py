"""Java version and test-source detection heuristics.

Inspects parsed Maven data and raw Java sources to answer questions that
drive BUILD generation: which language level to target, which files are
test classes, and which tests Bazel's JUnit 4 runner will not handle.
"""

import re
from typing import Optional

from .maven_bazel_mappings import is_surefire_test
from .pom_parser import resolve_property

_CLASS_MODIFIERS = r"(?:(?:public|protected|private|static|final|strictfp)\s+)*"
# Column 0 only: indented declarations are nested classes.
_ABSTRACT_CLASS = re.compile(r"^" + _CLASS_MODIFIERS + r"abstract\s+" + _CLASS_MODIFIERS + r"class\s", re.MULTILINE)
_JUNIT5_IMPORT = re.compile(r"^\s*import\s+(?:static\s+)?org\.junit\.jupiter\.", re.MULTILINE)
_JUNIT4_IMPORT = re.compile(r"^\s*import\s+(?:static\s+)?org\.junit\.(?!jupiter\.|platform\.)", re.MULTILINE)
_TESTNG_IMPORT = re.compile(r"^\s*import\s+(?:static\s+)?org\.testng\.", re.MULTILINE)
_JUNIT4_PARAMETERIZED = re.compile(r"@RunWith\(\s*(?:\w+\.)*(?:Parameterized|JUnitParamsRunner)\.class\s*\)")
_JUNIT5_PARAMETERIZED = re.compile(r"@ParameterizedTest\b")


def _normalize_java_version(ver: str) -> str:
    # 1.8 → 8, 11 → 11
    if ver.startswith("1.") and len(ver) <= 4:
        return ver[2:]
    return ver


def detect_java_version(properties: dict, plugins: list) -> Optional[str]:
    """Extract the target Java version from Maven properties or compiler plugin config.

    Checks common property names in order of preference, then falls back to
    the ``maven-compiler-plugin`` ``<configuration>`` block. Legacy ``1.x``
    versions are normalized to ``x``.

    Args:
        properties: Merged properties dict from all modules.
        plugins: Combined list of plugins and pluginManagement entries.

    Returns:
        Java version string (e.g. ``"21"``), or ``None`` if not detected.
    """
    for prop_name in [
        "java.version", "maven.compiler.release", "maven.compiler.source",
        "maven.compiler.target", "jdk.version", "java.source.version",
    ]:
        if prop_name in properties:
            ver = resolve_property(properties[prop_name], properties) or properties[prop_name]
            return _normalize_java_version(ver)
    for p in plugins:
        if p.artifact_id == "maven-compiler-plugin":
            for key in ["release", "source", "target"]:
                if key in p.configuration:
                    ver = p.configuration[key]
                    ver = resolve_property(ver, properties) or ver
                    return _normalize_java_version(ver)
    return None


def is_test_class_file(filename: str) -> bool:
    """Check whether a file in a test content root is a runnable test class."""
    return filename.endswith(".java") and is_surefire_test(filename)


def is_abstract_class(source: str) -> bool:
    """Check whether a Java source declares a top-level abstract class."""
    return bool(_ABSTRACT_CLASS.search(source))


def detect_test_framework(source: str) -> Optional[str]:
    """Identify the test framework a Java source imports.

    JUnit 5 wins over JUnit 4 when a file imports both (vintage-style
    migrations commonly leave stray ``org.junit`` imports behind).

    Returns:
        ``"junit5"``, ``"junit4"``, ``"testng"``, or ``None``.
    """
    if _JUNIT5_IMPORT.search(source):
        return "junit5"
    if _TESTNG_IMPORT.search(source):
        return "testng"
    if _JUNIT4_IMPORT.search(source):
        return "junit4"
    return None


def is_parameterized_test(source: str) -> bool:
    """Check for JUnit 4 ``Parameterized``/``JUnitParams`` runners or JUnit 5 ``@ParameterizedTest``."""
    return bool(_JUNIT4_PARAMETERIZED.search(source) or _JUNIT5_PARAMETERIZED.search(source))


def needs_manual_attention(source: str) -> list[str]:
    """List the reasons a test class cannot simply run under ``java_test``.

    Bazel's built-in test runner only drives JUnit 4. JUnit 5 and TestNG
    classes need a different runner wired in by hand, and JUnit 5
    parameterized tests are the most common casualty of that.

    Args:
        source: Java source text of the test class.

    Returns:
        Human-readable reasons; empty if the class should run as generated.
    """
    reasons = []
    framework = detect_test_framework(source)
    if framework == "junit5":
        if is_parameterized_test(source):
            reasons.append("JUnit 5 @ParameterizedTest is not run by Bazel's JUnit 4 test runner")
        else:
            reasons.append("JUnit 5 tests need a JUnit Platform runner (Bazel's java_test runs JUnit 4)")
    elif framework == "testng":
        reasons.append("TestNG tests need a TestNG runner (Bazel's java_test runs JUnit 4)")
    return reasons
