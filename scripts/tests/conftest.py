"""Shared test fixtures for the Maven-to-Bazel migration test suite."""

import textwrap
from pathlib import Path

import pytest

from bazel_migrate.pom_models import Dependency, MavenModule, Plugin


@pytest.fixture
def tmp_pom(tmp_path):
    """Factory fixture that writes a pom.xml to a temp directory and returns the path."""
    def _write(content: str) -> Path:
        pom = tmp_path / "pom.xml"
        pom.write_text(textwrap.dedent(content), encoding="utf-8")
        return pom
    return _write


@pytest.fixture
def write_file(tmp_path):
    """Factory fixture that writes a dedented file relative to tmp_path."""
    def _write(relative: str, content: str = "") -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def simple_module():
    """A minimal single-module MavenModule for use in generator tests."""
    return MavenModule(
        group_id="com.example",
        artifact_id="demo",
        version="1.0.0",
        packaging="jar",
        properties={"java.version": "17", "guava.version": "33.0.0-jre"},
        dependencies=[
            Dependency(
                group_id="com.google.guava",
                artifact_id="guava",
                version="${guava.version}",
            ),
            Dependency(
                group_id="junit",
                artifact_id="junit",
                version="4.13.2",
                scope="test",
            ),
        ],
        source_dir=".",
    )


@pytest.fixture
def multi_module_root():
    """A multi-module parent POM module with managed versions."""
    return MavenModule(
        group_id="com.example",
        artifact_id="parent",
        version="1.0.0",
        packaging="pom",
        properties={"java.version": "11", "jackson.version": "2.17.1"},
        modules=["core", "web"],
        dep_management=[
            Dependency(
                group_id="com.fasterxml.jackson.core",
                artifact_id="jackson-databind",
                version="${jackson.version}",
            ),
        ],
        plugins=[
            Plugin(
                group_id="org.apache.maven.plugins",
                artifact_id="maven-compiler-plugin",
                configuration={"release": "11"},
            ),
        ],
        source_dir=".",
    )


@pytest.fixture
def child_core_module():
    """A child 'core' module whose jackson version comes from dependencyManagement."""
    return MavenModule(
        group_id="com.example",
        artifact_id="core",
        version="1.0.0",
        packaging="jar",
        dependencies=[
            Dependency(
                group_id="com.fasterxml.jackson.core",
                artifact_id="jackson-databind",
            ),
        ],
        source_dir="core",
    )


@pytest.fixture
def child_web_module():
    """A child 'web' module that depends on 'core' and has a runtime-only driver."""
    return MavenModule(
        group_id="com.example",
        artifact_id="web",
        version="1.0.0",
        packaging="jar",
        dependencies=[
            Dependency(
                group_id="com.example",
                artifact_id="core",
                version="${project.version}",
            ),
            Dependency(
                group_id="org.postgresql",
                artifact_id="postgresql",
                version="42.7.3",
                scope="runtime",
            ),
            Dependency(
                group_id="junit",
                artifact_id="junit",
                version="4.13.2",
                scope="test",
            ),
        ],
        source_dir="web",
    )
