"""Tests for maven_bazel_mappings.py — label generation and scope mapping."""

from bazel_migrate.maven_bazel_mappings import (
    bazel_attribute,
    is_surefire_test,
    third_party_root,
    to_coordinate,
    to_label,
    to_package_path,
    to_target_name,
    to_third_party_label,
    to_workspace_name,
    version_key,
)


class TestToThirdPartyLabel:
    def test_simple(self):
        assert to_third_party_label("com.google.guava", "guava") == "//3rdparty/jvm/com/google/guava:guava"

    def test_dashes_become_underscores(self):
        assert to_third_party_label("org.apache.commons", "commons-lang3") == \
            "//3rdparty/jvm/org/apache/commons:commons_lang3"

    def test_dotted_artifact(self):
        assert to_third_party_label("org.scala-lang", "scala.library") == \
            "//3rdparty/jvm/org/scala_lang:scala_library"

    def test_single_segment_group(self):
        assert to_third_party_label("junit", "junit") == "//3rdparty/jvm/junit:junit"

    def test_custom_third_party_dir(self):
        assert to_third_party_label("junit", "junit", "/third_party/java/") == "//third_party/java/junit:junit"


class TestWorkspaceName:
    def test_dashes(self):
        assert to_workspace_name("my-service") == "my_service"

    def test_leading_digit(self):
        assert to_workspace_name("2fa-server") == "w_2fa_server"

    def test_collapses_and_lowercases(self):
        assert to_workspace_name("My..Cool--App") == "my_cool_app"

    def test_empty(self):
        assert to_workspace_name("---") == "workspace"


class TestPackagePaths:
    def test_root_module_dot_dropped(self):
        assert to_package_path(".", "src/main/java", "com/example") == "src/main/java/com/example"

    def test_child_module(self):
        assert to_package_path("core", "src/test/java") == "core/src/test/java"

    def test_backslashes_normalized(self):
        assert to_package_path("core\\sub", "src") == "core/sub/src"

    def test_target_name_is_last_segment(self):
        assert to_target_name("core/src/main/java/com/example/util") == "util"

    def test_target_name_sanitized(self):
        assert to_target_name("src/main/java/com/my-co") == "my_co"

    def test_label_short_form(self):
        assert to_label("core/src/main/resources", "resources") == "//core/src/main/resources"

    def test_label_long_form(self):
        assert to_label("src/test/java/com/example", "FooTest") == "//src/test/java/com/example:FooTest"

    def test_third_party_root(self):
        assert third_party_root("3rdparty/jvm") == "3rdparty"
        assert third_party_root("/external/") == "external"


class TestSurefirePatterns:
    def test_matches_defaults(self):
        for name in ["FooTest.java", "TestFoo.java", "FooTests.java", "FooTestCase.java"]:
            assert is_surefire_test(name), name

    def test_non_tests(self):
        for name in ["Foo.java", "FooTestUtils.java", "FooIT.java", "FooTest.kt"]:
            assert not is_surefire_test(name), name


class TestVersionKey:
    def test_numeric_ordering(self):
        assert version_key("1.10") > version_key("1.2")

    def test_release_beats_snapshot(self):
        assert version_key("1.0") > version_key("1.0-SNAPSHOT")

    def test_patch_beats_release(self):
        assert version_key("1.0.1") > version_key("1.0")

    def test_final_equals_release(self):
        assert version_key("5.4.0.Final") == version_key("5.4.0")

    def test_milestones_compare_numerically(self):
        assert version_key("2.0.0-M10") > version_key("2.0.0-M9")
        assert version_key("3.0.0-RC10") > version_key("3.0.0-RC9")
        assert version_key("2.0.0") > version_key("2.0.0-M10")

    def test_conflict_picks_latest_milestone(self):
        assert max(["6.0.0-M9", "6.0.0-M10"], key=version_key) == "6.0.0-M10"

    def test_max_picks_highest(self):
        versions = ["32.1.3-jre", "33.0.0-jre", "31.1-jre"]
        assert max(versions, key=version_key) == "33.0.0-jre"


class TestScopes:
    def test_runtime(self):
        assert bazel_attribute("runtime") == "runtime_deps"

    def test_compile_provided_and_test(self):
        assert bazel_attribute("compile") == "deps"
        assert bazel_attribute("provided") == "deps"
        assert bazel_attribute("test") == "deps"

    def test_unknown_defaults_to_deps(self):
        assert bazel_attribute("weird") == "deps"

    def test_coordinate(self):
        assert to_coordinate("junit", "junit") == "junit:junit"
