"""External tool invocation: dependency generator, inference tool, Bazel.

Each tool is run as a one-shot subprocess from the workspace root, in a
fixed sequence. A tool failure never raises: it is reported as a WARNING
and returned as a ToolResult so the pipeline can summarize what broke.
"""

import shlex
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import MigrationConfig
from .maven_bazel_mappings import third_party_root

# Exit status a shell reports for a command it cannot find.
COMMAND_NOT_FOUND = 127
COMMAND_NOT_EXECUTABLE = 126

TARGETS_PLACEHOLDER = "{targets}"


@dataclass
class ToolResult:
    """Outcome of one external command.

    Attributes:
        name: Short description of the step (e.g. ``"infer deps //foo"``).
        command: The fully expanded argument list.
        returncode: Process exit status (0 for a dry run).
        stdout: Captured standard output.
        stderr: Captured standard error.
    """
    name: str
    command: list = field(default_factory=list)
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def expand_command(template: list, targets: Optional[list] = None, **values) -> list:
    """Fill placeholders in a command template.

    ``{name}`` placeholders are replaced inside each token with ``values[name]``.
    A token that is exactly ``{targets}`` expands to one argument per target
    label. Placeholders with no value are left untouched.

    Args:
        template: Command tokens.
        targets: Labels substituted for a standalone ``{targets}`` token.
        **values: Substitutions for the other placeholders.

    Returns:
        The expanded argument list.
    """
    command = []
    for token in template:
        if token == TARGETS_PLACEHOLDER:
            command.extend(targets or [])
            continue
        for key, value in values.items():
            token = token.replace("{" + key + "}", str(value))
        command.append(token)
    return command


def run_tool(name: str, command: list, cwd: Path, dry_run: bool = False) -> ToolResult:
    """Run one external command and capture its output.

    Args:
        name: Step description used in console output.
        command: Argument list to execute.
        cwd: Working directory (the Bazel workspace root).
        dry_run: If ``True``, print the command without running it.

    Returns:
        A ToolResult. A missing executable yields returncode 127, one that cannot be
        executed (permissions, bad format) 126.
    """
    print(f"  $ {shlex.join(command)}")
    if dry_run:
        return ToolResult(name=name, command=command)

    try:
        proc = subprocess.run(command, cwd=cwd, capture_output=True, text=True, check=False)
    except FileNotFoundError:
        result = ToolResult(
            name=name, command=command, returncode=COMMAND_NOT_FOUND,
            stderr=f"{command[0]}: command not found",
        )
    except OSError as exc:
        result = ToolResult(
            name=name, command=command, returncode=COMMAND_NOT_EXECUTABLE,
            stderr=f"{command[0]}: {exc.strerror or exc}",
        )
    else:
        result = ToolResult(
            name=name, command=command, returncode=proc.returncode,
            stdout=proc.stdout or "", stderr=proc.stderr or "",
        )

    if not result.ok:
        print(f"WARNING: {name} failed with exit code {result.returncode}", file=sys.stderr)
        tail = result.stderr.strip().splitlines()[-5:]
        for line in tail:
            print(f"    {line}", file=sys.stderr)
    return result


def _placeholders(workspace: Path, config: MigrationConfig) -> dict:
    return {
        "workspace": workspace.resolve(),
        "third_party_dir": config.third_party_dir,
        "third_party_root": third_party_root(config.third_party_dir),
    }


def run_dependency_generator(workspace: Path, config: MigrationConfig,
                             dry_run: bool = False) -> ToolResult:
    """Turn dependencies.yaml into 3rd-party BUILD files and workspace.bzl."""
    command = expand_command(config.generator_command, **_placeholders(workspace, config))
    return run_tool("generate 3rd-party BUILD files", command, workspace, dry_run)


def infer_dependencies(
    workspace: Path,
    packages: dict,
    content_roots: list,
    config: MigrationConfig,
    dry_run: bool = False,
) -> list[ToolResult]:
    """Run the dependency-inference tool once per BUILD package.

    Packages are processed in sorted order. A failing package is reported
    and skipped; the remaining packages still run.

    Args:
        workspace: The workspace root.
        packages: Mapping of package path to the target names it defines.
        content_roots: ContentRoot entries passed to the tool.
        config: Migration config holding the command template.
        dry_run: If ``True``, print the commands without running them.

    Returns:
        One ToolResult per package.
    """
    roots = ",".join(root.path for root in content_roots)
    results = []
    for package_path in sorted(packages):
        targets = [f"//{package_path}:{name}" for name in packages[package_path]]
        if not targets:
            continue
        command = expand_command(
            config.inference_command,
            targets=targets,
            content_roots=roots,
            **_placeholders(workspace, config),
        )
        results.append(run_tool(f"infer deps //{package_path}", command, workspace, dry_run))
    return results


def run_build(workspace: Path, config: MigrationConfig, dry_run: bool = False,
              run_tests: bool = True) -> list[ToolResult]:
    """Build the workspace, then run its tests if the build succeeded."""
    values = _placeholders(workspace, config)
    results = [run_tool("bazel build", expand_command(config.build_command, **values), workspace, dry_run)]
    if run_tests and results[0].ok:
        results.append(run_tool("bazel test", expand_command(config.test_command, **values), workspace, dry_run))
    return results
