# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the TaskGen command-line interface."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from taskgen.errors import TaskgenError
from taskgen.project.packages import PROJECT_FILE_NAME
from taskgen.workspace.config import (
    WORKSPACE_CONFIG_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    load_workspace_config,
)

if TYPE_CHECKING:
    from taskgen.project.project import ProjectModel

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the TaskGen CLI."""
    parser = argparse.ArgumentParser(
        prog="taskgen",
        description="TaskGen: component code generator",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every generation step")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Create a new TaskGen project",
        description=f"Write a skeleton {PROJECT_FILE_NAME} and workspace configuration.",
    )
    init_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to create the project in (default: current directory)",
    )
    init_parser.add_argument("--name", help="Project name (default: the directory name)")

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Load the project and run the lint checks",
        description="Validate the project description without generating any file.",
    )
    check_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the TaskGen project (default: current directory)",
    )

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate the typekit and component classes",
        description=(
            "Regenerate the base classes in the automatic area and create the user "
            "classes that do not exist yet. Existing user files are never modified."
        ),
    )
    generate_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the TaskGen project (default: current directory)",
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "init":
        return _cmd_init(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "generate":
        return _cmd_generate(args)
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    """Handle the init subcommand."""
    from taskgen.project.loader import ProjectDescription, TaskDescription, save_project_description

    directory = Path(args.directory).resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    project_file = directory / PROJECT_FILE_NAME
    if project_file.exists():
        print(f"Error: project already exists at '{project_file}'.", file=sys.stderr)
        return 1

    name = args.name or re.sub(r"\W", "_", directory.name)
    description = ProjectDescription(name=name, tasks=[TaskDescription(name="Task")])
    try:
        save_project_description(description, project_file)
    except TaskgenError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    workspace_yaml = directory / WORKSPACE_CONFIG_NAME
    if not workspace_yaml.exists():
        workspace_yaml.write_text(
            "# TaskGen Workspace Configuration\n"
            "automatic-area: .taskgen\n"
            "fake-install: true\n"
            "package-imports: []\n",
            encoding="utf-8",
        )
    print(f"Initialized TaskGen project '{name}' at '{project_file}'.")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    from taskgen.validation.checks import validate

    loaded = _load(Path(args.directory))
    if loaded is None:
        return 1
    project, _ = loaded

    print(f"Checking {len(project.self_tasks)} component(s) of project '{project.name}'...")
    result = validate(project)
    for warning in result.warnings:
        print(f"Warning: {warning.message}")
    for error in result.errors:
        print(f"Error: {error.message}", file=sys.stderr)

    if result.has_errors:
        return 1

    print("No issues found.")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    from taskgen.generation.build import generate_project

    loaded = _load(Path(args.directory))
    if loaded is None:
        return 1
    project, config = loaded

    try:
        result = generate_project(
            project,
            automatic_area=config.automatic_area,
            install_links=config.fake_install,
        )
    except TaskgenError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for warning in result.warnings:
        print(f"Warning: {warning.message}")
    if result.typekit is not None:
        print(f"  typekit {project.name}: {result.typekit.types_header}")
    for component in result.components:
        print(f"  {component.user_header.stem}: {component.base_header.parent}")
    print(f"Generated {len(result.components)} component(s) of project '{project.name}'.")
    return 0


def _load(directory: Path) -> tuple[ProjectModel, WorkspaceConfig] | None:
    """Load the workspace configuration and the project of *directory*.

    Errors are reported on stderr; None is returned in that case.
    """
    from taskgen.project.loader import load_project_file

    directory = directory.resolve()
    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return None

    project_file = directory / PROJECT_FILE_NAME
    if not project_file.exists():
        print(
            f"Error: no TaskGen project found at '{directory}'. Run 'taskgen init' to create one.",
            file=sys.stderr,
        )
        return None

    config = WorkspaceConfig()
    workspace_yaml = directory / WORKSPACE_CONFIG_NAME
    if workspace_yaml.exists():
        try:
            config = load_workspace_config(workspace_yaml)
        except WorkspaceConfigError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return None

    try:
        project = load_project_file(project_file, resolver=config.package_resolver(directory))
    except TaskgenError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None
    return project, config
