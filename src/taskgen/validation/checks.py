# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lint checks for TaskGen projects.

These checks run on a fully loaded project and report issues that the
declaration API accepts but that are likely mistakes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from taskgen.project.resolver import DependencyResolver

if TYPE_CHECKING:
    from taskgen.model.component import ComponentSpec
    from taskgen.project.project import ProjectModel

# ###############
# Public Interface
# ###############

# Names used by the client-side component API. A member with one of these names
# cannot be reached through the shortcut accessors of that API.
RESERVED_MEMBER_NAMES: frozenset[str] = frozenset(
    {
        "attribute",
        "cleanup",
        "configure",
        "connect_to",
        "doc",
        "model",
        "name",
        "operation",
        "port",
        "ports",
        "property",
        "properties",
        "reset_exception",
        "start",
        "stop",
    }
)


@dataclass(frozen=True)
class ValidationWarning:
    """A non-fatal issue found by a lint check.

    Attributes:
        message: Human-readable description of the warning.
    """

    message: str


@dataclass(frozen=True)
class ValidationError:
    """A fatal issue found by a lint check.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


@dataclass
class ValidationResult:
    """Result of running the lint checks.

    Attributes:
        warnings: Non-fatal issues.
        errors: Issues that make the generated code unusable.
    """

    warnings: list[ValidationWarning] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any fatal validation errors were found."""
        return len(self.errors) > 0


def validate(project: ProjectModel) -> ValidationResult:
    """Run all lint checks on the components of *project*.

    Checks performed:

    1. **Reserved names** (warning): members named like a method of the
       client-side component API.

    2. **Isolated components** (warning): components whose interface, including
       inherited members, is empty.

    3. **Internal interface types** (error): interface types that the typekits
       defining them export for internal use only. Such types cannot cross
       component boundaries.

    Args:
        project: The loaded project. Imported libraries are not checked.

    Returns:
        A :class:`ValidationResult`; an empty result means no issue was found.
    """
    warnings: list[ValidationWarning] = []
    errors: list[ValidationError] = []
    if project.imported:
        return ValidationResult()

    for component in project.self_tasks:
        warnings.extend(_check_reserved_names(component))
        warnings.extend(_check_isolated(component))
        errors.extend(_check_internal_types(project, component))

    return ValidationResult(warnings=warnings, errors=errors)


def check_user_constructors(component: ComponentSpec, path: Path) -> list[ValidationWarning]:
    """Look for user constructors that still take an initial state.

    When a component gets a fixed initial state after its user files were
    created, the preserved constructors still accept a ``TaskCore::TaskState``
    argument and no longer match the base class.

    Args:
        component: The generated component.
        path: A preserved user file of the component.
    """
    if not component.is_fixed_initial_state or not path.is_file():
        return []

    constructor = re.compile(rf"\b{re.escape(component.basename)}\((.*)\)")
    for line in path.read_text(encoding="utf-8").splitlines():
        match = constructor.search(line)
        if match and "TaskCore::TaskState" in match.group(1):
            return [
                ValidationWarning(
                    f"'needs_configuration' or 'fixed_initial_state' has been specified for the task "
                    f"'{component.basename}', but the constructors in {path} still take a TaskState. "
                    f"Setting an initial state is not allowed with a fixed initial state, the "
                    f"constructors must be adapted."
                )
            ]
    return []


# ################
# Implementation
# ################


def _check_reserved_names(component: ComponentSpec) -> list[ValidationWarning]:
    return [
        ValidationWarning(
            f"{component.name}: '{member.name}' is a method name of the client-side component API; "
            f"the {member.kind} will not be reachable through the shortcut accessor"
        )
        for member in component.self_members()
        if member.name in RESERVED_MEMBER_NAMES
    ]


def _check_isolated(component: ComponentSpec) -> list[ValidationWarning]:
    if next(component.all_members(), None) is not None:
        return []
    return [ValidationWarning(f"{component.name} has an empty interface")]


def _check_internal_types(project: ProjectModel, component: ComponentSpec) -> list[ValidationError]:
    errors = []
    typekits = project.visible_typekits()
    for type_name in DependencyResolver(project).interface_types(component):
        exporting = [tk for tk in typekits if not tk.virtual and tk.includes(type_name)]
        if exporting and not any(tk.interface_type(type_name) for tk in exporting):
            names = ", ".join(tk.name for tk in exporting)
            errors.append(
                ValidationError(f"{component.name}: type {type_name} is internal to typekit(s) {names}")
            )
    return errors
