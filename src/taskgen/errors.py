# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Error taxonomy shared by the TaskGen model, project and generation layers.

Definition-time errors (raised while a project is being declared or loaded)
abort loading of the declaring project. Generation-time errors abort the
generation run of that project only.
"""

from __future__ import annotations

# ###############
# Public Interface
# ###############


class TaskgenError(Exception):
    """Base class of every error raised by TaskGen."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class MalformedDeclaration(TaskgenError):
    """A typelist or type descriptor could not be parsed."""


class TypeNotFound(TaskgenError):
    """A type name is not known to the registry.

    Attributes:
        type_name: The normalized name that failed to resolve.
    """

    def __init__(self, type_name: str, message: str | None = None) -> None:
        super().__init__(message or f"type '{type_name}' is not defined")
        self.type_name = type_name


class IllegalTypeError(TaskgenError):
    """A type cannot be used where it was declared (e.g. a toplevel array)."""


class DuplicateMemberError(TaskgenError):
    """A member name collides with another member of the component or its ancestors."""


class MissingBodyError(TaskgenError):
    """A hidden operation was declared without a body."""


class MissingOpaqueError(TaskgenError):
    """An opaque type reaches a component interface without a marshalling definition."""


class UnsupportedOperationError(TaskgenError):
    """A legacy or unsupported declaration form was used."""


class GenerationOnImportError(TaskgenError):
    """Code generation was requested for an imported (external) definition."""


class FrozenProjectError(TaskgenError):
    """A declaration was attempted after the project was frozen for generation."""


class TypekitCycleError(TaskgenError):
    """A typekit import re-entered itself while it was being resolved."""


class PackageNotFoundError(TaskgenError):
    """The package discovery layer could not locate a package."""


class ProjectLoadError(TaskgenError):
    """A project description file is unreadable or does not match the schema."""


class ComponentNotFoundError(TaskgenError):
    """No component with the requested name is defined or imported."""


class UnknownMemberError(TaskgenError):
    """A component has no member with the requested name."""
