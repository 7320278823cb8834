# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declarative project descriptions (``taskgen.yaml``).

A project description names the project, the typekit it builds, the typekits
and component libraries it imports, and the components it declares::

    name: camera
    typekit:
      registry: camera.tlb
    using-typekits: [base]
    tasks:
      - name: Driver
        needs-configuration: true
        properties:
          - {name: device, type: /std/string, default: /dev/video0}
        output-ports:
          - {name: frames, type: /camera/Frame, pointer: read-only}
        operations:
          - name: reset
            returns: /bool
            arguments:
              - {name: hard, type: /bool}

The description is validated with pydantic and then replayed through the
declaration API of :class:`~taskgen.project.project.ProjectModel`, so it is
subject to the same checks as a programmatic declaration.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from taskgen.errors import ProjectLoadError
from taskgen.model.component import ComponentSpec
from taskgen.model.members import RetentionPolicy
from taskgen.model.records import HOOKS
from taskgen.project.packages import PackageInfo, PackageResolver
from taskgen.project.project import ProjectModel

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

ScalarValue = bool | int | float | str


class _Schema(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class OpaqueDescription(_Schema):
    """An opaque type of the project typekit."""

    type: str
    marshal_as: str = Field(alias="marshal-as")
    includes: list[str] = Field(default_factory=list)
    needs_copy: bool = Field(alias="needs-copy", default=True)


class TypekitDescription(_Schema):
    """Location of the type descriptor files of the project typekit.

    Paths are relative to the project file.
    """

    registry: str | None = None
    typelist: str | None = None
    opaques: list[OpaqueDescription] = Field(default_factory=list)


class ValueDescription(_Schema):
    """A property or attribute."""

    name: str
    type: str
    default: ScalarValue | None = None
    doc: str | None = None


class InputPortDescription(_Schema):
    name: str
    type: str
    doc: str | None = None
    pointer: Literal["shared", "read-only"] | None = None
    clear_on_start: bool = Field(alias="clear-on-start", default=True)


class OutputPortDescription(_Schema):
    name: str
    type: str
    doc: str | None = None
    pointer: Literal["shared", "read-only"] | None = None
    keep_last_written_value: RetentionPolicy = Field(
        alias="keep-last-written-value", default=RetentionPolicy.ONLY_IF_UNREAD
    )


class DynamicPortDescription(_Schema):
    name: str
    type: str | None = None
    doc: str | None = None


class ArgumentDescription(_Schema):
    name: str
    type: str
    doc: str | None = None


class OperationDescription(_Schema):
    """An operation; hidden operations are implemented by *body* in the base class."""

    name: str
    doc: str | None = None
    method_name: str | None = Field(alias="method-name", default=None)
    returns: str | None = None
    arguments: list[ArgumentDescription] = Field(default_factory=list)
    caller_thread: bool = Field(alias="caller-thread", default=False)
    hidden: bool = False
    body: str | None = None


class TaskDescription(_Schema):
    """A component declaration."""

    name: str
    subclasses: str | None = None
    doc: str | None = None
    fixed_initial_state: bool = Field(alias="fixed-initial-state", default=False)
    needs_configuration: bool = Field(alias="needs-configuration", default=False)
    port_driven: bool | list[str] = Field(alias="port-driven", default=False)
    properties: list[ValueDescription] = Field(default_factory=list)
    attributes: list[ValueDescription] = Field(default_factory=list)
    input_ports: list[InputPortDescription] = Field(alias="input-ports", default_factory=list)
    output_ports: list[OutputPortDescription] = Field(alias="output-ports", default_factory=list)
    dynamic_input_ports: list[DynamicPortDescription] = Field(alias="dynamic-input-ports", default_factory=list)
    dynamic_output_ports: list[DynamicPortDescription] = Field(alias="dynamic-output-ports", default_factory=list)
    operations: list[OperationDescription] = Field(default_factory=list)
    hooks: dict[str, list[str]] = Field(default_factory=dict)
    methods: list[str] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=list)

    @field_validator("hooks")
    @classmethod
    def _check_hook_names(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        unknown = sorted(set(value) - set(HOOKS))
        if unknown:
            raise ValueError(f"unknown hook(s) {', '.join(unknown)}, must be one of {', '.join(HOOKS)}")
        return value


class ProjectDescription(_Schema):
    """Top-level model of a ``taskgen.yaml`` file."""

    name: str
    typekit: TypekitDescription | None = None
    using_typekits: list[str] = Field(alias="using-typekits", default_factory=list)
    using_task_libraries: list[str] = Field(alias="using-task-libraries", default_factory=list)
    tasks: list[TaskDescription] = Field(default_factory=list)


def parse_project_description(text: str, source_label: str = "<string>") -> ProjectDescription:
    """Validate the YAML text of a project description.

    Raises:
        ProjectLoadError: If the text is not valid YAML or does not match the schema.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ProjectLoadError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise ProjectLoadError(f"{source_label}: project description must be a YAML mapping")

    try:
        return ProjectDescription.model_validate(data)
    except ValidationError as exc:
        raise ProjectLoadError(f"Invalid project description {source_label}: {exc}") from exc


def load_project(
    text: str,
    *,
    base_dir: Path,
    resolver: PackageResolver | None = None,
    main_project: ProjectModel | None = None,
    pkg: PackageInfo | None = None,
    source_label: str = "<string>",
) -> ProjectModel:
    """Build a project from the YAML text of its description.

    Args:
        text: Content of the project description.
        base_dir: Directory relative paths are resolved against; generated
            files are written below it.
        resolver: Package discovery for imports; imported projects use the
            resolver of *main_project*.
        main_project: Set when loading an imported component library.
        pkg: Package an imported library was found in.
        source_label: Name used in error messages.

    Raises:
        ProjectLoadError: If the description is invalid or a referenced file
            cannot be read.
        TaskgenError: If a declaration is rejected by the component model.
    """
    description = parse_project_description(text, source_label)
    if main_project is not None:
        resolver = main_project.resolver
    project = ProjectModel(description.name, base_dir=base_dir, resolver=resolver, main_project=main_project, pkg=pkg)
    logger.debug("loading project %s from %s", project.name, source_label)

    for name in description.using_typekits:
        project.using_typekit(name)
    for name in description.using_task_libraries:
        project.using_task_library(name)

    # The typekit of an imported project comes from its installed package.
    if description.typekit is not None and not project.imported:
        _load_own_typekit(project, description.typekit, base_dir)

    for task in description.tasks:
        _declare_task(project, task)
    return project


def load_project_file(
    path: Path,
    *,
    resolver: PackageResolver | None = None,
    main_project: ProjectModel | None = None,
    pkg: PackageInfo | None = None,
) -> ProjectModel:
    """Load the project described by the ``taskgen.yaml`` file at *path*."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ProjectLoadError(f"Project file not found: {path}") from None
    except OSError as exc:
        raise ProjectLoadError(f"Cannot read project file '{path}': {exc}") from exc
    return load_project(
        text,
        base_dir=path.parent,
        resolver=resolver,
        main_project=main_project,
        pkg=pkg,
        source_label=str(path),
    )


def save_project_description(description: ProjectDescription, path: Path) -> None:
    """Write *description* to *path*, omitting fields left at their defaults.

    Raises:
        ProjectLoadError: If the file cannot be written.
    """
    data = description.model_dump(by_alias=True, exclude_defaults=True, mode="json")
    try:
        path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False), encoding="utf-8")
    except OSError as exc:
        raise ProjectLoadError(f"Cannot write project file '{path}': {exc}") from exc


# ################
# Implementation
# ################


def _read(base_dir: Path, relative: str) -> str:
    path = base_dir / relative
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProjectLoadError(f"Cannot read typekit file '{path}': {exc}") from exc


def _load_own_typekit(project: ProjectModel, typekit: TypekitDescription, base_dir: Path) -> None:
    if typekit.registry is not None:
        typelist = _read(base_dir, typekit.typelist) if typekit.typelist is not None else None
        project.load_typekit(_read(base_dir, typekit.registry), typelist)
    else:
        project.typekit(create=True)
    for opaque in typekit.opaques:
        project.opaque_type(
            opaque.type,
            opaque.marshal_as,
            includes=opaque.includes,
            needs_copy=opaque.needs_copy,
        )


def _port_type(task: ComponentSpec, type_name: str, pointer: str | None) -> str:
    if pointer == "shared":
        return task.shared_ptr(type_name)
    if pointer == "read-only":
        return task.ro_ptr(type_name)
    return type_name


def _declare_task(project: ProjectModel, description: TaskDescription) -> ComponentSpec:
    task = project.task_context(description.name, subclasses=description.subclasses, doc=description.doc)

    for name in description.methods:
        task.method(name)
    for name in description.commands:
        task.command(name)

    if description.fixed_initial_state:
        task.fixed_initial_state()
    if description.needs_configuration:
        task.needs_configuration()

    for prop in description.properties:
        task.property(prop.name, prop.type, prop.default, doc=prop.doc)
    for attr in description.attributes:
        task.attribute(attr.name, attr.type, attr.default, doc=attr.doc)

    for port in description.input_ports:
        task.input_port(
            port.name,
            _port_type(task, port.type, port.pointer),
            doc=port.doc,
            clear_on_start=port.clear_on_start,
        )
    for port in description.output_ports:
        task.output_port(
            port.name,
            _port_type(task, port.type, port.pointer),
            doc=port.doc,
            keep_last_written_value=port.keep_last_written_value,
        )
    for port in description.dynamic_input_ports:
        task.dynamic_input_port(port.name, port.type, doc=port.doc)
    for port in description.dynamic_output_ports:
        task.dynamic_output_port(port.name, port.type, doc=port.doc)

    if description.port_driven is True:
        task.port_driven()
    elif description.port_driven:
        task.port_driven(*description.port_driven)

    for op in description.operations:
        if op.hidden and op.body is not None:
            operation = task.hidden_operation(op.name, op.body, doc=op.doc, method_name=op.method_name)
        else:
            operation = task.operation(op.name, doc=op.doc, method_name=op.method_name)
            operation.hidden = op.hidden
            operation.body = op.body
        for arg in op.arguments:
            operation.argument(arg.name, arg.type, arg.doc)
        operation.returns(op.returns)
        if op.caller_thread:
            operation.caller_thread()

    for hook, statements in description.hooks.items():
        for statement in statements:
            task.in_base_hook(hook, statement)
    return task
