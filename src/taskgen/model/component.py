# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""The component (task context) declaration model.

A :class:`ComponentSpec` collects the interface of one component: its ports,
properties, attributes and operations, plus the extra code plugins attach to
the generated base class. Member names are unique across the whole
inheritance chain, and every declaration is rejected once the owning project
has been frozen for generation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Protocol

from taskgen.errors import DuplicateMemberError, TypeNotFound, UnknownMemberError, UnsupportedOperationError
from taskgen.model.members import (
    AttributeSpec,
    MemberSpec,
    OperationSpec,
    PortDirection,
    PortSpec,
    PropertySpec,
    RetentionPolicy,
)
from taskgen.model.records import HOOKS, CodeCallback, CodeSlot, CodeSnippet, Contribution
from taskgen.model.types import RO_PTR_TEMPLATE, SHARED_PTR_TEMPLATE, TypeDef, validate_toplevel_type

if TYPE_CHECKING:
    from taskgen.project.project import ProjectModel

# ###############
# Public Interface
# ###############

# C++ class every component ultimately derives from.
FRAMEWORK_BASE_CLASS = "RTT::TaskContext"
FRAMEWORK_BASE_HEADER = "rtt/TaskContext.hpp"


class Extension(Protocol):
    """A plugin attached to a component that contributes generated code."""

    name: str

    def register_for_generation(self, owner: ComponentSpec) -> Contribution: ...


GenerationHandler = Callable[["ComponentSpec"], Contribution | None]


class ComponentSpec:
    """Declaration of a component and its interface.

    Args:
        project: The project owning the component.
        name: Qualified name, ``project::Basename``.
        superclass: Component this one derives from; None derives directly
            from the framework base class.
        external_definition: True for components of imported libraries, which
            are never generated.
        doc: Documentation of the component.
    """

    def __init__(
        self,
        project: ProjectModel,
        name: str,
        superclass: ComponentSpec | None = None,
        *,
        external_definition: bool = False,
        doc: str | None = None,
    ) -> None:
        self.project = project
        self.name = name
        self.superclass = superclass
        self.external_definition = external_definition
        self.doc = doc

        self.ports: dict[str, PortSpec] = {}
        self.dynamic_ports: list[PortSpec] = []
        self.properties: dict[str, PropertySpec] = {}
        self.attributes: dict[str, AttributeSpec] = {}
        self.operations: dict[str, OperationSpec] = {}

        self.base_hook_code: dict[str, list[CodeSlot]] = {hook: [] for hook in HOOKS}
        self.base_header_code: list[CodeSnippet] = []
        self.base_implementation_code: list[CodeSnippet] = []
        self.generation_handlers: list[GenerationHandler] = []
        self.extensions: list[Extension] = []

        self._fixed_initial_state = False
        self._needs_configuration = False

    def __repr__(self) -> str:
        return f"<ComponentSpec {self.name}>"

    # -- naming ---------------------------------------------------------------

    @property
    def basename(self) -> str:
        """The name without its project prefix."""
        return self.name.rpartition("::")[2]

    @property
    def class_name(self) -> str:
        return self.name

    @property
    def header_file(self) -> str:
        """Include path of the header that defines this component's class."""
        library = self.name.partition("::")[0] if "::" in self.name else self.project.name
        return f"{library.lower()}/{self.basename}.hpp"

    @property
    def superclass_name(self) -> str:
        return self.superclass.class_name if self.superclass is not None else FRAMEWORK_BASE_CLASS

    @property
    def superclass_header(self) -> str:
        return self.superclass.header_file if self.superclass is not None else FRAMEWORK_BASE_HEADER

    # -- inheritance ------------------------------------------------------------

    def ancestors(self) -> list[ComponentSpec]:
        """Return the superclass chain, nearest first."""
        result = []
        current = self.superclass
        while current is not None:
            result.append(current)
            current = current.superclass
        return result

    def implements(self, name: str) -> bool:
        """Return True if this component is, or derives from, the component *name*."""
        if name == FRAMEWORK_BASE_CLASS:
            return True
        return any(component.name == name for component in [self, *self.ancestors()])

    def all_ports(self) -> list[PortSpec]:
        """Static ports of this component and its ancestors, ancestors first."""
        return [p for c in self._chain() for p in c.ports.values()]

    def all_dynamic_ports(self) -> list[PortSpec]:
        return [p for c in self._chain() for p in c.dynamic_ports]

    def all_properties(self) -> list[PropertySpec]:
        return [p for c in self._chain() for p in c.properties.values()]

    def all_attributes(self) -> list[AttributeSpec]:
        return [a for c in self._chain() for a in c.attributes.values()]

    def all_operations(self) -> list[OperationSpec]:
        return [o for c in self._chain() for o in c.operations.values()]

    def self_members(self) -> Iterator[MemberSpec]:
        """Members declared on this component itself, in generation order."""
        yield from self.operations.values()
        yield from self.properties.values()
        yield from self.attributes.values()
        yield from self.ports.values()
        yield from self.dynamic_ports

    def all_members(self) -> Iterator[MemberSpec]:
        for component in self._chain():
            yield from component.self_members()

    def check_uniqueness(self, name: str) -> None:
        """Reject *name* if any member of this component or an ancestor uses it.

        Raises:
            DuplicateMemberError: On a collision.
        """
        for component in [self, *self.ancestors()]:
            if any(member.name == name for member in component.self_members()):
                raise DuplicateMemberError(f"{name} is already used in the interface of {component.name}")

    def find_type(self, type_ref: str | TypeDef) -> TypeDef:
        return self.project.find_type(type_ref)

    def used_types(self, member: MemberSpec) -> set[str]:
        """Return the names of the types *member* exposes."""
        return member.used_types()

    def find_port(self, name: str) -> PortSpec:
        for port in self.all_ports():
            if port.name == name:
                return port
        raise UnknownMemberError(f"{self.name} has no port named '{name}'")

    def find_operation(self, name: str) -> OperationSpec:
        for operation in self.all_operations():
            if operation.name == name:
                return operation
        raise UnknownMemberError(f"{self.name} has no operation named '{name}'")

    # -- state --------------------------------------------------------------------

    def fixed_initial_state(self) -> None:
        """Declare that the initial state of the component cannot be chosen."""
        self.project.check_mutable()
        self._fixed_initial_state = True

    def needs_configuration(self) -> None:
        """Declare that the component must be configured before it can start."""
        self.project.check_mutable()
        self._needs_configuration = True

    @property
    def is_fixed_initial_state(self) -> bool:
        if self._fixed_initial_state or self.is_configuration_required:
            return True
        return self.superclass is not None and self.superclass.is_fixed_initial_state

    @property
    def is_configuration_required(self) -> bool:
        if self._needs_configuration:
            return True
        return self.superclass is not None and self.superclass.is_configuration_required

    # -- ports ------------------------------------------------------------------

    def input_port(
        self,
        name: str,
        type_name: str | TypeDef,
        *,
        doc: str | None = None,
        clear_on_start: bool = True,
    ) -> PortSpec:
        """Declare an input port."""
        return self._add_port(
            PortSpec(
                name=name,
                direction=PortDirection.INPUT,
                type_name=self._toplevel_type(type_name),
                doc=doc,
                clear_on_start=clear_on_start,
            )
        )

    def output_port(
        self,
        name: str,
        type_name: str | TypeDef,
        *,
        doc: str | None = None,
        keep_last_written_value: RetentionPolicy | str = RetentionPolicy.ONLY_IF_UNREAD,
    ) -> PortSpec:
        """Declare an output port.

        Args:
            keep_last_written_value: What the port retains for connections
                established after a write.
        """
        return self._add_port(
            PortSpec(
                name=name,
                direction=PortDirection.OUTPUT,
                type_name=self._toplevel_type(type_name),
                doc=doc,
                keep_last_written_value=RetentionPolicy(keep_last_written_value),
            )
        )

    def dynamic_input_port(self, name: str, type_name: str | TypeDef | None = None, *, doc: str | None = None) -> PortSpec:
        """Declare that input ports matching *name* may be created at runtime."""
        return self._add_dynamic_port(name, PortDirection.INPUT, type_name, doc)

    def dynamic_output_port(
        self, name: str, type_name: str | TypeDef | None = None, *, doc: str | None = None
    ) -> PortSpec:
        """Declare that output ports matching *name* may be created at runtime."""
        return self._add_dynamic_port(name, PortDirection.OUTPUT, type_name, doc)

    def port_driven(self, *names: str) -> None:
        """Make the update hook run whenever one of the named input ports receives data.

        Without arguments, every input port declared on this component becomes
        a trigger.

        Raises:
            UnknownMemberError: If a name is not an input port of this component.
        """
        self.project.check_mutable()
        if not names:
            names = tuple(name for name, port in self.ports.items() if port.is_input)
        for name in names:
            port = self.ports.get(name)
            if port is None or not port.is_input:
                raise UnknownMemberError(f"{self.name} has no input port named '{name}' to be driven by")
            port.is_event_triggered = True

    # -- configuration and runtime values -----------------------------------------

    def property(
        self,
        name: str,
        type_name: str | TypeDef,
        default_value: object = None,
        *,
        doc: str | None = None,
    ) -> PropertySpec:
        """Declare a configuration property."""
        self.project.check_mutable()
        self.check_uniqueness(name)
        prop = PropertySpec(name=name, type_name=self._toplevel_type(type_name), default_value=default_value, doc=doc)
        self.properties[name] = prop
        return prop

    def attribute(
        self,
        name: str,
        type_name: str | TypeDef,
        default_value: object = None,
        *,
        doc: str | None = None,
    ) -> AttributeSpec:
        """Declare a runtime attribute."""
        self.project.check_mutable()
        self.check_uniqueness(name)
        attr = AttributeSpec(name=name, type_name=self._toplevel_type(type_name), default_value=default_value, doc=doc)
        self.attributes[name] = attr
        return attr

    # -- operations ---------------------------------------------------------------

    def operation(self, name: str, *, doc: str | None = None, method_name: str | None = None) -> OperationSpec:
        """Declare an operation implemented by the user class.

        The returned spec is configured by chaining
        :meth:`~taskgen.model.members.OperationSpec.argument`,
        :meth:`~taskgen.model.members.OperationSpec.returns` and
        :meth:`~taskgen.model.members.OperationSpec.caller_thread`.
        """
        return self._add_operation(OperationSpec(name=name, doc=doc, method_name=method_name or ""))

    def hidden_operation(
        self, name: str, body: str, *, doc: str | None = None, method_name: str | None = None
    ) -> OperationSpec:
        """Declare an operation implemented by the generated base class."""
        return self._add_operation(
            OperationSpec(name=name, doc=doc, method_name=method_name or "", body=body, hidden=True)
        )

    def method(self, name: str) -> OperationSpec:
        raise UnsupportedOperationError(
            "RTT 1.x methods must be replaced by RTT 2.x operations. Use #operation"
        )

    def command(self, name: str) -> OperationSpec:
        raise UnsupportedOperationError(
            "RTT 1.x commands must be replaced by RTT 2.x operations. Use #operation"
        )

    # -- code added to the generated base class -----------------------------------

    def in_base_hook(self, hook: str, code: str | CodeCallback) -> None:
        """Add a statement to one lifecycle hook of the generated base class.

        Raises:
            ValueError: If *hook* is not a lifecycle hook.
        """
        self.project.check_mutable()
        if hook not in self.base_hook_code:
            raise ValueError(f"unknown hook '{hook}', must be one of {', '.join(HOOKS)}")
        self.base_hook_code[hook].append(CodeSlot.of(code))

    def add_base_header_code(self, code: str | CodeCallback, include_before: bool = True) -> None:
        """Add toplevel code to the generated base header, before or after the class."""
        self.project.check_mutable()
        self.base_header_code.append(CodeSnippet(CodeSlot.of(code), include_before))

    def add_base_implementation_code(self, code: str | CodeCallback, include_before: bool = True) -> None:
        """Add toplevel code to the generated base implementation file."""
        self.project.check_mutable()
        self.base_implementation_code.append(CodeSnippet(CodeSlot.of(code), include_before))

    def add_generation_handler(self, handler: GenerationHandler) -> None:
        """Register a callable run at generation time, after all members.

        The handler receives the component and may return a
        :class:`~taskgen.model.records.Contribution`.
        """
        self.project.check_mutable()
        self.generation_handlers.append(handler)

    def add_extension(self, extension: Extension) -> None:
        self.project.check_mutable()
        if any(ext.name == extension.name for ext in self.extensions):
            raise DuplicateMemberError(f"{self.name} already has an extension named '{extension.name}'")
        self.extensions.append(extension)

    # -- pointer types --------------------------------------------------------------

    def shared_ptr(self, type_ref: str | TypeDef) -> str:
        """Return the name of ``boost::shared_ptr`` of *type_ref*, defining it if needed.

        The pointer is declared as an opaque of the project typekit, marshalled
        as the pointed-to type.
        """
        return self._pointer_type(SHARED_PTR_TEMPLATE, type_ref, "boost/shared_ptr.hpp")

    def ro_ptr(self, type_ref: str | TypeDef) -> str:
        """Return the name of ``RTT::extras::ReadOnlyPointer`` of *type_ref*, defining it if needed."""
        return self._pointer_type(RO_PTR_TEMPLATE, type_ref, "rtt/extras/ReadOnlyPointer.hpp")

    # -- helpers ----------------------------------------------------------------------

    def _chain(self) -> list[ComponentSpec]:
        return [*reversed(self.ancestors()), self]

    def _toplevel_type(self, type_ref: str | TypeDef) -> str:
        type_def = self.find_type(type_ref)
        validate_toplevel_type(type_def)
        return type_def.name

    def _add_port(self, port: PortSpec) -> PortSpec:
        self.project.check_mutable()
        self.check_uniqueness(port.name)
        self.ports[port.name] = port
        return port

    def _add_dynamic_port(
        self, name: str, direction: PortDirection, type_name: str | TypeDef | None, doc: str | None
    ) -> PortSpec:
        self.project.check_mutable()
        self.check_uniqueness(name)
        resolved = self._toplevel_type(type_name) if type_name is not None else None
        port = PortSpec(name=name, direction=direction, type_name=resolved, doc=doc, is_dynamic=True)
        self.dynamic_ports.append(port)
        return port

    def _add_operation(self, operation: OperationSpec) -> OperationSpec:
        self.project.check_mutable()
        self.check_uniqueness(operation.name)
        operation._owner = self
        self.operations[operation.name] = operation
        return operation

    def _pointer_type(self, template: str, type_ref: str | TypeDef, include: str) -> str:
        pointee = self.find_type(type_ref)
        full_name = f"{template}<{pointee.name}>"
        try:
            return self.find_type(full_name).name
        except TypeNotFound:
            self.project.opaque_type(full_name, pointee.name, includes=[include], needs_copy=False)
        return self.find_type(full_name).name
