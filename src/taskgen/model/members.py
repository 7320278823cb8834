# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Interface members of a component: ports, properties, attributes and operations.

Every member kind implements the :class:`Generatable` interface. The records
it returns are pure data; the member never modifies the component it belongs
to while being prepared for generation.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Protocol

from pydantic import BaseModel, PrivateAttr, model_validator
from pydantic import Field as _Field

from taskgen.errors import MissingBodyError
from taskgen.model.records import (
    CodeSlot,
    ConstructionRecord,
    Contribution,
    DeclarationRecord,
    HookRecord,
    MethodRecord,
)
from taskgen.model.types import cxx_literal, cxx_name

if TYPE_CHECKING:
    from taskgen.model.component import ComponentSpec

# ###############
# Public Interface
# ###############


class PortDirection(Enum):
    """Data flow direction of a port."""

    INPUT = "input"
    OUTPUT = "output"


class RetentionPolicy(Enum):
    """What an output port keeps from the samples written to it.

    * ``ALWAYS`` keeps the last written sample for late connections.
    * ``NEVER`` keeps nothing.
    * ``ONLY_IF_UNREAD`` keeps the next written sample until a connection reads it.
    """

    ALWAYS = "always"
    NEVER = "never"
    ONLY_IF_UNREAD = "only_if_unread"


class Generatable(Protocol):
    """Interface every member kind provides to the generation engine."""

    name: str

    def used_types(self) -> set[str]: ...

    def declaration_records(self, owner: ComponentSpec) -> list[DeclarationRecord]: ...

    def construction_records(self, owner: ComponentSpec) -> list[ConstructionRecord]: ...


class MemberSpec(BaseModel):
    """Common fields of all component members."""

    kind: ClassVar[str] = "member"

    name: str
    doc: str | None = None

    def used_types(self) -> set[str]:
        return set()

    def declaration_records(self, owner: ComponentSpec) -> list[DeclarationRecord]:
        return []

    def construction_records(self, owner: ComponentSpec) -> list[ConstructionRecord]:
        return []

    def hook_records(self, owner: ComponentSpec) -> list[HookRecord]:
        return []

    def method_records(self, owner: ComponentSpec) -> list[MethodRecord]:
        return []

    def register_for_generation(self, owner: ComponentSpec) -> Contribution:
        """Bundle all records of this member into a :class:`Contribution`."""
        contribution = Contribution(
            declarations=self.declaration_records(owner),
            constructions=self.construction_records(owner),
            hooks=self.hook_records(owner),
        )
        for method in self.method_records(owner):
            if method.in_base:
                contribution.base_methods.append(method)
            else:
                contribution.user_methods.append(method)
        return contribution

    @property
    def field_name(self) -> str:
        """Name of the generated data member backing this member."""
        return f"_{self.name}"

    def _cxx_doc(self) -> str:
        return cxx_literal(self.doc or "")


class PortSpec(MemberSpec):
    """A data port.

    A dynamic port is a template for ports created at runtime: it takes part
    in type resolution but never produces a generated member.
    """

    kind: ClassVar[str] = "port"

    direction: PortDirection
    type_name: str | None = None
    is_dynamic: bool = False
    is_event_triggered: bool = False
    keep_last_written_value: RetentionPolicy = RetentionPolicy.ONLY_IF_UNREAD
    clear_on_start: bool = True

    @property
    def is_input(self) -> bool:
        return self.direction is PortDirection.INPUT

    @property
    def framework_class(self) -> str:
        return "RTT::InputPort" if self.is_input else "RTT::OutputPort"

    def instantiate(self, name: str) -> PortSpec:
        """Return a copy of this dynamic port template named *name*."""
        return self.model_copy(update={"name": name})

    def used_types(self) -> set[str]:
        return {self.type_name} if self.type_name else set()

    def declaration_records(self, owner: ComponentSpec) -> list[DeclarationRecord]:
        if self.is_dynamic:
            return []
        assert self.type_name is not None
        return [
            DeclarationRecord(
                kind=f"{self.direction.value}_port_declaration",
                field_name=self.field_name,
                type_signature=f"{self.framework_class}< {cxx_name(self.type_name)} >",
            )
        ]

    def construction_records(self, owner: ComponentSpec) -> list[ConstructionRecord]:
        if self.is_dynamic:
            return []
        add = "addEventPort" if self.is_event_triggered else "addPort"
        constructor = f"ports()->{add}({self.field_name})"
        if self.doc:
            constructor += f"\n  .doc({self._cxx_doc()})"
        records = [
            ConstructionRecord(
                kind=f"{self.direction.value}_port_declaration",
                field_name=self.field_name,
                initializer=CodeSlot(text=f'{self.field_name}("{self.name}")'),
                constructor=CodeSlot(text=constructor + ";"),
            )
        ]
        if not self.is_input:
            records.append(
                ConstructionRecord(
                    kind="output_port",
                    field_name=self.field_name,
                    constructor=CodeSlot(text=self._retention_setup()),
                )
            )
        return records

    def hook_records(self, owner: ComponentSpec) -> list[HookRecord]:
        if self.is_dynamic or not self.is_input or not self.clear_on_start:
            return []
        return [HookRecord(hook="start", code=CodeSlot(text=f"{self.field_name}.clear();"))]

    def _retention_setup(self) -> str:
        keep_last, keep_next = _RETENTION_FLAGS[self.keep_last_written_value]
        return (
            f"{self.field_name}.keepLastWrittenValue({_cxx_bool(keep_last)});\n"
            f"{self.field_name}.keepNextWrittenValue({_cxx_bool(keep_next)});"
        )


class PropertySpec(MemberSpec):
    """A configuration value, read by the component at configuration time."""

    kind: ClassVar[str] = "property"

    type_name: str
    default_value: Any = None

    def used_types(self) -> set[str]:
        return {self.type_name}

    def declaration_records(self, owner: ComponentSpec) -> list[DeclarationRecord]:
        return [
            DeclarationRecord(
                kind="property",
                field_name=self.field_name,
                type_signature=f"RTT::Property< {cxx_name(self.type_name)} >",
            )
        ]

    def construction_records(self, owner: ComponentSpec) -> list[ConstructionRecord]:
        constructor = []
        if self.default_value is not None:
            constructor.append(f"{self.field_name}.set({cxx_literal(self.default_value)});")
        constructor.append(f"properties()->addProperty( {self.field_name} );")
        return [
            ConstructionRecord(
                kind="property",
                field_name=self.field_name,
                initializer=CodeSlot(text=f'{self.field_name}("{self.name}", {self._cxx_doc()})'),
                constructor=CodeSlot(text="\n".join(constructor)),
            )
        ]


class AttributeSpec(MemberSpec):
    """A runtime-modifiable value exported by the component."""

    kind: ClassVar[str] = "attribute"

    type_name: str
    default_value: Any = None

    def used_types(self) -> set[str]:
        return {self.type_name}

    def declaration_records(self, owner: ComponentSpec) -> list[DeclarationRecord]:
        return [
            DeclarationRecord(
                kind="attribute",
                field_name=self.field_name,
                type_signature=f"RTT::Attribute< {cxx_name(self.type_name)} >",
            )
        ]

    def construction_records(self, owner: ComponentSpec) -> list[ConstructionRecord]:
        constructor = []
        if self.default_value is not None:
            constructor.append(f"{self.field_name}.set({cxx_literal(self.default_value)});")
        constructor.append(f"attributes()->addAttribute( {self.field_name} );")
        return [
            ConstructionRecord(
                kind="attribute",
                field_name=self.field_name,
                initializer=CodeSlot(text=f'{self.field_name}("{self.name}")'),
                constructor=CodeSlot(text="\n".join(constructor)),
            )
        ]


class OperationArgument(BaseModel):
    """One argument of an operation."""

    name: str
    type_name: str
    doc: str | None = None


class OperationSpec(MemberSpec):
    """A callable service offered by the component.

    The C++ handler method is named after the operation with its first letter
    lower-cased (``MyOp`` is served by ``myOp``) unless *method_name* is given.
    Hidden operations are implemented by the generated base class and must
    therefore carry a body.
    """

    kind: ClassVar[str] = "operation"

    arguments: list[OperationArgument] = _Field(default_factory=list)
    return_type: str | None = None
    runs_in_caller_thread: bool = False
    body: str | None = None
    hidden: bool = False
    method_name: str = ""

    _owner: Any = PrivateAttr(default=None)

    @model_validator(mode="after")
    def _derive_method_name(self) -> OperationSpec:
        if not self.method_name:
            self.method_name = self.name[:1].lower() + self.name[1:]
        return self

    def argument(self, name: str, type_name: str, doc: str | None = None) -> OperationSpec:
        """Append an argument and return self for chaining."""
        if self._owner is not None:
            type_name = self._owner.find_type(type_name).name
        self.arguments.append(OperationArgument(name=name, type_name=type_name, doc=doc))
        return self

    def returns(self, type_name: str | None) -> OperationSpec:
        """Set the return type (None for void) and return self for chaining."""
        if type_name is not None and self._owner is not None:
            type_name = self._owner.find_type(type_name).name
        self.return_type = type_name
        return self

    def caller_thread(self) -> OperationSpec:
        """Declare that the operation runs in the thread of its caller."""
        self.runs_in_caller_thread = True
        return self

    def used_types(self) -> set[str]:
        types = {a.type_name for a in self.arguments}
        if self.return_type is not None:
            types.add(self.return_type)
        return types

    @property
    def cxx_return_type(self) -> str:
        return cxx_name(self.return_type) if self.return_type else "void"

    def argument_signature(self, owner: ComponentSpec, with_names: bool = True) -> str:
        """Return the C++ argument list; non-numeric types are passed by const reference."""
        parts = []
        for arg in self.arguments:
            cxx = cxx_name(arg.type_name)
            if not owner.find_type(arg.type_name).is_numeric:
                cxx = f"{cxx} const &"
            parts.append(f"{cxx} {arg.name}" if with_names else cxx)
        return ", ".join(parts)

    def signature(self, owner: ComponentSpec) -> str:
        return f"{self.cxx_return_type}({self.argument_signature(owner, with_names=False)})"

    def declaration_records(self, owner: ComponentSpec) -> list[DeclarationRecord]:
        return [
            DeclarationRecord(
                kind="operation",
                field_name=self.field_name,
                type_signature=f"RTT::Operation< {self.signature(owner)} >",
            )
        ]

    def construction_records(self, owner: ComponentSpec) -> list[ConstructionRecord]:
        thread = "RTT::ClientThread" if self.runs_in_caller_thread else "RTT::OwnThread"
        constructor = f"provides()->addOperation( {self.field_name})\n    .doc({self._cxx_doc()})"
        for arg in self.arguments:
            constructor += f'\n    .arg("{arg.name}", {cxx_literal(arg.doc or "")})'
        return [
            ConstructionRecord(
                kind="operation",
                field_name=self.field_name,
                initializer=CodeSlot(
                    text=(
                        f'{self.field_name}("{self.name}", &{owner.basename}Base::{self.method_name}, '
                        f"this, {thread})"
                    )
                ),
                constructor=CodeSlot(text=constructor + ";"),
            )
        ]

    def method_records(self, owner: ComponentSpec) -> list[MethodRecord]:
        if self.hidden and self.body is None:
            raise MissingBodyError(f"{owner.name}: hidden operation '{self.name}' must have a body")

        if self.body is not None:
            body = self.body
        elif self.return_type is not None:
            body = f"    return {self.cxx_return_type}();"
        else:
            body = ""

        return [
            MethodRecord(
                return_type=self.cxx_return_type,
                name=self.method_name,
                signature=self.argument_signature(owner),
                body=CodeSlot(text=body),
                doc=(f"Handler for the {self.method_name} operation",),
                in_base=self.hidden,
            )
        ]


# ################
# Implementation
# ################

# (keepLastWrittenValue, keepNextWrittenValue) per retention policy.
_RETENTION_FLAGS: dict[RetentionPolicy, tuple[bool, bool]] = {
    RetentionPolicy.ALWAYS: (True, False),
    RetentionPolicy.NEVER: (False, False),
    RetentionPolicy.ONLY_IF_UNREAD: (False, True),
}


def _cxx_bool(value: bool) -> str:
    return "true" if value else "false"
