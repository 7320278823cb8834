# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Typekits: named bundles of exported types and opaque marshalling rules.

A typekit exports a subset of a type registry. Of the exported types, only
the *interface* types may be used across component boundaries; the others
are internal to the typekit. Opaque types cannot be introspected and are
marshalled through an intermediate type described by an :class:`OpaqueDef`.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel
from pydantic import Field as _Field

from taskgen.errors import FrozenProjectError, IllegalTypeError, MalformedDeclaration
from taskgen.model.registry import TypeRegistry
from taskgen.model.types import RO_PTR_TEMPLATE, SHARED_PTR_TEMPLATE, TypeDef, TypeKind, normalize_typename
from taskgen.project.packages import PackageInfo

if TYPE_CHECKING:
    from taskgen.project.project import ProjectModel

# ###############
# Public Interface
# ###############


class OpaqueDef(BaseModel):
    """Marshalling rule of an opaque type.

    Attributes:
        type_name: The opaque (concrete) type.
        intermediate_type_name: The introspectable type it is marshalled through.
        needs_copy: Whether converting from the intermediate type requires a copy.
        includes: Headers needed to use the concrete type.
    """

    type_name: str
    intermediate_type_name: str
    needs_copy: bool = True
    includes: list[str] = _Field(default_factory=list)

    @property
    def pointer_template(self) -> str | None:
        """The smart pointer template the opaque instantiates, if any."""
        for template in (SHARED_PTR_TEMPLATE, RO_PTR_TEMPLATE):
            if self.type_name.startswith(f"{template}<"):
                return template
        return None


def parse_typelist(text: str) -> tuple[set[str], set[str]]:
    """Parse a typelist into all exported names and interface-visible names.

    Each non-blank line holds a type name, optionally followed by a flag. A
    flag of ``0`` marks the type as internal to the typekit; any other flag,
    or no flag, makes it interface-visible. Names may contain spaces
    (``/unsigned char[8] 0``).

    Raises:
        MalformedDeclaration: If a line holds two whitespace-separated digit
            groups, or does not match ``<name> [<flag>]``.
    """
    all_names: set[str] = set()
    interface_names: set[str] = set()
    for raw_line in text.split("\n"):
        decl = raw_line.strip()
        if not decl:
            continue
        if _CORRUPT_DECLARATION.search(decl):
            raise MalformedDeclaration(f"Declaration '{decl}' in a typelist could not be parsed -- wrong type pattern")
        match = _DECLARATION.match(decl)
        if match is None:
            raise MalformedDeclaration(f"Declaration '{decl}' in a typelist could not be parsed -- wrong type pattern")
        type_name, flag = match.group(1), match.group(2)
        all_names.add(type_name)
        if flag != "0":
            interface_names.add(type_name)
    return all_names, interface_names


def serialize_typelist(all_names: Iterable[str], interface_names: Iterable[str]) -> str:
    """Write a typelist that :func:`parse_typelist` reads back unchanged."""
    names = set(all_names)
    interface = set(interface_names)
    if not interface <= names:
        raise MalformedDeclaration("interface types must be a subset of the exported types")
    lines = [name if name in interface else f"{name} 0" for name in sorted(names)]
    return "\n".join(lines) + "\n" if lines else ""


class Typekit:
    """A typekit imported from a package or built by the local project."""

    virtual = False

    def __init__(
        self,
        name: str,
        registry: TypeRegistry,
        typelist: Iterable[str],
        interface_typelist: Iterable[str],
        *,
        pkg: PackageInfo | None = None,
        main_project: ProjectModel | None = None,
    ) -> None:
        self.name = name
        self.pkg = pkg
        self.main_project = main_project
        self.registry = registry
        self.typelist: set[str] = {normalize_typename(n) for n in typelist}
        self.interface_typelist: set[str] = {normalize_typename(n) for n in interface_typelist}
        if not self.interface_typelist <= self.typelist:
            extra = ", ".join(sorted(self.interface_typelist - self.typelist))
            raise MalformedDeclaration(f"typekit '{name}': interface types not exported by the typekit: {extra}")
        self.opaques: list[OpaqueDef] = []
        self.opaque_registry = TypeRegistry()
        self._frozen = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    @classmethod
    def from_descriptor(
        cls,
        name: str,
        pkg: PackageInfo | None,
        registry_xml: str,
        typelist_text: str,
        main_project: ProjectModel | None = None,
    ) -> Typekit:
        """Build an immutable typekit from its XML descriptor and typelist."""
        registry = TypeRegistry()
        registry.add_standard_types()
        registry.merge_xml(registry_xml)
        typelist, interface_typelist = parse_typelist(typelist_text)
        typekit = cls(name, registry, typelist, interface_typelist, pkg=pkg, main_project=main_project)
        for opaque in opaque_entries(registry_xml):
            typekit.add_opaque(opaque)
        typekit.freeze()
        return typekit

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def includes(self, type_ref: str | TypeDef) -> bool:
        """Return True if this typekit exports *type_ref*."""
        return _type_name(type_ref) in self.typelist

    def interface_type(self, type_ref: str | TypeDef) -> bool:
        """Return True if this typekit exports *type_ref* for use in interfaces."""
        return _type_name(type_ref) in self.interface_typelist

    @property
    def has_opaques(self) -> bool:
        if self.opaques:
            return True
        return any(self.registry.get(name).is_opaque for name in self.typelist if name in self.registry)

    def self_types(self) -> list[TypeDef]:
        """Return the definitions of the exported types, sorted by name."""
        return [self.registry.get(name) for name in sorted(self.typelist)]

    def interface_types(self) -> list[TypeDef]:
        return [self.registry.get(name) for name in sorted(self.interface_typelist)]

    @property
    def pkg_name(self) -> str | None:
        return self.pkg.name if self.pkg is not None else None

    @property
    def include_dirs(self) -> set[Path]:
        return set(self.pkg.include_dirs) if self.pkg is not None else set()

    @property
    def types_dir(self) -> Path | None:
        """The ``types/`` directory of this typekit in the package include tree."""
        if self.pkg is None:
            return None
        return self.pkg.includedir / self.name / "types"

    def pkg_transport_name(self, transport_name: str) -> str | None:
        if self.pkg is None:
            return None
        return f"{self.pkg.name}-transport-{transport_name}"

    def opaque_for(self, type_ref: str | TypeDef) -> OpaqueDef | None:
        """Return the marshalling rule of *type_ref*, if this typekit defines one."""
        name = _type_name(type_ref)
        for opaque in self.opaques:
            if opaque.type_name == name:
                return opaque
        return None

    def intermediate_type_for(self, type_ref: str | TypeDef) -> str:
        """Return the name of the type *type_ref* is marshalled as."""
        opaque = self.opaque_for(type_ref)
        return opaque.intermediate_type_name if opaque is not None else _type_name(type_ref)

    def export_types(self, names: Iterable[str], *, interface: bool = True) -> None:
        """Add registry types to the exported set while the typekit is being built."""
        self._check_mutable()
        for name in names:
            type_def = self.registry.get(name)
            self.typelist.add(type_def.name)
            if interface:
                self.interface_typelist.add(type_def.name)

    def opaque_type(
        self,
        type_name: str,
        intermediate_type_name: str,
        *,
        includes: Iterable[str] = (),
        needs_copy: bool = True,
    ) -> OpaqueDef:
        """Declare how the opaque type *type_name* is marshalled.

        The opaque type is added to the registry if it is not yet known; the
        intermediate type must already be defined.
        """
        self._check_mutable()
        name = normalize_typename(type_name)
        if name not in self.registry:
            self.registry.add(TypeDef(name=name, kind=TypeKind.OPAQUE))
        elif not self.registry.get(name).is_opaque:
            raise IllegalTypeError(f"{name} is not an opaque type")
        intermediate = self.registry.get(intermediate_type_name)
        opaque = OpaqueDef(
            type_name=name,
            intermediate_type_name=intermediate.name,
            needs_copy=needs_copy,
            includes=list(includes),
        )
        self.add_opaque(opaque)
        self.typelist.add(name)
        self.interface_typelist.add(name)
        return opaque

    def add_opaque(self, opaque: OpaqueDef) -> None:
        if self.opaque_for(opaque.type_name) is not None:
            raise MalformedDeclaration(f"typekit '{self.name}': opaque '{opaque.type_name}' is defined twice")
        self.opaque_registry.merge(self.registry.minimal(opaque.type_name))
        self.opaques.append(opaque)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise FrozenProjectError(f"typekit '{self.name}' cannot be modified after it has been loaded")


class VirtualTypekit(Typekit):
    """The framework's built-in typekit for native numeric types.

    It has no package; its exported types are computed from the registry
    instead of being read from a typelist.
    """

    virtual = True
    INTERFACE_TYPELIST: frozenset[str] = frozenset({"/bool", "/double", "/float", "/int32_t"})

    def __init__(self, name: str, registry: TypeRegistry, main_project: ProjectModel | None = None) -> None:
        typelist = {t.name for t in registry if t.kind in (TypeKind.NUMERIC, TypeKind.NULL)}
        super().__init__(
            name,
            registry,
            typelist,
            self.INTERFACE_TYPELIST & typelist,
            main_project=main_project,
        )
        self.freeze()

    @property
    def types_dir(self) -> Path | None:
        return None

    def pkg_transport_name(self, transport_name: str) -> str | None:
        return None


# ################
# Implementation
# ################

# Non-greedy name so that a trailing flag is not swallowed by the name.
_DECLARATION = re.compile(r"^(\S.*?)(?:\s+(\d+))?$")
_CORRUPT_DECLARATION = re.compile(r"(?:^|\s)\d+\s+\d+")


def _type_name(type_ref: str | TypeDef) -> str:
    if isinstance(type_ref, TypeDef):
        return type_ref.name
    return normalize_typename(type_ref)


def opaque_entries(registry_xml: str) -> list[OpaqueDef]:
    """Read the marshalling attributes of every ``<opaque>`` entry."""
    try:
        root = ET.fromstring(registry_xml)
    except ET.ParseError as exc:
        raise MalformedDeclaration(f"invalid type descriptor: {exc}") from exc

    result = []
    for entry in root.iter("opaque"):
        name = entry.get("name")
        marshal_as = entry.get("marshal_as")
        if name is None or marshal_as is None:
            raise MalformedDeclaration("<opaque> entries need both 'name' and 'marshal_as'")
        includes = entry.get("includes") or ""
        result.append(
            OpaqueDef(
                type_name=normalize_typename(name),
                intermediate_type_name=normalize_typename(marshal_as),
                needs_copy=entry.get("needs_copy") == "1",
                includes=[p for p in includes.split(":") if p],
            )
        )
    return result
