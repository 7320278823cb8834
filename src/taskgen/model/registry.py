# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type-reflection registry.

The registry stores the structural layout of every type known to a project
and is fed from XML type descriptors::

    <typelib>
      <numeric name="/int32_t" category="sint" size="4"/>
      <compound name="/base/Time">
        <field name="microseconds" type="/int64_t"/>
      </compound>
      <array name="/double[3]" of="/double" dimension="3"/>
      <container name="/std/vector&lt;/double&gt;" of="/double" kind="/std/vector"/>
      <enum name="/base/Mode"><value symbol="IDLE" value="0"/></enum>
      <opaque name="/base/Image" marshal_as="/base/ImageM" includes="base/Image.hpp" needs_copy="1"/>
    </typelib>

Opaque entries only declare the opaque type here; the marshalling attributes
are interpreted by :mod:`taskgen.project.typekit`.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator

from taskgen.errors import MalformedDeclaration, TypeNotFound
from taskgen.model.types import TypeDef, TypeField, TypeKind, normalize_typename

# ###############
# Public Interface
# ###############


class TypeRegistry:
    """A set of type definitions indexed by canonical name."""

    def __init__(self) -> None:
        self._types: dict[str, TypeDef] = {}

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return normalize_typename(name) in self._types

    def __iter__(self) -> Iterator[TypeDef]:
        return iter(list(self._types.values()))

    def __len__(self) -> int:
        return len(self._types)

    def names(self) -> list[str]:
        """Return all declared type names, in declaration order."""
        return list(self._types)

    def get(self, name: str) -> TypeDef:
        """Return the definition of *name*.

        Raises:
            TypeNotFound: If no type with that name is registered.
        """
        normalized = normalize_typename(name)
        try:
            return self._types[normalized]
        except KeyError:
            raise TypeNotFound(normalized) from None

    def add(self, type_def: TypeDef) -> bool:
        """Register *type_def*, returning False if an identical definition exists.

        Raises:
            MalformedDeclaration: If a different definition of the same name
                is already registered.
        """
        existing = self._types.get(type_def.name)
        if existing is not None:
            if existing != type_def:
                raise MalformedDeclaration(f"conflicting definitions for type '{type_def.name}'")
            return False
        self._types[type_def.name] = type_def
        return True

    def add_standard_types(self) -> None:
        """Register the native numeric types, the null type and ``/std/string``."""
        for name, category, size in _STANDARD_NUMERICS:
            self.add(TypeDef(name=name, kind=TypeKind.NUMERIC, category=category, size=size))
        self.add(TypeDef(name="/nil", kind=TypeKind.NULL))
        self.add(
            TypeDef(
                name="/std/string",
                kind=TypeKind.CONTAINER,
                element_type="/char",
                container_kind="/std/string",
            )
        )

    def merge(self, other: TypeRegistry) -> list[str]:
        """Merge every definition of *other* into this registry.

        Returns:
            The names that were not already present.
        """
        return [t.name for t in other if self.add(t)]

    def merge_xml(self, text: str) -> list[str]:
        """Parse an XML type descriptor and merge its types into this registry.

        Returns:
            The names of the types that were newly added, in document order.

        Raises:
            MalformedDeclaration: If the document is not well-formed or an
                entry lacks a required attribute.
        """
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise MalformedDeclaration(f"invalid type descriptor: {exc}") from exc

        added: list[str] = []
        for element in root:
            type_def = _type_from_element(element)
            if self.add(type_def):
                added.append(type_def.name)
        return added

    def minimal(self, name: str) -> TypeRegistry:
        """Return a registry holding *name* and every type it depends on."""
        result = TypeRegistry()
        pending = [self.get(name)]
        while pending:
            type_def = pending.pop()
            if not result.add(type_def):
                continue
            pending.extend(self.get(dep) for dep in type_def.dependencies())
        return result

    def contained_opaques(self, name: str) -> set[str]:
        """Return the opaque types reachable from *name*, including itself."""
        return {t.name for t in self.minimal(name) if t.is_opaque}

    def contains_opaques(self, name: str) -> bool:
        return bool(self.contained_opaques(name))


# ################
# Implementation
# ################

_STANDARD_NUMERICS: list[tuple[str, str, int]] = [
    ("/bool", "uint", 1),
    ("/char", "sint", 1),
    ("/unsigned char", "uint", 1),
    ("/short", "sint", 2),
    ("/unsigned short", "uint", 2),
    ("/int", "sint", 4),
    ("/unsigned int", "uint", 4),
    ("/long", "sint", 8),
    ("/unsigned long", "uint", 8),
    ("/int8_t", "sint", 1),
    ("/uint8_t", "uint", 1),
    ("/int16_t", "sint", 2),
    ("/uint16_t", "uint", 2),
    ("/int32_t", "sint", 4),
    ("/uint32_t", "uint", 4),
    ("/int64_t", "sint", 8),
    ("/uint64_t", "uint", 8),
    ("/float", "float", 4),
    ("/double", "float", 8),
]


def _require(element: ET.Element, attribute: str) -> str:
    value = element.get(attribute)
    if value is None:
        raise MalformedDeclaration(f"<{element.tag}> entry is missing the '{attribute}' attribute")
    return value


def _optional_int(element: ET.Element, attribute: str) -> int | None:
    value = element.get(attribute)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise MalformedDeclaration(f"<{element.tag}> attribute '{attribute}' must be an integer, got {value!r}") from None


def _type_from_element(element: ET.Element) -> TypeDef:
    """Build a TypeDef from one child of the ``<typelib>`` root."""
    tag = element.tag
    if tag == "numeric":
        return TypeDef(
            name=normalize_typename(_require(element, "name")),
            kind=TypeKind.NUMERIC,
            category=element.get("category"),
            size=_optional_int(element, "size"),
        )
    if tag == "null":
        return TypeDef(name=normalize_typename(_require(element, "name")), kind=TypeKind.NULL)
    if tag == "enum":
        return TypeDef(
            name=normalize_typename(_require(element, "name")),
            kind=TypeKind.ENUM,
            values=[_require(v, "symbol") for v in element.findall("value")],
        )
    if tag == "compound":
        return TypeDef(
            name=normalize_typename(_require(element, "name")),
            kind=TypeKind.COMPOUND,
            fields=[
                TypeField(name=_require(f, "name"), type_name=normalize_typename(_require(f, "type")))
                for f in element.findall("field")
            ],
        )
    if tag == "array":
        return TypeDef(
            name=normalize_typename(_require(element, "name")),
            kind=TypeKind.ARRAY,
            element_type=normalize_typename(_require(element, "of")),
            dimension=_optional_int(element, "dimension"),
        )
    if tag == "container":
        return TypeDef(
            name=normalize_typename(_require(element, "name")),
            kind=TypeKind.CONTAINER,
            element_type=normalize_typename(_require(element, "of")),
            container_kind=element.get("kind"),
        )
    if tag == "opaque":
        return TypeDef(name=normalize_typename(_require(element, "name")), kind=TypeKind.OPAQUE)
    raise MalformedDeclaration(f"unknown type descriptor entry <{tag}>")
