# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type representations for the TaskGen component model.

Types are identified by a canonical, slash-separated name such as
``/base/Time`` or ``/std/vector</double>``. The registry is the sole owner of
type definitions; every other entity refers to types by their canonical name.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel
from pydantic import Field as _Field

from taskgen.errors import IllegalTypeError

# ###############
# Public Interface
# ###############


class TypeKind(Enum):
    """Structural category of a registered type."""

    NUMERIC = "numeric"
    NULL = "null"
    ENUM = "enum"
    COMPOUND = "compound"
    ARRAY = "array"
    CONTAINER = "container"
    OPAQUE = "opaque"


class TypeField(BaseModel):
    """A named field of a compound type."""

    name: str
    type_name: str


class TypeDef(BaseModel):
    """A type definition as stored in the type registry."""

    name: str
    kind: TypeKind
    category: str | None = None
    size: int | None = None
    element_type: str | None = None
    dimension: int | None = None
    container_kind: str | None = None
    fields: list[TypeField] = _Field(default_factory=list)
    values: list[str] = _Field(default_factory=list)

    @property
    def cxx_name(self) -> str:
        """The C++ spelling of this type."""
        return cxx_name(self.name)

    @property
    def is_numeric(self) -> bool:
        return self.kind is TypeKind.NUMERIC

    @property
    def is_opaque(self) -> bool:
        return self.kind is TypeKind.OPAQUE

    def dependencies(self) -> list[str]:
        """Return the names of the types this definition directly refers to."""
        if self.kind is TypeKind.COMPOUND:
            return [f.type_name for f in self.fields]
        if self.element_type is not None:
            return [self.element_type]
        return []


# Numeric types the component framework can transport without a typekit of
# their own.
BASE_RTT_TYPES: frozenset[str] = frozenset(
    {
        "/bool",
        "/char",
        "/int",
        "/unsigned int",
        "/int32_t",
        "/uint32_t",
        "/float",
        "/double",
    }
)

# Pointer templates marshalled as the pointed-to type.
SHARED_PTR_TEMPLATE = "/boost/shared_ptr"
RO_PTR_TEMPLATE = "/RTT/extras/ReadOnlyPointer"


def normalize_typename(name: str) -> str:
    """Return the canonical registry spelling of *name*.

    ``::`` separators become ``/``, whitespace around template delimiters is
    dropped and every qualified name (including template arguments) receives a
    leading ``/``.

    >>> normalize_typename("std::vector< base::Time >")
    '/std/vector</base/Time>'
    """
    result = name.strip().replace("::", "/")
    result = _DELIMITER_SPACES.sub(r"\1", result)
    return _MISSING_ROOT.sub(r"\1/", result)


def cxx_name(name: str) -> str:
    """Return the C++ spelling of the type called *name*.

    >>> cxx_name("/std/vector</double>")
    'std::vector< double >'
    """
    result = _ROOTS.sub(r"\1", normalize_typename(name)).replace("/", "::")
    return result.replace("<", "< ").replace(">", " >").replace(",", ", ")


def is_base_rtt_type(type_def: TypeDef) -> bool:
    """Return True if the framework natively transports *type_def*."""
    return type_def.name in BASE_RTT_TYPES


def validate_toplevel_type(type_def: TypeDef) -> None:
    """Check that *type_def* may be used directly as a port, property or attribute type.

    Raises:
        IllegalTypeError: If the type is an array (arrays are only allowed
            inside structures) or a numeric type the framework does not
            transport natively.
    """
    if type_def.kind is TypeKind.ARRAY:
        raise IllegalTypeError(f"{type_def.name}: array types can be used only in a structure")
    if type_def.kind is TypeKind.NUMERIC and not is_base_rtt_type(type_def):
        raise IllegalTypeError(f"{type_def.name} cannot be used as a toplevel type")


def cxx_literal(value: object) -> str:
    """Render a Python default value as a C++ literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return repr(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    raise ValueError(f"cannot represent {value!r} as a C++ literal")


# ################
# Implementation
# ################

_DELIMITER_SPACES = re.compile(r"\s*([<>,])\s*")
_MISSING_ROOT = re.compile(r"(^|[<,])(?=[A-Za-z_])")
_ROOTS = re.compile(r"(^|[<,])/")
