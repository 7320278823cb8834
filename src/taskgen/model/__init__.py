# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Component model for TaskGen (types, members, components, generation records)."""

from taskgen.model.component import ComponentSpec, Extension
from taskgen.model.members import (
    AttributeSpec,
    Generatable,
    MemberSpec,
    OperationArgument,
    OperationSpec,
    PortDirection,
    PortSpec,
    PropertySpec,
    RetentionPolicy,
)
from taskgen.model.records import (
    HOOKS,
    CodeSlot,
    CodeSnippet,
    ConstructionRecord,
    Contribution,
    DeclarationRecord,
    HookRecord,
    MethodRecord,
)
from taskgen.model.registry import TypeRegistry
from taskgen.model.types import TypeDef, TypeField, TypeKind, cxx_name, normalize_typename

__all__ = [
    # Type system
    "TypeKind",
    "TypeField",
    "TypeDef",
    "TypeRegistry",
    "normalize_typename",
    "cxx_name",
    # Members
    "Generatable",
    "MemberSpec",
    "PortDirection",
    "RetentionPolicy",
    "PortSpec",
    "PropertySpec",
    "AttributeSpec",
    "OperationArgument",
    "OperationSpec",
    # Components
    "ComponentSpec",
    "Extension",
    # Generation records
    "HOOKS",
    "CodeSlot",
    "CodeSnippet",
    "DeclarationRecord",
    "ConstructionRecord",
    "HookRecord",
    "MethodRecord",
    "Contribution",
]
