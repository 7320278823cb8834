# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for type names and type definitions."""

import pytest

from taskgen.errors import IllegalTypeError
from taskgen.model.types import (
    TypeDef,
    TypeField,
    TypeKind,
    cxx_literal,
    cxx_name,
    normalize_typename,
    validate_toplevel_type,
)

# ###############
# Type Names
# ###############


@pytest.mark.parametrize(
    "name, expected",
    [
        ("base::Time", "/base/Time"),
        ("/base/Time", "/base/Time"),
        ("  /base/Time  ", "/base/Time"),
        ("std::vector< base::Time >", "/std/vector</base/Time>"),
        ("std::map< std::string , int >", "/std/map</std/string,/int>"),
        ("/std/vector</double>", "/std/vector</double>"),
        ("unsigned int", "/unsigned int"),
    ],
)
def test_normalize_typename(name: str, expected: str) -> None:
    assert normalize_typename(name) == expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("/base/Time", "base::Time"),
        ("/double", "double"),
        ("/std/vector</double>", "std::vector< double >"),
        ("/std/map</std/string,/int>", "std::map< std::string, int >"),
        ("base::samples::RigidBodyState", "base::samples::RigidBodyState"),
    ],
)
def test_cxx_name(name: str, expected: str) -> None:
    assert cxx_name(name) == expected


def test_typedef_cxx_name_uses_canonical_name() -> None:
    type_def = TypeDef(name="/std/vector</base/Time>", kind=TypeKind.CONTAINER, element_type="/base/Time")
    assert type_def.cxx_name == "std::vector< base::Time >"


# ###############
# Type Definitions
# ###############


def test_compound_dependencies_are_its_field_types() -> None:
    point = TypeDef(
        name="/demo/Point",
        kind=TypeKind.COMPOUND,
        fields=[TypeField(name="x", type_name="/double"), TypeField(name="t", type_name="/base/Time")],
    )
    assert point.dependencies() == ["/double", "/base/Time"]


def test_container_and_array_depend_on_their_element() -> None:
    vector = TypeDef(name="/std/vector</double>", kind=TypeKind.CONTAINER, element_type="/double")
    array = TypeDef(name="/double[3]", kind=TypeKind.ARRAY, element_type="/double", dimension=3)
    assert vector.dependencies() == ["/double"]
    assert array.dependencies() == ["/double"]


def test_numeric_has_no_dependencies() -> None:
    assert TypeDef(name="/int", kind=TypeKind.NUMERIC).dependencies() == []


# ###############
# Toplevel Types
# ###############


def test_array_is_not_a_valid_toplevel_type() -> None:
    array = TypeDef(name="/double[3]", kind=TypeKind.ARRAY, element_type="/double", dimension=3)
    with pytest.raises(IllegalTypeError, match="only in a structure"):
        validate_toplevel_type(array)


def test_numeric_without_native_transport_is_rejected() -> None:
    with pytest.raises(IllegalTypeError, match="toplevel"):
        validate_toplevel_type(TypeDef(name="/int64_t", kind=TypeKind.NUMERIC, category="sint", size=8))


@pytest.mark.parametrize(
    "type_def",
    [
        TypeDef(name="/double", kind=TypeKind.NUMERIC, category="float", size=8),
        TypeDef(name="/demo/Point", kind=TypeKind.COMPOUND),
        TypeDef(name="/std/string", kind=TypeKind.CONTAINER, element_type="/char"),
        TypeDef(name="/demo/Image", kind=TypeKind.OPAQUE),
    ],
)
def test_valid_toplevel_types(type_def: TypeDef) -> None:
    validate_toplevel_type(type_def)


# ###############
# Literals
# ###############


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, "true"),
        (False, "false"),
        (3, "3"),
        (1.5, "1.5"),
        ("/dev/video0", '"/dev/video0"'),
        ('say "hi"', '"say \\"hi\\""'),
    ],
)
def test_cxx_literal(value: object, expected: str) -> None:
    assert cxx_literal(value) == expected


def test_cxx_literal_rejects_unknown_values() -> None:
    with pytest.raises(ValueError):
        cxx_literal([1, 2])
