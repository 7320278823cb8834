# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the generation of typekit files."""

from pathlib import Path

import pytest

from taskgen.errors import GenerationOnImportError
from taskgen.generation.typekit import TypekitGenerator
from taskgen.project.packages import LocalPackageResolver
from taskgen.project.project import ProjectModel
from taskgen.project.typekit import parse_typelist

# ###############
# Helpers
# ###############

DEMO_TYPES = """\
<typelib>
  <compound name="/demo/Point">
    <field name="x" type="/double"/>
    <field name="y" type="/double"/>
  </compound>
  <compound name="/demo/Internal">
    <field name="raw" type="/int"/>
  </compound>
</typelib>
"""


def _project(tmp_path: Path) -> ProjectModel:
    project = ProjectModel("demo", base_dir=tmp_path)
    project.load_typekit(DEMO_TYPES, "/demo/Point\n/demo/Internal 0\n")
    project.opaque_type("/demo/Handle", "/demo/Point", includes=["demo/Handle.hpp"])
    return project


# ###############
# Normal Cases
# ###############


def test_types_header(tmp_path: Path) -> None:
    generated = TypekitGenerator(_project(tmp_path)).generate()
    assert generated is not None
    assert generated.types_header == tmp_path / ".taskgen" / "typekit" / "Types.hpp"

    header = generated.types_header.read_text(encoding="utf-8")
    assert "#ifndef TASKGEN_GENERATED_DEMO_TYPES_HPP" in header
    assert "#include <demo/Handle.hpp>" in header
    assert "extern template class RTT::Property< demo::Point >;" in header
    assert "extern template class RTT::InputPort< demo::Handle >;" in header
    assert "demo::Internal" not in header


def test_typelist_file(tmp_path: Path) -> None:
    generated = TypekitGenerator(_project(tmp_path)).generate()
    assert generated is not None
    text = generated.typelist.read_text(encoding="utf-8")
    assert generated.typelist.name == "demo.typelist"
    assert text == "/demo/Handle\n/demo/Internal 0\n/demo/Point\n"
    assert parse_typelist(text) == ({"/demo/Handle", "/demo/Internal", "/demo/Point"}, {"/demo/Handle", "/demo/Point"})


def test_public_headers_are_installed(tmp_path: Path) -> None:
    generated = TypekitGenerator(_project(tmp_path)).generate()
    assert generated is not None
    types_link, conversions_link = generated.links
    assert types_link == tmp_path / ".taskgen" / "demo" / "Types.hpp"
    assert types_link.resolve() == generated.types_header.resolve()
    assert conversions_link == tmp_path / ".taskgen" / "demo" / "OpaqueConvertions.hpp"


def test_used_typekits_are_included(tmp_path: Path) -> None:
    package = tmp_path / "base"
    package.mkdir()
    (package / "base.tlb").write_text(
        '<typelib><compound name="/base/Time"><field name="us" type="/int64_t"/></compound></typelib>',
        encoding="utf-8",
    )
    project = ProjectModel("demo", base_dir=tmp_path, resolver=LocalPackageResolver({"base": package}))
    project.using_typekit("base")
    project.load_typekit(DEMO_TYPES)

    generated = TypekitGenerator(project).generate()
    assert generated is not None
    header = generated.types_header.read_text(encoding="utf-8")
    assert "#include <base/Types.hpp>" in header
    assert "rtt/Types.hpp" not in header


def test_project_without_typekit(tmp_path: Path) -> None:
    assert TypekitGenerator(ProjectModel("demo", base_dir=tmp_path)).generate() is None
    assert not (tmp_path / ".taskgen").exists()


# ###############
# Opaque Conversions
# ###############


def test_opaque_conversion_declarations(tmp_path: Path) -> None:
    project = _project(tmp_path)
    project.task_context("Task").shared_ptr("/demo/Point")
    generated = TypekitGenerator(project).generate()
    assert generated is not None
    header_path, source_path = generated.conversions
    assert header_path == tmp_path / ".taskgen" / "typekit" / "OpaqueConvertions.hpp"
    header = header_path.read_text(encoding="utf-8")

    assert '#include "Types.hpp"' in header
    assert "namespace taskgen_typekits {" in header
    assert "    void toIntermediate(demo::Point& intermediate, demo::Handle const& real_type);" in header
    assert "    void fromIntermediate(demo::Handle& real_type, demo::Point const& intermediate);" in header
    assert "    demo::Point const& toIntermediate(boost::shared_ptr< demo::Point > const& real_type);" in header
    assert "    bool fromIntermediate(boost::shared_ptr< demo::Point >& real_type, demo::Point* intermediate);" in header
    assert source_path.name == "OpaqueConvertions.cpp"


def test_smart_pointer_conversions_are_generated(tmp_path: Path) -> None:
    project = _project(tmp_path)
    task = project.task_context("Task")
    task.shared_ptr("/demo/Point")
    task.ro_ptr("/demo/Point")
    generated = TypekitGenerator(project).generate()
    assert generated is not None
    source = generated.conversions[1].read_text(encoding="utf-8")

    assert (
        "demo::Point const& taskgen_typekits::toIntermediate(boost::shared_ptr< demo::Point > const& real_type)\n"
        "{\n    return *real_type;\n}"
    ) in source
    assert (
        "bool taskgen_typekits::fromIntermediate(boost::shared_ptr< demo::Point >& real_type, "
        "demo::Point* intermediate)\n"
        "{\n    if (real_type.get() != intermediate)\n        real_type.reset(intermediate);\n    return true;\n}"
    ) in source
    assert (
        "bool taskgen_typekits::fromIntermediate(RTT::extras::ReadOnlyPointer< demo::Point >& real_type, "
        "demo::Point* intermediate)\n"
        "{\n    real_type.reset(intermediate);\n    return true;\n}"
    ) in source
    assert (
        "void taskgen_typekits::fromIntermediate(boost::shared_ptr< demo::Point >& real_type, "
        "demo::Point const& _intermediate)"
    ) in source


def test_by_copy_conversion_of_opaques_without_copy(tmp_path: Path) -> None:
    project = _project(tmp_path)
    project.opaque_type("/demo/Buffer", "/demo/Point", needs_copy=False)
    generated = TypekitGenerator(project).generate()
    assert generated is not None
    source = generated.conversions[1].read_text(encoding="utf-8")

    assert (
        "void taskgen_typekits::fromIntermediate(demo::Buffer& real_type, demo::Point const& _intermediate)\n"
        "{\n"
        "    std::unique_ptr< demo::Point > intermediate(new demo::Point(_intermediate));\n"
        "    if (fromIntermediate(real_type, intermediate.get()))\n"
        "        intermediate.release();\n"
        "}"
    ) in source
    assert "toIntermediate(demo::Buffer" not in source
    assert "fromIntermediate(demo::Handle" not in source


def test_conversions_of_used_typekits_are_included(tmp_path: Path) -> None:
    package = tmp_path / "base"
    package.mkdir()
    (package / "base.tlb").write_text(
        "<typelib>"
        '<compound name="/base/Time"><field name="us" type="/int64_t"/></compound>'
        '<opaque name="/base/Clock" marshal_as="/base/Time" needs_copy="1"/>'
        "</typelib>",
        encoding="utf-8",
    )
    project = ProjectModel("demo", base_dir=tmp_path, resolver=LocalPackageResolver({"base": package}))
    project.using_typekit("base")
    project.load_typekit(DEMO_TYPES)
    project.opaque_type("/demo/Handle", "/demo/Point")

    generated = TypekitGenerator(project).generate()
    assert generated is not None
    assert "#include <base/OpaqueConvertions.hpp>" in generated.conversions[1].read_text(encoding="utf-8")


def test_typekit_without_opaques_has_no_conversions(tmp_path: Path) -> None:
    project = ProjectModel("demo", base_dir=tmp_path)
    project.load_typekit(DEMO_TYPES)
    generated = TypekitGenerator(project).generate()
    assert generated is not None
    assert generated.conversions == []
    assert [link.name for link in generated.links] == ["Types.hpp"]
    assert not (tmp_path / ".taskgen" / "typekit" / "OpaqueConvertions.hpp").exists()


# ###############
# Error Cases
# ###############


def test_imported_project_typekit_is_not_generated(tmp_path: Path) -> None:
    main = _project(tmp_path)
    library = ProjectModel("lib", base_dir=tmp_path, main_project=main)
    with pytest.raises(GenerationOnImportError, match="lib"):
        TypekitGenerator(library).generate()
