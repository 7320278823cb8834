# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for whole-project generation."""

import os
from pathlib import Path

import pytest

from taskgen.errors import FrozenProjectError, MissingOpaqueError
from taskgen.generation.build import generate_project
from taskgen.model.types import TypeDef, TypeKind
from taskgen.project.loader import load_project

# ###############
# Helpers
# ###############

PROJECT = """\
name: demo
typekit:
  opaques: []
tasks:
  - name: Source
    output-ports:
      - {name: out, type: /double}
  - name: Sink
    port-driven: true
    input-ports:
      - {name: in, type: /double}
"""


# ###############
# Normal Cases
# ###############


def test_generate_project(tmp_path: Path) -> None:
    project = load_project(PROJECT, base_dir=tmp_path)
    result = generate_project(project)

    assert project.frozen
    assert result.typekit is not None
    assert [c.user_header.name for c in result.components] == ["Source.hpp", "Sink.hpp"]
    assert (tmp_path / ".taskgen" / "tasks" / "SinkBase.cpp").is_file()
    assert (tmp_path / "tasks" / "Source.cpp").is_file()
    assert result.warnings == []


def test_generated_project_is_frozen(tmp_path: Path) -> None:
    project = load_project(PROJECT, base_dir=tmp_path)
    generate_project(project)
    with pytest.raises(FrozenProjectError):
        project.task_context("Late")


def test_regeneration_keeps_user_files(tmp_path: Path) -> None:
    generate_project(load_project(PROJECT, base_dir=tmp_path))
    user_file = tmp_path / "tasks" / "Sink.cpp"
    user_file.write_text("// edited\n", encoding="utf-8")

    changed = PROJECT.replace("port-driven: true", "needs-configuration: true\n    port-driven: true")
    result = generate_project(load_project(changed, base_dir=tmp_path))

    assert user_file.read_text(encoding="utf-8") == "// edited\n"
    [warning] = result.warnings
    assert "Sink" in warning.message


def test_regeneration_rewrites_automatic_files(tmp_path: Path) -> None:
    generate_project(load_project(PROJECT, base_dir=tmp_path))
    base_header = tmp_path / ".taskgen" / "tasks" / "SourceBase.hpp"
    content = base_header.read_text(encoding="utf-8")
    os.utime(base_header, ns=(1_000_000_000, 1_000_000_000))

    generate_project(load_project(PROJECT, base_dir=tmp_path))

    assert base_header.stat().st_mtime_ns != 1_000_000_000
    assert base_header.read_text(encoding="utf-8") == content


def test_custom_automatic_area_without_links(tmp_path: Path) -> None:
    result = generate_project(load_project(PROJECT, base_dir=tmp_path), automatic_area="gen", install_links=False)
    assert (tmp_path / "gen" / "tasks" / "SourceBase.hpp").is_file()
    assert all(component.links == [] for component in result.components)
    assert not (tmp_path / "gen" / "demo").exists()


def test_project_without_typekit(tmp_path: Path) -> None:
    result = generate_project(load_project("name: bare\ntasks:\n  - name: Task\n", base_dir=tmp_path))
    assert result.typekit is None
    assert len(result.components) == 1


# ###############
# Error Cases
# ###############


def test_generation_error_propagates(tmp_path: Path) -> None:
    project = load_project(PROJECT, base_dir=tmp_path)
    project.registry.add(TypeDef(name="/demo/Handle", kind=TypeKind.OPAQUE))
    project.find_task_context("Sink").attribute("handle", "/demo/Handle")
    with pytest.raises(MissingOpaqueError):
        generate_project(project)
