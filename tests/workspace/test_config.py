# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the workspace configuration module."""

from pathlib import Path

import pytest

from taskgen.errors import PackageNotFoundError
from taskgen.workspace import (
    PackageImport,
    WorkspaceConfig,
    WorkspaceConfigError,
    load_workspace_config,
)

# ###############
# Helpers
# ###############


def _write_config(tmp_path: Path, content: str) -> Path:
    """Write a workspace config file and return its path."""
    config_file = tmp_path / ".taskgen-workspace.yaml"
    config_file.write_text(content, encoding="utf-8")
    return config_file


# ###############
# Normal Cases
# ###############


def test_empty_config_uses_defaults(tmp_path: Path) -> None:
    """An empty file yields the default configuration."""
    config = load_workspace_config(_write_config(tmp_path, ""))
    assert config == WorkspaceConfig()
    assert config.automatic_area == ".taskgen"
    assert config.fake_install is True
    assert config.package_imports == []


def test_full_config(tmp_path: Path) -> None:
    """Every field is parsed."""
    content = """\
automatic-area: build/gen
fake-install: false
package-imports:
  - name: base
    local-path: ../install/base
  - name: sensors
    local-path: ./libs/sensors
"""
    config = load_workspace_config(_write_config(tmp_path, content))

    assert config.automatic_area == "build/gen"
    assert config.fake_install is False
    assert config.package_imports == [
        PackageImport(name="base", local_path="../install/base"),
        PackageImport(name="sensors", local_path="./libs/sensors"),
    ]


def test_package_resolver_uses_workspace_relative_paths(tmp_path: Path) -> None:
    """Package imports resolve against the workspace root."""
    package = tmp_path / "libs" / "base"
    package.mkdir(parents=True)
    (package / "base.tlb").write_text("<typelib/>", encoding="utf-8")
    config = load_workspace_config(
        _write_config(tmp_path, "package-imports:\n  - name: base\n    local-path: libs/base\n")
    )

    resolver = config.package_resolver(tmp_path)

    info = resolver.resolve("base")
    assert info.path == package.resolve()
    assert info.has_typekit
    with pytest.raises(PackageNotFoundError, match="other"):
        resolver.resolve("other")


def test_explicit_empty_imports(tmp_path: Path) -> None:
    """An explicit empty package-imports list is valid."""
    config = load_workspace_config(_write_config(tmp_path, "package-imports: []\n"))
    assert config.package_imports == []


# ###############
# Error Cases
# ###############


def test_file_not_found(tmp_path: Path) -> None:
    """Loading a non-existent file raises WorkspaceConfigError."""
    with pytest.raises(WorkspaceConfigError, match="not found"):
        load_workspace_config(tmp_path / "missing.yaml")


def test_invalid_yaml_syntax(tmp_path: Path) -> None:
    """A file with invalid YAML raises WorkspaceConfigError."""
    with pytest.raises(WorkspaceConfigError, match="Invalid YAML"):
        load_workspace_config(_write_config(tmp_path, "package-imports: [\nbroken yaml"))


def test_not_a_mapping(tmp_path: Path) -> None:
    """A YAML document that is not a mapping raises WorkspaceConfigError."""
    with pytest.raises(WorkspaceConfigError, match="must be a YAML mapping"):
        load_workspace_config(_write_config(tmp_path, "- just a list\n"))


def test_unknown_field(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceConfigError, match="unknown field\\(s\\) build-directory"):
        load_workspace_config(_write_config(tmp_path, "build-directory: .build\n"))


def test_automatic_area_not_a_string(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceConfigError, match="'automatic-area' must be a string"):
        load_workspace_config(_write_config(tmp_path, "automatic-area: 42\n"))


def test_fake_install_not_a_boolean(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceConfigError, match="'fake-install' must be a boolean"):
        load_workspace_config(_write_config(tmp_path, "fake-install: sometimes\n"))


def test_package_imports_not_a_list(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceConfigError, match="'package-imports' must be a list"):
        load_workspace_config(_write_config(tmp_path, "package-imports: base\n"))


def test_import_entry_not_a_mapping(tmp_path: Path) -> None:
    content = """\
package-imports:
  - just a string
"""
    with pytest.raises(WorkspaceConfigError, match="package-imports\\[0\\] must be a YAML mapping"):
        load_workspace_config(_write_config(tmp_path, content))


@pytest.mark.parametrize(
    ("entry", "missing"),
    [
        ("  - local-path: ./libs\n", "name"),
        ("  - name: base\n", "local-path"),
    ],
)
def test_import_missing_field(tmp_path: Path, entry: str, missing: str) -> None:
    with pytest.raises(WorkspaceConfigError, match=f"missing required field '{missing}'"):
        load_workspace_config(_write_config(tmp_path, "package-imports:\n" + entry))


def test_duplicate_import(tmp_path: Path) -> None:
    content = """\
package-imports:
  - name: base
    local-path: ./a
  - name: base
    local-path: ./b
"""
    with pytest.raises(WorkspaceConfigError, match="imported more than once: base"):
        load_workspace_config(_write_config(tmp_path, content))
