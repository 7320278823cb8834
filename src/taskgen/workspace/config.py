# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the TaskGen workspace configuration file.

A workspace is a directory holding a ``taskgen.yaml`` project description and,
optionally, a ``.taskgen-workspace.yaml`` file::

    automatic-area: .taskgen
    fake-install: true
    package-imports:
      - name: base
        local-path: ../install/base
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from taskgen.generation.files import DEFAULT_AUTOMATIC_AREA
from taskgen.project.packages import LocalPackageResolver

# ###############
# Public Interface
# ###############

WORKSPACE_CONFIG_NAME = ".taskgen-workspace.yaml"


class WorkspaceConfigError(Exception):
    """Raised when a workspace configuration file is invalid or cannot be loaded."""


@dataclass
class PackageImport:
    """An installed package, located by a path relative to the workspace root."""

    name: str
    local_path: str


@dataclass
class WorkspaceConfig:
    """The parsed configuration for a TaskGen workspace.

    Attributes:
        automatic_area: Directory (relative to the workspace root) for generator-owned files.
        fake_install: Whether to link generated headers into a fake install tree.
        package_imports: Packages that typekit and library imports resolve to.
    """

    automatic_area: str = DEFAULT_AUTOMATIC_AREA
    fake_install: bool = True
    package_imports: list[PackageImport] = field(default_factory=list)

    def package_resolver(self, root: Path) -> LocalPackageResolver:
        """Return a resolver for the configured package imports."""
        return LocalPackageResolver({imp.name: (root / imp.local_path).resolve() for imp in self.package_imports})


def load_workspace_config(path: Path) -> WorkspaceConfig:
    """Load and parse a TaskGen workspace configuration file.

    Args:
        path: Path to the `.taskgen-workspace.yaml` file.

    Returns:
        A WorkspaceConfig instance populated from the file.

    Raises:
        WorkspaceConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise WorkspaceConfigError(f"Workspace config file not found: {path}") from None
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot read workspace config file: {exc}") from exc

    return _parse_workspace_config(text, source_label=str(path))


# ################
# Implementation
# ################


def _parse_workspace_config(text: str, source_label: str = "<string>") -> WorkspaceConfig:
    """Parse workspace config YAML text into a WorkspaceConfig.

    An empty document yields the default configuration.

    Raises:
        WorkspaceConfigError: If the YAML is invalid or a field has the wrong type.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WorkspaceConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        return WorkspaceConfig()
    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{source_label}: workspace config must be a YAML mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise WorkspaceConfigError(f"{source_label}: unknown field(s) {', '.join(unknown)}")

    config = WorkspaceConfig()
    if "automatic-area" in data:
        config.automatic_area = _require_string(data, "automatic-area", source_label)
    if "fake-install" in data:
        value = data["fake-install"]
        if not isinstance(value, bool):
            raise WorkspaceConfigError(f"{source_label}: 'fake-install' must be a boolean")
        config.fake_install = value

    if "package-imports" in data:
        raw_imports = data["package-imports"]
        if not isinstance(raw_imports, list):
            raise WorkspaceConfigError(f"{source_label}: 'package-imports' must be a list")
        for index, entry in enumerate(raw_imports):
            config.package_imports.append(_parse_package_import(entry, index, source_label))

    names = [imp.name for imp in config.package_imports]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise WorkspaceConfigError(f"{source_label}: package(s) imported more than once: {', '.join(duplicates)}")
    return config


_KNOWN_KEYS = frozenset({"automatic-area", "fake-install", "package-imports"})


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a required string field from a mapping, raising WorkspaceConfigError if missing."""
    if key not in mapping:
        raise WorkspaceConfigError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str):
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be a string")
    return value


def _parse_package_import(entry: object, index: int, source_label: str) -> PackageImport:
    """Parse a single package import entry from the YAML list."""
    location = f"{source_label}: package-imports[{index}]"

    if not isinstance(entry, dict):
        raise WorkspaceConfigError(f"{location} must be a YAML mapping")

    name = _require_string(entry, "name", location)
    local_path = _require_string(entry, "local-path", location)
    return PackageImport(name=name, local_path=local_path)
