# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Discovery of installed packages (typekits and component libraries).

A package is a directory laid out as::

    <package>/
        <name>.tlb          XML type descriptor (typekit packages)
        <name>.typelist     exported types (typekit packages)
        taskgen.yaml        project description (component libraries)
        include/            headers
        lib/                libraries
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from taskgen.errors import PackageNotFoundError

# ###############
# Public Interface
# ###############

PROJECT_FILE_NAME = "taskgen.yaml"


@dataclass(frozen=True)
class PackageInfo:
    """Location of an installed package.

    Attributes:
        name: Package name.
        path: Root directory of the package.
        include_dirs: Directories to add to the compiler include path.
        libdir: Directory holding the package libraries.
    """

    name: str
    path: Path
    include_dirs: tuple[Path, ...]
    libdir: Path

    @property
    def includedir(self) -> Path:
        return self.include_dirs[0] if self.include_dirs else self.path / "include"

    @property
    def registry_file(self) -> Path:
        return self.path / f"{self.name}.tlb"

    @property
    def typelist_file(self) -> Path:
        return self.path / f"{self.name}.typelist"

    @property
    def project_file(self) -> Path:
        return self.path / PROJECT_FILE_NAME

    @property
    def has_typekit(self) -> bool:
        return self.registry_file.is_file()

    @property
    def has_task_library(self) -> bool:
        return self.project_file.is_file()


class PackageResolver(Protocol):
    """Maps a package name to its installed location."""

    def resolve(self, pkg_name: str) -> PackageInfo:
        """Return the package called *pkg_name*.

        Raises:
            PackageNotFoundError: If the package is not installed.
        """
        ...


class LocalPackageResolver:
    """Resolves packages from an explicit ``{name: directory}`` map."""

    def __init__(self, import_map: dict[str, Path] | None = None) -> None:
        self._import_map = dict(import_map or {})

    def add(self, name: str, path: Path) -> None:
        self._import_map[name] = path

    def resolve(self, pkg_name: str) -> PackageInfo:
        path = self._import_map.get(pkg_name)
        if path is None:
            raise PackageNotFoundError(f"package '{pkg_name}' is not configured in the workspace")
        if not path.is_dir():
            raise PackageNotFoundError(f"package '{pkg_name}': directory '{path}' does not exist")
        return PackageInfo(
            name=pkg_name,
            path=path,
            include_dirs=(path / "include",),
            libdir=path / "lib",
        )
