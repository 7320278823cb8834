# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Writing of generated files.

Generated files live in two areas below the project directory:

* the *automatic* area (``.taskgen/`` by default) holds files that are fully
  owned by the generator and rewritten on every run;
* the *user* area (the project directory itself) holds files that are
  created once and then belong to the user. They are never overwritten; the
  latest rendering is kept under ``<automatic>/templates/`` for comparison.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

DEFAULT_AUTOMATIC_AREA = ".taskgen"


class GeneratedFileWriter:
    """Writes generated files following the automatic / user area policy.

    Args:
        base_dir: The project directory.
        automatic_area: Name of the automatic area, relative to *base_dir*.
        install_links: Whether :meth:`fake_install` creates links at all.
    """

    def __init__(
        self,
        base_dir: Path,
        automatic_area: str = DEFAULT_AUTOMATIC_AREA,
        *,
        install_links: bool = True,
    ) -> None:
        self.base_dir = base_dir
        self.automatic_area = automatic_area
        self.install_links = install_links

    @property
    def automatic_dir(self) -> Path:
        return self.base_dir / self.automatic_area

    def save_automatic(self, *parts: str, content: str) -> Path:
        """Write a generator-owned file, replacing any previous version."""
        path = self.automatic_dir.joinpath(*parts)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info("generated %s", path)
        return path

    def save_user(self, *parts: str, content: str) -> Path:
        """Create a user-owned file unless it already exists.

        Returns:
            The path of the user file, whether it was just created or preserved.
        """
        _write_if_changed(self.automatic_dir.joinpath("templates", *parts), content)
        path = self.base_dir.joinpath(*parts)
        if path.exists():
            logger.debug("preserving user file %s", path)
            return path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info("created %s", path)
        return path

    def fake_install(self, project_name: str, targets: Iterable[Path]) -> list[Path]:
        """Link headers into ``<automatic>/<project_name>/`` as if they were installed.

        Existing links of the same name are replaced.
        """
        if not self.install_links:
            return []
        install_dir = self.automatic_dir / project_name
        install_dir.mkdir(parents=True, exist_ok=True)
        links = []
        for target in targets:
            link = install_dir / target.name
            if link.is_symlink() or link.exists():
                link.unlink()
            link.symlink_to(target.resolve())
            links.append(link)
        return links


# ################
# Implementation
# ################


def _write_if_changed(path: Path, content: str) -> None:
    if path.is_file() and path.read_text(encoding="utf-8") == content:
        logger.debug("%s is up to date", path)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("generated %s", path)
