# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Whole-project generation pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from taskgen.generation.files import DEFAULT_AUTOMATIC_AREA, GeneratedFileWriter
from taskgen.generation.render import JinjaRenderer, Renderer
from taskgen.generation.tasks import GeneratedComponent, TaskContextGenerator
from taskgen.generation.typekit import GeneratedTypekit, TypekitGenerator
from taskgen.project.project import ProjectModel
from taskgen.validation.checks import ValidationWarning

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass
class ProjectGenerationResult:
    """Everything generated for one project.

    Attributes:
        typekit: Files of the project typekit, if the project defines one.
        components: Files of each generated component, in declaration order.
    """

    typekit: GeneratedTypekit | None = None
    components: list[GeneratedComponent] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationWarning]:
        return [warning for component in self.components for warning in component.warnings]


def generate_project(
    project: ProjectModel,
    *,
    automatic_area: str = DEFAULT_AUTOMATIC_AREA,
    install_links: bool = True,
    renderer: Renderer | None = None,
) -> ProjectGenerationResult:
    """Freeze *project* and generate its typekit and components.

    Generation stops at the first error; files written before it are kept.

    Args:
        project: The main project.
        automatic_area: Name of the directory holding generator-owned files.
        install_links: Whether to create the fake install tree.
        renderer: Template renderer; defaults to the packaged templates.

    Raises:
        TaskgenError: If the typekit or a component cannot be generated.
    """
    project.freeze()
    writer = GeneratedFileWriter(project.base_dir, automatic_area, install_links=install_links)
    renderer = renderer if renderer is not None else JinjaRenderer()

    result = ProjectGenerationResult()
    result.typekit = TypekitGenerator(project, writer=writer, renderer=renderer).generate()
    for component in project.self_tasks:
        generator = TaskContextGenerator(component, writer=writer, renderer=renderer)
        result.components.append(generator.generate())
    logger.info("generated %d component(s) of project %s", len(result.components), project.name)
    return result
