# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Code generation: templates, file policy, component and typekit generators."""

from taskgen.generation.build import ProjectGenerationResult, generate_project
from taskgen.generation.files import DEFAULT_AUTOMATIC_AREA, GeneratedFileWriter
from taskgen.generation.render import JinjaRenderer, Renderer
from taskgen.generation.tasks import TaskContextGenerator
from taskgen.generation.typekit import TypekitGenerator

__all__ = [
    "DEFAULT_AUTOMATIC_AREA",
    "GeneratedFileWriter",
    "Renderer",
    "JinjaRenderer",
    "TaskContextGenerator",
    "TypekitGenerator",
    "ProjectGenerationResult",
    "generate_project",
]
