# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generation of the public files of a project's own typekit.

Besides ``Types.hpp`` and the typelist, a typekit defining opaque types gets
``OpaqueConvertions.hpp/.cpp``. The header declares the ``toIntermediate`` /
``fromIntermediate`` pair of every opaque. The source defines the functions
the generator can write itself:

* both directions for smart pointers, which marshal as the pointed-to value;
* the by-copy ``fromIntermediate`` of opaques that do not need a copy, which
  forwards to the pointer-taking overload.

The remaining conversions are implemented by the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from taskgen.errors import GenerationOnImportError
from taskgen.generation.files import GeneratedFileWriter
from taskgen.generation.render import JinjaRenderer, Renderer
from taskgen.model.types import SHARED_PTR_TEMPLATE, cxx_name
from taskgen.project.project import ProjectModel
from taskgen.project.typekit import OpaqueDef, Typekit, serialize_typelist

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass
class OpaqueConversion:
    """C++ spellings of the conversion functions of one opaque type."""

    type: str
    intermediate: str
    needs_copy: bool
    pointer_template: str | None = None

    @property
    def shared(self) -> bool:
        return self.pointer_template == SHARED_PTR_TEMPLATE


@dataclass
class GeneratedTypekit:
    """Files produced for a typekit."""

    types_header: Path
    typelist: Path
    links: list[Path]
    conversions: list[Path] = field(default_factory=list)


class TypekitGenerator:
    """Writes ``Types.hpp``, the opaque conversions and the typelist of the project's own typekit."""

    def __init__(
        self,
        project: ProjectModel,
        *,
        writer: GeneratedFileWriter | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.project = project
        self.writer = writer if writer is not None else GeneratedFileWriter(project.base_dir)
        self.renderer = renderer if renderer is not None else JinjaRenderer()

    def generate(self) -> GeneratedTypekit | None:
        """Generate the typekit files; returns None if the project has no typekit.

        Raises:
            GenerationOnImportError: If the project is an imported library.
        """
        if self.project.imported:
            raise GenerationOnImportError(f"cannot generate the typekit of imported project {self.project.name}")
        typekit = self.project.typekit()
        if typekit is None:
            return None

        logger.info("generating typekit %s", typekit.name)
        opaque_includes: list[str] = []
        for opaque in typekit.opaques:
            opaque_includes.extend(header for header in opaque.includes if header not in opaque_includes)
        used_typekits = [tk for tk in self.project.used_typekits if not tk.virtual]

        content = self.renderer.render(
            "typekit/Types.hpp",
            typekit=typekit,
            opaque_includes=opaque_includes,
            used_typekits=used_typekits,
            interface_types=typekit.interface_types(),
        )
        types_header = self.writer.save_automatic("typekit", "Types.hpp", content=content)
        typelist = self.writer.save_automatic(
            "typekit",
            f"{typekit.name}.typelist",
            content=serialize_typelist(typekit.typelist, typekit.interface_typelist),
        )

        installed = [types_header]
        conversions = self._generate_conversions(typekit, used_typekits)
        if conversions:
            installed.append(conversions[0])
        links = self.writer.fake_install(typekit.name.lower(), installed)
        return GeneratedTypekit(types_header=types_header, typelist=typelist, links=links, conversions=conversions)

    def _generate_conversions(self, typekit: Typekit, used_typekits: list[Typekit]) -> list[Path]:
        if not typekit.opaques:
            return []
        bindings = {
            "typekit": typekit,
            "conversions": [_conversion(typekit, opaque) for opaque in typekit.opaques],
            "conversion_includes": [
                f"{tk.name}/OpaqueConvertions.hpp" for tk in used_typekits if tk.has_opaques
            ],
        }
        header = self.writer.save_automatic(
            "typekit", "OpaqueConvertions.hpp", content=self.renderer.render("typekit/OpaqueConvertions.hpp", **bindings)
        )
        source = self.writer.save_automatic(
            "typekit", "OpaqueConvertions.cpp", content=self.renderer.render("typekit/OpaqueConvertions.cpp", **bindings)
        )
        return [header, source]


# ################
# Implementation
# ################


def _conversion(typekit: Typekit, opaque: OpaqueDef) -> OpaqueConversion:
    return OpaqueConversion(
        type=cxx_name(opaque.type_name),
        intermediate=cxx_name(typekit.intermediate_type_for(opaque.type_name)),
        needs_copy=opaque.needs_copy,
        pointer_template=opaque.pointer_template,
    )
