# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of generated files from templates."""

from __future__ import annotations

from typing import Any, Protocol

from jinja2 import Environment, PackageLoader, StrictUndefined

# ###############
# Public Interface
# ###############


class Renderer(Protocol):
    """Turns a template identifier and its bindings into file content."""

    def render(self, template_id: str, **bindings: Any) -> str: ...


class JinjaRenderer:
    """Renders the templates shipped in the ``taskgen/templates`` package directory.

    Template identifiers are paths relative to that directory without the
    ``.j2`` suffix, for instance ``tasks/TaskBase.hpp``.
    """

    def __init__(self, environment: Environment | None = None) -> None:
        self.environment = environment if environment is not None else _default_environment()

    def render(self, template_id: str, **bindings: Any) -> str:
        return self.environment.get_template(f"{template_id}.j2").render(**bindings)


# ################
# Implementation
# ################


def _default_environment() -> Environment:
    return Environment(
        loader=PackageLoader("taskgen", "templates"),
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
