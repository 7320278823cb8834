# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compile-time dependencies of a component.

The generated code of a component needs the typekits defining the types of
its interface and the component libraries defining its ancestors. Both sets
are computed here and are minimal: nothing is included that the interface
does not use.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskgen.project.typekit import Typekit

if TYPE_CHECKING:
    from taskgen.model.component import ComponentSpec
    from taskgen.project.project import ProjectModel

# ###############
# Public Interface
# ###############


class DependencyResolver:
    """Computes the types, typekits and libraries a component depends on."""

    def __init__(self, project: ProjectModel) -> None:
        self.project = project

    def interface_types(self, component: ComponentSpec) -> list[str]:
        """Return the sorted names of every type used by the component's interface.

        Members inherited from ancestors and dynamic port templates are included.
        """
        types: set[str] = set()
        for member in component.all_members():
            types |= component.used_types(member)
        return sorted(types)

    def required_typekits(self, component: ComponentSpec) -> list[Typekit]:
        """Return the visible typekits that export at least one interface type."""
        types = self.interface_types(component)
        return [tk for tk in self.project.visible_typekits() if any(tk.includes(t) for t in types)]

    def required_component_libraries(self, component: ComponentSpec) -> list[ProjectModel]:
        """Return the imported libraries defining the component or one of its ancestors."""
        return [
            library
            for library in self.project.used_task_libraries
            if any(component.implements(task.name) for task in library.self_tasks)
        ]
