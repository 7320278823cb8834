# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Projects: the owners of types, typekits and components.

A generation run has one *main* project. Component libraries imported by it
are projects too, but they do not own their own type world: every shared
query (types, typekits, other libraries) is answered by the main project.
This is expressed by the project's :data:`ProjectView`:

* :class:`Owning`: the project answers shared queries itself.
* :class:`Delegating`: shared queries are answered by the main project.

:attr:`ProjectModel.scope` is the single place where that rule is applied.

Typekit and library imports are memoized per main project. Each name has a
:class:`ResolutionSlot` that goes ``UNRESOLVED -> RESOLVING -> RESOLVED`` and
serializes concurrent resolutions of the same name.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from taskgen.errors import (
    ComponentNotFoundError,
    DuplicateMemberError,
    FrozenProjectError,
    MissingOpaqueError,
    PackageNotFoundError,
    ProjectLoadError,
    TypekitCycleError,
    TypeNotFound,
)
from taskgen.model.registry import TypeRegistry
from taskgen.model.types import TypeDef, normalize_typename
from taskgen.project.packages import LocalPackageResolver, PackageInfo, PackageResolver
from taskgen.project.typekit import OpaqueDef, Typekit, VirtualTypekit, opaque_entries, parse_typelist

if TYPE_CHECKING:
    from taskgen.model.component import ComponentSpec

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

# Name of the framework's built-in typekit.
RTT_TYPEKIT_NAME = "rtt"


@dataclass(frozen=True)
class Owning:
    """The project owns its type world."""

    project: ProjectModel


@dataclass(frozen=True)
class Delegating:
    """The project is an import; shared queries go to *main_project*."""

    main_project: ProjectModel


ProjectView = Owning | Delegating


class ResolutionState(Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


class ResolutionSlot:
    """Memoized, single-flight resolution of one named import.

    The first caller runs the loader; concurrent callers for the same name
    wait for it and receive the same result. A loader that re-enters its own
    slot raises :class:`TypekitCycleError`.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.state = ResolutionState.UNRESOLVED
        self.value: Any = None
        self._lock = threading.RLock()

    def resolve(self, loader: Callable[[], Any]) -> Any:
        with self._lock:
            if self.state is ResolutionState.RESOLVED:
                return self.value
            if self.state is ResolutionState.RESOLVING:
                raise TypekitCycleError(f"'{self.name}' is imported while it is being imported")
            self.state = ResolutionState.RESOLVING
            try:
                value = loader()
            except BaseException:
                self.state = ResolutionState.UNRESOLVED
                raise
            self.value = value
            self.state = ResolutionState.RESOLVED
            return value


class ProjectModel:
    """A project: its registry, typekits, imported libraries and components.

    Args:
        name: Project name, also the namespace of its components.
        base_dir: Directory generated files are written to.
        resolver: Package discovery used to import typekits and libraries.
        main_project: Set for imported component libraries; shared queries are
            then delegated to it.
        pkg: The package an imported project was loaded from.
    """

    def __init__(
        self,
        name: str,
        *,
        base_dir: Path | None = None,
        resolver: PackageResolver | None = None,
        main_project: ProjectModel | None = None,
        pkg: PackageInfo | None = None,
    ) -> None:
        self.name = name
        self.base_dir = base_dir if base_dir is not None else Path.cwd()
        self.pkg = pkg
        self.view: ProjectView = Delegating(main_project) if main_project is not None else Owning(self)
        self.resolver: PackageResolver = resolver if resolver is not None else LocalPackageResolver()
        self.tasks: list[ComponentSpec] = []

        self._registry = TypeRegistry()
        self._typekit: Typekit | None = None
        self._used_typekits: list[Typekit] = []
        self._used_task_libraries: list[ProjectModel] = []
        self._typekit_slots: dict[str, ResolutionSlot] = {}
        self._library_slots: dict[str, ResolutionSlot] = {}
        self._own_typekit_slot = ResolutionSlot(name)
        self._slots_guard = threading.Lock()
        self._use_lock = threading.RLock()
        self._frozen = False

        if isinstance(self.view, Owning):
            self._registry.add_standard_types()
            self._used_typekits.append(VirtualTypekit(RTT_TYPEKIT_NAME, self._registry, self))

    def __repr__(self) -> str:
        return f"<ProjectModel {self.name}{' (imported)' if self.imported else ''}>"

    # -- view dispatch ----------------------------------------------------

    @property
    def scope(self) -> ProjectModel:
        """The project answering shared queries for this one."""
        if isinstance(self.view, Delegating):
            return self.view.main_project
        return self.view.project

    @property
    def imported(self) -> bool:
        return isinstance(self.view, Delegating)

    @property
    def registry(self) -> TypeRegistry:
        return self.scope._registry

    @property
    def used_typekits(self) -> list[Typekit]:
        return list(self.scope._used_typekits)

    @property
    def used_task_libraries(self) -> list[ProjectModel]:
        return list(self.scope._used_task_libraries)

    # -- lifecycle ----------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """End the declaration phase; later declarations raise FrozenProjectError."""
        self._frozen = True
        if self._typekit is not None and not self.imported:
            self._typekit.freeze()

    def check_mutable(self) -> None:
        if self._frozen:
            raise FrozenProjectError(f"project '{self.name}' is frozen, no more declarations are allowed")

    @property
    def include_dirs(self) -> set[Path]:
        return set(self.pkg.include_dirs) if self.pkg is not None else set()

    # -- types --------------------------------------------------------------

    def find_type(self, type_ref: str | TypeDef) -> TypeDef:
        """Resolve a type by name.

        On a miss, typekits that could define the type are imported once and
        the lookup is retried.

        Raises:
            TypeNotFound: If the type is still unknown after the retry.
        """
        if isinstance(type_ref, TypeDef):
            return type_ref
        name = normalize_typename(type_ref)
        try:
            return self.registry.get(name)
        except TypeNotFound:
            if not self._import_on_miss():
                raise
        logger.debug("retrying lookup of %s after importing typekits", name)
        return self.registry.get(name)

    def interface_type(self, type_ref: str | TypeDef) -> bool:
        """Return True if a visible typekit exports *type_ref* for interfaces."""
        return any(tk.interface_type(type_ref) for tk in self.visible_typekits())

    def opaque_specification(self, type_ref: str | TypeDef) -> OpaqueDef:
        """Return the marshalling rule of an opaque type.

        Raises:
            MissingOpaqueError: If no visible typekit defines one.
        """
        for typekit in self.visible_typekits():
            opaque = typekit.opaque_for(type_ref)
            if opaque is not None:
                return opaque
        name = type_ref.name if isinstance(type_ref, TypeDef) else normalize_typename(type_ref)
        raise MissingOpaqueError(f"opaque type '{name}' has no marshalling definition in any typekit of '{self.name}'")

    def intermediate_type_for(self, type_ref: str | TypeDef) -> str:
        type_def = self.find_type(type_ref)
        if type_def.is_opaque:
            return self.opaque_specification(type_def).intermediate_type_name
        return type_def.name

    # -- typekits -----------------------------------------------------------

    def typekit(self, create: bool = False) -> Typekit | None:
        """Return this project's own typekit.

        For the main project the typekit is created on demand when *create*
        is true. For an imported project it is the typekit package named after
        the project, imported into the main project the first time it is asked for.
        """
        if self.imported:
            return self._own_typekit_slot.resolve(self._import_own_typekit)
        if self._typekit is None and create:
            self.check_mutable()
            self._typekit = Typekit(self.name, self._registry, (), (), main_project=self)
        return self._typekit

    def load_typekit(self, registry_xml: str, typelist_text: str | None = None) -> Typekit:
        """Define types in this project's own typekit from an XML descriptor.

        Without a typelist, every type newly defined by the descriptor is
        exported as an interface type.
        """
        self.check_mutable()
        typekit = self.typekit(create=True)
        assert typekit is not None
        added = self.registry.merge_xml(registry_xml)
        if typelist_text is None:
            typekit.export_types(added)
        else:
            all_names, interface_names = parse_typelist(typelist_text)
            typekit.export_types(sorted(all_names - interface_names), interface=False)
            typekit.export_types(sorted(interface_names))
        for opaque in opaque_entries(registry_xml):
            typekit.add_opaque(opaque)
        return typekit

    def opaque_type(
        self,
        type_name: str,
        intermediate_type_name: str,
        *,
        includes: list[str] | None = None,
        needs_copy: bool = True,
    ) -> OpaqueDef:
        """Register an opaque type on this project's own typekit."""
        self.check_mutable()
        typekit = self.typekit(create=True)
        if typekit is None or typekit.frozen:
            raise MissingOpaqueError(f"opaque type '{type_name}' must be defined by the typekit of '{self.name}'")
        return typekit.opaque_type(type_name, intermediate_type_name, includes=includes or [], needs_copy=needs_copy)

    def visible_typekits(self) -> list[Typekit]:
        """Typekits whose types components of this project may use."""
        result = []
        own = self.scope._typekit
        if own is not None:
            result.append(own)
        result.extend(tk for tk in self.used_typekits if tk not in result)
        return result

    def has_typekit(self, name: str) -> bool:
        """Return True if a typekit package called *name* can be imported."""
        return self._typekit_slot(name).resolve(lambda: self.scope._load_typekit_package(name)) is not None

    def import_typekit(self, name: str) -> Typekit:
        """Load the typekit package *name*, once per main project.

        Raises:
            PackageNotFoundError: If no such typekit is installed.
        """
        typekit = self._typekit_slot(name).resolve(lambda: self.scope._load_typekit_package(name))
        if typekit is None:
            raise PackageNotFoundError(f"no typekit named '{name}' is available")
        return typekit

    def using_typekit(self, typekit: str | Typekit) -> Typekit:
        """Make the types of *typekit* available to the project."""
        scope = self.scope
        if isinstance(typekit, str):
            typekit = self.import_typekit(typekit)
        with scope._use_lock:
            if typekit not in scope._used_typekits:
                scope._registry.merge(typekit.registry)
                scope._used_typekits.append(typekit)
                logger.debug("%s: using typekit %s", scope.name, typekit.name)
        return typekit

    def find_typekit(self, name: str) -> Typekit | None:
        for typekit in self.visible_typekits():
            if typekit.name == name:
                return typekit
        return None

    # -- component libraries -------------------------------------------------

    def using_task_library(self, name: str) -> ProjectModel:
        """Import the component library *name* and the typekit it exports.

        Raises:
            PackageNotFoundError: If the library is not installed.
        """
        scope = self.scope
        library: ProjectModel = self._library_slot(name).resolve(lambda: scope._load_task_library(name))
        with scope._use_lock:
            if library not in scope._used_task_libraries:
                scope._used_task_libraries.append(library)
        return library

    def find_task_library(self, name: str) -> ProjectModel | None:
        for library in self.used_task_libraries:
            if library.name == name:
                return library
        return None

    # -- components -----------------------------------------------------------

    def task_context(
        self,
        name: str,
        *,
        subclasses: str | ComponentSpec | None = None,
        doc: str | None = None,
    ) -> ComponentSpec:
        """Declare a new component in this project."""
        from taskgen.model.component import ComponentSpec

        self.check_mutable()
        qualified = name if "::" in name else f"{self.name}::{name}"
        if any(task.name == qualified for task in self.tasks):
            raise DuplicateMemberError(f"component '{qualified}' is already defined in project '{self.name}'")
        superclass = self.find_task_context(subclasses) if isinstance(subclasses, str) else subclasses
        task = ComponentSpec(
            self,
            qualified,
            superclass=superclass,
            external_definition=self.imported,
            doc=doc,
        )
        self.tasks.append(task)
        return task

    @property
    def self_tasks(self) -> list[ComponentSpec]:
        return list(self.tasks)

    def find_task_context(self, name: str) -> ComponentSpec:
        """Find a component by qualified name, or by short name in this project.

        Raises:
            ComponentNotFoundError: If no project in scope defines it.
        """
        for task in self.tasks:
            if task.name == name or task.basename == name and "::" not in name:
                return task
        for library in self.used_task_libraries:
            if library is self:
                continue
            for task in library.tasks:
                if task.name == name:
                    return task
        if self.imported:
            return self.scope.find_task_context(name)
        raise ComponentNotFoundError(f"no component named '{name}' in project '{self.name}' or its imports")

    # -- helpers --------------------------------------------------------------

    def _slot(self, table: dict[str, ResolutionSlot], name: str) -> ResolutionSlot:
        with self.scope._slots_guard:
            slot = table.get(name)
            if slot is None:
                slot = table[name] = ResolutionSlot(name)
            return slot

    def _typekit_slot(self, name: str) -> ResolutionSlot:
        return self._slot(self.scope._typekit_slots, name)

    def _library_slot(self, name: str) -> ResolutionSlot:
        return self._slot(self.scope._library_slots, name)

    def _import_on_miss(self) -> bool:
        """Import typekits that may define a missing type; True if any was added."""
        before = len(self.used_typekits)
        if self.imported:
            self.typekit()
        else:
            for library in self.used_task_libraries:
                library.typekit()
        return len(self.used_typekits) > before

    def _import_own_typekit(self) -> Typekit | None:
        scope = self.scope
        if not scope.has_typekit(self.name):
            return None
        return scope.using_typekit(scope.import_typekit(self.name))

    def _load_typekit_package(self, name: str) -> Typekit | None:
        try:
            pkg = self.resolver.resolve(name)
        except PackageNotFoundError:
            logger.debug("%s: no package for typekit %s", self.name, name)
            return None
        if not pkg.has_typekit:
            return None
        try:
            registry_xml = pkg.registry_file.read_text(encoding="utf-8")
            typelist_text = pkg.typelist_file.read_text(encoding="utf-8") if pkg.typelist_file.exists() else ""
        except OSError as exc:
            raise ProjectLoadError(f"Cannot read typekit '{name}': {exc}") from exc
        logger.info("loading typekit %s from %s", name, pkg.path)
        return Typekit.from_descriptor(name, pkg, registry_xml, typelist_text, main_project=self)

    def _load_task_library(self, name: str) -> ProjectModel:
        from taskgen.project.loader import load_project_file

        pkg = self.resolver.resolve(name)
        if not pkg.has_task_library:
            raise PackageNotFoundError(f"package '{name}' does not define a component library")
        logger.info("loading component library %s from %s", name, pkg.path)
        library = load_project_file(pkg.project_file, main_project=self, pkg=pkg)
        library.freeze()
        return library
