# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generation of the C++ classes of a component.

Each component produces two classes:

* ``<Name>Base`` in the automatic area, fully regenerated on every run. It
  declares every port, property, attribute and operation and registers them
  with the framework.
* ``<Name>`` in the user area, derived from the base class. It is created on
  the first run only and then belongs to the user.

Generation runs in four steps. :meth:`TaskContextGenerator.collect` gathers
the records of every member, extension and generation handler into a single
:class:`~taskgen.model.records.Contribution`; :meth:`~TaskContextGenerator.assemble_base`
and :meth:`~TaskContextGenerator.assemble_user` turn it into rendered code
fragments; :meth:`~TaskContextGenerator.emit` renders the templates and writes
the files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from taskgen.errors import DuplicateMemberError, GenerationOnImportError
from taskgen.generation.files import GeneratedFileWriter
from taskgen.generation.render import JinjaRenderer, Renderer
from taskgen.model.component import ComponentSpec
from taskgen.model.members import OperationSpec
from taskgen.model.records import (
    HOOKS,
    CodeSlot,
    CodeSnippet,
    Contribution,
    MethodRecord,
)
from taskgen.project.resolver import DependencyResolver
from taskgen.validation.checks import ValidationWarning, check_user_constructors

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

# Hooks returning bool; a false result of the framework default aborts the hook.
BOOL_HOOKS: frozenset[str] = frozenset({"configure", "start"})


@dataclass
class BaseClassContent:
    """Rendered fragments of the generated base class."""

    includes: list[str] = field(default_factory=list)
    declarations: list[str] = field(default_factory=list)
    initializers: list[str] = field(default_factory=list)
    constructors: list[str] = field(default_factory=list)
    destructors: list[str] = field(default_factory=list)
    hooks: dict[str, list[str]] = field(default_factory=dict)
    method_declarations: list[str] = field(default_factory=list)
    method_definitions: list[str] = field(default_factory=list)
    header_before: list[str] = field(default_factory=list)
    header_after: list[str] = field(default_factory=list)
    implementation_before: list[str] = field(default_factory=list)
    implementation_after: list[str] = field(default_factory=list)


@dataclass
class UserClassContent:
    """Rendered fragments of the user class skeleton."""

    method_declarations: list[str] = field(default_factory=list)
    method_definitions: list[str] = field(default_factory=list)


@dataclass
class GeneratedComponent:
    """Files produced for one component."""

    base_header: Path
    base_source: Path
    user_header: Path
    user_source: Path
    links: list[Path] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)


class TaskContextGenerator:
    """Generates the base and user classes of one component.

    Args:
        component: The component to generate.
        writer: Destination of the generated files; defaults to the project directory.
        renderer: Template renderer; defaults to the packaged Jinja2 templates.
    """

    def __init__(
        self,
        component: ComponentSpec,
        *,
        writer: GeneratedFileWriter | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.component = component
        self.project = component.project
        self.writer = writer if writer is not None else GeneratedFileWriter(self.project.base_dir)
        self.renderer = renderer if renderer is not None else JinjaRenderer()
        self.resolver = DependencyResolver(self.project)

    def check_opaques(self) -> None:
        """Check that every opaque type reachable from the interface can be marshalled.

        Raises:
            MissingOpaqueError: For the first opaque type without a definition.
        """
        registry = self.project.registry
        for type_name in self.resolver.interface_types(self.component):
            for opaque in sorted(registry.contained_opaques(type_name)):
                self.project.opaque_specification(opaque)

    def collect(self) -> Contribution:
        """Gather the records of the implicit operations, members, extensions and handlers.

        Raises:
            DuplicateMemberError: If two records declare the same base member
                or base method.
        """
        component = self.component
        contribution = Contribution()
        self._collect_implicit(contribution)
        for operation in component.operations.values():
            contribution.extend(operation.register_for_generation(component))
        for prop in component.properties.values():
            contribution.extend(prop.register_for_generation(component))
        for attr in component.attributes.values():
            contribution.extend(attr.register_for_generation(component))
        for port in [*component.ports.values(), *component.dynamic_ports]:
            contribution.extend(port.register_for_generation(component))
        for extension in component.extensions:
            contribution.extend(extension.register_for_generation(component))
        for handler in component.generation_handlers:
            result = handler(component)
            if result is not None:
                contribution.extend(result)

        for snippet in component.base_header_code:
            contribution.header_code.append(snippet)
        for snippet in component.base_implementation_code:
            contribution.implementation_code.append(snippet)

        _check_duplicates(component, contribution)
        self._add_pure_virtual_methods(contribution)
        return contribution

    def assemble_base(self, contribution: Contribution) -> BaseClassContent:
        component = self.component
        content = BaseClassContent(includes=self._includes())
        content.declarations = [record.render() for record in contribution.declarations]
        for record in contribution.constructions:
            initializer = record.initializer.render()
            if initializer:
                content.initializers.append(initializer)
            constructor = record.constructor.render(indent=4)
            if constructor:
                content.constructors.append(constructor)
            destructor = record.destructor.render(indent=4)
            if destructor:
                content.destructors.append(destructor)

        hook_code: dict[str, list[CodeSlot]] = {hook: [] for hook in HOOKS}
        for hook_record in contribution.hooks:
            hook_code[hook_record.hook].append(hook_record.code)
        for hook, slots in component.base_hook_code.items():
            hook_code[hook].extend(slots)
        for hook in HOOKS:
            statements = [code for code in (slot.render(indent=4) for slot in hook_code[hook]) if code]
            if statements:
                content.hooks[hook] = statements

        base_class = f"{component.basename}Base"
        for method in contribution.base_methods:
            content.method_declarations.append(method.declaration())
            definition = method.definition(base_class)
            if definition is not None:
                content.method_definitions.append(definition)

        content.header_before, content.header_after = _split_snippets(contribution.header_code)
        content.implementation_before, content.implementation_after = _split_snippets(
            contribution.implementation_code
        )
        return content

    def assemble_user(self, contribution: Contribution) -> UserClassContent:
        """Declare and define in the user class every method left abstract by the base class."""
        user_methods = list(contribution.user_methods)
        user_names = {method.name for method in user_methods}
        for method in contribution.base_methods:
            if method.body is None and method.name not in user_names:
                user_methods.append(_default_override(method))
                user_names.add(method.name)

        content = UserClassContent()
        for method in user_methods:
            content.method_declarations.append(method.declaration())
            definition = method.definition(self.component.basename)
            if definition is not None:
                content.method_definitions.append(definition)
        return content

    def emit(self, base: BaseClassContent, user: UserClassContent) -> GeneratedComponent:
        """Render the templates and write the base, user and fake install files."""
        component = self.component
        basename = component.basename
        bindings = {"task": component, "base": base, "user": user, "bool_hooks": BOOL_HOOKS}

        base_header = self.writer.save_automatic(
            "tasks", f"{basename}Base.hpp", content=self.renderer.render("tasks/TaskBase.hpp", **bindings)
        )
        base_source = self.writer.save_automatic(
            "tasks", f"{basename}Base.cpp", content=self.renderer.render("tasks/TaskBase.cpp", **bindings)
        )
        user_header = self.writer.save_user(
            "tasks", f"{basename}.hpp", content=self.renderer.render("tasks/Task.hpp", **bindings)
        )
        user_source = self.writer.save_user(
            "tasks", f"{basename}.cpp", content=self.renderer.render("tasks/Task.cpp", **bindings)
        )

        warnings = check_user_constructors(component, user_source) + check_user_constructors(component, user_header)
        for warning in warnings:
            logger.warning("%s", warning.message)

        links = self.writer.fake_install(self.project.name.lower(), [user_header, base_header])
        return GeneratedComponent(
            base_header=base_header,
            base_source=base_source,
            user_header=user_header,
            user_source=user_source,
            links=links,
            warnings=warnings,
        )

    def generate(self) -> GeneratedComponent:
        """Run every generation step for the component.

        Raises:
            GenerationOnImportError: If the component belongs to an imported library.
        """
        if self.component.external_definition:
            raise GenerationOnImportError(
                f"cannot generate {self.component.name}: it is defined by an imported library"
            )
        logger.info("generating %s", self.component.name)
        self.check_opaques()
        contribution = self.collect()
        return self.emit(self.assemble_base(contribution), self.assemble_user(contribution))

    def _collect_implicit(self, contribution: Contribution) -> None:
        component = self.component
        model_name_body = f'    return "{component.name}";'
        if component.superclass is None:
            model_name = OperationSpec(
                name="getModelName",
                doc="returns the model name of this task",
                return_type="/std/string",
                runs_in_caller_thread=True,
                hidden=True,
                body=model_name_body,
            )
            contribution.extend(model_name.register_for_generation(component))
            contribution.implementation_code.append(
                CodeSnippet(CodeSlot(text="#ifdef HAS_GETTID\n#include <sys/syscall.h>\n#endif"))
            )
            thread_id = OperationSpec(
                name="__taskgen_getTID",
                doc="returns the thread ID of this task",
                return_type="/int",
                hidden=True,
                body="#ifdef HAS_GETTID\n    return syscall(SYS_gettid);\n#else\n    return 0;\n#endif",
            )
            contribution.extend(thread_id.register_for_generation(component))
        else:
            contribution.base_methods.append(
                MethodRecord(return_type="std::string", name="getModelName", body=CodeSlot(text=model_name_body))
            )

    def _add_pure_virtual_methods(self, contribution: Contribution) -> None:
        base_names = {method.name for method in contribution.base_methods}
        for method in contribution.user_methods:
            if method.name in base_names:
                continue
            contribution.base_methods.append(
                MethodRecord(
                    return_type=method.return_type,
                    name=method.name,
                    signature=method.signature,
                    doc=(
                        "If the compiler issues an error at this point, it is probably that",
                        f"you forgot to add the corresponding method to the {self.component.name} class.",
                    ),
                )
            )
            base_names.add(method.name)

    def _includes(self) -> list[str]:
        component = self.component
        includes = [component.superclass_header]
        for library in self.resolver.required_component_libraries(component):
            for task in library.self_tasks:
                if component.implements(task.name) and task.header_file not in includes:
                    includes.append(task.header_file)
        for typekit in self.resolver.required_typekits(component):
            if not typekit.virtual:
                includes.append(f"{typekit.name}/Types.hpp")
        registry = self.project.registry
        for type_name in self.resolver.interface_types(component):
            for opaque in sorted(registry.contained_opaques(type_name)):
                for header in self.project.opaque_specification(opaque).includes:
                    if header not in includes:
                        includes.append(header)
        return includes


# ################
# Implementation
# ################


def _check_duplicates(component: ComponentSpec, contribution: Contribution) -> None:
    seen: set[tuple[str, str]] = set()
    for record in [*contribution.declarations, *contribution.constructions]:
        key = (type(record).__name__, f"{record.kind}:{record.field_name}")
        if key in seen:
            raise DuplicateMemberError(
                f"{component.name}: duplicate name {record.kind}:{record.field_name} used for base member"
            )
        seen.add(key)

    for methods in (contribution.base_methods, contribution.user_methods):
        names: set[str] = set()
        for method in methods:
            if method.name in names:
                raise DuplicateMemberError(
                    f"{component.name}: there is already a method called {method.name} defined at this level"
                )
            names.add(method.name)


def _default_override(method: MethodRecord) -> MethodRecord:
    body = "" if method.return_type == "void" else f"    return {method.return_type}();"
    return MethodRecord(
        return_type=method.return_type,
        name=method.name,
        signature=method.signature,
        body=CodeSlot(text=body),
        in_base=False,
    )


def _split_snippets(snippets: list[CodeSnippet]) -> tuple[list[str], list[str]]:
    before, after = [], []
    for snippet in snippets:
        code = snippet.code.render()
        if code:
            (before if snippet.include_before else after).append(code)
    return before, after

