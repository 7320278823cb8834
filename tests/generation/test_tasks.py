# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the generation of component classes."""

from pathlib import Path
from typing import Any

import pytest

from taskgen.errors import (
    DuplicateMemberError,
    GenerationOnImportError,
    MissingBodyError,
    MissingOpaqueError,
)
from taskgen.generation.tasks import TaskContextGenerator
from taskgen.model.component import ComponentSpec
from taskgen.model.records import CodeSlot, Contribution, DeclarationRecord, HookRecord, MethodRecord
from taskgen.model.types import TypeDef, TypeKind
from taskgen.project.project import ProjectModel

# ###############
# Helpers
# ###############

DEMO_TYPES = """\
<typelib>
  <compound name="/demo/Point">
    <field name="x" type="/double"/>
    <field name="y" type="/double"/>
  </compound>
</typelib>
"""


class _RecordingRenderer:
    """Renders every template as a one-line comment naming it."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def render(self, template_id: str, **bindings: Any) -> str:
        self.calls.append(template_id)
        return f"// {template_id}\n"


class _Logger:
    name = "logger"

    def register_for_generation(self, owner: ComponentSpec) -> Contribution:
        return Contribution(
            declarations=[DeclarationRecord(kind="extension", field_name="_logger", type_signature="Logger*")]
        )


class _Ticker:
    name = "ticker"

    def register_for_generation(self, owner: ComponentSpec) -> Contribution:
        return Contribution(
            base_methods=[
                MethodRecord(return_type="void", name="onTick"),
                MethodRecord(return_type="int", name="ticks", signature="bool reset"),
                MethodRecord(return_type="int", name="period", body=CodeSlot(text="    return 10;")),
            ]
        )


def _project(tmp_path: Path) -> ProjectModel:
    project = ProjectModel("demo", base_dir=tmp_path)
    project.load_typekit(DEMO_TYPES)
    return project


def _tracker(project: ProjectModel) -> ComponentSpec:
    task = project.task_context("Task")
    task.input_port("samples", "/demo/Point")
    task.output_port("result", "/double", keep_last_written_value="always")
    task.property("gain", "/double", 2.0)
    task.operation("reset").argument("hard", "/bool").returns("/bool")
    return task


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


# ###############
# Generated Files
# ###############


def test_generated_file_layout(tmp_path: Path) -> None:
    generated = TaskContextGenerator(_tracker(_project(tmp_path))).generate()

    assert generated.base_header == tmp_path / ".taskgen" / "tasks" / "TaskBase.hpp"
    assert generated.base_source == tmp_path / ".taskgen" / "tasks" / "TaskBase.cpp"
    assert generated.user_header == tmp_path / "tasks" / "Task.hpp"
    assert generated.user_source == tmp_path / "tasks" / "Task.cpp"
    assert (tmp_path / ".taskgen" / "templates" / "tasks" / "Task.cpp").is_file()
    assert sorted(link.name for link in generated.links) == ["Task.hpp", "TaskBase.hpp"]
    assert all(link.parent == tmp_path / ".taskgen" / "demo" for link in generated.links)
    assert generated.warnings == []


def test_base_header(tmp_path: Path) -> None:
    header = _read(TaskContextGenerator(_tracker(_project(tmp_path))).generate().base_header)

    assert "#ifndef DEMO_TASK_TASK_BASE_HPP" in header
    assert "#include <rtt/TaskContext.hpp>" in header
    assert "#include <demo/Types.hpp>" in header
    assert "rtt/Types.hpp" not in header
    assert "class TaskBase : public RTT::TaskContext" in header
    assert "RTT::InputPort< demo::Point > _samples;" in header
    assert "RTT::OutputPort< double > _result;" in header
    assert "RTT::Property< double > _gain;" in header
    assert "RTT::Operation< bool(bool) > _reset;" in header
    assert "RTT::Operation< std::string() > _getModelName;" in header
    assert "virtual bool reset(bool hard) = 0;" in header
    assert "If the compiler issues an error at this point" in header
    assert "TaskBase(std::string const& name, TaskCore::TaskState initial_state);" in header
    assert "bool startHook();" in header
    assert "updateHook" not in header


def test_base_source(tmp_path: Path) -> None:
    source = _read(TaskContextGenerator(_tracker(_project(tmp_path))).generate().base_source)

    assert '#include "TaskBase.hpp"' in source
    assert "#include <sys/syscall.h>" in source
    assert "    : RTT::TaskContext(name)" in source
    assert '    , _samples("samples")' in source
    assert "    ports()->addPort(_samples);" in source
    assert "    _result.keepLastWrittenValue(true);\n    _result.keepNextWrittenValue(false);" in source
    assert "    _gain.set(2.0);" in source
    assert "    if (! RTT::TaskContext::startHook())\n        return false;\n    _samples.clear();\n    return true;" in (
        source
    )
    assert 'return "demo::Task";' in source
    assert "std::string TaskBase::getModelName()" in source


def test_user_files(tmp_path: Path) -> None:
    generated = TaskContextGenerator(_tracker(_project(tmp_path))).generate()
    header = _read(generated.user_header)
    source = _read(generated.user_source)

    assert '#include "demo/TaskBase.hpp"' in header
    assert "class Task : public TaskBase" in header
    assert "virtual bool reset(bool hard);" in header
    assert 'Task(std::string const& name = "demo::Task", TaskCore::TaskState initial_state = Stopped);' in header
    assert "bool Task::reset(bool hard)\n{\n    return bool();\n}" in source
    assert "void Task::updateHook()" in source


def test_regeneration_preserves_user_files(tmp_path: Path) -> None:
    task = _tracker(_project(tmp_path))
    generated = TaskContextGenerator(task).generate()
    generated.user_source.write_text("// my implementation\n", encoding="utf-8")

    task.property("offset", "/double")
    regenerated = TaskContextGenerator(task).generate()

    assert _read(regenerated.user_source) == "// my implementation\n"
    assert "_offset" in _read(regenerated.base_header)


def test_custom_renderer(tmp_path: Path) -> None:
    renderer = _RecordingRenderer()
    generated = TaskContextGenerator(_tracker(_project(tmp_path)), renderer=renderer).generate()
    assert renderer.calls == ["tasks/TaskBase.hpp", "tasks/TaskBase.cpp", "tasks/Task.hpp", "tasks/Task.cpp"]
    assert _read(generated.base_header) == "// tasks/TaskBase.hpp\n"


# ###############
# Component Variants
# ###############


def test_configuration_required(tmp_path: Path) -> None:
    task = _project(tmp_path).task_context("Task")
    task.needs_configuration()
    generated = TaskContextGenerator(task).generate()

    assert "initial_state" not in _read(generated.base_header)
    assert "    : RTT::TaskContext(name, TaskCore::PreOperational)" in _read(generated.base_source)
    assert 'Task(std::string const& name = "demo::Task");' in _read(generated.user_header)


def test_fixed_state_after_user_files_were_created(tmp_path: Path) -> None:
    task = _project(tmp_path).task_context("Task")
    assert TaskContextGenerator(task).generate().warnings == []

    task.fixed_initial_state()
    warnings = TaskContextGenerator(task).generate().warnings
    assert len(warnings) == 2
    assert all("still take a TaskState" in warning.message for warning in warnings)


def test_subclass(tmp_path: Path) -> None:
    project = _project(tmp_path)
    parent = project.task_context("Task")
    child = project.task_context("Child", subclasses=parent)
    child.input_port("extra", "/double")
    generated = TaskContextGenerator(child).generate()
    header = _read(generated.base_header)
    source = _read(generated.base_source)

    assert "#include <demo/Task.hpp>" in header
    assert "class ChildBase : public demo::Task" in header
    assert "virtual std::string getModelName();" in header
    assert "_getModelName" not in header
    assert "sys/syscall.h" not in source
    assert 'return "demo::Child";' in source
    assert "    if (! demo::Task::startHook())" in source


def test_pointer_port_includes_its_header(tmp_path: Path) -> None:
    task = _project(tmp_path).task_context("Task")
    task.input_port("frames", task.ro_ptr("/demo/Point"))
    header = _read(TaskContextGenerator(task).generate().base_header)
    assert "#include <rtt/extras/ReadOnlyPointer.hpp>" in header
    assert "RTT::InputPort< RTT::extras::ReadOnlyPointer< demo::Point > > _frames;" in header


def test_extensions_handlers_and_code_additions(tmp_path: Path) -> None:
    task = _project(tmp_path).task_context("Task")
    task.add_extension(_Logger())
    task.add_generation_handler(
        lambda component: Contribution(hooks=[HookRecord(hook="update", code=CodeSlot(text="log();"))])
    )
    task.add_generation_handler(lambda component: None)
    task.in_base_hook("update", "process();")
    task.in_base_hook("stop", lambda: f"// stopping {task.basename}")
    task.add_base_header_code("#include <logger.hpp>")
    task.add_base_header_code("// trailer", include_before=False)
    task.add_base_implementation_code("// implementation trailer", include_before=False)

    generated = TaskContextGenerator(task).generate()
    header = _read(generated.base_header)
    source = _read(generated.base_source)

    assert "Logger* _logger;" in header
    assert "void updateHook();" in header
    assert "void stopHook();" in header
    assert header.index("#include <logger.hpp>") < header.index("namespace demo")
    assert header.index("class TaskBase") < header.index("// trailer") < header.index("#endif")
    assert "    RTT::TaskContext::updateHook();\n    log();\n    process();\n}" in source
    assert "    // stopping Task" in source
    assert source.rstrip().endswith("// implementation trailer")


def test_abstract_extension_methods_are_overridden_by_the_user_class(tmp_path: Path) -> None:
    task = _project(tmp_path).task_context("Task")
    task.add_extension(_Ticker())
    generator = TaskContextGenerator(task)
    contribution = generator.collect()

    user = generator.assemble_user(contribution)

    assert user.method_declarations == ["virtual void onTick();", "virtual int ticks(bool reset);"]
    assert user.method_definitions == [
        "void Task::onTick()\n{\n\n}",
        "int Task::ticks(bool reset)\n{\n    return int();\n}",
    ]

    generated = generator.emit(generator.assemble_base(contribution), user)
    assert "virtual void onTick() = 0;" in _read(generated.base_header)
    assert "virtual int period();" in _read(generated.base_header)
    assert "period" not in _read(generated.user_header)
    assert "        virtual void onTick();" in _read(generated.user_header)


def test_opaque_port_once_its_marshalling_is_defined(tmp_path: Path) -> None:
    project = _project(tmp_path)
    project.registry.add(TypeDef(name="/demo/Handle", kind=TypeKind.OPAQUE))
    task = project.task_context("Task")
    task.input_port("handle", "/demo/Handle")
    with pytest.raises(MissingOpaqueError):
        TaskContextGenerator(task).generate()

    project.opaque_type("/demo/Handle", "/demo/Point", includes=["demo/Handle.hpp"])
    header = _read(TaskContextGenerator(task).generate().base_header)

    assert "#include <demo/Handle.hpp>" in header
    assert "RTT::InputPort< demo::Handle > _handle;" in header


# ###############
# Error Cases
# ###############


def test_imported_component_is_not_generated(tmp_path: Path) -> None:
    main = _project(tmp_path)
    library = ProjectModel("lib", base_dir=tmp_path, main_project=main)
    task = library.task_context("Task")
    with pytest.raises(GenerationOnImportError, match="lib::Task"):
        TaskContextGenerator(task).generate()
    assert not (tmp_path / ".taskgen").exists()


def test_opaque_without_marshalling_definition(tmp_path: Path) -> None:
    project = _project(tmp_path)
    project.registry.add(TypeDef(name="/demo/Handle", kind=TypeKind.OPAQUE))
    task = project.task_context("Task")
    task.input_port("handle", "/demo/Handle")
    with pytest.raises(MissingOpaqueError, match="/demo/Handle"):
        TaskContextGenerator(task).generate()


def test_operation_colliding_with_an_implicit_operation(tmp_path: Path) -> None:
    task = _project(tmp_path).task_context("Task")
    task.operation("getModelName").returns("/std/string")
    with pytest.raises(DuplicateMemberError, match="_getModelName"):
        TaskContextGenerator(task).generate()


def test_operations_with_the_same_method_name(tmp_path: Path) -> None:
    task = _project(tmp_path).task_context("Task")
    task.operation("run")
    task.operation("Run")
    with pytest.raises(DuplicateMemberError, match="already a method called run"):
        TaskContextGenerator(task).generate()


def test_hidden_operation_without_body(tmp_path: Path) -> None:
    task = _project(tmp_path).task_context("Task")
    task.operation("secret").hidden = True
    with pytest.raises(MissingBodyError):
        TaskContextGenerator(task).generate()
