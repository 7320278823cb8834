# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declarative generation records.

Component members do not modify the component when they are prepared for
generation. Instead they produce records describing what the generated base
class must contain: member declarations, constructor code, lifecycle hook
statements and methods. The generation engine renders these records.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

# ###############
# Public Interface
# ###############

# Lifecycle hooks of a component, in the order the framework calls them.
HOOKS: tuple[str, ...] = ("configure", "start", "update", "error", "exception", "fatal", "stop", "cleanup")

CodeCallback = Callable[[], str | None]


@dataclass(frozen=True)
class CodeSlot:
    """A piece of generated code given either literally or through a callback.

    The callback form is evaluated at render time, which lets plugins compute
    code from state that is only complete once the whole model is known.
    """

    text: str | None = None
    callback: CodeCallback | None = None

    def __post_init__(self) -> None:
        if self.text is not None and self.callback is not None:
            raise ValueError("you can provide either a string or a callback, not both")

    @classmethod
    def of(cls, code: str | CodeCallback | CodeSlot | None) -> CodeSlot:
        """Wrap *code* into a CodeSlot."""
        if isinstance(code, CodeSlot):
            return code
        if code is None or isinstance(code, str):
            return cls(text=code)
        return cls(callback=code)

    @property
    def is_empty(self) -> bool:
        return self.text is None and self.callback is None

    def render(self, indent: int = 0) -> str:
        """Return the code text, indenting every line by *indent* spaces."""
        if self.text is not None:
            result = self.text
        elif self.callback is not None:
            result = self.callback() or ""
        else:
            result = ""
        if indent and result:
            prefix = " " * indent
            result = "\n".join(prefix + line if line else line for line in result.split("\n"))
        return result


@dataclass(frozen=True)
class DeclarationRecord:
    """A data member of the generated base class."""

    kind: str
    field_name: str
    type_signature: str
    doc: str | None = None

    def render(self) -> str:
        decl = f"{self.type_signature} {self.field_name};"
        if self.doc:
            return f"/* {self.doc} */\n{decl}"
        return decl


@dataclass(frozen=True)
class ConstructionRecord:
    """Initialization and tear-down code attached to a base class member."""

    kind: str
    field_name: str
    initializer: CodeSlot = field(default_factory=CodeSlot)
    constructor: CodeSlot = field(default_factory=CodeSlot)
    destructor: CodeSlot = field(default_factory=CodeSlot)


@dataclass(frozen=True)
class HookRecord:
    """A statement injected into one of the base class lifecycle hooks."""

    hook: str
    code: CodeSlot

    def __post_init__(self) -> None:
        if self.hook not in HOOKS:
            raise ValueError(f"unknown hook '{self.hook}', must be one of {', '.join(HOOKS)}")


@dataclass(frozen=True)
class MethodRecord:
    """A method of the generated base or user class.

    A method without a body is pure virtual.
    """

    return_type: str
    name: str
    signature: str = ""
    body: CodeSlot | None = None
    doc: tuple[str, ...] = ()
    in_base: bool = True

    def declaration(self) -> str:
        decl = f"virtual {self.return_type} {self.name}({self.signature})"
        if self.doc:
            decl = "/* " + "\n * ".join(self.doc) + "\n */\n" + decl
        if self.body is None:
            decl += " = 0"
        return decl + ";"

    def definition(self, class_name: str) -> str | None:
        if self.body is None:
            return None
        return f"{self.return_type} {class_name}::{self.name}({self.signature})\n{{\n{self.body.render()}\n}}"


@dataclass(frozen=True)
class CodeSnippet:
    """Toplevel code placed before or after the class in a generated file."""

    code: CodeSlot
    include_before: bool = True


@dataclass
class Contribution:
    """Every record contributed by one member, extension or handler."""

    declarations: list[DeclarationRecord] = field(default_factory=list)
    constructions: list[ConstructionRecord] = field(default_factory=list)
    hooks: list[HookRecord] = field(default_factory=list)
    base_methods: list[MethodRecord] = field(default_factory=list)
    user_methods: list[MethodRecord] = field(default_factory=list)
    header_code: list[CodeSnippet] = field(default_factory=list)
    implementation_code: list[CodeSnippet] = field(default_factory=list)

    def extend(self, other: Contribution) -> None:
        """Append the records of *other* to this contribution."""
        self.declarations.extend(other.declarations)
        self.constructions.extend(other.constructions)
        self.hooks.extend(other.hooks)
        self.base_methods.extend(other.base_methods)
        self.user_methods.extend(other.user_methods)
        self.header_code.extend(other.header_code)
        self.implementation_code.extend(other.implementation_code)
