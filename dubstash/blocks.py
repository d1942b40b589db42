"""Compiled template blocks.

A compiled template is a list of blocks. Conditions and iterators own
child lists of their own, so the list forms a tree that mirrors the
nesting of ``{{if}}`` and ``{{foreach}}`` directives. Blocks hold no
behaviour beyond dispatching to the runtime that renders them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from dubstash.context import Context
    from dubstash.runtime import Runtime


@dataclass
class TextBlock:
    """Literal text copied to the output."""

    text: str

    def render(self, runtime: Runtime, context: Context, ignore_undefined: bool = False) -> str:
        return self.text


@dataclass
class PlaceholderBlock:
    """``{{name}}`` or ``{{{name}}}``, optionally with the ``/r`` flag."""

    name: str
    recursive: bool = False
    html_escape: bool = True

    @property
    def source(self) -> str:
        """The directive as it would appear in a template, without the flag."""
        if self.html_escape:
            return "{{" + self.name + "}}"
        return "{{{" + self.name + "}}}"

    def render(self, runtime: Runtime, context: Context, ignore_undefined: bool = False) -> str:
        return runtime.render_placeholder(self, context, ignore_undefined)


@dataclass
class ConditionBlock:
    """``{{if name}} ... {{else}} ... {{end}}``."""

    name: str
    recursive: bool = False
    true_blocks: list[Block] = field(default_factory=list)
    false_blocks: list[Block] = field(default_factory=list)
    # Compile-time only: set once {{else}} has been seen.
    in_else: bool = field(default=False, repr=False, compare=False)

    def add_block(self, block: Block) -> None:
        if self.in_else:
            self.false_blocks.append(block)
        else:
            self.true_blocks.append(block)

    def found_else(self) -> None:
        self.in_else = True

    def render(self, runtime: Runtime, context: Context, ignore_undefined: bool = False) -> str:
        return runtime.render_condition(self, context, ignore_undefined)


@dataclass
class IteratorBlock:
    """``{{foreach name}} ... {{end}}``."""

    name: str
    body: list[Block] = field(default_factory=list)

    def add_block(self, block: Block) -> None:
        self.body.append(block)

    def render(self, runtime: Runtime, context: Context, ignore_undefined: bool = False) -> str:
        return runtime.render_iterator(self, context, ignore_undefined)


Block = Union[TextBlock, PlaceholderBlock, ConditionBlock, IteratorBlock]
ContainerBlock = Union[ConditionBlock, IteratorBlock]
