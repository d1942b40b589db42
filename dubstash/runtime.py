"""Rendering runtime.

The runtime owns the global registry and the recursive compile cache,
creates the initial context for each render call and implements the
placeholder, condition and iteration algorithms that blocks dispatch to.
"""

from __future__ import annotations

import functools
import logging
import math
import os
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional

from dubstash.blocks import Block, ConditionBlock, IteratorBlock, PlaceholderBlock
from dubstash.collection import classify
from dubstash.compiler import DIRECTIVE_OPENER, compile_blocks
from dubstash.context import (
    ITEM_SEGMENT,
    UNDEFINED,
    Context,
    PathResolver,
    create_context,
)
from dubstash.errors import TemplateRecursionError
from dubstash.registry import GlobalRegistry, RecursiveCompileCache

if TYPE_CHECKING:
    from dubstash.config import EngineConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32
# Compiled top-level texts kept by Runtime.render.
RENDER_CACHE_SIZE = 256

_HTML_ESCAPES: dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
}


def _default_max_depth() -> int:
    """Return the recursion bound, respecting DUBSTASH_MAX_DEPTH env var."""
    env = os.environ.get("DUBSTASH_MAX_DEPTH")
    if env:
        return int(env)
    return DEFAULT_MAX_DEPTH


def html_escape(text: str) -> str:
    return "".join(_HTML_ESCAPES.get(char, char) for char in text)


def to_text(value: Any) -> str:
    """Stringify a value for output.

    Booleans render as ``true``/``false``, integral floats without a
    fractional part and lists or tuples as their members joined by commas,
    with None members left empty.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else to_text(item) for item in value)
    return str(value)


class Template:
    """A compiled template. Call it with data to render."""

    def __init__(self, blocks: list[Block], runtime: Runtime, source: Optional[str] = None) -> None:
        self.blocks = blocks
        self.runtime = runtime
        self.source = source

    def __call__(
        self,
        data: Any = None,
        ignore_undefined: bool = False,
        start_context: Optional[Context] = None,
    ) -> str:
        return self.runtime.render_blocks(self.blocks, data, ignore_undefined, start_context)

    render = __call__

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize the block tree (see dubstash.precompiled)."""
        from dubstash.precompiled import dump_blocks

        return dump_blocks(self.blocks, indent=indent)

    def __repr__(self) -> str:
        return f"Template(source={self.source!r}, blocks={len(self.blocks)})"


class Runtime:
    """Compiles and renders templates against one registry."""

    def __init__(
        self,
        registry: Optional[GlobalRegistry] = None,
        *,
        max_depth: Optional[int] = None,
    ) -> None:
        self.registry = registry if registry is not None else GlobalRegistry()
        self.max_depth = max_depth if max_depth is not None else _default_max_depth()
        self.cache = RecursiveCompileCache(self.compile)
        self._compile_memo = functools.lru_cache(maxsize=RENDER_CACHE_SIZE)(self.compile)
        self.resolver = PathResolver(self.registry, self._render_global)
        self._local = threading.local()

    @classmethod
    def from_config(cls, config: EngineConfig) -> Runtime:
        """Build a runtime and register the configured globals."""
        runtime = cls(max_depth=config.max_depth)
        for name, text in config.templates.items():
            runtime.register_global_template(name, text)
        for name, value in config.data.items():
            runtime.register_global_data(name, value)
        return runtime

    # -- public API --

    def compile(self, text: str) -> Template:
        return Template(compile_blocks(text), self, source=text)

    def render(self, text: str, data: Any = None, ignore_undefined: bool = False) -> str:
        """Compile and render, reusing the most recently compiled texts."""
        return self._compile_memo(text)(data, ignore_undefined)

    def register_global_template(self, name: str, text: str) -> Template:
        template = self.compile(text)
        self.registry.register_template(name, template)
        logger.debug("Registered global template %r", name)
        return template

    def register_global_data(self, name: str, value: Any) -> None:
        self.registry.register_data(name, value)

    def create_context(self, start_object: Any, start_path: str = "", root_object: Any = None) -> Context:
        return create_context(start_object, start_path, root_object)

    def resolve(self, name: str, context: Context) -> Any:
        return self.resolver.resolve(name, context)

    def precompile(self, text: str, indent: Optional[int] = None) -> str:
        return self.compile(text).to_json(indent=indent)

    def load_precompiled(self, source: str) -> Template:
        from dubstash.precompiled import load_blocks

        return Template(load_blocks(source), self)

    def precompile_global_templates(self, indent: Optional[int] = None) -> str:
        """Serialize every registered global template into one JSON document."""
        from dubstash.precompiled import dump_templates

        return dump_templates(
            {
                name: self.registry.get_template(name).blocks
                for name in self.registry.list_templates()
            },
            indent=indent,
        )

    def load_global_templates(self, source: str) -> list[str]:
        """Register every template in a document from precompile_global_templates."""
        from dubstash.precompiled import load_templates

        loaded = load_templates(source)
        for name, blocks in loaded.items():
            self.registry.register_template(name, Template(blocks, self))
        return list(loaded.keys())

    # -- block rendering --

    def render_blocks(
        self,
        blocks: list[Block],
        data: Any,
        ignore_undefined: bool = False,
        start_context: Optional[Context] = None,
    ) -> str:
        context = start_context or Context(data, "", data)
        return "".join(block.render(self, context, ignore_undefined) for block in blocks)

    def render_placeholder(self, block: PlaceholderBlock, context: Context, ignore_undefined: bool) -> str:
        value = self.resolve(block.name, context)
        if value is UNDEFINED and ignore_undefined:
            # Leave the placeholder for a later rendering pass.
            return block.source
        if value is UNDEFINED or value is None:
            return ""

        # Escape before recursing so recursed output is not escaped twice.
        text = to_text(value)
        if block.html_escape:
            text = html_escape(text)
        if block.recursive and DIRECTIVE_OPENER in text:
            text = self._render_recursive(text, context, ignore_undefined)
        return text

    def render_condition(self, block: ConditionBlock, context: Context, ignore_undefined: bool) -> str:
        value = self.resolve(block.name, context)
        # Only a value that is nothing but directives needs evaluating;
        # anything else is truthy already.
        if (
            block.recursive
            and isinstance(value, str)
            and value.startswith("{{")
            and value.endswith("}}")
        ):
            value = self._render_recursive(value, context, False)
        selected = block.true_blocks if value else block.false_blocks
        return "".join(child.render(self, context, ignore_undefined) for child in selected)

    def render_iterator(self, block: IteratorBlock, context: Context, ignore_undefined: bool) -> str:
        collection = self.resolve(block.name, context)
        if not collection:
            return ""

        member_path = f"{context.current_path}.{block.name}" if context.current_path else block.name
        member_path += "." + ITEM_SEGMENT
        item_context = Context(None, member_path, context.root_object)

        output = []
        for member in classify(collection).members():
            item_context.current_object = member
            for child in block.body:
                output.append(child.render(self, item_context, ignore_undefined))
        return "".join(output)

    # -- recursion --

    def _render_recursive(self, text: str, context: Context, ignore_undefined: bool) -> str:
        template = self.cache.get(text)
        with self._nested(text):
            return template(context.root_object, ignore_undefined, context)

    def _render_global(self, template: Template, context: Context) -> str:
        with self._nested(template.source or repr(template)):
            return template(context.root_object, False, context)

    @contextmanager
    def _nested(self, fragment: str) -> Iterator[None]:
        depth = getattr(self._local, "depth", 0) + 1
        if depth > self.max_depth:
            raise TemplateRecursionError(self.max_depth, fragment)
        self._local.depth = depth
        try:
            yield
        finally:
            self._local.depth = depth - 1


_default_runtime: Optional[Runtime] = None


def default_runtime() -> Runtime:
    """Return the process-wide runtime behind the package-level functions."""
    global _default_runtime
    if _default_runtime is None:
        _default_runtime = Runtime()
    return _default_runtime
