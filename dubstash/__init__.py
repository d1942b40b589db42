"""Logic-lite templates: placeholders, conditions, iteration and recursion.

    >>> import dubstash
    >>> render = dubstash.compile("Hello {{name}}!")
    >>> render({"name": "<World>"})
    'Hello &lt;World&gt;!'

The functions below operate on a process-wide default runtime. Create a
:class:`Runtime` to keep global templates and data separate.
"""

from __future__ import annotations

from typing import Any, Optional

from dubstash.context import UNDEFINED, Context
from dubstash.errors import DubStashError, PrecompiledFormatError, TemplateRecursionError
from dubstash.precompiled import AST_FORMAT_VERSION
from dubstash.registry import GlobalRegistry
from dubstash.runtime import Runtime, Template, default_runtime
from dubstash.template_engine import load_data, render_string, render_template

__version__ = "1.0.0"

__all__ = [
    "AST_FORMAT_VERSION",
    "Context",
    "DubStashError",
    "GlobalRegistry",
    "PrecompiledFormatError",
    "Runtime",
    "Template",
    "TemplateRecursionError",
    "UNDEFINED",
    "compile",
    "create_context",
    "default_runtime",
    "load_data",
    "load_global_templates",
    "load_precompiled",
    "precompile",
    "precompile_global_templates",
    "register_global_data",
    "register_global_template",
    "render",
    "render_string",
    "render_template",
]


def compile(text: str) -> Template:
    """Compile template text into a reusable renderer."""
    return default_runtime().compile(text)


def render(text: str, data: Any = None, ignore_undefined: bool = False) -> str:
    return default_runtime().render(text, data, ignore_undefined)


def register_global_template(name: str, text: str) -> Template:
    """Make a template available by name anywhere in the data hierarchy."""
    return default_runtime().register_global_template(name, text)


def register_global_data(name: str, value: Any) -> None:
    """Make a value available by name wherever a name does not resolve locally."""
    default_runtime().register_global_data(name, value)


def create_context(start_object: Any, start_path: str = "", root_object: Any = None) -> Context:
    return default_runtime().create_context(start_object, start_path, root_object)


def precompile(text: str, indent: Optional[int] = None) -> str:
    return default_runtime().precompile(text, indent=indent)


def load_precompiled(source: str) -> Template:
    return default_runtime().load_precompiled(source)


def precompile_global_templates(indent: Optional[int] = None) -> str:
    return default_runtime().precompile_global_templates(indent=indent)


def load_global_templates(source: str) -> list[str]:
    return default_runtime().load_global_templates(source)
