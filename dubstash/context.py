"""Rendering context and dotted-path resolution.

A name such as ``../../parent.child`` is resolved in three stages: climb
to the ancestor named by the leading ``../`` groups, drill down through
all but the last dot-segment, then evaluate the last segment. Names that
cannot be resolved locally are retried against the registry's global
data, unless an ancestor climb took place.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from dubstash.registry import GlobalRegistry
    from dubstash.runtime import Template

logger = logging.getLogger(__name__)

PARENT_PREFIX = "../"
ITEM_SEGMENT = "[item]"

# Values that never expose properties to templates.
_SCALAR_TYPES = (str, bytes, int, float, complex, bool)


class _Undefined:
    """Marks a property that does not exist (as opposed to one set to None)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()


@dataclass
class Context:
    """The object a name is resolved against, its path from the root, and the root."""

    current_object: Any
    current_path: str = ""
    root_object: Any = None

    def child(self, current_object: Any, segment: str) -> Context:
        path = f"{self.current_path}.{segment}" if self.current_path else segment
        return Context(current_object, path, self.root_object)


def create_context(start_object: Any, start_path: str = "", root_object: Any = None) -> Context:
    """Build a context for rendering relative to a non-root object.

    ``root_object`` defaults to ``start_object``.
    """
    if root_object is None:
        root_object = start_object
    return Context(start_object, start_path, root_object)


def normalize(value: Any) -> Any:
    """Turn empty lists, tuples and mappings into None so they test falsy."""
    if isinstance(value, (list, tuple, Mapping)) and not value:
        return None
    return value


def lookup_property(obj: Any, name: str) -> Any:
    """Read ``name`` from ``obj`` without any global fallback.

    Mappings are read by key, lists and tuples by numeric index, other
    objects by public attribute. Callables found this way are invoked
    with no arguments. Returns UNDEFINED when the property is absent.
    """
    if obj is None or isinstance(obj, _SCALAR_TYPES):
        return UNDEFINED
    if isinstance(obj, Mapping):
        if name not in obj:
            return UNDEFINED
        value = obj[name]
    elif isinstance(obj, (list, tuple)):
        if not name.isdigit() or int(name) >= len(obj):
            return UNDEFINED
        value = obj[int(name)]
    else:
        if not name or name.startswith("_"):
            return UNDEFINED
        try:
            inspect.getattr_static(obj, name)
        except AttributeError:
            return UNDEFINED
        # Read once; errors raised by a property getter propagate.
        value = getattr(obj, name)
    if callable(value) and not isinstance(value, type):
        value = value()
    return value


def count_parent_levels(name: str) -> int:
    """Number of leading ``../`` groups in ``name``."""
    levels = 0
    while name.startswith(PARENT_PREFIX, levels * len(PARENT_PREFIX)):
        levels += 1
    return levels


class PathResolver:
    """Resolves names against a Context, falling back to a GlobalRegistry.

    ``render_global`` renders a registered global template for a context;
    the runtime supplies it so that recursion depth is accounted for.
    """

    def __init__(
        self,
        registry: GlobalRegistry,
        render_global: Callable[[Template, Context], str],
    ) -> None:
        self._registry = registry
        self._render_global = render_global

    @property
    def global_context(self) -> Context:
        data = self._registry.data
        return Context(data, "", data)

    def resolve(self, name: str, context: Context) -> Any:
        """Return the value ``name`` refers to, or UNDEFINED."""
        return self._resolve(name, context, use_global_data=True)

    def _resolve(self, name: str, context: Context, use_global_data: bool) -> Any:
        levels = count_parent_levels(name)
        if levels:
            context = self.ancestor_context(context, levels, name)
            name = name[levels * len(PARENT_PREFIX):]
            use_global_data = False

        segments = name.split(".")
        drilled = Context(context.current_object, context.current_path, context.root_object)
        for segment in segments[:-1]:
            next_obj = self.evaluate(drilled, segment)
            if next_obj is UNDEFINED:
                if use_global_data:
                    return self._resolve(name, self.global_context, use_global_data=False)
                return UNDEFINED
            drilled = drilled.child(next_obj, segment)

        value = self.evaluate(drilled, segments[-1])
        if value is UNDEFINED and use_global_data:
            value = self._resolve(name, self.global_context, use_global_data=False)
        return value

    def ancestor_context(self, context: Context, levels: int, name: str = "") -> Context:
        """Context for the object ``levels`` steps above ``context``.

        Climbing above the root is clamped to the root.
        """
        segments = context.current_path.split(".")
        keep = len(segments) - levels
        if keep < 0:
            logger.warning(
                "Too many levels to climb from %r to %r. Will stop at the top.",
                context.current_path, name,
            )
            keep = 0
        if keep == 0:
            return Context(context.root_object, "", context.root_object)

        ancestor_path = ".".join(segments[:keep])
        root_context = Context(context.root_object, "", context.root_object)
        ancestor = self.resolve(ancestor_path, root_context)
        if ancestor is UNDEFINED:
            ancestor = None
        return Context(ancestor, ancestor_path, context.root_object)

    def evaluate(self, context: Context, name: str) -> Any:
        """Evaluate a single property of the context's current object.

        A property missing from the object is looked up among the global
        templates, which render against the root object with ``context``
        passed through.
        """
        obj = context.current_object
        if obj is None:
            # Possibly an empty collection that was normalized away.
            return UNDEFINED
        value = lookup_property(obj, name)
        if value is UNDEFINED:
            template = self._registry.templates.get(name)
            if template is not None:
                value = self._render_global(template, context)
        return normalize(value)
