"""Global templates, global data and the recursive compile cache."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from dubstash.runtime import Template

logger = logging.getLogger(__name__)


class GlobalRegistry:
    """Named templates and data consulted when local resolution fails.

    Neither map ever shadows a property that resolves locally. The last
    registration for a name wins. Registration is not synchronized;
    callers sharing a registry between threads must serialize writes.
    """

    def __init__(self) -> None:
        self.templates: dict[str, Template] = {}
        self.data: dict[str, Any] = {}

    def register_template(self, name: str, template: Template) -> None:
        """Register a compiled template under a name."""
        if name in self.templates:
            logger.debug("Replacing global template %r", name)
        self.templates[name] = template

    def register_data(self, name: str, value: Any) -> None:
        """Register a value (object or primitive) under a name."""
        self.data[name] = value

    def get_template(self, name: str) -> Template:
        template = self.templates.get(name)
        if template is None:
            available = list(self.templates.keys())
            raise KeyError(f"Unknown global template: {name!r}. Available: {available}")
        return template

    def list_templates(self) -> list[str]:
        """Return names of all registered global templates."""
        return list(self.templates.keys())


class RecursiveCompileCache:
    """Compiled renderers keyed by the exact literal text they came from.

    Entries are never evicted; the cache is bounded by the number of
    distinct fragments rendered recursively.
    """

    def __init__(self, compile_fn: Callable[[str], Template]) -> None:
        self._compile = compile_fn
        self._renderers: dict[str, Template] = {}

    def get(self, text: str) -> Template:
        renderer = self._renderers.get(text)
        if renderer is None:
            logger.debug("Compiling recursive fragment %r", text)
            renderer = self._compile(text)
            self._renderers[text] = renderer
        return renderer

    def __contains__(self, text: str) -> bool:
        return text in self._renderers

    def __len__(self) -> int:
        return len(self._renderers)
