"""Exceptions raised by the engine itself.

Template-authoring mistakes never raise; they are logged and the raw
directive text is left in the output. Errors raised by data accessors
propagate unchanged.
"""

from __future__ import annotations


class DubStashError(Exception):
    """Base class for errors raised by dubstash."""


class TemplateRecursionError(DubStashError):
    """Recursive rendering nested deeper than the runtime allows."""

    def __init__(self, max_depth: int, fragment: str) -> None:
        self.max_depth = max_depth
        self.fragment = fragment
        super().__init__(
            f"Recursive rendering exceeded max depth {max_depth} "
            f"while rendering {fragment!r}"
        )


class PrecompiledFormatError(DubStashError):
    """A precompiled template document could not be loaded."""
