"""Template compiler: turns template text into a list of blocks."""

from __future__ import annotations

import logging
import re
from typing import Optional

from dubstash.blocks import (
    Block,
    ConditionBlock,
    ContainerBlock,
    IteratorBlock,
    PlaceholderBlock,
    TextBlock,
)

logger = logging.getLogger(__name__)

# Opening braces, up to three whitespace-separated tokens, closing braces.
PATTERN = re.compile(r"(\{{2,3})\s*([^}\s]*)\s*([^}\s]*)?\s*([^}\s]*)?(\}{2,3})")

RECURSIVE_FLAG = "/r"
DIRECTIVE_OPENER = "{{"

_END_QUALIFIERS = {
    "if": ConditionBlock,
    "foreach": IteratorBlock,
}


class Compiler:
    """Compiles one template text; the block list is built once and reused.

    Malformed directives never raise. Unbalanced braces are left in the
    text, and a stray ``{{else}}`` or ``{{end}}`` is kept as literal
    text so the problem shows up in the rendered output.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self._blocks: Optional[list[Block]] = None
        self._top_level: list[Block] = []
        self._open_blocks: list[ContainerBlock] = []
        self._last_index = 0

    def compile(self) -> list[Block]:
        if self._blocks is None:
            self._blocks = self._compile()
        return self._blocks

    def _compile(self) -> list[Block]:
        for match in PATTERN.finditer(self.text):
            opening, keyword, name, flag, closing = match.groups()
            if len(opening) != len(closing):
                logger.warning("Unbalanced brackets encountered: %s", match.group(0))
                continue

            self._add_text(match.start())
            self._last_index = match.end()
            name = name or ""
            flag = flag or ""
            directive = match.group(0)

            if keyword == "if":
                if name:
                    self._open(ConditionBlock(name, recursive=(flag == RECURSIVE_FLAG)))
                else:
                    self._unexpected(directive, "Bad condition")
            elif keyword == "foreach":
                if name:
                    self._open(IteratorBlock(name))
                else:
                    self._unexpected(directive, "Bad iteration")
            elif keyword == "else":
                self._else(directive)
            elif keyword == "end":
                self._end(directive, name)
            else:
                self._add_block(PlaceholderBlock(
                    keyword,
                    recursive=(name == RECURSIVE_FLAG),
                    html_escape=(len(opening) == 2),
                ))

        self._add_text(len(self.text))
        if self._open_blocks:
            logger.warning(
                "Missing {{end}}: %d block(s) still open at end of template",
                len(self._open_blocks),
            )
        return self._top_level

    def _else(self, directive: str) -> None:
        if self._open_blocks and isinstance(self._open_blocks[-1], ConditionBlock):
            self._open_blocks[-1].found_else()
        else:
            self._unexpected(directive, "Unexpected {{else}} encountered")

    def _end(self, directive: str, qualifier: str) -> None:
        if not self._open_blocks:
            self._unexpected(directive, "Unexpected {{end}} encountered")
            return
        if qualifier:
            expected = _END_QUALIFIERS.get(qualifier)
            if expected is None or not isinstance(self._open_blocks[-1], expected):
                self._unexpected(directive, "Unexpected {{end}} encountered")
                return
        self._open_blocks.pop()

    def _unexpected(self, directive: str, message: str) -> None:
        # Put the directive back in the output to show the problem.
        self._add_block(TextBlock(directive))
        logger.warning("%s: %s", message, directive)

    def _open(self, block: ContainerBlock) -> None:
        self._add_block(block)
        self._open_blocks.append(block)

    def _add_text(self, end: int) -> None:
        text = self.text[self._last_index:end]
        if text:
            self._add_block(TextBlock(text))

    def _add_block(self, block: Block) -> None:
        if self._open_blocks:
            self._open_blocks[-1].add_block(block)
        else:
            self._top_level.append(block)


def compile_blocks(text: str) -> list[Block]:
    """Compile ``text`` into its top-level block list."""
    return Compiler(text).compile()
