"""JSON serialization of compiled block trees.

A precompiled template is a JSON document::

    {"format": "dubstash-ast", "version": 1, "blocks": [...]}

Loading one rebuilds the block tree without touching the compiler, and
renders exactly as the template it was produced from.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Union

from dubstash.blocks import (
    Block,
    ConditionBlock,
    IteratorBlock,
    PlaceholderBlock,
    TextBlock,
)
from dubstash.errors import PrecompiledFormatError

FORMAT_NAME = "dubstash-ast"
AST_FORMAT_VERSION = 1


def block_to_dict(block: Block) -> dict:
    if isinstance(block, TextBlock):
        return {"type": "text", "text": block.text}
    if isinstance(block, PlaceholderBlock):
        return {
            "type": "placeholder",
            "name": block.name,
            "recursive": block.recursive,
            "html_escape": block.html_escape,
        }
    if isinstance(block, ConditionBlock):
        return {
            "type": "condition",
            "name": block.name,
            "recursive": block.recursive,
            "true_blocks": [block_to_dict(b) for b in block.true_blocks],
            "false_blocks": [block_to_dict(b) for b in block.false_blocks],
        }
    if isinstance(block, IteratorBlock):
        return {
            "type": "iterator",
            "name": block.name,
            "body": [block_to_dict(b) for b in block.body],
        }
    raise TypeError(f"Not a template block: {block!r}")


def block_from_dict(raw: Any) -> Block:
    if not isinstance(raw, dict):
        raise PrecompiledFormatError(f"Block must be an object, got {type(raw).__name__}")
    block_type = raw.get("type")
    try:
        if block_type == "text":
            return TextBlock(raw["text"])
        if block_type == "placeholder":
            return PlaceholderBlock(
                raw["name"],
                recursive=bool(raw.get("recursive", False)),
                html_escape=bool(raw.get("html_escape", True)),
            )
        if block_type == "condition":
            return ConditionBlock(
                raw["name"],
                recursive=bool(raw.get("recursive", False)),
                true_blocks=_blocks_from_list(raw.get("true_blocks", [])),
                false_blocks=_blocks_from_list(raw.get("false_blocks", [])),
            )
        if block_type == "iterator":
            return IteratorBlock(raw["name"], body=_blocks_from_list(raw.get("body", [])))
    except KeyError as exc:
        raise PrecompiledFormatError(f"{block_type} block is missing {exc.args[0]!r}") from exc
    raise PrecompiledFormatError(f"Unknown block type: {block_type!r}")


def _blocks_from_list(raw: Any) -> list[Block]:
    if not isinstance(raw, list):
        raise PrecompiledFormatError(f"Block list must be an array, got {type(raw).__name__}")
    return [block_from_dict(item) for item in raw]


def blocks_document(blocks: list[Block]) -> dict:
    return {
        "format": FORMAT_NAME,
        "version": AST_FORMAT_VERSION,
        "blocks": [block_to_dict(b) for b in blocks],
    }


def dump_blocks(blocks: list[Block], indent: Optional[int] = None) -> str:
    return json.dumps(blocks_document(blocks), indent=indent)


def load_blocks(source: Union[str, dict]) -> list[Block]:
    """Rebuild a block list from a document produced by dump_blocks."""
    document = _parse(source)
    return _blocks_from_list(document.get("blocks", []))


def dump_templates(templates: dict[str, list[Block]], indent: Optional[int] = None) -> str:
    """Serialize several named block lists into one JSON object."""
    return json.dumps(
        {name: blocks_document(blocks) for name, blocks in templates.items()},
        indent=indent,
    )


def load_templates(source: str) -> dict[str, list[Block]]:
    try:
        raw = json.loads(source)
    except json.JSONDecodeError as exc:
        raise PrecompiledFormatError(f"Not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise PrecompiledFormatError(
            f"Precompiled templates must be an object, got {type(raw).__name__}"
        )
    return {name: load_blocks(document) for name, document in raw.items()}


def _parse(source: Union[str, dict]) -> dict:
    if isinstance(source, str):
        try:
            document = json.loads(source)
        except json.JSONDecodeError as exc:
            raise PrecompiledFormatError(f"Not valid JSON: {exc}") from exc
    else:
        document = source
    if not isinstance(document, dict):
        raise PrecompiledFormatError(
            f"Precompiled template must be an object, got {type(document).__name__}"
        )
    if document.get("format") != FORMAT_NAME:
        raise PrecompiledFormatError(f"Unknown format: {document.get('format')!r}")
    version = document.get("version")
    if version != AST_FORMAT_VERSION:
        raise PrecompiledFormatError(
            f"Unsupported version {version!r}; this release reads version {AST_FORMAT_VERSION}"
        )
    return document
