"""CLI entry point: python -m dubstash render|precompile|tree ..."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dubstash.blocks import Block, ConditionBlock, IteratorBlock, PlaceholderBlock, TextBlock
from dubstash.runtime import Runtime


def _build_runtime(args: argparse.Namespace) -> Runtime:
    if getattr(args, "config", None):
        from dubstash.config import load_engine_config

        return Runtime.from_config(load_engine_config(args.config))
    return Runtime()


def _read_template(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Error: cannot read template {path}: {exc}", file=sys.stderr)
        sys.exit(1)


def cmd_render(args: argparse.Namespace) -> None:
    from dubstash.template_engine import load_data

    try:
        runtime = _build_runtime(args)
        data = load_data(args.data) if args.data else {}
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    text = _read_template(args.template)
    output = runtime.compile(text)(data, args.ignore_undefined)
    sys.stdout.write(output)


def cmd_precompile(args: argparse.Namespace) -> None:
    text = _read_template(args.template)
    source = Runtime().precompile(text, indent=args.indent)
    if args.output:
        Path(args.output).write_text(source + "\n", encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(source)


def cmd_tree(args: argparse.Namespace) -> None:
    from rich.console import Console
    from rich.markup import escape
    from rich.tree import Tree

    text = _read_template(args.template)
    template = Runtime().compile(text)

    root = Tree(f"[bold]{escape(args.template)}[/bold]")
    _add_branches(root, template.blocks)
    Console().print(root)


def _add_branches(tree, blocks: list[Block]) -> None:
    from rich.markup import escape

    for block in blocks:
        if isinstance(block, TextBlock):
            tree.add(f"[dim]text[/dim] {escape(repr(block.text))}")
        elif isinstance(block, PlaceholderBlock):
            flags = []
            if block.recursive:
                flags.append("recursive")
            if not block.html_escape:
                flags.append("raw")
            suffix = f"  [dim]({', '.join(flags)})[/dim]" if flags else ""
            tree.add(f"[cyan]placeholder[/cyan] {escape(block.name)}{suffix}")
        elif isinstance(block, ConditionBlock):
            suffix = "  [dim](recursive)[/dim]" if block.recursive else ""
            branch = tree.add(f"[green]if[/green] {escape(block.name)}{suffix}")
            _add_branches(branch.add("[green]then[/green]"), block.true_blocks)
            if block.false_blocks:
                _add_branches(branch.add("[green]else[/green]"), block.false_blocks)
        elif isinstance(block, IteratorBlock):
            branch = tree.add(f"[magenta]foreach[/magenta] {escape(block.name)}")
            _add_branches(branch, block.body)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="dubstash",
        description="Render logic-lite {{templates}} against YAML or JSON data",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # -- render --
    p_render = subparsers.add_parser("render", help="Render a template file")
    p_render.add_argument("template", help="Path to the template file")
    p_render.add_argument("--data", default=None,
                          help="Path to a YAML or JSON data file")
    p_render.add_argument("--config", default=None,
                          help="Path to YAML file with global templates, data and max_depth")
    p_render.add_argument("--ignore-undefined", action="store_true", default=False,
                          help="Leave unresolved placeholders in the output")
    p_render.set_defaults(func=cmd_render)

    # -- precompile --
    p_pre = subparsers.add_parser("precompile", help="Serialize a compiled template to JSON")
    p_pre.add_argument("template", help="Path to the template file")
    p_pre.add_argument("--output", "-o", default=None, help="Write to a file instead of stdout")
    p_pre.add_argument("--indent", type=int, default=None, help="Pretty-print with this indent")
    p_pre.set_defaults(func=cmd_precompile)

    # -- tree --
    p_tree = subparsers.add_parser("tree", help="Show the compiled block tree")
    p_tree.add_argument("template", help="Path to the template file")
    p_tree.set_defaults(func=cmd_tree)

    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    args.func(args)


if __name__ == "__main__":
    main()
