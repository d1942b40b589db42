"""Convenience helpers: render strings and template files in one call."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml

from dubstash.runtime import Runtime, default_runtime


def render_string(
    template: str,
    data: Any = None,
    ignore_undefined: bool = False,
    runtime: Optional[Runtime] = None,
) -> str:
    """Compile ``template`` (once per distinct text) and render it against ``data``."""
    runtime = runtime or default_runtime()
    return runtime.render(template, data, ignore_undefined)


def render_template(
    template_path: str,
    data: Any = None,
    ignore_undefined: bool = False,
    runtime: Optional[Runtime] = None,
) -> str:
    """Read a UTF-8 template file and render it, return the rendered string."""
    content = Path(template_path).read_text(encoding="utf-8")
    return render_string(content, data, ignore_undefined, runtime)


def load_data(path: str) -> Any:
    """Load render data from a ``.json`` file, or from YAML otherwise."""
    content = Path(path).read_text(encoding="utf-8")
    if Path(path).suffix.lower() == ".json":
        return json.loads(content)
    return yaml.safe_load(content)
