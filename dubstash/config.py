"""Engine configuration dataclass and YAML loader."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

_ALLOWED_KEYS = frozenset({"max_depth", "templates", "data"})


@dataclass
class EngineConfig:
    max_depth: Optional[int] = None  # None: DUBSTASH_MAX_DEPTH env var or the default
    templates: dict[str, str] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)


def load_engine_config(path: str) -> EngineConfig:
    """Load global templates, global data and limits from a YAML file.

    Unknown top-level keys cause a ``ValueError`` so typos are caught early.
    """
    with open(path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        return EngineConfig()
    if not isinstance(raw, dict):
        raise ValueError(f"Engine config YAML must be a mapping, got {type(raw).__name__}")

    unknown = set(raw) - _ALLOWED_KEYS
    if unknown:
        raise ValueError(
            f"Unknown top-level keys in engine config: {sorted(unknown)}. "
            f"Allowed: {sorted(_ALLOWED_KEYS)}"
        )

    max_depth = raw.get("max_depth")
    if max_depth is not None and (not isinstance(max_depth, int) or max_depth < 1):
        raise ValueError(f"'max_depth' must be a positive integer, got {max_depth!r}")

    templates = raw.get("templates", {}) or {}
    data = raw.get("data", {}) or {}
    _validate_mapping("templates", templates)
    _validate_mapping("data", data)
    for name, text in templates.items():
        if not isinstance(text, str):
            raise ValueError(
                f"Template {name!r} must be a string, got {type(text).__name__}"
            )

    return EngineConfig(max_depth=max_depth, templates=templates, data=data)


def _validate_mapping(section: str, raw: Any) -> None:
    if not isinstance(raw, dict):
        raise ValueError(f"'{section}' must be a mapping, got {type(raw).__name__}")
