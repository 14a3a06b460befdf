"""Tool configuration for tcodec.

Every tool has built-in defaults (DEFAULTS). A JSON config can override them,
and CLI flags override the config:

    CLI flag > --config JSON > DEFAULTS

The config loader is intentionally *small* and strict:
  - JSON only ('@file.json' or inline)
  - explicit schema id
  - unknown keys are rejected, value types are checked
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tcodec.core.bitstream import validate_dna_mapping
from tcodec.core.wrap import MAX_WRAP
from tcodec.errors import UsageError

SPEC_ID_V1 = "tcodec.config.v1"

TOOLS: tuple[str, ...] = (
    "ascii85",
    "base85",
    "binary",
    "dna",
    "braille",
    "morse",
    "leetspeak",
    "dancing-men",
    "factoradic",
)

DEFAULTS: dict[str, dict[str, Any]] = {
    "ascii85": {"wrap": 76, "zero_compress": False, "space_compress": False, "ignore_garbage": False},
    "base85": {"wrap": 76, "ignore_garbage": False},
    "binary": {"wrap": 64},
    "dna": {"wrap": 80, "mapping": "ATGC", "complement": False, "stats": False},
    "braille": {"text_braille": False},
    "morse": {"separator": " ", "word_sep": " / "},
    "leetspeak": {"level": 1, "ignore_case": False},
    "dancing-men": {"compact": False},
    "factoradic": {"verbose": False},
}

_BOOL_KEYS = frozenset(
    {
        "zero_compress",
        "space_compress",
        "ignore_garbage",
        "complement",
        "stats",
        "text_braille",
        "ignore_case",
        "compact",
        "verbose",
    }
)
_STR_KEYS = frozenset({"mapping", "separator", "word_sep"})


class ToolConfigError(ValueError):
    pass


def parse_wrap(value: str | int) -> int:
    """Wrap column count: integer in 0..MAX_WRAP (0 disables wrapping)."""
    if isinstance(value, bool):
        raise UsageError(f"invalid wrap value: {value!r}")
    try:
        n = int(str(value).strip(), 10)
    except ValueError:
        raise UsageError(f"invalid wrap value: {value!r}") from None
    if n < 0 or n > MAX_WRAP:
        raise UsageError(f"invalid wrap value: {n} (must be 0..{MAX_WRAP})")
    return n


def parse_level(value: str | int) -> int:
    if isinstance(value, bool):
        raise UsageError(f"invalid level {value!r}")
    try:
        n = int(str(value).strip(), 10)
    except ValueError:
        raise UsageError(f"invalid level {value!r} (1=basic, 2=advanced, 3=extreme)") from None
    if n not in (1, 2, 3):
        raise UsageError(f"invalid level {n} (1=basic, 2=advanced, 3=extreme)")
    return n


def _load_json_arg(config_arg: str) -> dict[str, Any]:
    s = config_arg.strip()
    if not s:
        raise ToolConfigError("config: argomento vuoto")

    if s.startswith("@"):
        p = Path(s[1:]).expanduser()
        if not p.exists() or not p.is_file():
            raise ToolConfigError(f"config: file non trovato: {p}")
        raw = p.read_text(encoding="utf-8")
        try:
            obj = json.loads(raw)
        except Exception as e:
            raise ToolConfigError(f"config: JSON non valido in {p}: {e}") from e
        if not isinstance(obj, dict):
            raise ToolConfigError(f"config: il JSON in {p} deve essere un oggetto")
        return obj

    try:
        obj = json.loads(s)
    except Exception as e:
        raise ToolConfigError(f"config: JSON inline non valido: {e}") from e
    if not isinstance(obj, dict):
        raise ToolConfigError("config: il JSON inline deve essere un oggetto")
    return obj


def _check_value(tool: str, key: str, v: Any) -> Any:
    if key in _BOOL_KEYS:
        if not isinstance(v, bool):
            raise ToolConfigError(f"config: campo '{key}' deve essere booleano")
        return v
    if key in _STR_KEYS:
        if not isinstance(v, str) or not v:
            raise ToolConfigError(f"config: campo '{key}' deve essere una stringa non vuota")
        if key == "mapping":
            try:
                return validate_dna_mapping(v)
            except UsageError as e:
                raise ToolConfigError(f"config: {e}") from e
        return v
    if key == "wrap":
        if not isinstance(v, int) or isinstance(v, bool):
            raise ToolConfigError("config: campo 'wrap' deve essere un intero")
        try:
            return parse_wrap(v)
        except UsageError as e:
            raise ToolConfigError(f"config: {e}") from e
    if key == "level":
        if not isinstance(v, int) or isinstance(v, bool):
            raise ToolConfigError("config: campo 'level' deve essere un intero")
        try:
            return parse_level(v)
        except UsageError as e:
            raise ToolConfigError(f"config: {e}") from e
    raise ToolConfigError(f"config: chiave non supportata per {tool}: {key}")


@dataclass(frozen=True)
class ToolConfig:
    """Resolved options for one tool run."""

    tool: str
    options: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Any:
        return self.options[key]

    def merged(self, overrides: Mapping[str, Any]) -> ToolConfig:
        """Apply CLI overrides; None means 'flag not given'."""
        opts = dict(self.options)
        for k, v in overrides.items():
            if v is None:
                continue
            if k not in opts:
                raise ToolConfigError(f"config: opzione sconosciuta per {self.tool}: {k}")
            opts[k] = v
        return ToolConfig(self.tool, opts)


def default_config(tool: str) -> ToolConfig:
    if tool not in DEFAULTS:
        raise ToolConfigError(f"config: tool sconosciuto: {tool!r}")
    return ToolConfig(tool, dict(DEFAULTS[tool]))


def load_tool_config(tool: str, config_arg: str | None) -> ToolConfig:
    """Defaults for ``tool``, overridden by the config (if any).

    config_arg:
      - None: defaults only
      - '@file.json'
      - inline JSON object
    """
    base = default_config(tool)
    if config_arg is None:
        return base

    obj = _load_json_arg(config_arg)

    spec_id = obj.get("spec")
    if spec_id != SPEC_ID_V1:
        raise ToolConfigError(f"config: spec non supportata: {spec_id!r} (attesa {SPEC_ID_V1!r})")

    cfg_tool = obj.get("tool")
    if cfg_tool is not None and cfg_tool != tool:
        raise ToolConfigError(f"config: pensata per {cfg_tool!r}, non per {tool!r}")

    allowed = set(DEFAULTS[tool]) | {"spec", "tool"}
    extra = sorted(set(obj.keys()) - allowed)
    if extra:
        raise ToolConfigError(f"config: chiavi non supportate per {tool}: {', '.join(extra)}")

    opts = dict(base.options)
    for key, v in obj.items():
        if key in ("spec", "tool"):
            continue
        opts[key] = _check_value(tool, key, v)
    return ToolConfig(tool, opts)
