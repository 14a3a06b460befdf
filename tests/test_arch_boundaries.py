from __future__ import annotations

import ast
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

PACKAGE_ROOT = "tcodec"

# Dependency direction, lowest first:
#
#   errors  <-  core.*  <-  layers.*  <-  config  <-  cli / __main__
#
# Each rule: modules under `src` must not import anything under `forbidden`.
# tcodec.errors is the exit-code contract and may be imported by anything.
RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("tcodec.errors", ("tcodec.core", "tcodec.layers", "tcodec.config", "tcodec.cli")),
    ("tcodec.core", ("tcodec.layers", "tcodec.config", "tcodec.cli", "tcodec.__main__")),
    ("tcodec.layers", ("tcodec.config", "tcodec.cli", "tcodec.__main__")),
    ("tcodec.config", ("tcodec.cli", "tcodec.__main__")),
)


@dataclass(frozen=True)
class ImportEdge:
    src: str
    dst: str
    file: Path
    lineno: int


def _under(mod: str, prefix: str) -> bool:
    return mod == prefix or mod.startswith(prefix + ".")


def _module_name(src_dir: Path, py_file: Path) -> str | None:
    parts = list(py_file.relative_to(src_dir).parts)
    if not parts or parts[0] != PACKAGE_ROOT:
        return None
    if py_file.name == "__init__.py":
        parts = parts[:-1]
    else:
        parts[-1] = py_file.stem
    return ".".join(parts)


def _absolute(current_mod: str, level: int, module: str | None) -> str | None:
    if level <= 0:
        return module
    base = current_mod.split(".")[:-1]
    if level > len(base) + 1:
        return None
    base = base[: len(base) - level + 1]
    return ".".join(base + module.split(".")) if module else ".".join(base)


def _import_edges(src_dir: Path) -> Iterable[ImportEdge]:
    for py in sorted(src_dir.rglob("*.py")):
        mod = _module_name(src_dir, py)
        if mod is None:
            continue
        tree = ast.parse(py.read_text(encoding="utf-8"), filename=str(py))
        for node in ast.walk(tree):
            targets: list[str] = []
            if isinstance(node, ast.Import):
                targets = [alias.name for alias in node.names]
            elif isinstance(node, ast.ImportFrom):
                base = _absolute(mod, node.level, node.module)
                if base is None:
                    continue
                targets = [base]
                # "from tcodec.core import base85" names submodules
                targets += [f"{base}.{alias.name}" for alias in node.names]
            for dst in targets:
                if _under(dst, PACKAGE_ROOT):
                    yield ImportEdge(mod, dst, py, getattr(node, "lineno", 0))


def _src_dir() -> Path:
    src_dir = Path(__file__).resolve().parents[1] / "src"
    if not src_dir.is_dir():
        raise AssertionError(f"Expected src/ directory at: {src_dir}")
    return src_dir


def test_low_level_modules_do_not_import_upwards() -> None:
    violations: list[ImportEdge] = []
    for edge in _import_edges(_src_dir()):
        for low, forbidden in RULES:
            if _under(edge.src, low) and any(_under(edge.dst, f) for f in forbidden):
                violations.append(edge)

    if violations:
        lines = ["Forbidden imports detected (LOW -> HIGH):"]
        for v in violations:
            lines.append(f"  {v.file}:{v.lineno}  {v.src}  ->  {v.dst}")
        lines.append("")
        lines.append("Fix: move high-level logic out of LOW modules, or invert the dependency.")
        raise AssertionError("\n".join(lines))


def test_only_the_cli_touches_process_streams() -> None:
    """sys.stdin/sys.stdout and signal handling belong to tcodec.cli."""
    offenders: list[str] = []
    for py in sorted((_src_dir() / PACKAGE_ROOT).rglob("*.py")):
        if py.name in ("cli.py", "__main__.py"):
            continue
        tree = ast.parse(py.read_text(encoding="utf-8"), filename=str(py))
        for node in ast.walk(tree):
            if (
                isinstance(node, ast.Attribute)
                and isinstance(node.value, ast.Name)
                and node.value.id == "sys"
                and node.attr in ("stdin", "stdout", "argv")
            ):
                offenders.append(f"{py}:{node.lineno} sys.{node.attr}")
            if isinstance(node, ast.Import) and any(a.name == "signal" for a in node.names):
                offenders.append(f"{py}:{node.lineno} import signal")
    assert not offenders, "\n".join(offenders)
