#!/usr/bin/env python3
"""Randomized round-trip smoke tests for the tcodec CLI.

Goal:
- deterministic (seeded) payloads for every tool
- encode then decode through the real CLI (subprocess), compare with the input
- produce a JSON report
- fail fast (non-zero exit) on any mismatch

Usage examples:
  python tools/smoke_roundtrip.py --iters 10
  python tools/smoke_roundtrip.py --iters 50 --seed 123 --json-out smoke.json
"""

from __future__ import annotations

import argparse
import json
import os
import random
import string
import subprocess
import sys
from collections.abc import Callable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

REPO = Path(__file__).resolve().parents[1]

BRAILLE_CHARS = string.ascii_letters + string.digits + " .,?!;:-'\"/"
MORSE_CHARS = string.ascii_uppercase + string.digits + ".,?'!/()&:;=+-_\"$@"


@dataclass
class StepResult:
    name: str
    ok: bool
    rc: int
    stderr: str


def _env() -> dict[str, str]:
    env = dict(os.environ)
    old = env.get("PYTHONPATH", "")
    env["PYTHONPATH"] = str(REPO / "src") + (os.pathsep + old if old else "")
    return env


def _lines(make_line: Callable[[], str], n: int) -> str:
    return "".join(make_line() + "\n" for _ in range(n))


def _braille_text(rng: random.Random) -> str:
    return _lines(
        lambda: "".join(rng.choice(BRAILLE_CHARS) for _ in range(rng.randint(0, 80))),
        rng.randint(1, 5),
    )


def _morse_text(rng: random.Random) -> str:
    def line() -> str:
        words = [
            "".join(rng.choice(MORSE_CHARS) for _ in range(rng.randint(1, 8)))
            for _ in range(rng.randint(1, 10))
        ]
        return " ".join(words)

    return _lines(line, rng.randint(1, 5))


def _letters_text(rng: random.Random, alphabet: str) -> str:
    return _lines(
        lambda: "".join(rng.choice(alphabet) for _ in range(rng.randint(1, 40))),
        rng.randint(1, 4),
    )


def _factoradic_text(rng: random.Random) -> str:
    return _lines(lambda: str(rng.randint(0, 2**64 - 1)), rng.randint(1, 20))


def main() -> int:
    ap = argparse.ArgumentParser(description="tcodec randomized round-trip smoke tests")
    ap.add_argument("--iters", type=int, default=10, help="Number of iterations (default: 10)")
    ap.add_argument("--seed", type=int, default=12345, help="Deterministic RNG seed (default: 12345)")
    ap.add_argument("--max-bytes", type=int, default=4096, help="Max binary payload size (default: 4096)")
    ap.add_argument("--json-out", type=Path, default=None, help="Write JSON report to file")
    ap.add_argument("--python", dest="pyexe", default=sys.executable, help="Python executable to use")
    ns = ap.parse_args()

    rng = random.Random(ns.seed)
    report: dict[str, Any] = {"ok": True, "seed": ns.seed, "iters": ns.iters, "steps": []}

    def run_cli(args: list[str], stdin: bytes) -> subprocess.CompletedProcess[bytes]:
        cmd = [ns.pyexe, "-m", "tcodec", *args]
        return subprocess.run(cmd, input=stdin, capture_output=True, env=_env())

    def add_step(name: str, ok: bool, rc: int, stderr: bytes) -> None:
        step = StepResult(name, ok, rc, stderr.decode("utf-8", "replace"))
        report["steps"].append(asdict(step))
        if not ok:
            report["ok"] = False

    def roundtrip(name: str, args: list[str], payload: bytes, expected: bytes) -> None:
        enc = run_cli(args, payload)
        if enc.returncode != 0:
            add_step(f"{name}_encode", False, enc.returncode, enc.stderr)
            return
        dec = run_cli([*args, "-d"], enc.stdout)
        ok = dec.returncode == 0 and dec.stdout == expected
        add_step(name, ok, dec.returncode, dec.stderr if ok else dec.stderr + b"\n(output differs)")

    for it in range(ns.iters):
        tag = f"it{it:03d}"
        blob = rng.randbytes(rng.randint(0, ns.max_bytes))

        roundtrip(f"{tag}_ascii85", ["ascii85"], blob, blob)
        padded = blob + b"\x00" * 8 + b" " * 4
        roundtrip(f"{tag}_ascii85_zy", ["ascii85", "-z", "-y"], padded, padded)
        roundtrip(f"{tag}_base85", ["base85", "-w", "0"], blob, blob)
        roundtrip(f"{tag}_binary", ["binary"], blob, blob)
        mapping = rng.choice(["ATGC", "AGCT", "CGAT"])
        roundtrip(f"{tag}_dna_{mapping}", ["dna", "-m", mapping, "-c"], blob, blob)

        text = _braille_text(rng)
        roundtrip(f"{tag}_braille", ["braille"], text.encode("utf-8"), text.encode("utf-8"))
        roundtrip(f"{tag}_braille_text", ["braille", "-t"], text.encode("utf-8"), text.encode("utf-8"))

        text = _morse_text(rng)
        roundtrip(f"{tag}_morse", ["morse"], text.encode("utf-8"), text.encode("utf-8"))

        text = _letters_text(rng, string.ascii_uppercase + " ")
        roundtrip(f"{tag}_dancing_men", ["dancing-men"], text.encode("utf-8"), text.encode("utf-8"))

        # leetspeak is not injective: decoding must be stable under re-encoding
        text = _letters_text(rng, string.ascii_lowercase + " ").encode("utf-8")
        level = str(rng.choice([1, 2]))
        first = run_cli(["leetspeak", "-l", level], text)
        back = run_cli(["leetspeak", "-l", level, "-d"], first.stdout)
        again = run_cli(["leetspeak", "-l", level], back.stdout)
        add_step(
            f"{tag}_leetspeak_l{level}",
            first.returncode == 0 and again.returncode == 0 and again.stdout == first.stdout,
            again.returncode,
            again.stderr,
        )

        text = _factoradic_text(rng)
        roundtrip(f"{tag}_factoradic", ["factoradic"], text.encode("utf-8"), text.encode("utf-8"))

    failed = [s["name"] for s in report["steps"] if not s["ok"]]
    report["failed"] = failed

    if ns.json_out:
        ns.json_out.write_text(json.dumps(report, indent=2), encoding="utf-8")

    print(json.dumps({"ok": report["ok"], "steps": len(report["steps"]), "failed": failed}))
    return 0 if report["ok"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
