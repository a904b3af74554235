"""Text and JSON serialization helpers for IL programs."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

from ..constants import FORMAT_VERSION, INDENT
from .blocks import nesting_depths
from .core import Instruction, Program

_DECODER = json.JSONDecoder()


def _scan_arg(entry, pos):
    """Read one argument starting at ``entry[pos]``, returning ``(value, end)``.

    A JSON value is taken whole, so strings and containers may hold spaces.
    Anything else runs up to the next whitespace and stays a bare string.
    """

    try:
        value, stop = _DECODER.raw_decode(entry, pos)
    except json.JSONDecodeError:
        stop = None
    if stop is not None and (stop == len(entry) or entry[stop].isspace()):
        return value, stop
    if entry[pos] == '"':
        raise ValueError(f"Malformed string argument at column {pos + 1}")
    stop = pos
    while stop < len(entry) and not entry[stop].isspace():
        stop += 1
    return entry[pos:stop], stop


def _parse_args(text):
    args = []
    pos = 0
    while pos < len(text):
        if text[pos].isspace():
            pos += 1
            continue
        value, pos = _scan_arg(text, pos)
        args.append(value)
    return args


def _format_arg(arg):
    # Bare strings must read back as the same string.
    if (
        isinstance(arg, str)
        and arg
        and not arg.startswith('"')
        and not any(ch.isspace() for ch in arg)
        and _parse_args(arg) == [arg]
    ):
        return arg
    return json.dumps(arg, separators=(",", ":"))


def parse_program(text):
    """Parse the line-oriented text format into a :class:`Program`.

    Each non-blank line holds one instruction, ``Op arg arg ...``. Lines
    starting with ``#`` are skipped and indentation is ignored. Arguments are
    JSON values where they parse as one and bare strings otherwise.
    """

    program = Program()
    for lineno, line in enumerate(text.splitlines(), start=1):
        entry = line.strip()
        if not entry or entry.startswith("#"):
            continue
        op, *rest = entry.split(None, 1)
        try:
            program.emit(op, *_parse_args(rest[0] if rest else ""))
        except ValueError as exc:
            raise ValueError(f"Line {lineno}: {exc}") from exc
    return program


def format_program(program):
    """Render ``program`` in the text format, indented by nesting depth."""

    lines = []
    for depth, instr in zip(nesting_depths(program), program):
        parts = [instr.op] + [_format_arg(arg) for arg in instr.args]
        lines.append(f"{INDENT * depth}{' '.join(parts)}")
    return "\n".join(lines) + ("\n" if lines else "")


def program_to_dict(program):
    return {
        "fuzzblocks_version": FORMAT_VERSION,
        "instructions": [
            {"op": instr.op, "args": list(instr.args)} for instr in program
        ],
    }


def program_from_dict(doc):
    if not isinstance(doc, dict) or "instructions" not in doc:
        raise ValueError("Program document missing 'instructions'")
    return Program(
        Instruction(entry["op"], entry.get("args", [])) for entry in doc["instructions"]
    )


def hash_program(program):
    """Return the SHA-256 digest of the canonical JSON form of ``program``."""

    canonical = json.dumps(program_to_dict(program)["instructions"], sort_keys=True)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def write_program(program, filename):
    """Persist ``program`` as JSON (``.json``) or in the text format."""

    path = Path(filename)
    if path.suffix == ".json":
        path.write_text(json.dumps(program_to_dict(program), indent=2), encoding="utf-8")
    else:
        path.write_text(format_program(program), encoding="utf-8")
    print(f"  ✓ Program written → {path}")
    return path


def load_program(filename):
    path = Path(filename)
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return program_from_dict(json.loads(text))
    return parse_program(text)


__all__ = [
    "format_program",
    "hash_program",
    "load_program",
    "parse_program",
    "program_from_dict",
    "program_to_dict",
    "write_program",
]
