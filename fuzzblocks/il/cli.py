"""Command-line interface for inspecting and reducing IL programs."""
from __future__ import annotations

import argparse
import logging
import sys

from ..constants import DEFAULT_MAX_ROUNDS
from ..operations import (
    OPERATION_REGISTRY,
    get_registered_operations,
    register_operations,
)
from .analysis import export_graphviz, max_group_depth, print_groups
from .blocks import (
    Block,
    BlockGroup,
    BlockStructureError,
    check_well_formed,
    nesting_depths,
)
from .reducer import minimize
from .serialize import (
    format_program,
    hash_program,
    load_program,
    parse_program,
    write_program,
)
from .verifier import KeepOperationsVerifier

DEFAULT_SRC = (
    "BeginIf; LoadInteger 1; BeginWhileLoop; CallFunction f; EndWhileLoop; "
    "BeginElse; LoadString foo; EndIf; Return"
)


def parse_args(args):
    argp = argparse.ArgumentParser(description="Block structure tools for flat IL programs")

    argp.add_argument("--load", help="Load a program from a text or .json file")
    argp.add_argument(
        "--src",
        default=DEFAULT_SRC,
        help="Inline program, instructions separated by ';'",
    )
    argp.add_argument(
        "--ops",
        metavar="SCHEMA",
        help="Register extra operations, e.g. 'BeginLoop: begin; EndLoop: end'",
    )
    argp.add_argument("--groups", action="store_true", help="List every block group")
    argp.add_argument("--depths", action="store_true", help="Show the nesting depth of each instruction")
    argp.add_argument("--block", type=int, metavar="IDX", help="Show the block delimited at IDX")
    argp.add_argument("--group", type=int, metavar="IDX", help="Show the block group surrounding IDX")
    argp.add_argument("--hash", action="store_true", help="Print the program's SHA-256")
    argp.add_argument("--reduce", action="store_true", help="Nop out every removable instruction")
    argp.add_argument(
        "--keep",
        action="append",
        default=[],
        metavar="OP",
        help="Operation whose instances must survive reduction (repeatable)",
    )
    argp.add_argument(
        "--max-rounds",
        type=int,
        default=DEFAULT_MAX_ROUNDS,
        help="Upper bound on reduction rounds",
    )
    argp.add_argument("--output", metavar="FILE", help="Write the (reduced) program to FILE")
    argp.add_argument("--viz", metavar="OUTPUT", help="Export the nesting tree (.dot or .svg)")
    argp.add_argument("-v", "--verbose", action="store_true", help="Log every reduction attempt")

    return argp.parse_args(args)


def _split_inline(src):
    """Turn an inline program into lines, splitting on ';' outside string arguments."""

    lines = []
    current = []
    in_string = escaped = False
    for ch in src:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == ";":
            lines.append("".join(current))
            current = []
            continue
        current.append(ch)
    lines.append("".join(current))
    return "\n".join(lines)


def _show_block(program, idx):
    if 0 <= idx < len(program) and program[idx].is_block_begin:
        block = Block.starting_at(idx, program)
    else:
        block = Block.ending_at(idx, program)
    print(f"\nBlock at {idx}: {block.begin.op} {block.head}..{block.tail}")
    print(f"  → size: {block.size}")
    print(f"  → body: {block.body()}")


def _show_group(program, idx):
    group = BlockGroup.surrounding(idx, program)
    print(f"\nBlock group surrounding {idx}: {group.begin.op} {group.head}..{group.tail}")
    print(f"  → block instructions: {group.excluding_content()}")
    for block in group.blocks():
        print(f"    • {block.begin.op} {block.head}..{block.tail} ({len(block.body())} inside)")


def main(args):
    params = parse_args(args)
    logging.basicConfig(
        level=logging.DEBUG if params.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    previous_registry = get_registered_operations()
    try:
        return _run(params)
    finally:
        OPERATION_REGISTRY.clear()
        OPERATION_REGISTRY.update(previous_registry)


def _run(params):
    try:
        if params.ops:
            register_operations(params.ops.replace(";", "\n"))
        if params.load:
            program = load_program(params.load)
        else:
            program = parse_program(_split_inline(params.src))
    except ValueError as exc:
        print(f"  ✗ {exc}")
        return 1

    print("Program:")
    try:
        check_well_formed(program)
    except BlockStructureError as exc:
        for idx, instr in enumerate(program):
            print(f"  {idx:4d}  {instr!r}")
        print(f"  ✗ {exc}")
        return 1
    print(format_program(program).rstrip() if len(program) else "  (empty)")
    print(f"  ✓ Well formed, {max_group_depth(program)} level(s) of nesting")

    if params.hash:
        print(f"\nSHA256 = {hash_program(program)}")

    if params.depths:
        print("\nNesting depths:")
        for idx, (depth, instr) in enumerate(zip(nesting_depths(program), program)):
            print(f"  {idx:4d}  {depth}  {instr.op}")

    if params.groups:
        print("\nBlock groups:")
        print_groups(program)

    try:
        if params.block is not None:
            _show_block(program, params.block)
        if params.group is not None:
            _show_group(program, params.group)
    except BlockStructureError as exc:
        print(f"  ✗ {exc}")
        return 1

    if params.reduce:
        try:
            verifier = KeepOperationsVerifier(program, params.keep)
            result = minimize(program, verifier, max_rounds=params.max_rounds)
        except ValueError as exc:
            print(f"  ✗ {exc}")
            return 1
        print("\nReduction:")
        print(f"  → rounds: {result.rounds}")
        print(f"  → attempts: {result.attempts} ({result.accepted} accepted)")
        print(f"  → removed: {result.removed} instruction(s)")
        print(format_program(program).rstrip())

    if params.output:
        write_program(program, params.output)
    if params.viz:
        export_graphviz(program, params.viz)
    return 0


__all__ = [
    "main",
    "parse_args",
]


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main(sys.argv[1:]))
