"""Flat instruction sequences: the in-memory IL program."""
from __future__ import annotations

from copy import deepcopy
import json
from typing import Any, Iterable, Iterator

from ..constants import COMMENT, NOP
from ..operations import OperationSpec, lookup_operation


class Instruction:
    """Single IL instruction: an operation name plus its arguments."""

    __slots__ = ("op", "args", "spec")

    def __init__(self, op: str, args: Iterable[Any] | None = None):
        self.spec: OperationSpec = lookup_operation(op)
        self.op = self.spec.name
        self.args = list(args or [])

    @property
    def is_block_begin(self) -> bool:
        return self.spec.block_begin

    @property
    def is_block_end(self) -> bool:
        return self.spec.block_end

    @property
    def is_block_group_begin(self) -> bool:
        return self.spec.is_block_group_begin

    @property
    def is_block_group_end(self) -> bool:
        return self.spec.is_block_group_end

    @property
    def is_simple(self) -> bool:
        return self.spec.simple

    @property
    def is_nop(self) -> bool:
        return self.op == NOP

    @property
    def is_comment(self) -> bool:
        return self.op == COMMENT

    def __eq__(self, other):
        if not isinstance(other, Instruction):
            return NotImplemented
        return self.op == other.op and self.args == other.args

    def __repr__(self):  # pragma: no cover - representation helper
        if not self.args:
            return self.op
        args = " ".join(
            arg if isinstance(arg, str) else json.dumps(arg) for arg in self.args
        )
        return f"{self.op} {args}"


class Program:
    """In-memory representation of a flat IL program.

    Control flow is encoded by block marker instructions only; the nesting
    they describe is recovered by :mod:`fuzzblocks.il.blocks`.
    """

    def __init__(self, instructions: Iterable[Instruction] | None = None):
        self.instructions: list[Instruction] = list(instructions or [])

    @classmethod
    def from_ops(cls, ops: Iterable[str]) -> "Program":
        program = cls()
        for op in ops:
            program.emit(op)
        return program

    def emit(self, op: str, *args: Any) -> int:
        self.instructions.append(Instruction(op, args))
        return len(self.instructions) - 1

    def clone(self) -> "Program":
        return Program(deepcopy(instr) for instr in self.instructions)

    def replace(self, idx: int, instr: Instruction) -> None:
        if not 0 <= idx < len(self.instructions):
            raise IndexError(f"Instruction index {idx} out of range")
        self.instructions[idx] = instr

    def nop(self, idx: int) -> None:
        """Replace the instruction at ``idx`` with a ``Nop`` keeping the length."""

        self.replace(idx, Instruction(NOP))

    def count(self, op: str) -> int:
        return sum(1 for instr in self.instructions if instr.op == op)

    def ops(self) -> list[str]:
        return [instr.op for instr in self.instructions]

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, idx: int) -> Instruction:
        return self.instructions[idx]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __eq__(self, other):
        if not isinstance(other, Program):
            return NotImplemented
        return self.instructions == other.instructions

    def __repr__(self):  # pragma: no cover - debugging helper
        return "\n".join(map(repr, self.instructions))


__all__ = [
    "Instruction",
    "Program",
]
