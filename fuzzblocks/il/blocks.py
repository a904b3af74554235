"""Blocks and block groups recovered from the flat instruction encoding.

A block is a sequence of instructions which starts at an opening instruction
(``is_block_begin``) and ends at the next closing instruction
(``is_block_end``) of the same nesting depth, for example a loop::

    BeginWhileLoop
        ...
    EndWhileLoop

A block group is a sequence of blocks sharing one opening instruction that
does not close anything and one closing instruction that does not open
anything, for example an if-else statement::

    BeginIf
        ...        ; block 1
    BeginElse
        ...        ; block 2
    EndIf

Both views hold plain indices into a program they do not own. Any edit of the
program invalidates them.
"""
from __future__ import annotations

from typing import Iterator

from .core import Program


class BlockStructureError(ValueError):
    """Base class for block structure violations."""


class MalformedProgramError(BlockStructureError):
    """The program's begin/end markers are unbalanced or inconsistent."""


class PreconditionError(BlockStructureError):
    """A caller passed an index with the wrong facet for the requested query."""


def _require(program: Program, idx: int, facet: str) -> None:
    if not 0 <= idx < len(program):
        raise PreconditionError(
            f"Index {idx} is out of range for a program of {len(program)} instructions"
        )
    if not getattr(program[idx], facet):
        raise PreconditionError(
            f"Instruction {idx} ({program[idx].op}) does not satisfy {facet}"
        )


def find_block_end(start: int, program: Program) -> int:
    """Return the index of the block end matching the block begin at ``start``."""

    _require(program, start, "is_block_begin")

    idx = start + 1
    depth = 1
    while idx < len(program):
        current = program[idx]
        if current.is_block_end:
            depth -= 1
        if depth == 0:
            if not current.is_block_end:
                raise MalformedProgramError(
                    f"Block opened at {start} closes on non-end instruction {idx}"
                )
            return idx
        if current.is_block_begin:
            depth += 1
        idx += 1

    raise MalformedProgramError(f"Block opened at {start} is never closed")


def find_block_begin(end: int, program: Program) -> int:
    """Return the index of the block begin matching the block end at ``end``."""

    _require(program, end, "is_block_end")

    idx = end - 1
    depth = 1
    while idx >= 0:
        current = program[idx]
        if current.is_block_begin:
            depth -= 1
        # Checked before the block-end increment, unlike find_block_group_head.
        if depth == 0:
            if not current.is_block_begin:
                raise MalformedProgramError(
                    f"Block closed at {end} opens on non-begin instruction {idx}"
                )
            return idx
        if current.is_block_end:
            depth += 1
        idx -= 1

    raise MalformedProgramError(f"Block closed at {end} is never opened")


def find_block_group_head(idx: int, program: Program) -> int:
    """Return the head of the block group surrounding ``idx``."""

    if not 0 <= idx < len(program):
        raise PreconditionError(
            f"Index {idx} is out of range for a program of {len(program)} instructions"
        )
    if program[idx].is_block_group_begin:
        return idx

    start = idx
    idx -= 1
    depth = 1
    while idx >= 0:
        current = program[idx]
        if current.is_block_begin:
            depth -= 1
        if current.is_block_end:
            depth += 1
        if depth == 0:
            if not current.is_block_group_begin:
                raise MalformedProgramError(
                    f"Group around {start} opens on non-group-begin instruction {idx}"
                )
            return idx
        idx -= 1

    raise MalformedProgramError(f"No block group surrounds instruction {start}")


def collect_block_group(start: int, program: Program) -> list[int]:
    """Return every block instruction of the group whose head is ``start``."""

    _require(program, start, "is_block_group_begin")

    content = [start]
    idx = start + 1
    depth = 1
    while idx < len(program):
        current = program[idx]
        if current.is_block_end:
            depth -= 1
        if current.is_block_begin:
            if depth == 0:
                content.append(idx)
            depth += 1
        if depth == 0:
            if not current.is_block_group_end:
                raise MalformedProgramError(
                    f"Group opened at {start} closes on non-group-end instruction {idx}"
                )
            content.append(idx)
            return content
        idx += 1

    raise MalformedProgramError(f"Block group opened at {start} is never closed")


def find_all_block_groups(program: Program) -> list["BlockGroup"]:
    """Return all block groups of ``program`` in the order they close."""

    groups = []
    block_stack: list[list[int]] = []
    for idx, instr in enumerate(program):
        if instr.is_block_begin and not instr.is_block_end:
            block_stack.append([idx])
        elif instr.is_block_end:
            if not block_stack:
                raise MalformedProgramError(
                    f"Instruction {idx} ({instr.op}) closes a block that was never opened"
                )
            block_stack[-1].append(idx)
            if not instr.is_block_begin:
                groups.append(BlockGroup(block_stack.pop(), program))

    if block_stack:
        raise MalformedProgramError(
            f"Block group opened at {block_stack[-1][0]} is never closed"
        )
    return groups


def check_well_formed(program: Program) -> None:
    """Raise :class:`MalformedProgramError` unless every marker is balanced."""

    find_all_block_groups(program)


def is_well_formed(program: Program) -> bool:
    try:
        check_well_formed(program)
    except MalformedProgramError:
        return False
    return True


def nesting_depths(program: Program) -> list[int]:
    """Return the nesting depth of each instruction.

    Block instructions are reported at the depth of the level they open or
    close, so ``BeginIf``, ``BeginElse`` and ``EndIf`` of one group share a
    depth.
    """

    depths = []
    depth = 0
    for instr in program:
        if instr.is_block_end:
            depth -= 1
            if depth < 0:
                raise MalformedProgramError(
                    f"Instruction {len(depths)} ({instr.op}) closes a block that was never opened"
                )
        depths.append(depth)
        if instr.is_block_begin:
            depth += 1
    if depth != 0:
        raise MalformedProgramError(f"{depth} block(s) left open at end of program")
    return depths


class Block:
    """One nesting level: a matching begin/end pair and everything in between."""

    __slots__ = ("head", "tail", "program")

    def __init__(self, head: int, tail: int, program: Program):
        self.program = program
        self.head = head
        self.tail = tail

        _require(program, head, "is_block_begin")
        _require(program, tail, "is_block_end")
        if find_block_begin(tail, program) != head or find_block_end(head, program) != tail:
            raise PreconditionError(
                f"Instructions {head} and {tail} do not delimit the same block"
            )

    @classmethod
    def starting_at(cls, head: int, program: Program) -> "Block":
        return cls(head, find_block_end(head, program), program)

    @classmethod
    def ending_at(cls, tail: int, program: Program) -> "Block":
        return cls(find_block_begin(tail, program), tail, program)

    @property
    def size(self) -> int:
        return self.tail - self.head + 1

    @property
    def begin(self):
        return self.program[self.head]

    @property
    def end(self):
        return self.program[self.tail]

    def body(self) -> list[int]:
        """Indices of the instructions strictly inside this block."""

        return list(range(self.head + 1, self.tail))

    def range(self) -> range:
        return range(self.head, self.tail + 1)

    def __eq__(self, other):
        if not isinstance(other, Block):
            return NotImplemented
        return (
            self.program is other.program
            and self.head == other.head
            and self.tail == other.tail
        )

    def __repr__(self):  # pragma: no cover - representation helper
        return f"Block({self.head}..{self.tail})"


class BlockGroup:
    """Sibling blocks sharing one opening and one closing instruction."""

    __slots__ = ("program", "block_instructions")

    def __init__(self, block_instructions: list[int], program: Program):
        self.program = program
        self.block_instructions = list(block_instructions)

        if len(self.block_instructions) < 2:
            raise MalformedProgramError(
                f"A block group needs at least two block instructions, got {self.block_instructions}"
            )
        if not self.begin.is_block_group_begin:
            raise MalformedProgramError(
                f"Block group head {self.head} ({self.begin.op}) is not a group begin"
            )
        if not self.end.is_block_group_end:
            raise MalformedProgramError(
                f"Block group tail {self.tail} ({self.end.op}) is not a group end"
            )

    @classmethod
    def starting_at(cls, head: int, program: Program) -> "BlockGroup":
        return cls(collect_block_group(head, program), program)

    @classmethod
    def surrounding(cls, idx: int, program: Program) -> "BlockGroup":
        return cls.starting_at(find_block_group_head(idx, program), program)

    @property
    def head(self) -> int:
        return self.block_instructions[0]

    @property
    def tail(self) -> int:
        return self.block_instructions[-1]

    @property
    def size(self) -> int:
        return self.tail - self.head + 1

    @property
    def begin(self):
        return self.program[self.head]

    @property
    def end(self):
        return self.program[self.tail]

    @property
    def num_blocks(self) -> int:
        return len(self.block_instructions) - 1

    def block(self, i: int) -> Block:
        return Block(self.block_instructions[i], self.block_instructions[i + 1], self.program)

    def blocks(self) -> Iterator[Block]:
        for i in range(self.num_blocks):
            yield self.block(i)

    def excluding_content(self) -> list[int]:
        return list(self.block_instructions)

    def including_content(self) -> list[int]:
        return list(range(self.head, self.tail + 1))

    def __getitem__(self, i: int) -> int:
        return self.block_instructions[i]

    def __eq__(self, other):
        if not isinstance(other, BlockGroup):
            return NotImplemented
        return (
            self.program is other.program
            and self.block_instructions == other.block_instructions
        )

    def __repr__(self):  # pragma: no cover - representation helper
        return f"BlockGroup({self.block_instructions})"


__all__ = [
    "Block",
    "BlockGroup",
    "BlockStructureError",
    "MalformedProgramError",
    "PreconditionError",
    "check_well_formed",
    "collect_block_group",
    "find_all_block_groups",
    "find_block_begin",
    "find_block_end",
    "find_block_group_head",
    "is_well_formed",
    "nesting_depths",
]
