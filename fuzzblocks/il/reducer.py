"""Program reducers and the reduction driver."""
from __future__ import annotations

import abc
from dataclasses import dataclass
import logging

from ..constants import DEFAULT_MAX_ROUNDS
from .blocks import find_all_block_groups
from .core import Program
from .verifier import ReductionVerifier

LOG = logging.getLogger(__name__)


class Reducer(abc.ABC):
    """A single reduction strategy applied in place to a program."""

    name = "reducer"

    @abc.abstractmethod
    def reduce(self, program: Program, verifier: ReductionVerifier) -> None:
        """Shrink ``program`` using ``verifier`` to judge every edit."""


class GenericInstructionReducer(Reducer):
    """Removes simple instructions from a program if they are not required.

    Candidates are visited from the last index down to the first, so nopping
    a later instruction never shifts one that is still to be visited.
    """

    name = "instructions"

    def reduce(self, program, verifier):
        for idx in range(len(program) - 1, -1, -1):
            instr = program[idx]
            if not instr.is_simple or instr.is_nop or instr.is_comment:
                continue
            verifier.try_nopping(idx, program)


class BlockReducer(Reducer):
    """Removes whole block groups, or failing that only their block instructions."""

    name = "blocks"

    def reduce(self, program, verifier):
        # Nopping keeps every index stable, so plain index snapshots stay valid.
        snapshots = [
            (group.excluding_content(), group.including_content())
            for group in find_all_block_groups(program)
        ]
        for boundaries, everything in snapshots:
            if not program[boundaries[0]].is_block_group_begin:
                continue
            if verifier.try_nopping_all(everything, program):
                continue
            verifier.try_nopping_all(boundaries, program)


DEFAULT_REDUCERS = (BlockReducer, GenericInstructionReducer)


@dataclass
class ReductionResult:
    """Outcome of :func:`minimize`."""

    program: Program
    rounds: int
    attempts: int
    accepted: int
    removed: int


def _payload_size(program):
    return sum(1 for instr in program if not instr.is_nop)


def minimize(program, verifier, reducers=None, max_rounds=DEFAULT_MAX_ROUNDS):
    """Run ``reducers`` over ``program`` until a full round changes nothing."""

    if max_rounds < 1:
        raise ValueError("max_rounds must be at least 1")
    if reducers is None:
        reducers = [cls() for cls in DEFAULT_REDUCERS]

    initial_size = _payload_size(program)
    attempts_before = verifier.attempts
    accepted_before = verifier.accepted

    rounds = 0
    while rounds < max_rounds:
        rounds += 1
        accepted_at_start = verifier.accepted
        for reducer in reducers:
            LOG.debug("Round %d: running %s reducer", rounds, reducer.name)
            reducer.reduce(program, verifier)
        changed = verifier.accepted - accepted_at_start
        LOG.info(
            "Round %d: %d edit(s) accepted, %d instruction(s) left",
            rounds,
            changed,
            _payload_size(program),
        )
        if not changed:
            break

    return ReductionResult(
        program=program,
        rounds=rounds,
        attempts=verifier.attempts - attempts_before,
        accepted=verifier.accepted - accepted_before,
        removed=initial_size - _payload_size(program),
    )


__all__ = [
    "BlockReducer",
    "DEFAULT_REDUCERS",
    "GenericInstructionReducer",
    "ReductionResult",
    "Reducer",
    "minimize",
]
