"""Reduction verifiers: the oracles deciding whether a removal is kept."""
from __future__ import annotations

import abc
import logging
from typing import Callable, Iterable

from ..operations import lookup_operation
from .blocks import is_well_formed
from .core import Program

LOG = logging.getLogger(__name__)


class ReductionVerifier(abc.ABC):
    """Judge tentative edits of a program and commit the accepted ones.

    Every attempt is made on a clone. Only when :meth:`test` accepts it are the
    same indices nopped in the caller's program, so a rejected attempt (or one
    whose test raises) leaves the program untouched and other instructions keep
    their identity.
    """

    def __init__(self):
        self.attempts = 0
        self.accepted = 0

    @abc.abstractmethod
    def test(self, candidate: Program) -> bool:
        """Return ``True`` when ``candidate`` is still acceptable."""

    def try_nopping(self, index: int, program: Program) -> bool:
        """Replace ``program[index]`` with a ``Nop`` if the result stays valid."""

        return self.try_nopping_all([index], program)

    def try_nopping_all(self, indices: Iterable[int], program: Program) -> bool:
        indices = [idx for idx in indices if not program[idx].is_nop]
        if not indices:
            return False

        candidate = program.clone()
        for idx in indices:
            candidate.nop(idx)

        self.attempts += 1
        if not self.test(candidate):
            LOG.debug("Rejected nop of %s", indices)
            return False

        for idx in indices:
            program.nop(idx)
        self.accepted += 1
        LOG.debug("Committed nop of %s", indices)
        return True


class PredicateVerifier(ReductionVerifier):
    """Accept candidates that are well formed and satisfy ``predicate``."""

    def __init__(self, predicate: Callable[[Program], bool], *, require_well_formed=True):
        super().__init__()
        self.predicate = predicate
        self.require_well_formed = require_well_formed

    def test(self, candidate: Program) -> bool:
        if self.require_well_formed and not is_well_formed(candidate):
            return False
        return bool(self.predicate(candidate))


class KeepOperationsVerifier(PredicateVerifier):
    """Accept candidates that keep every instance of the named operations."""

    def __init__(self, program: Program, ops: Iterable[str], **kwargs):
        self.required = {
            lookup_operation(op).name: program.count(op) for op in ops
        }
        super().__init__(self._keeps_required, **kwargs)

    def _keeps_required(self, candidate: Program) -> bool:
        return all(candidate.count(op) >= n for op, n in self.required.items())


__all__ = [
    "KeepOperationsVerifier",
    "PredicateVerifier",
    "ReductionVerifier",
]
