import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fuzzblocks import (  # noqa: E402
    BlockReducer,
    GenericInstructionReducer,
    KeepOperationsVerifier,
    PredicateVerifier,
    Program,
    ReductionVerifier,
    clear_operation_registry,
    minimize,
    register_operations,
)


class RecordingVerifier(PredicateVerifier):
    """Predicate verifier that remembers which indices were attempted."""

    def __init__(self, predicate, **kwargs):
        super().__init__(predicate, **kwargs)
        self.seen = []

    def try_nopping(self, index, program):
        self.seen.append(index)
        return super().try_nopping(index, program)


def payload(program):
    return [instr.op for instr in program if not instr.is_nop]


@pytest.fixture
def simple_markers():
    register_operations("BeginLoop: begin,simple\nEndLoop: end,simple")
    try:
        yield
    finally:
        clear_operation_registry()


def test_generic_reducer_nops_simple_instructions_only():
    program = Program.from_ops(
        ["LoadInteger", "BeginIf", "LoadString", "EndIf", "Return"]
    )
    verifier = PredicateVerifier(lambda candidate: True)

    GenericInstructionReducer().reduce(program, verifier)

    assert program.ops() == ["Nop", "BeginIf", "Nop", "EndIf", "Nop"]
    assert verifier.attempts == 3
    assert len(program) == 5


def test_generic_reducer_skips_non_simple_nops_and_comments():
    program = Program.from_ops(
        ["Comment", "Nop", "BeginWhileLoop", "LoadInteger", "EndWhileLoop"]
    )
    before = program.clone()
    verifier = RecordingVerifier(lambda candidate: False)

    GenericInstructionReducer().reduce(program, verifier)

    assert verifier.seen == [3]
    assert program == before


def test_generic_reducer_visits_in_descending_order():
    program = Program.from_ops(["LoadInteger", "CallFunction"])

    def later_removed_first(candidate):
        # instruction 0 may only go once instruction 1 is gone
        return not (candidate[0].is_nop and not candidate[1].is_nop)

    verifier = RecordingVerifier(later_removed_first)

    GenericInstructionReducer().reduce(program, verifier)

    assert verifier.seen == [1, 0]
    assert program.ops() == ["Nop", "Nop"]


def test_generic_reducer_is_idempotent():
    program = Program.from_ops(
        ["LoadInteger", "BeginIf", "CallFunction", "LoadString", "EndIf", "Return"]
    )
    verifier = KeepOperationsVerifier(program, ["CallFunction", "Return"])
    reducer = GenericInstructionReducer()

    reducer.reduce(program, verifier)
    snapshot = program.clone()
    accepted = verifier.accepted

    reducer.reduce(program, verifier)

    assert program == snapshot
    assert verifier.accepted == accepted
    assert payload(program) == ["BeginIf", "CallFunction", "EndIf", "Return"]


def test_generic_reducer_does_not_retry_rejections():
    program = Program.from_ops(["LoadInteger", "LoadInteger"])
    verifier = RecordingVerifier(lambda candidate: False)

    GenericInstructionReducer().reduce(program, verifier)

    assert verifier.seen == [1, 0]
    assert verifier.attempts == 2


def test_well_formedness_guards_simple_block_markers(simple_markers):
    program = Program.from_ops(["BeginLoop", "LoadInteger", "EndLoop"])

    GenericInstructionReducer().reduce(program, PredicateVerifier(lambda c: True))

    assert program.ops() == ["BeginLoop", "Nop", "EndLoop"]


def test_unchecked_verifier_lets_simple_markers_go(simple_markers):
    program = Program.from_ops(["BeginLoop", "LoadInteger", "EndLoop"])
    verifier = PredicateVerifier(lambda c: True, require_well_formed=False)

    GenericInstructionReducer().reduce(program, verifier)

    assert program.ops() == ["Nop", "Nop", "Nop"]


def test_block_reducer_removes_whole_groups():
    program = Program.from_ops(["BeginIf", "LoadInteger", "EndIf", "CallFunction"])
    verifier = KeepOperationsVerifier(program, ["CallFunction"])

    BlockReducer().reduce(program, verifier)

    assert program.ops() == ["Nop", "Nop", "Nop", "CallFunction"]


def test_block_reducer_unwraps_groups_when_content_is_needed():
    program = Program.from_ops(["BeginWhileLoop", "CallFunction", "EndWhileLoop"])
    verifier = KeepOperationsVerifier(program, ["CallFunction"])

    BlockReducer().reduce(program, verifier)

    assert program.ops() == ["Nop", "CallFunction", "Nop"]
    assert verifier.attempts == 2


def test_block_reducer_keeps_required_groups():
    program = Program.from_ops(["BeginWhileLoop", "CallFunction", "EndWhileLoop"])
    before = program.clone()
    verifier = KeepOperationsVerifier(program, ["BeginWhileLoop"])

    BlockReducer().reduce(program, verifier)

    assert program == before


def test_minimize_reaches_a_fixpoint():
    program = Program.from_ops(
        [
            "BeginFunctionDefinition",
            "LoadInteger",
            "BeginIf",
            "BeginTry",
            "ThrowException",
            "BeginCatch",
            "LoadString",
            "EndTryCatch",
            "BeginElse",
            "CallFunction",
            "EndIf",
            "Return",
            "EndFunctionDefinition",
        ]
    )
    verifier = KeepOperationsVerifier(program, ["ThrowException"])

    result = minimize(program, verifier)

    assert result.program is program
    assert payload(program) == ["ThrowException"]
    assert program[4].op == "ThrowException"
    assert result.rounds == 2
    assert result.removed == 12
    assert result.accepted == 7
    assert result.attempts == 12


def test_minimize_respects_round_limit():
    program = Program.from_ops(["BeginIf", "LoadInteger", "EndIf"])
    verifier = PredicateVerifier(lambda c: True)

    result = minimize(program, verifier, reducers=[GenericInstructionReducer()], max_rounds=1)

    assert result.rounds == 1
    assert result.removed == 1

    with pytest.raises(ValueError):
        minimize(program, verifier, max_rounds=0)


def test_custom_verifier_subclass():
    class NeverVerifier(ReductionVerifier):
        def test(self, candidate):
            return False

    program = Program.from_ops(["LoadInteger"])
    result = minimize(program, NeverVerifier())

    assert result.accepted == 0
    assert result.rounds == 1
    assert program.ops() == ["LoadInteger"]
