"""Shared constant values for fuzzblocks."""

NOP = "Nop"
COMMENT = "Comment"

# Facet flags for the built-in operations. Block markers are never simple.
OPS = {
    NOP: {"simple": True},
    COMMENT: {"simple": True},
    "LoadInteger": {"simple": True},
    "LoadFloat": {"simple": True},
    "LoadString": {"simple": True},
    "LoadBoolean": {"simple": True},
    "LoadUndefined": {"simple": True},
    "LoadNull": {"simple": True},
    "LoadBuiltin": {"simple": True},
    "CreateObject": {"simple": True},
    "CreateArray": {"simple": True},
    "LoadProperty": {"simple": True},
    "StoreProperty": {"simple": True},
    "DeleteProperty": {"simple": True},
    "LoadElement": {"simple": True},
    "StoreElement": {"simple": True},
    "CallFunction": {"simple": True},
    "CallMethod": {"simple": True},
    "Construct": {"simple": True},
    "UnaryOperation": {"simple": True},
    "BinaryOperation": {"simple": True},
    "Compare": {"simple": True},
    "Reassign": {"simple": True},
    "TypeOf": {"simple": True},
    "Return": {"simple": True},
    "Break": {"simple": True},
    "Continue": {"simple": True},
    "ThrowException": {"simple": True},
    "BeginIf": {"block_begin": True},
    "BeginElse": {"block_begin": True, "block_end": True},
    "EndIf": {"block_end": True},
    "BeginWhileLoop": {"block_begin": True},
    "EndWhileLoop": {"block_end": True},
    "BeginDoWhileLoop": {"block_begin": True},
    "EndDoWhileLoop": {"block_end": True},
    "BeginForLoop": {"block_begin": True},
    "EndForLoop": {"block_end": True},
    "BeginForInLoop": {"block_begin": True},
    "EndForInLoop": {"block_end": True},
    "BeginForOfLoop": {"block_begin": True},
    "EndForOfLoop": {"block_end": True},
    "BeginTry": {"block_begin": True},
    "BeginCatch": {"block_begin": True, "block_end": True},
    "BeginFinally": {"block_begin": True, "block_end": True},
    "EndTryCatch": {"block_end": True},
    "BeginFunctionDefinition": {"block_begin": True},
    "EndFunctionDefinition": {"block_end": True},
    "BeginWith": {"block_begin": True},
    "EndWith": {"block_end": True},
}

FORMAT_VERSION = "0.1"
DEFAULT_MAX_ROUNDS = 10
INDENT = "    "

__all__ = [
    "NOP",
    "COMMENT",
    "OPS",
    "FORMAT_VERSION",
    "DEFAULT_MAX_ROUNDS",
    "INDENT",
]
