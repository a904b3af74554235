"""Operation declarations and the facet registry."""

from dataclasses import dataclass
import json
import re

from .constants import OPS


@dataclass
class OperationSpec:
    """Classification facets of a single IL operation."""

    name: str
    block_begin: bool = False
    block_end: bool = False
    simple: bool = False

    def __post_init__(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValueError("Operation declaration requires a name")
        if not self.name[0].isalpha():
            raise ValueError(f"Operation name must start with a letter: {self.name}")
        self.block_begin = bool(self.block_begin)
        self.block_end = bool(self.block_end)
        self.simple = bool(self.simple)

    @property
    def is_block_group_begin(self):
        return self.block_begin and not self.block_end

    @property
    def is_block_group_end(self):
        return self.block_end and not self.block_begin

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise TypeError("Operation declaration must be built from a mapping")
        return cls(
            data.get("name"),
            block_begin=data.get("block_begin", data.get("begin", False)),
            block_end=data.get("block_end", data.get("end", False)),
            simple=data.get("simple", False),
        )


def _builtin_operations():
    return {name: OperationSpec(name, **flags) for name, flags in OPS.items()}


OPERATION_REGISTRY = _builtin_operations()

_FLAG_NAMES = {"begin": "block_begin", "end": "block_end", "simple": "simple"}

INLINE_OPERATION_PATTERN = re.compile(
    r"^\s*(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*:\s*(?P<flags>[a-z,\s]*)$"
)


def parse_inline_operations(schema):
    """Parse ``Name: begin,end,simple`` lines into declarations."""

    if not schema:
        return []

    declarations = []
    for line in schema.splitlines():
        entry = line.strip()
        if not entry or entry.startswith("#"):
            continue
        match = INLINE_OPERATION_PATTERN.match(entry)
        if not match:
            raise ValueError(f"Invalid inline operation declaration: {entry}")
        flags = {}
        for flag in match.group("flags").split(","):
            flag = flag.strip()
            if not flag:
                continue
            if flag not in _FLAG_NAMES:
                raise ValueError(f"Unknown operation flag '{flag}' in: {entry}")
            flags[_FLAG_NAMES[flag]] = True
        declarations.append(OperationSpec(match.group("name"), **flags))
    return declarations


def _normalize_operations(spec):
    if spec is None:
        return []
    if isinstance(spec, OperationSpec):
        return [spec]
    if isinstance(spec, str):
        trimmed = spec.strip()
        if not trimmed:
            return []
        if trimmed[0] in "[{":
            return _normalize_operations(json.loads(trimmed))
        return parse_inline_operations(trimmed)
    if isinstance(spec, dict):
        if "operations" in spec and isinstance(spec["operations"], list):
            return _normalize_operations(spec["operations"])
        return [OperationSpec.from_dict(spec)]
    if isinstance(spec, (list, tuple)):
        specs = []
        for item in spec:
            specs.extend(_normalize_operations(item))
        return specs
    raise TypeError(f"Unsupported operation spec type: {type(spec)!r}")


def register_operations(spec, *, reset=False):
    """Register one or more operations on top of the built-in table."""

    if reset:
        clear_operation_registry()
    for decl in _normalize_operations(spec):
        if decl.name in OPERATION_REGISTRY:
            raise ValueError(f"Duplicate operation declaration for {decl.name}")
        OPERATION_REGISTRY[decl.name] = decl


def clear_operation_registry():
    """Drop custom registrations, keeping only the built-in operations."""

    OPERATION_REGISTRY.clear()
    OPERATION_REGISTRY.update(_builtin_operations())


def get_registered_operations():
    return dict(OPERATION_REGISTRY)


def lookup_operation(name):
    try:
        return OPERATION_REGISTRY[name]
    except KeyError:
        raise ValueError(f"Unknown operation '{name}'") from None


__all__ = [
    "OperationSpec",
    "OPERATION_REGISTRY",
    "parse_inline_operations",
    "register_operations",
    "clear_operation_registry",
    "get_registered_operations",
    "lookup_operation",
]
