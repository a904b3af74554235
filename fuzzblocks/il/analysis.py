"""Nesting analysis and export of a program's block structure."""
from __future__ import annotations

from pathlib import Path

import networkx as nx
import pydot

from ..constants import INDENT
from .blocks import find_all_block_groups, nesting_depths

ROOT = "root"


def _group_id(head):
    return f"group:{head}"


def _block_id(block):
    return f"block:{block.head}-{block.tail}"


def _dot_name(name):
    # pydot reads "a:b" as node "a" with port "b".
    return name.replace(":", "_").replace("-", "_")


def _enclosing_blocks(program):
    """Map each group head to the head of the block directly containing it."""

    enclosing = {}
    stack = []  # [group head, head of the block currently open in that group]
    for idx, instr in enumerate(program):
        if instr.is_block_group_begin:
            enclosing[idx] = stack[-1][1] if stack else None
            stack.append([idx, idx])
        elif instr.is_block_end and instr.is_block_begin:
            stack[-1][1] = idx
        elif instr.is_block_group_end:
            stack.pop()
    return enclosing


def group_nesting(program):
    """Map each group head to the head of its innermost enclosing group."""

    groups = find_all_block_groups(program)
    owner = {}
    for group in groups:
        for block in group.blocks():
            owner[block.head] = group.head
    return {
        head: (owner[block_head] if block_head is not None else None)
        for head, block_head in _enclosing_blocks(program).items()
    }


def build_nesting_graph(program):
    """Build the nesting tree of ``program`` as a :class:`networkx.DiGraph`.

    The tree is rooted at ``"root"``. Groups hang below the block (or root)
    containing them, and each group owns one node per block.
    """

    graph = nx.DiGraph()
    graph.add_node(ROOT, kind="root", label="program")

    groups = sorted(find_all_block_groups(program), key=lambda g: g.head)
    block_nodes = {}
    for group in groups:
        gid = _group_id(group.head)
        graph.add_node(
            gid,
            kind="group",
            label=f"{group.begin.op} [{group.head}..{group.tail}]",
            head=group.head,
            tail=group.tail,
            num_blocks=group.num_blocks,
        )
        for block in group.blocks():
            bid = _block_id(block)
            graph.add_node(
                bid,
                kind="block",
                label=f"{block.begin.op} [{block.head}..{block.tail}]",
                head=block.head,
                tail=block.tail,
                body=len(block.body()),
            )
            graph.add_edge(gid, bid)
            block_nodes[block.head] = bid

    for head, block_head in _enclosing_blocks(program).items():
        parent = ROOT if block_head is None else block_nodes[block_head]
        graph.add_edge(parent, _group_id(head))

    return graph


def max_group_depth(program):
    """Return how many block groups are nested at the deepest point."""

    graph = build_nesting_graph(program)
    lengths = nx.single_source_shortest_path_length(graph, ROOT)
    # Each group level adds a group node and a block node below it.
    return (max(lengths.values()) + 1) // 2


def build_pydot_graph(program):
    """Render the nesting tree as a :class:`pydot.Dot` graph."""

    nesting = build_nesting_graph(program)
    graph = pydot.Dot(
        "fuzzblocks_nesting",
        graph_type="digraph",
        rankdir="TB",
        fontname="Helvetica",
    )

    styles = {
        "root": {"shape": "doublecircle", "fillcolor": "#ECEFF1"},
        "group": {"shape": "box", "fillcolor": "#FFE082"},
        "block": {"shape": "box", "fillcolor": "#C5E1A5"},
    }
    for name, data in nesting.nodes(data=True):
        style = styles[data["kind"]]
        graph.add_node(
            pydot.Node(
                _dot_name(name),
                label=data["label"],
                style="filled",
                color="#34495e",
                fontname="Helvetica",
                **style,
            )
        )
    for src, dst in nesting.edges():
        graph.add_edge(pydot.Edge(_dot_name(src), _dot_name(dst), color="#7f8c8d"))
    return graph


def export_graphviz(program, output_path):
    """Export the nesting tree; ``.dot`` paths are written as DOT source."""

    graph = build_pydot_graph(program)
    output_path = Path(output_path)
    if output_path.parent and not output_path.parent.exists():
        output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.suffix == ".dot":
        output_path.write_text(graph.to_string(), encoding="utf-8")
    else:  # pragma: no cover - needs the graphviz binaries
        graph.write_svg(str(output_path))
    print(f"  ✓ Nesting graph exported → {output_path}")
    return output_path


def print_groups(program):
    depths = nesting_depths(program)
    for group in sorted(find_all_block_groups(program), key=lambda g: g.head):
        pad = INDENT * depths[group.head]
        print(f"{pad}{group.begin.op} group {group.block_instructions} ({group.num_blocks} block(s))")
        for block in group.blocks():
            print(f"{pad}  block {block.head}..{block.tail}: {len(block.body())} instruction(s)")


__all__ = [
    "build_nesting_graph",
    "build_pydot_graph",
    "export_graphviz",
    "group_nesting",
    "max_group_depth",
    "print_groups",
]
