"""Tests for ``fuzzblocks.il.cli``."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fuzzblocks import DEFAULT_MAX_ROUNDS, get_registered_operations, load_program  # noqa: E402
from fuzzblocks.il import cli  # noqa: E402


def test_parse_args_defaults():
    params = cli.parse_args([])

    assert params.src == cli.DEFAULT_SRC
    assert params.keep == []
    assert params.max_rounds == DEFAULT_MAX_ROUNDS
    assert not params.reduce
    assert params.block is None


def test_parse_args_repeatable_keep():
    params = cli.parse_args(["--reduce", "--keep", "CallFunction", "--keep", "Return"])
    assert params.reduce
    assert params.keep == ["CallFunction", "Return"]


def test_main_reports_structure(capsys):
    assert cli.main(["--groups", "--depths", "--hash"]) == 0
    out = capsys.readouterr().out

    assert "✓ Well formed, 2 level(s) of nesting" in out
    assert "BeginIf group [0, 5, 7] (2 block(s))" in out
    assert "SHA256 = " in out
    assert "Nesting depths:" in out


def test_main_rejects_malformed_source(capsys):
    assert cli.main(["--src", "BeginIf; LoadInteger 1"]) == 1
    out = capsys.readouterr().out

    assert "✗" in out
    assert "never closed" in out


def test_main_rejects_unknown_operations(capsys):
    assert cli.main(["--src", "Frobnicate"]) == 1
    assert "Unknown operation" in capsys.readouterr().out


def test_main_shows_block_and_group(capsys):
    assert cli.main(["--block", "2", "--group", "3"]) == 0
    out = capsys.readouterr().out

    assert "Block at 2: BeginWhileLoop 2..4" in out
    assert "Block group surrounding 3: BeginWhileLoop 2..4" in out


def test_main_block_precondition(capsys):
    assert cli.main(["--block", "1"]) == 1
    assert "✗" in capsys.readouterr().out


def test_main_reduces_and_writes_output(tmp_path, capsys):
    target = tmp_path / "reduced.json"

    assert cli.main(["--reduce", "--keep", "CallFunction", "--output", str(target)]) == 0
    out = capsys.readouterr().out

    assert "removed: 8 instruction(s)" in out
    reduced = load_program(target)
    assert [instr.op for instr in reduced if not instr.is_nop] == ["CallFunction"]


def test_main_keeps_semicolons_inside_strings(capsys):
    assert cli.main(["--src", 'LoadString "a;b"; Return']) == 0
    out = capsys.readouterr().out

    assert "LoadString a;b" in out
    assert "Return" in out


def test_split_inline_respects_escaped_quotes():
    assert cli._split_inline(r'LoadString "x\";y"; Return') == 'LoadString "x\\";y"\n Return'


def test_main_rejects_unknown_keep(capsys):
    assert cli.main(["--reduce", "--keep", "Bogus"]) == 1
    assert "Unknown operation 'Bogus'" in capsys.readouterr().out


def test_main_loads_files_and_exports_viz(tmp_path, capsys):
    source = tmp_path / "prog.fil"
    source.write_text("BeginForLoop\n  CallFunction g\nEndForLoop\n", encoding="utf-8")
    viz = tmp_path / "nesting.dot"

    assert cli.main(["--load", str(source), "--viz", str(viz)]) == 0

    assert viz.exists()
    assert "1 level(s) of nesting" in capsys.readouterr().out


def test_main_registers_operations_temporarily(capsys):
    args = [
        "--ops",
        "BeginLoop: begin; EndLoop: end",
        "--src",
        "BeginLoop; LoadInteger 1; EndLoop",
        "--groups",
    ]

    assert cli.main(args) == 0
    assert "BeginLoop group [0, 2]" in capsys.readouterr().out
    assert "BeginLoop" not in get_registered_operations()
