"""
Tests for the `fix` command.

Verifies in-place rewriting, `--dry-run` diffs, and reporting of findings
that cannot be fixed automatically.
"""

import textwrap

from chainlint.cli.__main__ import main

DIRTY = """
def handler(ctx):
    a = ctx.data.a
    b = ctx.data.b
    c = ctx.data.c
"""

FIXED = """
def handler(ctx):
    _ctx_data = ctx.data
    a = _ctx_data.a
    b = _ctx_data.b
    c = _ctx_data.c
"""


def test_fix_rewrites_file_in_place(write_source, capsys):
  path = write_source("dirty.py", DIRTY)

  assert main(["fix", str(path)]) == 0
  assert path.read_text(encoding="utf-8") == textwrap.dedent(FIXED)
  assert "Fixed" in capsys.readouterr().out


def test_dry_run_prints_diff_and_leaves_file(write_source, capsys):
  path = write_source("dirty.py", DIRTY)

  assert main(["fix", str(path), "--dry-run"]) == 0
  out = capsys.readouterr().out
  assert f"--- a/{path}" in out
  assert "+    _ctx_data = ctx.data\n" in out
  assert "-    a = ctx.data.a\n" in out
  assert path.read_text(encoding="utf-8") == textwrap.dedent(DIRTY)


def test_clean_file_untouched(write_source):
  path = write_source("clean.py", "x = a.b\n")
  before = path.stat().st_mtime_ns

  assert main(["fix", str(path)]) == 0
  assert path.stat().st_mtime_ns == before


def test_crlf_preserved_on_disk(tmp_path):
  path = tmp_path / "win.py"
  path.write_bytes(b"v1 = ctx.data.a\r\nv2 = ctx.data.b\r\nv3 = ctx.data.c\r\n")

  assert main(["fix", str(path)]) == 0
  assert path.read_bytes() == (b"_ctx_data = ctx.data\r\nv1 = _ctx_data.a\r\nv2 = _ctx_data.b\r\nv3 = _ctx_data.c\r\n")


def test_unfixable_findings_listed(write_source, capsys):
  path = write_source("lam.py", "f = lambda p: p.pos.x + p.pos.y + p.pos.z\n")

  assert main(["fix", str(path)]) == 0
  out = capsys.readouterr().out
  assert "Remaining Findings" in out
  assert "p.pos" in out


def test_directory_fix(write_source, tmp_path):
  a = write_source("pkg/a.py", DIRTY)
  b = write_source("pkg/b.py", "x = 1\n")

  assert main(["fix", str(tmp_path / "pkg")]) == 0
  assert "_ctx_data" in a.read_text(encoding="utf-8")
  assert b.read_text(encoding="utf-8") == "x = 1\n"


def test_syntax_error_fails(write_source):
  path = write_source("broken.py", "def broken(:\n")

  assert main(["fix", str(path)]) == 1
  assert path.read_text(encoding="utf-8") == "def broken(:\n"
