"""Tests for the lexical include scanner."""

from makegraph.parsers.cpp.code_parser import LexicalIncludeScanner, extract_includes

SOURCE = """\
#include "local.h"
#include <stdio.h>
/* #include "commented.h" */
// #include "line.h"
const char *s = "#include \\"string.h\\"";
  #  include "../B/include/foo.h"
"""


def test_extract_includes_ignores_comments_and_strings() -> None:
    """Only real directives are reported, with their line numbers."""
    assert extract_includes(SOURCE) == [
        ("local.h", 1),
        ("stdio.h", 2),
        ("../B/include/foo.h", 6),
    ]


def test_block_comment_keeps_line_numbers() -> None:
    """Multi-line comments do not shift later line numbers."""
    text = '/* first\n   second */\n#include "x.h"\n'

    assert extract_includes(text) == [("x.h", 3)]


def test_include_after_leading_block_comment() -> None:
    """A same-line block comment before the directive does not hide it."""
    text = '/* vendored */ #include "../B/foo.h"\n#include "ok.h"\n'

    assert extract_includes(text) == [("../B/foo.h", 1), ("ok.h", 2)]


def test_scan_skips_excluded_and_nested_projects(make_workspace) -> None:
    """Build dirs and subdirectories with their own Makefile are not scanned."""
    root = make_workspace(
        {
            "A/Makefile": "build:\n",
            "A/src/main.c": '#include "../../B/include/foo.h"\n#include "local.h"\n',
            "A/src/util.c": '#include "local.h"\n',
            "A/src/local.h": "#pragma once\n",
            "A/build/gen.c": '#include "../../C/x.h"\n',
            "A/sub/Makefile": "build:\n",
            "A/sub/s.c": '#include "../nested.h"\n',
            "A/README.md": '#include "not-code.h"\n',
        }
    )

    edges = LexicalIncludeScanner().scan(root / "A", "A")

    assert [(e.include_path, e.source_file, e.line) for e in edges] == [
        ("../../B/include/foo.h", "A/src/main.c", 1),
        ("local.h", "A/src/main.c", 2),
    ]


def test_scan_honours_file_cap(make_workspace) -> None:
    """max_files bounds the number of files read, in walk order."""
    root = make_workspace(
        {
            "P/Makefile": "all:\n",
            "P/a.c": '#include "a.h"\n',
            "P/b.c": '#include "b.h"\n',
        }
    )

    edges = LexicalIncludeScanner(max_files=1).scan(root / "P", "P")

    assert [e.include_path for e in edges] == ["a.h"]


def test_scan_root_project_paths(make_workspace) -> None:
    """Sources of the workspace-root project are reported without a prefix."""
    root = make_workspace({"Makefile": "all:\n", "main.c": '#include "x.h"\n'})

    edges = LexicalIncludeScanner().scan(root, ".")

    assert edges[0].source_file == "main.c"
