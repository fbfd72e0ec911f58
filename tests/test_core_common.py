# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from qdispatch_lib.core.common import (
    join_command,
    quote_token,
    tail_lines,
    to_snake_case,
)


def test_tail_lines_returns_last_lines_without_newlines(tmp_path):
    file = tmp_path / "log"
    file.write_text("".join(f"line {i}\n" for i in range(20)))

    assert tail_lines(file, 3) == ["line 17", "line 18", "line 19"]


def test_tail_lines_short_file(tmp_path):
    file = tmp_path / "log"
    file.write_text("only\n")

    assert tail_lines(file, 10) == ["only"]


def test_tail_lines_empty_file(tmp_path):
    file = tmp_path / "log"
    file.write_text("")

    assert tail_lines(file, 10) == []


def test_tail_lines_replaces_undecodable_bytes(tmp_path):
    file = tmp_path / "log"
    file.write_bytes(b"ok\n\xff\xfe broken\n# Finished with status 0\n")

    lines = tail_lines(file, 2)

    assert lines[-1] == "# Finished with status 0"
    assert "broken" in lines[0]


def test_tail_lines_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        tail_lines(tmp_path / "missing", 10)


@pytest.mark.parametrize(
    "token,expected",
    [
        ("ark:-", "ark:-"),
        ("|", "|"),
        ("two words", '"two words"'),
        ('say "hi" now', "'say \"hi\" now'"),
        ("tab\tinside", '"tab\tinside"'),
    ],
)
def test_quote_token(token, expected):
    assert quote_token(token) == expected


def test_join_command_keeps_shell_constructs():
    tokens = ["gunzip", "-c", "in.gz", "|", "copy-feats", "ark:-", "ark,t:out file"]

    assert (
        join_command(tokens)
        == 'gunzip -c in.gz | copy-feats ark:- "ark,t:out file"'
    )


def test_to_snake_case_replaces_dashes_only():
    assert to_snake_case("max-jobs-run") == "max_jobs_run"
    assert to_snake_case("mem") == "mem"
    assert to_snake_case("Num-Threads") == "Num_Threads"
