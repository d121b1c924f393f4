"""Test the command line entry point and version string."""

import sys

import pytest
from linkmark import version
from linkmark.__main__ import main
from linkmark.version import BuildInfo, get_version_string


def run_main(monkeypatch, *args):
    monkeypatch.setattr(sys, 'argv', ['linkmark', *args])
    main()


def test_version_string(monkeypatch):
    monkeypatch.setattr(version, 'get_build_info',
                        lambda: BuildInfo("0.1.0", "abcdef123456", "2026-01-01", True))
    assert get_version_string() == "linkmark 0.1.0 (abcdef1-dirty 2026-01-01)"


def test_version_string_without_build_info(monkeypatch):
    monkeypatch.setattr(version, 'get_build_info', lambda: BuildInfo(None, None, None, False))
    assert get_version_string() == "linkmark unknown (unknown unknown)"


def test_version_flag(monkeypatch, capsys):
    run_main(monkeypatch, '--version')
    assert capsys.readouterr().out.startswith("linkmark ")


def test_help_flag(monkeypatch, capsys):
    run_main(monkeypatch, '-h')
    assert capsys.readouterr().out.startswith("usage: linkmark")


def test_strip_prints_plain_text(monkeypatch, capsys, tmp_path):
    filename = tmp_path / "notes.md"
    filename.write_text("# Notes\n\nsee [docs](http://x)\n", encoding='utf-8')

    run_main(monkeypatch, '--strip', str(filename))

    assert capsys.readouterr().out == "Notes\n\nsee docs\n"


def test_strip_needs_a_file(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc_info:
        run_main(monkeypatch, '--strip')
    assert exc_info.value.code == 2
    assert "usage" in capsys.readouterr().err
