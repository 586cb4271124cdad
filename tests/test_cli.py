"""Tests for the pathkeep command line front end."""

from __future__ import annotations

import pytest

from pathkeep.cli import build_parser, main


@pytest.fixture
def project(root):
    (root / "config").mkdir()
    (root / "config" / "app.json").write_text("{}")
    (root / "src").mkdir()
    (root / "src" / "main.py").write_text("")
    return root


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_resolve(project, capsys):
    assert main(["--root", str(project), "resolve", "config", "app.json"]) == 0
    assert capsys.readouterr().out.strip() == str(project / "config" / "app.json")


def test_resolve_in_directory(project, capsys):
    rc = main(["--root", str(project), "--dir", "logs=var/log", "resolve", "--in", "logs", "a.log"])
    assert rc == 0
    assert capsys.readouterr().out.strip() == str(project / "var" / "log" / "a.log")


def test_resolve_url(project, capsys):
    assert main(["--root", str(project), "resolve", "--url", "config"]) == 0
    assert capsys.readouterr().out.strip() == (project / "config").as_uri()


def test_resolve_uses_pk_root(project, capsys, monkeypatch):
    monkeypatch.setenv("PK_ROOT", str(project))
    assert main(["resolve", "src"]) == 0
    assert capsys.readouterr().out.strip() == str(project / "src")


def test_strict_traversal_exits_2(project, capsys):
    rc = main(["--root", str(project), "--strict", "resolve", "..", "etc"])
    assert rc == 2
    assert "boundary violation" in capsys.readouterr().err


def test_strict_from_environment(project, capsys, monkeypatch):
    monkeypatch.setenv("PK_STRICT", "1")
    assert main(["--root", str(project), "resolve", "..", "etc"]) == 2


def test_unknown_directory_exits_1(project, capsys):
    rc = main(["--root", str(project), "resolve", "--in", "cache", "x"])
    assert rc == 1
    err = capsys.readouterr().err
    assert err.startswith("[pathkeep] error:")
    assert "cache" in err


def test_malformed_dir_option_exits_1(project, capsys):
    assert main(["--root", str(project), "--dir", "novalue", "resolve"]) == 1
    assert "KEY=PATH" in capsys.readouterr().err


def test_sanitize(capsys):
    assert main(["sanitize", "CON.txt"]) == 0
    assert capsys.readouterr().out.strip() == "CON_.txt"


def test_sanitize_path_with_options(capsys):
    assert main(["sanitize", "--path", "--replacement", "-", "a/../b:c"]) == 0
    assert capsys.readouterr().out.strip() == "a/b-c"


def test_glob(project, capsys):
    assert main(["--root", str(project), "glob", "**/*.py", "--relative"]) == 0
    assert capsys.readouterr().out.splitlines() == ["src/main.py"]


def test_glob_with_ignore(project, capsys):
    rc = main(["--root", str(project), "glob", "**/*", "--relative", "--ignore", "src/**"])
    assert rc == 0
    assert capsys.readouterr().out.splitlines() == ["config/app.json"]


@pytest.mark.parametrize("target,rc,word", [("config/app.json", 0, "inside"), ("/etc/passwd", 1, "outside")])
def test_check(project, capsys, target, rc, word):
    assert main(["--root", str(project), "check", target]) == rc
    assert capsys.readouterr().out.strip() == word
