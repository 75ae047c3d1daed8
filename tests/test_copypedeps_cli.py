#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import os

import pytest

import copypedeps
from conftest import FakeEnumerator


def _run_main(argv):
    with pytest.raises(SystemExit) as exc:
        copypedeps.main(argv)
    return exc.value.code


@pytest.fixture
def app_tree(tmp_path, write_module, system_root, system32, monkeypatch):
    """app.exe -> libfoo.dll -> libsys.dll (system), with PATH pointing at a vendor folder."""
    app = write_module(tmp_path / "app", "app.exe")
    write_module(tmp_path / "vendor", "libfoo.dll")
    write_module(system32, "libsys.dll")
    enumerator = FakeEnumerator({
        "app.exe": ["libfoo.dll", "api-ms-win-crt-runtime-l1-1-0.dll"],
        "libfoo.dll": ["libsys.dll"],
        "libsys.dll": [],
    })
    monkeypatch.setattr(copypedeps, "PeImportEnumerator", lambda: enumerator)
    monkeypatch.setenv("windir", str(system_root))
    monkeypatch.delenv("SystemRoot", raising=False)
    monkeypatch.setenv("PATH", str(tmp_path / "vendor"))
    dest = tmp_path / "dist"
    dest.mkdir()
    return app, dest, enumerator


@pytest.mark.parametrize("flag", ["-h", "-?"])
def test_help_wins_over_other_arguments(flag, capsys):
    rc = _run_main(["-r", "app.exe", flag, "no-such-folder"])

    assert rc == 0
    assert "usage: copypedeps" in capsys.readouterr().out


def test_too_few_arguments_show_help(capsys):
    rc = _run_main(["app.exe"])

    assert rc == 0
    assert "dstfolder" in capsys.readouterr().out


def test_empty_destination_name(app_tree, capsys):
    app, _, _ = app_tree

    rc = _run_main([str(app), ""])

    assert rc == 1
    assert "[ARG-0010]" in capsys.readouterr().err


def test_missing_destination_folder(app_tree, tmp_path, capsys):
    app, _, _ = app_tree

    rc = _run_main([str(app), str(tmp_path / "nowhere")])

    assert rc == 2
    err = capsys.readouterr().err
    assert "Destination folder not found" in err
    assert str(tmp_path / "nowhere") + os.sep in err


def test_missing_source_is_not_fatal(app_tree, capsys):
    app, dest, _ = app_tree

    rc = _run_main(["-r", "ghost.exe", str(app), str(dest)])

    assert rc == 0
    assert "File not found: ghost.exe" in capsys.readouterr().err
    assert sorted(os.listdir(dest)) == ["libfoo.dll"]


def test_recursive_copy_skips_system_modules(app_tree):
    app, dest, enumerator = app_tree

    rc = _run_main(["-r", str(app), str(dest)])

    assert rc == 0
    assert sorted(os.listdir(dest)) == ["libfoo.dll"]
    assert enumerator.open_count(dest.parent / "vendor" / "libfoo.dll") == 1


def test_non_recursive_copy_does_not_expand_dependencies(app_tree):
    app, dest, enumerator = app_tree

    rc = _run_main([str(app), str(dest)])

    assert rc == 0
    assert sorted(os.listdir(dest)) == ["libfoo.dll"]
    assert enumerator.open_count(dest.parent / "vendor" / "libfoo.dll") == 0


def test_dry_run_prints_actions_only(app_tree, capsys):
    app, dest, _ = app_tree

    rc = _run_main(["-d", str(app), "-r", str(dest)])

    assert rc == 0
    assert os.listdir(dest) == []
    out = capsys.readouterr().out.splitlines()
    source = os.path.abspath(str(dest.parent / "vendor" / "libfoo.dll"))
    assert out == [f"{source} -> {dest}{os.sep}libfoo.dll"]


def test_no_overwrite_reports_existing_file(app_tree, write_module, capsys):
    app, dest, _ = app_tree
    write_module(dest, "libfoo.dll", b"mine")

    rc = _run_main(["-n", str(app), str(dest)])

    assert rc == 0
    assert (dest / "libfoo.dll").read_bytes() == b"mine"
    assert "Not overwriting existing file" in capsys.readouterr().err


def test_verbose_logging_goes_to_stderr(app_tree, capsys):
    app, dest, _ = app_tree

    rc = _run_main(["-v", "-l", str(app), str(dest)])

    assert rc == 0
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[INFO] Copied" in captured.err


def test_unknown_dash_argument_is_a_missing_source(app_tree, capsys):
    app, dest, _ = app_tree

    rc = _run_main(["-x", str(app), str(dest)])

    assert rc == 0
    assert "[ARG-0030] File not found: -x" in capsys.readouterr().err
    assert sorted(os.listdir(dest)) == ["libfoo.dll"]


def test_trailing_dash_argument_is_the_destination(app_tree, capsys):
    app, _, _ = app_tree

    rc = _run_main([str(app), "-out"])

    assert rc == 2
    assert "Destination folder not found: -out" in capsys.readouterr().err


def test_warnings_are_shown_without_verbose(app_tree, write_module, capsys):
    app, dest, _ = app_tree
    write_module(dest, "libfoo.dll", b"mine")

    rc = _run_main(["-l", "-n", str(app), str(dest)])

    assert rc == 0
    err = capsys.readouterr().err
    assert "[WARNING] " in err
    assert "[STG-0010]" in err
    assert "[INFO]" not in err


def test_split_paths_keeps_argument_roles():
    assert copypedeps.split_paths(["a.exe", "-x", "out"], ["a.exe", "out"], ["-x"]) == (["-x", "a.exe"], "out")
    assert copypedeps.split_paths(["a.exe", "-out"], ["a.exe"], ["-out"]) == (["a.exe"], "-out")
    assert copypedeps.split_paths(["-a", "-b", "-v"], [], ["-a", "-b"]) == (["-a"], "-b")
