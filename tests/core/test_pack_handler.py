# tests/core/test_pack_handler.py
import pytest

from htmlpack import app
from htmlpack.core.handlers.pack_handler import expand_inputs, handle_pack, validate_arguments
from htmlpack.core.managers.config_manager import config_manager


@pytest.fixture
def cli_env(tmp_path):
    src = tmp_path / "src"
    out = tmp_path / "out"
    lib = tmp_path / "lib"
    for d in (src, out, lib):
        d.mkdir()
    (lib / "shared.png").write_bytes(bytes([0, 1, 2]))
    (src / "index.html").write_text('<img src="shared.png"><img src="missing.png">', encoding="utf-8")
    return src, out, lib


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Each test sees the packaged defaults, whatever a previous test changed."""
    monkeypatch.setattr(config_manager, "_config", {
        "packer": {"overwrite": False, "stop_on_error": True, "search_paths": []},
        "inliner": {"extra_types": {}},
    })


def test_pack_prints_progress_and_diagnostics(cli_env, capsys):
    src, out, lib = cli_env
    page = str(src / "index.html")

    exit_code = handle_pack([page, "-o", str(out), "-p", str(lib)])

    lines = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert lines == [f"packing {page}", "not found: img src=missing.png"]
    assert "data:image/png;base64,AAEC" in (out / "index.html").read_text(encoding="utf-8")


def test_existing_output_without_overwrite_is_skipped(cli_env, capsys):
    src, out, lib = cli_env
    (out / "index.html").write_text("untouched", encoding="utf-8")

    exit_code = handle_pack([str(src / "index.html"), "-o", str(out), "-p", str(lib)])

    captured = capsys.readouterr().out
    assert exit_code == 0
    assert f"output file already exists: {out / 'index.html'}, use -w to overwrite it" in captured
    assert (out / "index.html").read_text(encoding="utf-8") == "untouched"


def test_overwrite_flag(cli_env):
    src, out, lib = cli_env
    (out / "index.html").write_text("stale", encoding="utf-8")

    assert handle_pack([str(src / "index.html"), "-o", str(out), "-p", str(lib), "-w"]) == 0
    assert "AAEC" in (out / "index.html").read_text(encoding="utf-8")


def test_overwrite_from_configuration(cli_env):
    src, out, lib = cli_env
    (out / "index.html").write_text("stale", encoding="utf-8")
    config_manager.set_nested("packer.overwrite", "true")

    assert handle_pack([str(src / "index.html"), "-o", str(out), "-p", str(lib)]) == 0
    assert "AAEC" in (out / "index.html").read_text(encoding="utf-8")


def test_configured_search_paths_are_appended(cli_env):
    src, out, lib = cli_env
    config_manager.set_nested("packer.search_paths", [str(lib)])

    assert handle_pack([str(src / "index.html"), "-o", str(out)]) == 0
    assert "AAEC" in (out / "index.html").read_text(encoding="utf-8")


def test_missing_input_file_is_rejected(cli_env, capsys):
    _, out, _ = cli_env

    exit_code = handle_pack(["nope.html", "-o", str(out)])

    assert exit_code == 1
    assert 'The file "nope.html" does not exist' in capsys.readouterr().out


def test_missing_search_directory_is_rejected(cli_env, capsys):
    src, out, _ = cli_env

    exit_code = handle_pack([str(src / "index.html"), "-o", str(out), "-p", "no_such_dir"])

    assert exit_code == 1
    assert 'The directory "no_such_dir" does not exist' in capsys.readouterr().out


def test_missing_required_out_dir(cli_env):
    src, _, _ = cli_env
    assert handle_pack([str(src / "index.html")]) == 1


def test_io_error_stops_the_run(cli_env, capsys):
    src, out, lib = cli_env
    (src / "second.html").write_text("<p>two</p>", encoding="utf-8")
    (out / "index.html").mkdir()

    exit_code = handle_pack([str(src / "index.html"), str(src / "second.html"), "-o", str(out), "-w"])

    captured = capsys.readouterr().out
    assert exit_code == 1
    assert "I/O Error" in captured
    assert f"packing {src / 'second.html'}" not in captured
    assert not (out / "second.html").exists()


def test_keep_going_continues_after_io_error(cli_env, capsys):
    src, out, lib = cli_env
    (src / "second.html").write_text("<p>two</p>", encoding="utf-8")
    (out / "index.html").mkdir()

    exit_code = handle_pack([
        str(src / "index.html"), str(src / "second.html"), "-o", str(out), "-w", "--keep-going"
    ])

    captured = capsys.readouterr().out
    assert exit_code == 1
    assert f"❌ {src / 'index.html'}" in captured
    assert (out / "second.html").is_file()


def test_expand_inputs_globs_unexpanded_patterns(tmp_path):
    for name in ("b.html", "a.html", "c.txt"):
        (tmp_path / name).write_text("x")

    expanded = expand_inputs([str(tmp_path / "*.html"), str(tmp_path / "c.txt")])

    assert expanded == [str(tmp_path / "a.html"), str(tmp_path / "b.html"), str(tmp_path / "c.txt")]


def test_validate_arguments_accepts_existing_paths(cli_env):
    src, out, lib = cli_env
    assert validate_arguments([str(src / "index.html")], str(out), [str(lib)]) is None


def test_app_main_configures_logging_and_runs(cli_env, monkeypatch):
    src, out, lib = cli_env
    levels = []
    monkeypatch.setattr(app, "configure_logger", lambda level: levels.append(level))

    exit_code = app.main([str(src / "index.html"), "-o", str(out), "-p", str(lib), "--log-level", "DEBUG"])

    assert exit_code == 0
    assert levels == ["DEBUG"]


def test_progress_flag_keeps_output_and_result(cli_env, capsys):
    src, out, lib = cli_env
    page = str(src / "index.html")

    exit_code = handle_pack([page, "-o", str(out), "-p", str(lib), "--progress"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert captured.out.splitlines() == [f"packing {page}", "not found: img src=missing.png"]
    assert "data:image/png;base64,AAEC" in (out / "index.html").read_text(encoding="utf-8")
