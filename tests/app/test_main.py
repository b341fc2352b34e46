"""Tests for the command-line entry point."""

import json
import logging
import plistlib

import pytest

from app.main import build_parser, main
from tests.fixtures.archive import MISSING


@pytest.fixture
def run(tmp_path):
    """Invoke main() with an isolated (absent) config file."""

    def _run(*argv):
        return main(["--config", str(tmp_path / "absent.yml"), *argv])

    return _run


@pytest.fixture
def container(archive_builder, write_container):
    archive_builder.item(service="Example", login="alice")
    archive_builder.item(service="Old", archived=True)
    return write_container(archive_builder)


def test_json_to_stdout(run, container, capsys):
    assert run(str(container)) == 0
    data = json.loads(capsys.readouterr().out)
    assert [item["Service"] for item in data] == ["Example"]


def test_include_archived_flag(run, container, capsys):
    assert run("-a", str(container)) == 0
    data = json.loads(capsys.readouterr().out)
    assert [item["Archived"] for item in data] == [False, True]


def test_html_flag(run, container, capsys):
    assert run("--html", str(container)) == 0
    out = capsys.readouterr().out
    assert out.startswith("<!DOCTYPE html>")
    assert "<h2>Example (alice)</h2>" in out


def test_format_option(run, container, capsys):
    assert run("--format", "html", str(container)) == 0
    assert "<html>" in capsys.readouterr().out


def test_output_file(run, container, tmp_path, capsys):
    target = tmp_path / "export.json"
    assert run("-o", str(target), str(container)) == 0
    assert capsys.readouterr().out == ""
    assert json.loads(target.read_text(encoding="utf-8"))[0]["Login"] == "alice"


def test_unwritable_output(run, container, tmp_path, caplog):
    target = tmp_path / "missing-dir" / "export.json"
    assert run("-o", str(target), str(container)) == 1
    assert "Error writing JSON" in caplog.text


def test_missing_container(run, tmp_path, capsys, caplog):
    assert run(str(tmp_path / "nope.plist")) == 1
    assert capsys.readouterr().out == ""
    assert "Could not read plist" in caplog.text
    assert any(record.levelno == logging.ERROR for record in caplog.records)


def test_graph_error_produces_no_output(run, archive_builder, write_container, capsys, caplog):
    archive_builder.item(service="Good")
    archive_builder.members.append(plistlib.UID(9999))
    path = write_container(archive_builder)

    assert run(str(path)) == 1
    assert capsys.readouterr().out == ""
    assert "out of bounds" in caplog.text


def test_missing_field_names_field(run, archive_builder, write_container, caplog):
    archive_builder.item(itemURLString=MISSING)
    assert run(str(write_container(archive_builder))) == 1
    assert "itemURLString" in caplog.text


def test_config_file_settings(tmp_path, container, capsys):
    config = tmp_path / "config.yml"
    config.write_text(
        f"container_path: {container}\ninclude_archived: true\n", encoding="utf-8"
    )
    assert main(["--config", str(config)]) == 0
    assert len(json.loads(capsys.readouterr().out)) == 2


def test_flags_override_config(tmp_path, container, capsys):
    config = tmp_path / "config.yml"
    config.write_text("output_format: html\n", encoding="utf-8")
    assert main(["--config", str(config), "--format", "json", str(container)]) == 0
    assert json.loads(capsys.readouterr().out)


def test_invalid_config(tmp_path, caplog):
    config = tmp_path / "config.yml"
    config.write_text("output_format: pdf\n", encoding="utf-8")
    assert main(["--config", str(config)]) == 1
    assert "pdf" in caplog.text


def test_invalid_log_level(run, container, caplog):
    assert run("--log-level", "chatty", str(container)) == 1
    assert "Unknown logging level" in caplog.text


def test_html_and_format_are_exclusive():
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["--html", "--format", "json"])
    assert excinfo.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("lockdown-export ")


def test_non_integer_log_size(tmp_path, container, capsys, caplog):
    config = tmp_path / "config.yml"
    config.write_text("logging:\n  max_mb: lots\n", encoding="utf-8")
    assert main(["--config", str(config), str(container)]) == 1
    assert capsys.readouterr().out == ""
    assert "max_mb" in caplog.text


def test_quoted_include_archived_rejected(tmp_path, container, capsys, caplog):
    config = tmp_path / "config.yml"
    config.write_text('include_archived: "false"\n', encoding="utf-8")
    assert main(["--config", str(config), str(container)]) == 1
    assert capsys.readouterr().out == ""
    assert "include_archived" in caplog.text


def test_unusable_log_dir(tmp_path, container, capsys, caplog):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    config = tmp_path / "config.yml"
    config.write_text(f"logging:\n  log_dir: {blocker / 'logs'}\n", encoding="utf-8")

    assert main(["--config", str(config), str(container)]) == 1
    assert capsys.readouterr().out == ""
    assert "Could not set up log file" in caplog.text
