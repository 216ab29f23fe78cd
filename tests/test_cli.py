"""Tests for the simple-storage command line interface."""

import json
from io import StringIO

import pytest
from rich.console import Console

from simple_storage.cli.cli import main
from simple_storage.cli.cli_parser import setup_argument_parser
from simple_storage.cli.commands import parse_value


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"logging": {"log_level": "WARNING", "log_to_file": False}}))
    return path


@pytest.fixture
def run(tmp_path, config_path):
    """Run the CLI against a temporary data directory, capturing output"""

    def _run(*argv):
        output = StringIO()
        console = Console(file=output, width=120, color_system=None)
        code = main(
            ["--data-dir", str(tmp_path / "data"), "--config", str(config_path), *argv],
            console=console,
        )
        return code, output.getvalue()

    return _run


class TestParser:
    """Argument parsing"""

    def test_set_with_raw_flag(self):
        args = setup_argument_parser().parse_args(["set", "prefs", "theme", "1", "--raw"])

        assert args.command == "set"
        assert (args.table, args.key, args.value, args.raw) == ("prefs", "theme", "1", True)

    def test_command_required(self):
        with pytest.raises(SystemExit):
            setup_argument_parser().parse_args([])

    @pytest.mark.parametrize(
        "text,raw,expected",
        [
            ('{"a": 1}', False, {"a": 1}),
            ("42", False, 42),
            ("null", False, None),
            ("plain words", False, "plain words"),
            ("42", True, "42"),
        ],
    )
    def test_parse_value(self, text, raw, expected):
        assert parse_value(text, raw=raw) == expected


class TestCommands:
    """End-to-end commands"""

    def test_set_get_remove(self, run):
        code, out = run("set", "prefs", "theme", '{"dark": true}')
        assert code == 0
        assert "Added prefs[theme]" in out

        code, out = run("set", "prefs", "theme", '"light"')
        assert code == 0
        assert "Updated prefs[theme]" in out

        code, out = run("get", "prefs", "theme")
        assert code == 0
        assert '"light"' in out

        code, out = run("remove", "prefs", "theme")
        assert code == 0
        assert "Removed prefs[theme]" in out

        code, out = run("remove", "prefs", "theme")
        assert code == 1
        assert "not found" in out

    def test_get_missing(self, run):
        code, out = run("get", "prefs", "nothing")

        assert code == 1
        assert "not found" in out

    def test_has_exit_codes(self, run):
        assert run("has", "prefs", "k")[0] == 1

        run("set", "prefs", "k", "null")
        code, out = run("has", "prefs", "k")

        assert code == 0
        assert "yes" in out

    def test_info(self, run, tmp_path):
        run("set", "prefs", "k", "1")
        run("set", "other", "k", "2")

        code, out = run("info")

        assert code == 0
        assert "delete" in out
        assert "OK" in out
        assert "other, prefs" in out

    def test_info_without_store(self, run, tmp_path):
        code, out = run("info")

        assert code == 1
        assert "No store at" in out
        assert not (tmp_path / "data" / "simple_storage.sqlite").exists()

    def test_invalid_table(self, run):
        code, out = run("set", "sqlite_master", "k", "1")

        assert code == 1
        assert "Error:" in out

    def test_unusable_data_dir(self, tmp_path, config_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        output = StringIO()

        code = main(
            ["--data-dir", str(blocker), "--config", str(config_path), "get", "t", "k"],
            console=Console(file=output, width=120, color_system=None),
        )

        assert code == 1
        assert "Failed to open the storage file" in output.getvalue()

    def test_bad_config_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{")
        output = StringIO()

        code = main(
            ["--config", str(path), "has", "t", "k"],
            console=Console(file=output, width=120, color_system=None),
        )

        assert code == 1
        assert "Error:" in output.getvalue()
