"""Tests for the launchpad CLI."""

import json
import logging

import pytest
from typer.testing import CliRunner

from launchpad import __version__
from launchpad.cli.app import app
from launchpad.framework.logging import configure_logging

runner = CliRunner()

PRINTER_PARAMS = {
    "PrinterColor": "red",
    "PrinterName": "MyCustomPrinter",
    "ScriptName": "Get printers",
}


@pytest.fixture(autouse=True)
def quiet_environment(monkeypatch, tmp_path):
    for key in ("LAUNCHPAD_SMTP_HOST", "LAUNCHPAD_NOTIFY_RECIPIENTS", "LAUNCHPAD_LOG_FORMAT", "LAUNCHPAD_LOG_DIR"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("LAUNCHPAD_LOG_LEVEL", "ERROR")
    monkeypatch.chdir(tmp_path)

    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    configure_logging(level="ERROR", force=True)
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in saved[0]:
        root.addHandler(handler)
    root.setLevel(saved[1])


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("launchpad ")

    def test_package_version(self):
        assert __version__ == "0.1.0"


class TestInspect:
    def test_signature(self, targets):
        result = runner.invoke(app, ["inspect", str(targets / "get_printers.py")])
        assert result.exit_code == 0
        assert "PrinterName" in result.output
        assert "default='A4'" in result.output

    def test_json_with_parameters(self, targets, write_params):
        params = write_params(PRINTER_PARAMS)
        result = runner.invoke(app, ["inspect", str(targets / "get_printers.py"), str(params), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["identity"] == "Get printers"
        assert [slot["value"] for slot in data["arguments"]] == ["MyCustomPrinter", "red", "Get printers", "", "A4"]

    def test_contract_error(self, targets, write_params):
        params = write_params({**PRINTER_PARAMS, "UnknownParameter": "kiwi"})
        result = runner.invoke(app, ["inspect", str(targets / "get_printers.py"), str(params)])
        assert result.exit_code == 1
        assert "UnknownParameter" in result.output


@pytest.mark.integration
class TestRun:
    def test_success_json(self, targets, write_params, tmp_path):
        params = write_params(PRINTER_PARAMS, "get_printers.json")
        result = runner.invoke(
            app,
            ["run", str(targets / "get_printers.py"), str(params), "--artifact-dir", str(tmp_path / "a"), "--json"],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["success"] is True
        assert data["identity"] == "Get printers"
        assert data["output"] == ["MyCustomPrinter", "red", "Get printers", "", "A4"]
        assert list((tmp_path / "a").glob("*_get_printers_get_printers.json"))

    def test_failure_exit_code(self, targets, write_params, tmp_path):
        params = write_params({"PrinterName": "p", "PrinterColor": "red"})
        result = runner.invoke(
            app,
            ["run", str(targets / "get_printers.py"), str(params), "--artifact-dir", str(tmp_path / "a")],
        )
        assert result.exit_code == 1
        assert "MissingScriptName" in result.output
        assert list((tmp_path / "a").glob("*.diagnostic.json"))

    def test_blocked_exit_code(self, targets, write_params, tmp_path):
        params = write_params({"ScriptName": "Drain"})
        result = runner.invoke(
            app,
            ["run", str(targets / "needs_queue.py"), str(params), "--artifact-dir", str(tmp_path / "a")],
        )
        assert result.exit_code == 1
        assert "BlockedLaunch" in result.output
        assert "QueueName" in result.output

    def test_missing_arguments(self):
        result = runner.invoke(app, ["run"])
        assert result.exit_code != 0
