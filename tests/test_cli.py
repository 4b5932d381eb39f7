import json
import logging
from pathlib import Path

from click.testing import CliRunner

from ramlview.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliBuild:
    def test_build_to_stdout(self):
        runner = CliRunner()
        result = runner.invoke(main, ["build", str(FIXTURES / "users.raml")])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["apiTitle"] == "Users API"
        assert [r["name"] for r in data["apiResources"]] == ["Users", "Teams", "Empty"]

    def test_build_to_file(self, tmp_path):
        output_file = tmp_path / "out" / "view.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "build", str(FIXTURES / "users.raml"),
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        assert output_file.exists()
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert data["apiBaseUri"] == "https://api.example.com/v1/{region}"

    def test_build_without_markdown(self, tmp_path):
        output_file = tmp_path / "view.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "build", str(FIXTURES / "users.raml"),
            "-o", str(output_file),
            "--no-markdown",
        ])

        assert result.exit_code == 0
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert data["apiDescription"] == "Manage **users** of the platform."

    def test_not_raml_exits_with_error(self, tmp_path):
        f = tmp_path / "doc.md"
        f.write_text("# API Docs\nSome text")

        runner = CliRunner()
        result = runner.invoke(main, ["build", str(f)])

        assert result.exit_code == 1
        assert "not a correct RAML file" in result.output


class TestCliEndpoints:
    def test_lists_endpoints(self):
        runner = CliRunner()
        result = runner.invoke(main, ["endpoints", str(FIXTURES / "users.raml")])

        assert result.exit_code == 0
        assert "Users (/users)" in result.output
        assert "  GET /users/{userId}" in result.output
        assert "Found 5 endpoints." in result.output


class TestCliConfig:
    def test_invalid_env_setting_is_a_usage_error(self):
        runner = CliRunner()
        result = runner.invoke(
            main,
            ["build", str(FIXTURES / "users.raml")],
            env={"RAMLVIEW_RENDER_MARKDOWN": "maybe"},
        )

        assert result.exit_code == 2
        assert "render_markdown" in result.output
        assert "Traceback" not in result.output


class TestCliLogging:
    def _levels(self, monkeypatch, args):
        calls = []
        monkeypatch.setattr("ramlview.cli.logging.basicConfig", lambda **kwargs: calls.append(kwargs))
        result = CliRunner().invoke(main, [*args, "endpoints", str(FIXTURES / "users.raml")])
        assert result.exit_code == 0
        return [call["level"] for call in calls]

    def test_warning_by_default(self, monkeypatch):
        assert self._levels(monkeypatch, []) == [logging.WARNING]

    def test_verbose_levels(self, monkeypatch):
        assert self._levels(monkeypatch, ["-v"]) == [logging.INFO]
        assert self._levels(monkeypatch, ["-vv"]) == [logging.DEBUG]
