"""Tests for the layout command line."""
import shutil

import pytest
import yaml
from typer.testing import CliRunner

from layout import __version__
from layout.cli import app

runner = CliRunner()

requires_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="requires a POSIX shell")


def flat(output: str) -> str:
    """Console output with line wrapping undone."""
    return " ".join(output.split())


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "config" / "layout.yaml"


class TestMainHelp:
    """Test main CLI help output."""

    def test_main_help(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "layout - project generator from templates" in result.output
        for command in ("new", "show", "set", "version"):
            assert command in result.output

    def test_new_help(self):
        result = runner.invoke(app, ["new", "--help"])
        assert result.exit_code == 0
        assert "--ask-once" in result.output
        assert "--disable-cleanup" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestConfigCommands:
    """Test `show` and `set`."""

    def test_show_config_file(self, config_file):
        result = runner.invoke(app, ["show", "config-file", "--config", str(config_file)])
        assert result.exit_code == 0
        assert str(config_file) in result.output

    def test_show_config_file_from_env(self, config_file):
        result = runner.invoke(app, ["show", "config-file"], env={"LAYOUT_CONFIG": str(config_file)})
        assert str(config_file) in result.output

    def test_set_and_show(self, config_file):
        cfg = ["--config", str(config_file)]
        assert runner.invoke(app, ["set", "default", "https://git.example.com/{0}.git", *cfg]).exit_code == 0
        assert runner.invoke(app, ["set", "abbreviation", "gl", "git@gitlab.com:{0}.git", *cfg]).exit_code == 0
        assert runner.invoke(app, ["set", "git", "native", *cfg]).exit_code == 0
        assert runner.invoke(app, ["set", "value", "year", "2024", *cfg]).exit_code == 0
        assert runner.invoke(app, ["set", "value", "author", "alice", *cfg]).exit_code == 0

        saved = yaml.safe_load(config_file.read_text())
        assert saved == {
            "default": "https://git.example.com/{0}.git",
            "abbreviations": {"gl": "git@gitlab.com:{0}.git"},
            "git": "native",
            "values": {"year": 2024, "author": "alice"},
        }

        result = runner.invoke(app, ["show", "config", *cfg])
        assert result.exit_code == 0
        assert yaml.safe_load(result.output) == saved

    def test_set_unknown_git_mode(self, config_file):
        result = runner.invoke(app, ["set", "git", "embedded", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "unknown git mode" in flat(result.output)
        assert not config_file.exists()

    def test_show_invalid_config(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("git: embedded\n")
        result = runner.invoke(app, ["show", "config", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "Error:" in result.output


@requires_sh
class TestNewCommand:
    """Test `layout new` with local layouts and the line-based UI."""

    def test_new_with_defaults(self, project_a, tmp_path, config_file):
        dest = tmp_path / "svc"
        result = runner.invoke(
            app,
            ["new", str(project_a), str(dest), "--ui", "simple", "--config", str(config_file)],
            input="\n\n\n",
        )

        assert result.exit_code == 0, result.output
        assert (dest / "README.md").read_text().startswith("# demo\n")
        assert (dest / "after.txt").exists()
        assert "Project generated in" in flat(result.output)

    def test_global_values_from_config(self, project_a, tmp_path, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("values:\n  author: alice\n")
        dest = tmp_path / "svc"

        result = runner.invoke(
            app,
            ["new", str(project_a), str(dest), "-u", "simple", "-c", str(config_file)],
            input="\n\n\n",
        )

        assert result.exit_code == 0, result.output
        assert "Author: alice" in (dest / "README.md").read_text()

    def test_source_from_layout_file(self, project_a, tmp_path, config_file, monkeypatch):
        work = tmp_path / "work"
        work.mkdir()
        (work / ".layout").write_text(f"{project_a}\n")
        monkeypatch.chdir(work)

        result = runner.invoke(
            app, ["new", "--ui", "simple", "--config", str(config_file)], input="\n\n\n",
        )

        assert result.exit_code == 0, result.output
        assert (work / "README.md").exists()

    def test_missing_source(self, tmp_path, config_file, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["new", "--ui", "simple", "--config", str(config_file)])
        assert result.exit_code == 1
        assert ".layout" in result.output

    def test_version_override(self, project_a, tmp_path, config_file):
        dest = tmp_path / "svc"
        result = runner.invoke(
            app,
            ["new", str(project_a), str(dest), "--ui", "simple", "--version", "2.0.0", "--config", str(config_file)],
        )
        assert result.exit_code == 1
        assert "requires another version" in flat(result.output)
        assert not dest.exists()

    def test_ask_once(self, project_a, tmp_path, config_file):
        dest = tmp_path / "svc"
        result = runner.invoke(
            app,
            ["new", str(project_a), str(dest), "--ui", "simple", "--ask-once", "--config", str(config_file)],
            input="\nnot-a-port\n8080\n\n",
        )
        assert result.exit_code == 1
        assert "invalid syntax" in flat(result.output)

    def test_end_of_input_is_interruption(self, project_a, tmp_path, config_file):
        dest = tmp_path / "svc"
        result = runner.invoke(
            app,
            ["new", str(project_a), str(dest), "--ui", "simple", "--config", str(config_file)],
            input="",
        )
        assert result.exit_code == 130

    def test_cleanup_on_failure(self, write_manifest, tmp_path, config_file):
        write_manifest("broken", "after:\n  - run: exit 1\n", {"a.txt": "a"})
        dest = tmp_path / "svc"

        result = runner.invoke(
            app, ["new", str(tmp_path / "broken"), str(dest), "--ui", "simple", "--config", str(config_file)],
        )

        assert result.exit_code == 1
        assert not dest.exists()

    def test_disable_cleanup(self, write_manifest, tmp_path, config_file):
        write_manifest("broken", "after:\n  - run: exit 1\n", {"a.txt": "a"})
        dest = tmp_path / "svc"

        result = runner.invoke(
            app,
            ["new", str(tmp_path / "broken"), str(dest), "--ui", "simple", "-D", "--config", str(config_file)],
        )

        assert result.exit_code == 1
        assert (dest / "a.txt").read_text() == "a"

    def test_existing_destination_kept(self, write_manifest, tmp_path, config_file):
        write_manifest("broken", "after:\n  - run: exit 1\n", {"a.txt": "a"})
        dest = tmp_path / "existing"
        dest.mkdir()
        (dest / "mine.txt").write_text("mine")

        result = runner.invoke(
            app, ["new", str(tmp_path / "broken"), str(dest), "--ui", "simple", "--config", str(config_file)],
        )

        assert result.exit_code == 1
        assert (dest / "mine.txt").read_text() == "mine"

    def test_unknown_ui(self, project_a, tmp_path, config_file):
        result = runner.invoke(
            app, ["new", str(project_a), str(tmp_path / "svc"), "--ui", "fancy", "--config", str(config_file)],
        )
        assert result.exit_code == 2
