"""命令行测试"""

import pytest
from rich.console import Console
from typer.testing import CliRunner

from skillpack import __version__
from skillpack import main as cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    """避免 CLI 替换测试进程的根日志处理器"""
    monkeypatch.setattr(cli, "setup_logging_from_settings", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli, "_manager", None)
    monkeypatch.setattr(cli, "console", Console(width=200))


def invoke(skills_dir, *args):
    return runner.invoke(cli.app, ["--skills-dir", str(skills_dir), *args])


class TestQueries:
    def test_version(self):
        result = runner.invoke(cli.app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_list(self, sample_skills):
        result = invoke(sample_skills, "list")
        assert result.exit_code == 0
        assert "code-review" in result.output
        assert "api-testing" in result.output

    def test_list_empty(self, skills_dir):
        result = invoke(skills_dir, "list")
        assert result.exit_code == 0
        assert "暂无技能" in result.output

    def test_show(self, sample_skills):
        result = invoke(sample_skills, "show", "code-review")
        assert result.exit_code == 0
        assert "Check naming" in result.output
        assert "review" in result.output

    def test_show_missing(self, sample_skills):
        result = invoke(sample_skills, "show", "missing")
        assert result.exit_code == 1
        assert "Skill not found" in result.output

    def test_search(self, sample_skills):
        result = invoke(sample_skills, "search", "api")
        assert result.exit_code == 0
        assert "api-testing" in result.output
        assert "code-review" not in result.output

    def test_resolve(self, sample_skills):
        result = invoke(sample_skills, "resolve", "please review my code")
        assert result.exit_code == 0
        assert "code-review" in result.output
        assert "0.67" in result.output

    def test_resolve_nothing(self, sample_skills):
        result = invoke(sample_skills, "resolve", "the and of", "--threshold", "0.5")
        assert result.exit_code == 0
        assert "没有相关技能" in result.output

    def test_prompt(self, sample_skills):
        result = invoke(sample_skills, "prompt")
        assert result.exit_code == 0
        assert "## Available Skills" in result.output
        assert "deploy-prod" not in result.output


class TestValidate:
    def test_valid_directory(self, sample_skills):
        result = invoke(sample_skills, "validate", str(sample_skills / "code-review"))
        assert result.exit_code == 0
        assert "校验通过" in result.output

    def test_invalid_file(self, tmp_path, skills_dir):
        skill_file = tmp_path / "SKILL.md"
        skill_file.write_text("---\nname: x\n---\nBody", encoding="utf-8")
        result = invoke(skills_dir, "validate", str(skill_file))
        assert result.exit_code == 1
        assert "description" in result.output

    def test_missing_path(self, tmp_path, skills_dir):
        result = invoke(skills_dir, "validate", str(tmp_path / "nope"))
        assert result.exit_code == 1


class TestLifecycle:
    def test_install_uninstall(self, tmp_path, skills_dir, make_skill):
        source = make_skill(tmp_path / "incoming", "cli-skill", "Installed from the CLI")

        result = invoke(skills_dir, "install", str(source))
        assert result.exit_code == 0
        assert (skills_dir / "cli-skill" / "SKILL.md").is_file()

        result = invoke(skills_dir, "install", str(source))
        assert result.exit_code == 1
        assert "already installed" in result.output

        result = invoke(skills_dir, "uninstall", "cli-skill")
        assert result.exit_code == 0
        assert not (skills_dir / "cli-skill").exists()

    def test_export(self, sample_skills, tmp_path):
        result = invoke(sample_skills, "export", "api-testing", str(tmp_path / "out"))
        assert result.exit_code == 0
        assert (tmp_path / "out" / "api-testing" / "SKILL.md").is_file()

    def test_new(self, skills_dir):
        result = invoke(skills_dir, "new", "fresh-skill", "A fresh skill")
        assert result.exit_code == 0
        skill_dir = skills_dir / "fresh-skill"
        assert (skill_dir / "SKILL.md").is_file()
        assert (skill_dir / "scripts").is_dir()

        result = invoke(skills_dir, "new", "fresh-skill", "Again")
        assert result.exit_code == 1

    def test_new_with_output(self, skills_dir, tmp_path):
        result = invoke(skills_dir, "new", "elsewhere", "Somewhere else", "--output", str(tmp_path))
        assert result.exit_code == 0
        assert (tmp_path / "elsewhere" / "SKILL.md").is_file()
