"""技能管理器测试"""

import pytest

from skillpack.config import settings
from skillpack.skills import (
    SkillManager,
    SkillNotFoundError,
    SkillValidationError,
    get_default,
    init_default,
    reset_default,
)


@pytest.fixture
def manager(sample_skills):
    return SkillManager(sample_skills)


class TestDiscovery:
    """发现生命周期"""

    def test_lazy_discovery(self, manager):
        assert not manager.discovered
        assert manager.count() == 3
        assert manager.discovered

    def test_discover_is_idempotent(self, manager):
        manager.discover()
        manager.discover()
        assert sorted(manager.all()) == ["api-testing", "code-review", "deploy-prod"]

    def test_add_path_rediscover(self, manager, tmp_path, make_skill):
        manager.discover()
        extra = tmp_path / "extra"
        make_skill(extra, "extra-skill")

        manager.add_path(extra)

        assert not manager.discovered
        assert "extra-skill" in manager.all()

    def test_get_loads_on_demand(self, manager):
        skill = manager.get("api-testing")
        assert skill.name == "api-testing"
        assert not manager.discovered
        assert manager.registry.has("api-testing")

    def test_get_missing(self, manager):
        with pytest.raises(SkillNotFoundError):
            manager.get("missing")

    def test_search_and_summaries(self, manager):
        assert list(manager.search("api")) == ["api-testing"]
        assert manager.summaries()["code-review"]["description"].startswith("Review code")


class TestResolve:
    def test_resolve(self, manager):
        assert [skill.name for skill in manager.resolve("please review my code")] == [
            "code-review"
        ]
        assert manager.resolve_one("test my api endpoints").name == "api-testing"

    def test_threshold_from_settings(self, manager, monkeypatch):
        monkeypatch.setattr(settings, "resolve_threshold", 0.9)
        assert manager.resolve("please review my code") == []
        assert manager.resolve("please review my code", threshold=0.5) != []

    def test_resolve_with_scores(self, manager):
        results = manager.resolve_with_scores("review code")
        assert results[0].skill.name == "code-review"
        assert results[0].score == 1.0


class TestSkillsPrompt:
    def test_generate_skills_prompt(self, sample_skills, make_skill):
        make_skill(sample_skills, "plan-mode", "Plan before acting", extra="mode: true")
        prompt = SkillManager(sample_skills).generate_skills_prompt()

        assert prompt.startswith("## Available Skills")
        assert "### Mode Commands\n- **plan-mode**: Plan before acting" in prompt
        assert "### Skills" in prompt
        assert "- **code-review**" in prompt
        assert "- **api-testing**" in prompt
        assert "deploy-prod" not in prompt
        assert prompt.count("plan-mode") == 1

    def test_empty_prompt(self, skills_dir):
        assert SkillManager(skills_dir).generate_skills_prompt() == ""

    def test_compose_prompt(self, manager):
        prompt = manager.compose_prompt("You are an agent.", "please review my code")

        assert prompt.startswith("You are an agent.")
        assert "### Skill: code-review" in prompt
        assert "- **api-testing**: Test REST APIs" in prompt
        assert "deploy-prod" not in prompt
        assert manager.get("code-review").loaded


class TestLifecycle:
    def test_install_and_uninstall(self, manager, tmp_path, make_skill, sample_skills):
        source = make_skill(tmp_path / "incoming", "new-skill", "Brand new")

        skill = manager.install(source)

        assert skill.path == str(sample_skills / "new-skill")
        assert manager.get("new-skill") is skill

        manager.uninstall("new-skill")

        assert not (sample_skills / "new-skill").exists()
        with pytest.raises(SkillNotFoundError):
            manager.get("new-skill")

    def test_export(self, manager, tmp_path):
        path = manager.export("code-review", tmp_path / "exported")
        assert (path / "SKILL.md").is_file()
        assert manager.validate_directory(path).valid

    def test_register_from_markdown(self, manager):
        skill = manager.register_from_markdown("---\nname: inline\ndescription: Inline\n---\nBody")
        assert manager.get("inline") is skill

    def test_register_from_markdown_without_name(self, manager):
        with pytest.raises(SkillValidationError):
            manager.register_from_markdown("---\ndescription: Nameless\n---\nBody")

    def test_create_does_not_register(self, manager):
        skill = manager.create({"name": "temp", "description": "Temporary"})
        assert skill.name == "temp"
        assert not manager.registry.has("temp")


class TestDefaultManager:
    def test_init_and_get(self, sample_skills):
        manager = init_default(sample_skills)
        assert get_default() is manager

    def test_reset(self, sample_skills):
        manager = init_default(sample_skills)
        reset_default()
        assert get_default() is not manager
