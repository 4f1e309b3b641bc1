"""技能导出器测试"""

import pytest

from skillpack.skills.errors import SkillExportError
from skillpack.skills.exporter import SkillExporter
from skillpack.skills.parser import Skill, SkillMetadata, parse_skill_directory
from skillpack.skills.validator import SkillValidator


@pytest.fixture
def exporter():
    return SkillExporter()


class TestExport:
    def test_export_in_memory_skill(self, exporter, tmp_path):
        skill = Skill(
            metadata=SkillMetadata(
                name="exported",
                description="Exported skill",
                version="1.0",
                metadata={"tags": ["export"]},
            ),
            instructions="# Exported\n\nSteps.",
        )
        skill_dir = exporter.export(skill, tmp_path / "out")

        assert skill_dir == tmp_path / "out" / "exported"
        for kind in ("scripts", "references", "assets"):
            assert (skill_dir / kind).is_dir()

        reloaded = parse_skill_directory(skill_dir)
        assert reloaded.metadata == skill.metadata
        assert reloaded.instructions == skill.instructions

    def test_export_copies_resources(self, exporter, tmp_path, make_skill):
        source_dir = make_skill(tmp_path / "src", "with-files")
        (source_dir / "references").mkdir()
        (source_dir / "references" / "guide.md").write_text("Guide", encoding="utf-8")
        skill = parse_skill_directory(source_dir)

        skill_dir = exporter.export(skill, tmp_path / "out")

        assert (skill_dir / "references" / "guide.md").read_text(encoding="utf-8") == "Guide"
        assert parse_skill_directory(skill_dir).references == ["guide.md"]

    def test_export_onto_itself(self, exporter, tmp_path, make_skill):
        source_dir = make_skill(tmp_path, "same-place")
        (source_dir / "scripts").mkdir()
        (source_dir / "scripts" / "run.sh").write_text("echo", encoding="utf-8")
        skill = parse_skill_directory(source_dir)

        exporter.export(skill, tmp_path)

        assert (source_dir / "scripts" / "run.sh").read_text(encoding="utf-8") == "echo"

    def test_export_failure(self, exporter, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        skill = Skill(metadata=SkillMetadata(name="x", description="y"), instructions="")
        with pytest.raises(SkillExportError):
            exporter.export(skill, blocker)

    @pytest.mark.parametrize("name", ["", ".", "..", "nested/skill"])
    def test_export_rejects_unusable_name(self, exporter, tmp_path, name):
        skill = Skill(metadata=SkillMetadata(name=name, description="d"), instructions="body")
        with pytest.raises(SkillExportError, match="valid directory name"):
            exporter.export(skill, tmp_path / "out")
        assert not (tmp_path / "out").exists()

    def test_export_empty_created_skill(self, exporter, tmp_path):
        with pytest.raises(SkillExportError):
            exporter.export(exporter.create_skill({}), tmp_path)
        assert not (tmp_path / "SKILL.md").exists()

    def test_export_unserializable_metadata(self, exporter, tmp_path):
        skill = exporter.create_skill(
            {
                "name": "odd-keys",
                "description": "Has a key the frontmatter cannot hold",
                "compatibility": {"python version": "3.10"},
            }
        )
        with pytest.raises(SkillExportError, match="odd-keys") as exc_info:
            exporter.export(skill, tmp_path)
        assert exc_info.value.skill_name == "odd-keys"
        assert not (tmp_path / "odd-keys").exists()

    def test_export_many(self, exporter, tmp_path):
        skills = [
            Skill(metadata=SkillMetadata(name=name, description="d"), instructions="body")
            for name in ("one", "two")
        ]
        paths = exporter.export_many(skills, tmp_path)
        assert [path.name for path in paths] == ["one", "two"]


class TestTemplates:
    def test_generate_template_is_valid(self, exporter):
        content = exporter.generate_template("new-skill", "A brand new skill")
        assert content.startswith("---\nname: new-skill\ndescription: A brand new skill\n---\n")
        assert "# new-skill" in content
        assert "Insert your skill instructions here" in content
        assert SkillValidator().validate(content).valid

    def test_create_skill(self, exporter):
        skill = exporter.create_skill(
            {"name": "created", "description": "Made in memory", "instructions": "  Do it.  "}
        )
        assert skill.name == "created"
        assert skill.instructions == "Do it."
        assert skill.path == ""
        assert "instructions" not in skill.metadata.to_dict()

    def test_generate_skill_md(self, exporter):
        skill = Skill(
            metadata=SkillMetadata(name="x", description="y", mode=True), instructions="Body"
        )
        assert exporter.generate_skill_md(skill) == (
            '---\nname: x\ndescription: "y"\nmode: true\n---\n\nBody\n'
        )
