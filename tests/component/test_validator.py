"""技能校验器测试"""

import pytest

from skillpack.skills.errors import SkillValidationError
from skillpack.skills.parser import Skill, SkillMetadata
from skillpack.skills.validator import SkillValidator, ValidationResult


@pytest.fixture
def validator():
    return SkillValidator()


def _doc(frontmatter: str, body: str = "# Body\n\nInstructions.") -> str:
    return f"---\n{frontmatter}\n---\n{body}\n"


class TestValidateContent:
    """SKILL.md 内容校验"""

    def test_valid(self, validator):
        result = validator.validate(_doc("name: good-skill\ndescription: Does good things"))
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_missing_description(self, validator):
        result = validator.validate(_doc("name: x"))
        assert not result.valid
        assert any("description" in error for error in result.errors)

    def test_missing_name(self, validator):
        result = validator.validate(_doc("description: y"))
        assert not result.valid
        assert any("name" in error for error in result.errors)

    def test_long_description_is_warning(self, validator):
        result = validator.validate(_doc(f"name: x\ndescription: {'d' * 250}"))
        assert result.valid
        assert any("200" in warning for warning in result.warnings)

    def test_name_too_long(self, validator):
        result = validator.validate(_doc(f"name: {'a' * 65}\ndescription: y"))
        assert not result.valid

    def test_name_not_kebab_case(self, validator):
        result = validator.validate(_doc("name: My_Skill\ndescription: y"))
        assert result.valid
        assert any("kebab-case" in warning for warning in result.warnings)

    def test_parse_failure_is_error(self, validator):
        result = validator.validate("no frontmatter")
        assert not result.valid
        assert "parse" in result.errors[0]

    def test_empty_body_warning(self, validator):
        result = validator.validate(_doc("name: x\ndescription: y", body=""))
        assert result.valid
        assert any("empty" in warning for warning in result.warnings)

    def test_long_body_warning(self, validator):
        body = "\n".join(f"line {i}" for i in range(600))
        result = validator.validate(_doc("name: x\ndescription: y", body=body))
        assert any("500" in warning for warning in result.warnings)

    def test_field_types(self, validator):
        result = validator.validate(
            _doc("name: x\ndescription: y\nmetadata: text\ndependencies: git\ncompatibility: [a]")
        )
        assert len(result.errors) == 3

    def test_empty_optional_fields_count_as_absent(self, validator):
        result = validator.validate(
            _doc(
                "name: null-meta\ndescription: y\nmetadata:\ndependencies:\n"
                "compatibility:\nversion:\nlicense: ~\nmode:"
            )
        )
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_unknown_field_warning(self, validator):
        result = validator.validate(_doc("name: x\ndescription: y\nfoo: bar"))
        assert result.valid
        assert any("foo" in warning for warning in result.warnings)


class TestValidateDirectory:
    """目录结构校验"""

    def test_not_a_directory(self, validator, tmp_path):
        result = validator.validate_directory(tmp_path / "missing")
        assert not result.valid

    def test_no_skill_file(self, validator, tmp_path):
        result = validator.validate_directory(tmp_path)
        assert not result.valid
        assert "SKILL.md" in result.errors[0]

    def test_valid_directory(self, validator, tmp_path, make_skill):
        skill_dir = make_skill(tmp_path, "dir-skill")
        (skill_dir / "scripts").mkdir()
        (skill_dir / ".git").mkdir()
        result = validator.validate_directory(skill_dir)
        assert result.valid
        assert result.warnings == []

    def test_unknown_directory_warning(self, validator, tmp_path, make_skill):
        skill_dir = make_skill(tmp_path, "dir-skill")
        (skill_dir / "docs").mkdir()
        result = validator.validate_directory(skill_dir)
        assert result.valid
        assert any("docs" in warning for warning in result.warnings)

    def test_directory_name_mismatch(self, validator, tmp_path, make_skill):
        skill_dir = make_skill(tmp_path, "real-name", dir_name="other-name")
        result = validator.validate_directory(skill_dir)
        assert any("does not match" in warning for warning in result.warnings)

    def test_deep_references_warning(self, validator, tmp_path, make_skill):
        skill_dir = make_skill(tmp_path, "deep")
        (skill_dir / "references" / "a" / "b").mkdir(parents=True)
        result = validator.validate_directory(skill_dir)
        assert any("nested" in warning for warning in result.warnings)


class TestValidationResult:
    def test_raise_for_errors(self):
        result = ValidationResult(errors=["bad"], warnings=["meh"])
        with pytest.raises(SkillValidationError) as exc_info:
            result.raise_for_errors("x")
        assert exc_info.value.errors == ["bad"]
        assert exc_info.value.skill_name == "x"

    def test_no_errors_does_not_raise(self):
        ValidationResult(warnings=["meh"]).raise_for_errors()

    def test_to_dict(self):
        assert ValidationResult().to_dict() == {"valid": True, "errors": [], "warnings": []}


class TestValidateSkill:
    def test_in_memory_skill(self, validator):
        skill = Skill(metadata=SkillMetadata(name="", description=""), instructions="")
        result = validator.validate_skill(skill)
        assert len(result.errors) == 2
        assert len(result.warnings) == 1
