"""
技能校验器

按 Agent Skills 规范检查 SKILL.md 内容和技能目录结构:
- errors: 阻止注册/使用 (缺少 name/description、字段类型错误、解析失败)
- warnings: 不阻止使用 (描述过长、name 非 kebab-case、正文为空或过长等)
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from .errors import SkillParseError, SkillValidationError
from .frontmatter import FrontmatterCodec, frontmatter_codec
from .parser import RESOURCE_DIRS, SKILL_FILE, Skill

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 200
MAX_INSTRUCTIONS_LINES = 500
MAX_REFERENCE_DEPTH = 2

NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

KNOWN_FIELDS = {
    "name",
    "description",
    "license",
    "version",
    "metadata",
    "dependencies",
    "compatibility",
    "disable-model-invocation",
    "mode",
    "allowed-tools",
}


@dataclass
class ValidationResult:
    """校验结果"""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def merge(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }

    def raise_for_errors(self, skill_name: str = "") -> None:
        """有错误时抛出 SkillValidationError"""
        if self.errors:
            raise SkillValidationError(
                "Validation failed: " + "; ".join(self.errors),
                self.errors,
                skill_name=skill_name or None,
            )


class SkillValidator:
    """
    技能校验器

    检查必需字段、字段约束、目录结构和内容规范
    """

    def __init__(self, codec: Optional[FrontmatterCodec] = None):
        self.codec = codec or frontmatter_codec

    def validate(self, content: str) -> ValidationResult:
        """
        校验 SKILL.md 内容

        Args:
            content: SKILL.md 原始内容

        Returns:
            ValidationResult
        """
        result = ValidationResult()

        try:
            parsed = self.codec.parse(content)
        except SkillParseError as e:
            result.errors.append(f"Failed to parse frontmatter: {e}")
            return result

        frontmatter = parsed.metadata
        body = parsed.body

        self._check_name(frontmatter.get("name"), result)
        self._check_description(frontmatter.get("description"), result)
        self._check_body(body, result)
        self._check_optional_fields(frontmatter, result)

        return result

    def _check_name(self, name: Any, result: ValidationResult) -> None:
        if name is None or name == "":
            result.errors.append("Required field 'name' is missing")
            return
        if not isinstance(name, str):
            result.errors.append(f"Field 'name' must be a string (got {type(name).__name__})")
            return
        if len(name) > MAX_NAME_LENGTH:
            result.errors.append(
                f"Name must be at most {MAX_NAME_LENGTH} characters (got {len(name)})"
            )
        if not NAME_PATTERN.match(name):
            result.warnings.append(
                f"Name should be kebab-case (lowercase with hyphens): '{name}'"
            )

    def _check_description(self, description: Any, result: ValidationResult) -> None:
        if description is None or description == "":
            result.errors.append("Required field 'description' is missing")
            return
        if not isinstance(description, str):
            result.errors.append(
                f"Field 'description' must be a string (got {type(description).__name__})"
            )
            return
        if len(description) > MAX_DESCRIPTION_LENGTH:
            result.warnings.append(
                f"Description exceeds recommended {MAX_DESCRIPTION_LENGTH} characters "
                f"(got {len(description)})"
            )

    def _check_body(self, body: str, result: ValidationResult) -> None:
        if not body.strip():
            result.warnings.append("SKILL.md body (instructions) is empty")
            return
        line_count = body.count("\n") + 1
        if line_count > MAX_INSTRUCTIONS_LINES:
            result.warnings.append(
                f"Instructions exceed recommended {MAX_INSTRUCTIONS_LINES} lines "
                f"(got {line_count}). Consider using references/ for detailed content."
            )

    def _check_optional_fields(self, frontmatter: dict, result: ValidationResult) -> None:
        # 空值 (如 "metadata:" 后面什么都没有) 视为未设置
        metadata = frontmatter.get("metadata")
        if metadata is not None and not isinstance(metadata, dict):
            result.errors.append("Metadata must be a mapping (key-value pairs)")
        elif isinstance(metadata, dict):
            tags = metadata.get("tags")
            if tags is not None and not isinstance(tags, list):
                result.warnings.append("metadata.tags should be a list (e.g., [api, testing])")

        dependencies = frontmatter.get("dependencies")
        if dependencies is not None and not isinstance(dependencies, list):
            result.errors.append("Dependencies must be an array")

        compatibility = frontmatter.get("compatibility")
        if compatibility is not None and not isinstance(compatibility, dict):
            result.errors.append("Compatibility must be a mapping")

        version = frontmatter.get("version")
        if version is not None and not isinstance(version, str):
            result.warnings.append("Version should be a string (e.g., '1.0.0')")

        license_ = frontmatter.get("license")
        if license_ is not None and not isinstance(license_, str):
            result.warnings.append("License should be a string (e.g., 'MIT')")

        for flag in ("disable-model-invocation", "mode"):
            value = frontmatter.get(flag)
            if value is not None and not isinstance(value, bool):
                result.warnings.append(f"Field '{flag}' should be a boolean (true/false)")

        for key in frontmatter:
            if key not in KNOWN_FIELDS:
                result.warnings.append(f"Unknown frontmatter field '{key}'")

    def validate_directory(self, path: Union[str, Path]) -> ValidationResult:
        """
        校验技能目录结构

        Args:
            path: 技能目录

        Returns:
            ValidationResult
        """
        skill_dir = Path(path)
        result = ValidationResult()

        if not skill_dir.is_dir():
            result.errors.append(f"Path is not a directory: '{skill_dir}'")
            return result

        skill_file = skill_dir / SKILL_FILE
        if not skill_file.is_file():
            result.errors.append(f"SKILL.md not found in: '{skill_dir}'")
            return result

        try:
            content = skill_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            result.errors.append(f"Cannot read SKILL.md in: '{skill_dir}' ({e})")
            return result

        result.merge(self.validate(content))

        try:
            name = self.codec.parse(content).metadata.get("name")
        except SkillParseError:
            name = None
        if isinstance(name, str) and name and skill_dir.name != name:
            result.warnings.append(
                f"Directory name '{skill_dir.name}' does not match skill name '{name}'"
            )

        for item in sorted(skill_dir.iterdir()):
            if not item.is_dir() or item.name.startswith("."):
                continue
            if item.name not in RESOURCE_DIRS:
                result.warnings.append(
                    f"Unknown directory '{item.name}' found. "
                    f"Standard directories are: scripts/, references/, assets/"
                )

        refs_dir = skill_dir / "references"
        if refs_dir.is_dir() and self._max_depth(refs_dir) > MAX_REFERENCE_DEPTH:
            result.warnings.append(
                f"References are nested deeper than {MAX_REFERENCE_DEPTH} levels. "
                f"Keep file references one level deep from SKILL.md."
            )

        return result

    def _max_depth(self, directory: Path, depth: int = 1) -> int:
        """目录嵌套深度 (references/ 本身为 1)"""
        deepest = depth
        for item in directory.iterdir():
            if item.is_dir():
                deepest = max(deepest, self._max_depth(item, depth + 1))
        return deepest

    def validate_skill(self, skill: Skill) -> ValidationResult:
        """校验内存中的 Skill 对象"""
        result = ValidationResult()
        if not skill.name:
            result.errors.append("Skill name is empty")
        elif len(skill.name) > MAX_NAME_LENGTH:
            result.errors.append(
                f"Name must be at most {MAX_NAME_LENGTH} characters (got {len(skill.name)})"
            )
        if not skill.description:
            result.errors.append("Skill description is empty")
        if not skill.instructions.strip():
            result.warnings.append("Skill instructions are empty")
        return result
