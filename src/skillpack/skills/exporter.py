"""
技能导出器

安装器的逆操作: 把 Skill 序列化为 SKILL.md + 资源目录，
也用于生成新技能的模板。
"""

import logging
import shutil
from pathlib import Path
from typing import Any, Iterable, Union

from .errors import SkillExportError
from .frontmatter import frontmatter_codec
from .parser import RESOURCE_DIRS, SKILL_FILE, Skill, SkillMetadata

logger = logging.getLogger(__name__)


class SkillExporter:
    """技能导出器"""

    TEMPLATE_BODY = """# {name}

{description}

## When to Use

Insert your skill instructions here. Describe when the agent should apply this skill.

## Instructions

1. First step
2. Second step

## Resources

- `scripts/`: executable helpers referenced by name
- `references/`: detailed documentation loaded on demand
- `assets/`: templates and static files
"""

    def export(self, skill: Skill, target_path: Union[str, Path]) -> Path:
        """
        导出技能到 target_path/<name>/

        Args:
            skill: 技能对象
            target_path: 导出目录

        Returns:
            技能目录路径

        Raises:
            SkillExportError: 名称不是合法目录名、无法序列化、写入或复制失败
        """
        name = skill.name
        if not name or Path(name).name != name or name in (".", ".."):
            raise SkillExportError(
                f"Skill name is not a valid directory name: '{name}'",
                skill_name=name or None,
            )

        try:
            content = self.generate_skill_md(skill)
        except ValueError as e:
            raise SkillExportError(
                f"Cannot serialize skill '{name}': {e}",
                skill_name=name,
            ) from e

        skill_dir = Path(target_path) / name

        try:
            skill_dir.mkdir(parents=True, exist_ok=True)
            (skill_dir / SKILL_FILE).write_text(content, encoding="utf-8")

            for kind in RESOURCE_DIRS:
                (skill_dir / kind).mkdir(exist_ok=True)

            if skill.path:
                self._copy_resources(skill, skill_dir)
        except OSError as e:
            raise SkillExportError(
                f"Failed to export skill '{name}' to {skill_dir}: {e}",
                skill_name=name,
            ) from e

        logger.info(f"Exported skill: {name} -> {skill_dir}")
        return skill_dir

    def _copy_resources(self, skill: Skill, skill_dir: Path) -> None:
        source_root = Path(skill.path)
        if source_root.resolve() == skill_dir.resolve():
            return

        resources = {
            "scripts": skill.scripts,
            "references": skill.references,
            "assets": skill.assets,
        }
        for kind, names in resources.items():
            for name in names:
                source = source_root / kind / name
                dest = skill_dir / kind / name
                if source.is_dir():
                    shutil.copytree(source, dest, dirs_exist_ok=True)
                elif source.is_file():
                    shutil.copy2(source, dest)
                else:
                    logger.warning(f"Resource not found, skipped: {source}")

    def export_many(self, skills: Iterable[Skill], target_path: Union[str, Path]) -> list[Path]:
        """批量导出"""
        return [self.export(skill, target_path) for skill in skills]

    def generate_skill_md(self, skill: Skill) -> str:
        """生成 SKILL.md 内容"""
        return frontmatter_codec.generate_document(skill.metadata.to_dict(), skill.instructions)

    def create_skill(self, data: dict[str, Any]) -> Skill:
        """
        从原始数据创建技能 (仅内存，不落盘)

        Args:
            data: frontmatter 字段 + 可选的 instructions

        Returns:
            Skill
        """
        fields = {key: value for key, value in data.items() if key != "instructions"}
        instructions = str(data.get("instructions") or "").strip()
        return Skill(metadata=SkillMetadata.from_dict(fields), instructions=instructions)

    def generate_template(self, name: str, description: str) -> str:
        """生成新技能的 SKILL.md 模板"""
        body = self.TEMPLATE_BODY.format(name=name, description=description)
        return frontmatter_codec.generate_document(
            {"name": name, "description": description},
            body,
        )
