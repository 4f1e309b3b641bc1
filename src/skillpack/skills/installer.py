"""
技能安装器

把技能目录复制到受管技能目录 (安装)，或从中删除 (卸载)，
并同步注册中心。

注意: 复制/删除不是事务性的，中途失败会留下部分目录，不做回滚。
"""

import logging
import shutil
from pathlib import Path
from typing import Optional, Union

from .errors import SkillAlreadyInstalledError, SkillInstallError, SkillNotFoundError
from .frontmatter import frontmatter_codec
from .loader import SkillLoader
from .parser import SKILL_FILE, Skill
from .registry import SkillRegistry
from .validator import SkillValidator

logger = logging.getLogger(__name__)


class SkillInstaller:
    """
    技能安装器

    Args:
        target_path: 受管技能目录
    """

    def __init__(self, target_path: Union[str, Path], validator: Optional[SkillValidator] = None):
        self.target_path = Path(target_path)
        self.validator = validator or SkillValidator()

    def install(
        self,
        source_path: Union[str, Path],
        registry: Optional[SkillRegistry] = None,
    ) -> Skill:
        """
        从源目录安装技能

        Args:
            source_path: 技能源目录
            registry: 可选，安装后注册到该注册中心

        Returns:
            安装后的技能 (从目标目录重新加载)

        Raises:
            SkillNotFoundError: 源目录中没有 SKILL.md
            SkillInstallError: 读取失败、校验失败或复制失败
            SkillAlreadyInstalledError: 目标目录已存在
        """
        source = Path(source_path)
        skill_file = source / SKILL_FILE
        if not skill_file.is_file():
            raise SkillNotFoundError.no_skill_file(str(source))

        try:
            content = skill_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SkillInstallError.install_failed(source.name, "Cannot read SKILL.md") from e

        result = self.validator.validate(content)
        if not result.valid:
            raise SkillInstallError.install_failed(
                source.name, "Validation failed: " + "; ".join(result.errors)
            )

        parsed = frontmatter_codec.parse(content)
        name = str(parsed.metadata.get("name") or source.name)
        if Path(name).name != name or name in (".", ".."):
            raise SkillInstallError.install_failed(name, "Skill name is not a valid directory name")

        dest = self.target_path / name
        if dest.exists():
            raise SkillAlreadyInstalledError.with_name(name)

        logger.info(f"Installing skill '{name}' from {source}")

        try:
            self.target_path.mkdir(parents=True, exist_ok=True)
            shutil.copytree(source, dest)
        except OSError as e:
            raise SkillInstallError.install_failed(name, f"Cannot copy skill directory: {e}") from e

        loader = SkillLoader(self.target_path)
        skill = loader.load_from_path(dest)

        if registry is not None:
            registry.register(skill)

        logger.info(f"Installed skill: {name} -> {dest}")
        return skill

    def uninstall(self, name: str, registry: Optional[SkillRegistry] = None) -> None:
        """
        卸载技能

        Raises:
            SkillNotFoundError: 技能目录不存在
            SkillInstallError: 删除失败
        """
        skill_dir = self.target_path / name
        if not skill_dir.is_dir():
            raise SkillNotFoundError.with_name(name)

        try:
            shutil.rmtree(skill_dir)
        except OSError as e:
            raise SkillInstallError.remove_failed(name, f"Failed to remove skill directory: {e}") from e

        logger.info(f"Removed skill directory: {skill_dir}")

        if registry is not None and registry.has(name):
            registry.unregister(name)

    def is_installed(self, name: str) -> bool:
        """检查技能是否已安装"""
        return (self.target_path / name / SKILL_FILE).is_file()

    def list_installed(self) -> list[str]:
        """列出已安装的技能名称"""
        if not self.target_path.is_dir():
            return []
        return sorted(
            item.name
            for item in self.target_path.iterdir()
            if item.is_dir() and (item / SKILL_FILE).is_file()
        )
