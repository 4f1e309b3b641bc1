"""
技能加载器

遵循 Agent Skills 规范 (agentskills.io/specification)
从标准目录结构加载 SKILL.md 定义的技能
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .errors import SkillError, SkillNotFoundError
from .parser import SKILL_FILE, Skill, SkillParser

logger = logging.getLogger(__name__)

# 标准技能目录 (按优先级排序)
SKILL_DIRECTORIES = [
    # 项目级别
    "skills",
    ".claude/skills",
    ".cursor/skills",
    ".codex/skills",
    # 用户级别 (全局)
    "~/.claude/skills",
    "~/.cursor/skills",
    "~/.codex/skills",
]


def discover_skill_directories(base_path: Optional[Path] = None) -> list[Path]:
    """
    发现所有存在的标准技能目录

    Args:
        base_path: 基础路径 (项目根目录)

    Returns:
        存在的技能目录列表 (按优先级)
    """
    base_path = base_path or Path.cwd()
    directories = []

    for skill_dir in SKILL_DIRECTORIES:
        if skill_dir.startswith("~"):
            path = Path(skill_dir).expanduser()
        else:
            path = base_path / skill_dir

        if path.is_dir():
            directories.append(path)
            logger.debug(f"Found skill directory: {path}")

    return directories


class SkillLoader:
    """
    技能加载器

    支持:
    - 扫描基础目录和附加目录，发现技能
    - 按名称加载单个技能 (带缓存)
    - 廉价的存在性检查

    多个目录中存在同名技能时，按配置顺序第一个加载成功的生效。
    """

    def __init__(
        self,
        skills_path: Union[str, Path],
        additional_paths: Iterable[Union[str, Path]] = (),
        cache_enabled: bool = True,
        parser: Optional[SkillParser] = None,
    ):
        self._skills_path = Path(skills_path)
        self._additional_paths = [Path(p) for p in additional_paths]
        self._cache_enabled = cache_enabled
        self._cache: dict[str, Skill] = {}
        self.parser = parser or SkillParser()

    @classmethod
    def from_standard_directories(
        cls,
        base_path: Optional[Path] = None,
        cache_enabled: bool = True,
    ) -> "SkillLoader":
        """用标准目录创建加载器 (第一个存在的目录作为基础目录)"""
        base_path = base_path or Path.cwd()
        directories = discover_skill_directories(base_path)
        if not directories:
            return cls(base_path / "skills", cache_enabled=cache_enabled)
        return cls(directories[0], directories[1:], cache_enabled=cache_enabled)

    @property
    def skills_path(self) -> Path:
        """基础技能目录 (安装目标目录)"""
        return self._skills_path

    @property
    def paths(self) -> list[Path]:
        """所有扫描目录 (按优先级)"""
        return [self._skills_path, *self._additional_paths]

    @property
    def cache_enabled(self) -> bool:
        return self._cache_enabled

    def load_all(self) -> list[Skill]:
        """
        从所有目录加载技能

        单个技能加载失败只记录日志，不影响其他技能。

        Returns:
            加载成功的技能列表 (每个名称一个)
        """
        skills: dict[str, Skill] = {}

        for base_path in self.paths:
            if not base_path.is_dir():
                logger.debug(f"Skill directory not found: {base_path}")
                continue

            loaded = 0
            for item in sorted(base_path.iterdir()):
                if not item.is_dir() or not (item / SKILL_FILE).is_file():
                    continue

                try:
                    skill = self.parser.parse_directory(item)
                except SkillError as e:
                    logger.error(f"Failed to load skill from {item}: {e}")
                    continue

                if skill.name in skills:
                    logger.debug(
                        f"Skill '{skill.name}' from {item} shadowed by "
                        f"{skills[skill.name].path}"
                    )
                    continue

                skills[skill.name] = skill
                if self._cache_enabled:
                    self._cache[skill.name] = skill
                loaded += 1

            logger.info(f"Loaded {loaded} skills from {base_path}")

        return list(skills.values())

    def load(self, name: str) -> Skill:
        """
        按名称加载技能

        Args:
            name: 技能名称 (即目录名)

        Returns:
            Skill

        Raises:
            SkillNotFoundError: 所有目录中都不存在
        """
        if self._cache_enabled and name in self._cache:
            return self._cache[name]

        for base_path in self.paths:
            skill_dir = base_path / name
            if (skill_dir / SKILL_FILE).is_file():
                return self.load_from_path(skill_dir)

        raise SkillNotFoundError.with_name(name)

    def exists(self, name: str) -> bool:
        """检查技能是否存在 (不解析)"""
        return any((base_path / name / SKILL_FILE).is_file() for base_path in self.paths)

    def load_from_path(self, skill_dir: Union[str, Path]) -> Skill:
        """
        从指定目录加载技能

        Raises:
            SkillNotFoundError: 目录中没有 SKILL.md
            SkillLoadError: 读取或解析失败
        """
        skill = self.parser.parse_directory(Path(skill_dir))

        if self._cache_enabled:
            self._cache[skill.name] = skill

        logger.debug(f"Loaded skill: {skill.name}")
        return skill

    def add_path(self, path: Union[str, Path]) -> "SkillLoader":
        """添加扫描目录 (优先级最低)"""
        self._additional_paths.append(Path(path))
        return self

    def set_cache_enabled(self, enabled: bool) -> "SkillLoader":
        """启用/禁用缓存，禁用时清空缓存"""
        self._cache_enabled = enabled
        if not enabled:
            self._cache.clear()
        return self

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cached_names(self) -> list[str]:
        return list(self._cache)
