"""
技能注册中心

遵循 Agent Skills 规范 (agentskills.io/specification)
存储和管理技能，支持渐进式披露
"""

import logging
from typing import Iterable, Iterator

from .errors import SkillNotFoundError
from .parser import Skill

logger = logging.getLogger(__name__)


class SkillRegistry:
    """
    技能注册中心

    以技能名称为键，每个名称最多一个技能 (重复注册时后注册的覆盖先注册的)。
    提供:
    - 注册/注销
    - 搜索/查找
    - 渐进式披露用的摘要
    """

    def __init__(self):
        self._skills: dict[str, Skill] = {}

    def register(self, skill: Skill) -> None:
        """
        注册技能

        Args:
            skill: 技能对象
        """
        if skill.name in self._skills:
            logger.debug(f"Skill '{skill.name}' already registered, overwriting")

        self._skills[skill.name] = skill
        logger.debug(f"Registered skill: {skill.name}")

    def register_many(self, skills: Iterable[Skill]) -> None:
        """批量注册"""
        for skill in skills:
            self.register(skill)

    def unregister(self, name: str) -> None:
        """
        注销技能

        Raises:
            SkillNotFoundError: 技能不存在
        """
        if name not in self._skills:
            raise SkillNotFoundError.with_name(name)
        del self._skills[name]
        logger.info(f"Unregistered skill: {name}")

    def get(self, name: str) -> Skill:
        """
        获取技能

        Raises:
            SkillNotFoundError: 技能不存在
        """
        try:
            return self._skills[name]
        except KeyError:
            raise SkillNotFoundError.with_name(name) from None

    def has(self, name: str) -> bool:
        """检查技能是否存在"""
        return name in self._skills

    def all(self) -> dict[str, Skill]:
        """所有技能 (按注册顺序)"""
        return dict(self._skills)

    def count(self) -> int:
        return len(self._skills)

    def names(self) -> list[str]:
        return list(self._skills)

    def search(self, query: str) -> dict[str, Skill]:
        """
        搜索技能

        Args:
            query: 搜索词 (子串匹配名称、描述或标签)

        Returns:
            匹配的技能
        """
        return {name: skill for name, skill in self._skills.items() if skill.matches_query(query)}

    def summaries(self) -> dict[str, dict[str, str]]:
        """
        所有技能的摘要 (Level 1)

        用于启动时向 LLM 展示可用技能
        """
        return {name: skill.summary() for name, skill in self._skills.items()}

    def get_auto_invocable(self) -> dict[str, Skill]:
        """允许模型自动调用的技能"""
        return {name: skill for name, skill in self._skills.items() if skill.is_auto_invocable}

    def get_modes(self) -> dict[str, Skill]:
        """模式命令技能"""
        return {name: skill for name, skill in self._skills.items() if skill.is_mode}

    def clear(self) -> None:
        self._skills.clear()

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[Skill]:
        return iter(list(self._skills.values()))

    def __bool__(self) -> bool:
        """确保空 registry 不被误判为 falsy"""
        return True
