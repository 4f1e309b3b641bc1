"""
技能解析器 (相关性排序)

根据用户输入/任务描述，从注册中心挑选相关技能。
渐进式披露的选择策略: 只有分数达到阈值的技能才会加载完整指令。
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .parser import Skill
from .registry import SkillRegistry

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.3


@dataclass(frozen=True)
class ScoredSkill:
    """带分数的技能 (诊断用)"""

    skill: Skill
    score: float


class SkillResolver:
    """
    技能解析器

    只读访问注册中心，禁用自动调用的技能不参与打分。
    相同输入和注册中心状态下结果顺序确定 (同分保持注册顺序)。
    """

    def __init__(self, registry: SkillRegistry):
        self._registry = registry

    def resolve_with_scores(
        self,
        input_text: str,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> list[ScoredSkill]:
        """
        计算所有可自动调用技能的分数

        Args:
            input_text: 用户输入或任务描述
            threshold: 最低分数

        Returns:
            分数 >= threshold 的结果，按分数降序
        """
        scored = []
        for skill in self._registry:
            if not skill.is_auto_invocable:
                continue
            score = skill.relevance_score(input_text)
            if score >= threshold:
                scored.append(ScoredSkill(skill=skill, score=score))

        # sorted 是稳定排序，同分保持注册顺序
        scored = sorted(scored, key=lambda item: item.score, reverse=True)

        if scored:
            logger.debug(
                "Resolved skills: "
                + ", ".join(f"{item.skill.name}={item.score:.2f}" for item in scored)
            )
        return scored

    def resolve(self, input_text: str, threshold: float = DEFAULT_THRESHOLD) -> list[Skill]:
        """按相关性降序返回匹配的技能"""
        return [item.skill for item in self.resolve_with_scores(input_text, threshold)]

    def resolve_one(
        self,
        input_text: str,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> Optional[Skill]:
        """返回最相关的技能，没有匹配时返回 None"""
        results = self.resolve_with_scores(input_text, threshold)
        return results[0].skill if results else None

    def resolve_by_name(self, name: str) -> Optional[Skill]:
        """按名称精确查找 (不打分，也不检查自动调用标记)"""
        if self._registry.has(name):
            return self._registry.get(name)
        return None
