"""
技能管理器

技能系统的统一入口，把加载器、注册中心、解析器、校验器、
安装器、导出器和提示词组合器组织在一起:

    manager = SkillManager("./skills")
    skills = manager.resolve("please review my code")
    prompt = SkillPromptComposer().compose(base_prompt, skills)

Agent 每个任务只需要 resolve + compose 两步；
generate_skills_prompt() 用于任务开始前的静态技能清单。
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from ..config import settings
from .composer import SkillPromptComposer
from .errors import SkillNotFoundError, SkillValidationError
from .exporter import SkillExporter
from .installer import SkillInstaller
from .loader import SkillLoader
from .parser import Skill
from .registry import SkillRegistry
from .resolver import ScoredSkill, SkillResolver
from .validator import SkillValidator, ValidationResult

logger = logging.getLogger(__name__)


class SkillManager:
    """
    技能管理器

    负责发现生命周期: 第一次需要技能列表时自动 discover()，
    add_path() 之后会重新发现。
    """

    def __init__(
        self,
        skills_path: Optional[Union[str, Path]] = None,
        *,
        loader: Optional[SkillLoader] = None,
        registry: Optional[SkillRegistry] = None,
        validator: Optional[SkillValidator] = None,
        composer: Optional[SkillPromptComposer] = None,
    ):
        if loader is None:
            loader = SkillLoader(
                skills_path if skills_path is not None else settings.skills_path,
                settings.extra_skill_path_list if skills_path is None else (),
                cache_enabled=settings.skill_cache_enabled,
            )
        self._loader = loader
        self._registry = registry if registry is not None else SkillRegistry()
        self._resolver = SkillResolver(self._registry)
        self._validator = validator or SkillValidator()
        self._composer = composer or SkillPromptComposer()
        self._discovered = False

    # -- 发现 --

    def discover(self) -> list[Skill]:
        """从所有配置目录发现并注册技能"""
        skills = self._loader.load_all()
        self._registry.register_many(skills)
        self._discovered = True
        logger.info(f"Discovered {len(skills)} skills")
        return skills

    def ensure_discovered(self) -> None:
        if not self._discovered:
            self.discover()

    @property
    def discovered(self) -> bool:
        return self._discovered

    def add_path(self, path: Union[str, Path]) -> "SkillManager":
        """添加技能扫描目录 (下次使用时重新发现)"""
        self._loader.add_path(path)
        self._discovered = False
        return self

    # -- 查询 --

    @staticmethod
    def _threshold(threshold: Optional[float]) -> float:
        return settings.resolve_threshold if threshold is None else threshold

    def get(self, name: str) -> Skill:
        """
        按名称获取技能 (未注册时按需从磁盘加载)

        Raises:
            SkillNotFoundError: 技能不存在
        """
        if self._registry.has(name):
            return self._registry.get(name)

        if self._loader.exists(name):
            skill = self._loader.load(name)
            self._registry.register(skill)
            return skill

        raise SkillNotFoundError.with_name(name)

    def resolve(self, input_text: str, threshold: Optional[float] = None) -> list[Skill]:
        """根据用户输入/任务描述解析相关技能"""
        self.ensure_discovered()
        return self._resolver.resolve(input_text, self._threshold(threshold))

    def resolve_one(
        self,
        input_text: str,
        threshold: Optional[float] = None,
    ) -> Optional[Skill]:
        """解析最相关的单个技能"""
        self.ensure_discovered()
        return self._resolver.resolve_one(input_text, self._threshold(threshold))

    def resolve_with_scores(
        self,
        input_text: str,
        threshold: Optional[float] = None,
    ) -> list[ScoredSkill]:
        self.ensure_discovered()
        return self._resolver.resolve_with_scores(input_text, self._threshold(threshold))

    def search(self, query: str) -> dict[str, Skill]:
        """子串搜索"""
        self.ensure_discovered()
        return self._registry.search(query)

    def all(self) -> dict[str, Skill]:
        self.ensure_discovered()
        return self._registry.all()

    def summaries(self) -> dict[str, dict[str, str]]:
        """渐进式披露用的轻量摘要"""
        self.ensure_discovered()
        return self._registry.summaries()

    def count(self) -> int:
        self.ensure_discovered()
        return self._registry.count()

    # -- 注册 --

    def register(self, skill: Skill) -> None:
        """以编程方式注册技能 (不经过文件系统)"""
        self._registry.register(skill)

    def register_from_markdown(self, content: str, path: Union[str, Path] = "") -> Skill:
        """从 SKILL.md 原始内容注册技能"""
        skill = Skill.from_markdown(content, path)
        if not skill.name:
            raise SkillValidationError(
                "Cannot register skill without a name", ["Required field 'name' is missing"]
            )
        self._registry.register(skill)
        return skill

    # -- 校验 --

    def validate(self, content: str) -> ValidationResult:
        return self._validator.validate(content)

    def validate_directory(self, path: Union[str, Path]) -> ValidationResult:
        return self._validator.validate_directory(path)

    # -- 安装/导出 --

    def install(self, source_path: Union[str, Path]) -> Skill:
        """安装技能到受管目录并注册"""
        installer = SkillInstaller(self._loader.skills_path, self._validator)
        return installer.install(source_path, self._registry)

    def uninstall(self, name: str) -> None:
        """从受管目录卸载技能并注销"""
        installer = SkillInstaller(self._loader.skills_path, self._validator)
        installer.uninstall(name, self._registry)
        self._loader.clear_cache()

    def export(self, name: str, target_path: Union[str, Path]) -> Path:
        """导出技能到目标目录"""
        skill = self.get(name)
        return SkillExporter().export(skill, target_path)

    def create(self, data: dict[str, Any]) -> Skill:
        """从原始数据创建技能 (不注册、不落盘)"""
        return SkillExporter().create_skill(data)

    # -- 提示词 --

    def generate_skills_prompt(self) -> str:
        """
        生成系统提示词用的技能清单

        模式命令和普通技能分开列出，禁用自动调用的普通技能不出现。
        没有技能时返回空字符串。
        """
        self.ensure_discovered()

        if not self._registry.count():
            return ""

        entry = SkillPromptComposer.SKILL_ENTRY_TEMPLATE
        lines = [
            "## Available Skills",
            "",
            "The following skills are available. "
            "When a user's request matches a skill, load its full instructions.",
            "",
        ]

        modes = self._registry.get_modes()
        if modes:
            lines.append("### Mode Commands")
            for skill in modes.values():
                lines.append(entry.format(name=skill.name, description=skill.description))
            lines.append("")

        regular = [
            skill for skill in self._registry.get_auto_invocable().values() if not skill.is_mode
        ]
        if regular:
            lines.append("### Skills")
            for skill in regular:
                lines.append(entry.format(name=skill.name, description=skill.description))

        return "\n".join(lines).rstrip() + "\n"

    def compose_prompt(
        self,
        base_prompt: str,
        task: str,
        threshold: Optional[float] = None,
    ) -> str:
        """
        为单个任务组合提示词

        解析相关技能并标记为已加载，注入完整指令；
        其余可自动调用的技能只以索引形式出现。
        """
        skills = self.resolve(task, threshold)
        for skill in skills:
            skill.mark_loaded()
        available = {
            name: skill.summary() for name, skill in self._registry.get_auto_invocable().items()
        }
        return self._composer.compose_with_discovery(base_prompt, skills, available)

    # -- 组件访问 --

    @property
    def registry(self) -> SkillRegistry:
        return self._registry

    @property
    def loader(self) -> SkillLoader:
        return self._loader

    @property
    def validator(self) -> SkillValidator:
        return self._validator

    @property
    def resolver(self) -> SkillResolver:
        return self._resolver

    @property
    def composer(self) -> SkillPromptComposer:
        return self._composer


# 进程级默认实例 (显式初始化，测试时可重置)
_default_manager: Optional[SkillManager] = None


def init_default(skills_path: Optional[Union[str, Path]] = None) -> SkillManager:
    """创建 (或替换) 默认管理器"""
    global _default_manager
    _default_manager = SkillManager(skills_path)
    return _default_manager


def get_default() -> SkillManager:
    """获取默认管理器，尚未初始化时使用配置中的技能目录"""
    if _default_manager is None:
        return init_default()
    return _default_manager


def reset_default() -> None:
    """重置默认管理器"""
    global _default_manager
    _default_manager = None
