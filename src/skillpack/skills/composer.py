"""
技能提示词组合器

渐进式披露在提示词层面的实现:
- 已加载的技能: 注入完整指令 + 资源清单 (Active Skills)
- 未加载的技能: 只注入 name + description 索引 (Available Skills)
"""

import logging
from typing import Iterable, Mapping

from .parser import Skill

logger = logging.getLogger(__name__)


class SkillPromptComposer:
    """技能提示词组合器"""

    ACTIVE_HEADER = "## Active Skills"

    INDEX_TEMPLATE = """## Available Skills

The following skills are available. When a user's request matches a skill's description, load its full instructions before acting.

{skill_list}"""

    SKILL_ENTRY_TEMPLATE = "- **{name}**: {description}"

    def compose(self, base_prompt: str, skills: Iterable[Skill]) -> str:
        """
        把技能指令追加到基础提示词

        Args:
            base_prompt: 基础系统提示词
            skills: 已加载的技能

        Returns:
            组合后的提示词 (没有技能时原样返回)
        """
        skills = list(skills)
        if not skills:
            return base_prompt

        return base_prompt + "\n\n" + self.build_skills_section(skills)

    def build_skills_section(self, skills: Iterable[Skill]) -> str:
        """生成 Active Skills 段落"""
        parts = [self.ACTIVE_HEADER, ""]
        for skill in skills:
            parts.append(self._format_skill(skill))
        return "\n".join(parts).rstrip() + "\n"

    def _format_skill(self, skill: Skill) -> str:
        lines = [
            f"### Skill: {skill.name}",
            f"**Description:** {skill.description}",
            "",
            skill.instructions,
            "",
        ]

        resources = [
            ("Scripts", skill.scripts),
            ("References", skill.references),
            ("Assets", skill.assets),
        ]
        if any(names for _, names in resources):
            lines.append("**Available Resources:**")
            for label, names in resources:
                if names:
                    lines.append(f"- {label}: {', '.join(names)}")
            lines.append("")

        return "\n".join(lines)

    def build_skills_index(self, summaries: Mapping[str, Mapping[str, str]]) -> str:
        """
        生成技能索引 (只有 name + description，不含指令)

        Args:
            summaries: 名称 -> {"name", "description"}

        Returns:
            索引文本，没有技能时返回空字符串
        """
        if not summaries:
            return ""

        entries = [
            self.SKILL_ENTRY_TEMPLATE.format(
                name=summary.get("name", name),
                description=summary.get("description", ""),
            )
            for name, summary in summaries.items()
        ]
        return self.INDEX_TEMPLATE.format(skill_list="\n".join(entries)) + "\n"

    def compose_with_discovery(
        self,
        base_prompt: str,
        loaded_skills: Iterable[Skill],
        available_summaries: Mapping[str, Mapping[str, str]],
    ) -> str:
        """
        组合已加载技能的完整指令和其余技能的索引

        已加载的技能不会重复出现在索引中。
        """
        loaded_skills = list(loaded_skills)
        prompt = self.compose(base_prompt, loaded_skills)

        loaded_names = {skill.name for skill in loaded_skills}
        remaining = {
            name: summary
            for name, summary in available_summaries.items()
            if name not in loaded_names
        }

        index = self.build_skills_index(remaining)
        if index:
            prompt = prompt.rstrip("\n") + "\n\n" + index

        logger.debug(
            f"Composed prompt with {len(loaded_skills)} active skills "
            f"and {len(remaining)} indexed skills"
        )
        return prompt
