"""
技能系统

遵循 Agent Skills 规范 (agentskills.io/specification)
支持渐进式披露:
- Level 1: 技能清单 (name + description) - 系统提示词
- Level 2: 完整指令 (SKILL.md body) - 技能被解析为相关时注入
- Level 3: 资源文件 (scripts/references/assets) - 按需读取
"""

from .composer import SkillPromptComposer
from .errors import (
    MalformedInputError,
    SkillAlreadyInstalledError,
    SkillError,
    SkillExportError,
    SkillInstallError,
    SkillLoadError,
    SkillNotFoundError,
    SkillParseError,
    SkillValidationError,
    UnterminatedBlockError,
)
from .exporter import SkillExporter
from .frontmatter import (
    FrontmatterCodec,
    ParseResult,
    frontmatter_codec,
    generate_frontmatter,
    parse_frontmatter,
)
from .installer import SkillInstaller
from .loader import SKILL_DIRECTORIES, SkillLoader, discover_skill_directories
from .manager import SkillManager, get_default, init_default, reset_default
from .parser import (
    RESOURCE_DIRS,
    SKILL_FILE,
    Skill,
    SkillMetadata,
    SkillParser,
    parse_skill,
    parse_skill_directory,
    skill_parser,
)
from .registry import SkillRegistry
from .resolver import DEFAULT_THRESHOLD, ScoredSkill, SkillResolver
from .validator import SkillValidator, ValidationResult

__all__ = [
    # 数据
    "Skill",
    "SkillMetadata",
    "ParseResult",
    "ValidationResult",
    "ScoredSkill",
    "SKILL_FILE",
    "RESOURCE_DIRS",
    "SKILL_DIRECTORIES",
    "DEFAULT_THRESHOLD",
    # 组件
    "FrontmatterCodec",
    "frontmatter_codec",
    "parse_frontmatter",
    "generate_frontmatter",
    "SkillParser",
    "skill_parser",
    "parse_skill",
    "parse_skill_directory",
    "SkillValidator",
    "SkillLoader",
    "discover_skill_directories",
    "SkillRegistry",
    "SkillResolver",
    "SkillInstaller",
    "SkillExporter",
    "SkillPromptComposer",
    "SkillManager",
    "init_default",
    "get_default",
    "reset_default",
    # 异常
    "SkillError",
    "SkillParseError",
    "MalformedInputError",
    "UnterminatedBlockError",
    "SkillValidationError",
    "SkillNotFoundError",
    "SkillLoadError",
    "SkillInstallError",
    "SkillAlreadyInstalledError",
    "SkillExportError",
]
