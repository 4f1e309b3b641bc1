"""
SKILL.md 解析器

遵循 Agent Skills 规范 (agentskills.io/specification)
解析 SKILL.md 文件的 frontmatter 和 Markdown body，构建 Skill 对象
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from .errors import SkillLoadError, SkillNotFoundError, SkillParseError
from .frontmatter import FrontmatterCodec, frontmatter_codec

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"

# 规范允许的资源目录
RESOURCE_DIRS = ("scripts", "references", "assets")

# 相关性打分时忽略的常见停用词
STOP_WORDS = frozenset(
    {
        "a", "an", "the", "in", "on", "at", "to", "for", "of", "by",
        "is", "it", "or", "and", "but", "not", "no", "so", "if",
        "do", "my", "me", "we", "be", "am", "are", "was", "has",
        "can", "will", "how", "what", "who", "this", "that", "with",
    }
)

MIN_TOKEN_LENGTH = 3

# 查询首尾需要去掉的标点
_TRIM_CHARS = "?!., "


def tokenize(text: str) -> list[str]:
    """
    把查询文本切分为打分用的词

    小写化、去掉首尾标点、按空白切分，
    丢弃短于 3 个字符的词和停用词 (避免 "in" 命中 "guidelines" 之类的误匹配)
    """
    words = []
    for word in text.lower().strip(_TRIM_CHARS).split():
        word = word.strip(_TRIM_CHARS)
        if len(word) >= MIN_TOKEN_LENGTH and word not in STOP_WORDS:
            words.append(word)
    return words


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class SkillMetadata:
    """
    技能元数据 (来自 frontmatter)

    必需字段:
    - name: 技能名称 (<=64 字符, 推荐 kebab-case)
    - description: 技能描述 (推荐 <=200 字符)

    可选字段:
    - license / version
    - metadata: 额外元数据 (author, tags 等)
    - dependencies: 依赖列表
    - compatibility: 环境要求
    - disable_model_invocation: 是否禁用自动调用 (只能手动使用)
    - mode: 是否为模式命令 (修改 Agent 行为，而不是提供领域知识)
    """

    name: str
    description: str
    license: Optional[str] = None
    version: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    dependencies: list[str] = field(default_factory=list)
    compatibility: dict[str, Any] = field(default_factory=dict)
    disable_model_invocation: bool = False
    mode: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SkillMetadata":
        """从 frontmatter 映射构建，缺失字段使用默认值"""
        metadata = data.get("metadata")
        dependencies = data.get("dependencies")
        compatibility = data.get("compatibility")

        return cls(
            name=_as_str(data.get("name")),
            description=_as_str(data.get("description")),
            license=_as_optional_str(data.get("license")),
            version=_as_optional_str(data.get("version")),
            metadata=dict(metadata) if isinstance(metadata, dict) else {},
            dependencies=[str(d) for d in dependencies] if isinstance(dependencies, list) else [],
            compatibility=dict(compatibility) if isinstance(compatibility, dict) else {},
            disable_model_invocation=data.get("disable-model-invocation") is True,
            mode=data.get("mode") is True,
        )

    def to_dict(self) -> dict[str, Any]:
        """转换为 frontmatter 映射，省略空的可选字段"""
        data: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
        }
        if self.license is not None:
            data["license"] = self.license
        if self.version is not None:
            data["version"] = self.version
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        if self.dependencies:
            data["dependencies"] = list(self.dependencies)
        if self.compatibility:
            data["compatibility"] = dict(self.compatibility)
        if self.disable_model_invocation:
            data["disable-model-invocation"] = True
        if self.mode:
            data["mode"] = True
        return data

    @property
    def author(self) -> Optional[str]:
        author = self.metadata.get("author")
        return str(author) if author is not None else None

    @property
    def tags(self) -> list[str]:
        tags = self.metadata.get("tags")
        if not isinstance(tags, list):
            return []
        return [str(tag) for tag in tags]


def _scan_directory(directory: Path) -> list[str]:
    """列出资源目录下的条目名 (不读取内容)"""
    if not directory.is_dir():
        return []
    return sorted(item.name for item in directory.iterdir())


@dataclass
class Skill:
    """
    技能

    支持渐进式披露:
    - Level 1: 元数据 (name, description) - 总是可用
    - Level 2: instructions (SKILL.md body) - 激活时加载
    - Level 3: scripts/references/assets - 按需读取

    loaded 标记区分 "已知存在" 和 "指令已注入 Agent 上下文"
    """

    metadata: SkillMetadata
    instructions: str
    path: str = ""
    scripts: list[str] = field(default_factory=list)
    references: list[str] = field(default_factory=list)
    assets: list[str] = field(default_factory=list)
    _loaded: bool = field(default=False, repr=False)

    @classmethod
    def create(
        cls,
        path: Union[str, Path],
        metadata: SkillMetadata,
        instructions: str,
    ) -> "Skill":
        """从技能目录创建，并发现资源文件"""
        skill = cls(metadata=metadata, instructions=instructions, path=str(path))
        skill.discover_resources()
        return skill

    @classmethod
    def from_markdown(cls, content: str, path: Union[str, Path] = "") -> "Skill":
        """从 SKILL.md 原始内容创建"""
        parsed = frontmatter_codec.parse(content)
        return cls(
            metadata=SkillMetadata.from_dict(parsed.metadata),
            instructions=parsed.body,
            path=str(path),
        )

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def description(self) -> str:
        return self.metadata.description

    @property
    def skill_dir(self) -> Optional[Path]:
        """技能根目录 (内存中创建的技能为 None)"""
        return Path(self.path) if self.path else None

    @property
    def loaded(self) -> bool:
        return self._loaded

    def mark_loaded(self) -> None:
        """标记指令已读入上下文"""
        self._loaded = True

    @property
    def is_auto_invocable(self) -> bool:
        return not self.metadata.disable_model_invocation

    @property
    def is_mode(self) -> bool:
        return self.metadata.mode

    def discover_resources(self) -> None:
        """扫描 scripts/ references/ assets/ 目录"""
        if not self.path:
            return
        root = Path(self.path)
        if not root.is_dir():
            return
        self.scripts = _scan_directory(root / "scripts")
        self.references = _scan_directory(root / "references")
        self.assets = _scan_directory(root / "assets")

    def _resource_path(self, kind: str, name: str) -> Optional[Path]:
        if not self.path:
            return None
        base = (Path(self.path) / kind).resolve()
        target = (base / name).resolve()
        # 不允许跳出资源目录
        if base not in target.parents:
            return None
        return target if target.is_file() else None

    def get_reference(self, name: str) -> Optional[str]:
        """读取参考文档内容"""
        ref_path = self._resource_path("references", name)
        if ref_path is None:
            return None
        return ref_path.read_text(encoding="utf-8")

    def get_script(self, name: str) -> Optional[str]:
        """读取脚本内容 (只读，不执行)"""
        script_path = self._resource_path("scripts", name)
        if script_path is None:
            return None
        return script_path.read_text(encoding="utf-8")

    def get_asset(self, name: str) -> Optional[str]:
        """获取资源文件的绝对路径"""
        asset_path = self._resource_path("assets", name)
        return str(asset_path) if asset_path is not None else None

    def matches_query(self, query: str) -> bool:
        """名称、描述或标签是否包含查询词 (不区分大小写)"""
        query = query.lower()
        if query in self.name.lower():
            return True
        if query in self.description.lower():
            return True
        return any(query in tag.lower() for tag in self.metadata.tags)

    def relevance_score(self, query: str) -> float:
        """
        计算查询的相关性分数 (0.0 ~ 1.0)

        每个词只按最高命中字段计分一次:
        名称 1.0 > 描述 0.7 > 标签 0.5
        """
        words = tokenize(query)
        max_score = len(words) if words else 1

        name = self.name.lower()
        description = self.description.lower()
        tags = [tag.lower() for tag in self.metadata.tags]

        score = 0.0
        for word in words:
            if word in name:
                score += 1.0
            elif word in description:
                score += 0.7
            elif any(word in tag for tag in tags):
                score += 0.5

        return max(0.0, min(1.0, score / max_score))

    def summary(self) -> dict[str, str]:
        """Level 1 摘要"""
        return {"name": self.name, "description": self.description}

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "path": self.path,
            "metadata": self.metadata.to_dict(),
            "instructions": self.instructions,
            "scripts": list(self.scripts),
            "references": list(self.references),
            "assets": list(self.assets),
            "loaded": self._loaded,
        }


class SkillParser:
    """
    SKILL.md 解析器

    解析符合 Agent Skills 规范的 SKILL.md 文件
    """

    def __init__(self, codec: Optional[FrontmatterCodec] = None):
        self.codec = codec or frontmatter_codec

    def parse_file(self, path: Path) -> Skill:
        """
        解析 SKILL.md 文件

        Args:
            path: SKILL.md 文件路径

        Returns:
            Skill 对象

        Raises:
            SkillNotFoundError: 文件不存在
            SkillLoadError: 读取或解析失败
        """
        path = Path(path)
        if not path.is_file():
            raise SkillNotFoundError.no_skill_file(str(path.parent))

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SkillLoadError.read_error(str(path)) from e

        skill = self.parse_content(content, path.parent)

        # 磁盘上的技能必须有 name 和 description
        for field_name in ("name", "description"):
            if not getattr(skill.metadata, field_name):
                raise SkillLoadError.parse_error(
                    str(path), f"Missing required '{field_name}' field"
                )
        return skill

    def parse_content(self, content: str, skill_dir: Union[str, Path] = "") -> Skill:
        """
        解析 SKILL.md 内容

        Args:
            content: 文件内容
            skill_dir: 技能目录 (用于发现资源文件)，为空表示内存中的技能

        Returns:
            Skill 对象
        """
        try:
            parsed = self.codec.parse(content)
        except SkillParseError as e:
            location = Path(skill_dir) / SKILL_FILE if skill_dir else "<memory>"
            raise SkillLoadError.parse_error(str(location), str(e)) from e

        metadata = SkillMetadata.from_dict(parsed.metadata)

        if skill_dir:
            skill_dir = Path(skill_dir)
            if metadata.name and skill_dir.name != metadata.name:
                logger.debug(
                    f"Skill directory name '{skill_dir.name}' does not match "
                    f"skill name '{metadata.name}'"
                )
            return Skill.create(skill_dir, metadata, parsed.body)

        return Skill(metadata=metadata, instructions=parsed.body)

    def parse_directory(self, skill_dir: Path) -> Skill:
        """
        解析技能目录

        Args:
            skill_dir: 技能目录路径

        Returns:
            Skill 对象
        """
        return self.parse_file(Path(skill_dir) / SKILL_FILE)


# 全局解析器实例
skill_parser = SkillParser()


def parse_skill(path: Path) -> Skill:
    """便捷函数：解析 SKILL.md 文件"""
    return skill_parser.parse_file(path)


def parse_skill_directory(skill_dir: Path) -> Skill:
    """便捷函数：解析技能目录"""
    return skill_parser.parse_directory(skill_dir)
