"""
SKILL.md frontmatter 编解码器

SKILL.md 的格式:

    ---
    name: code-review
    description: Review code for quality and security
    metadata:
      author: someone
      tags: [review, quality]
    ---
    # 指令正文 (Markdown)

frontmatter 只支持 YAML 的一个受限子集，不依赖通用 YAML 库:
- 标量: 字符串 (裸字符串/单引号/双引号)、布尔 (true/false/yes/no)、
  null (null/~)、整数、浮点数 (含 .inf/-.inf/.nan)、行内列表 [a, b]、行内映射 {a: 1}
- 通过缩进识别的嵌套映射和块列表 (列表项可以是标量或映射)
- 块标量 | 和 > (多行描述)
- 整行 # 注释、行尾 # 注释
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import MalformedInputError, SkillParseError, UnterminatedBlockError

logger = logging.getLogger(__name__)

DELIMITER = "---"

# 键名: 字母/数字/下划线开头，允许 - 和 .
KEY_PATTERN = re.compile(r"^([A-Za-z0-9_][A-Za-z0-9_.\-]*)\s*:(?:\s+(.*))?$")

INT_PATTERN = re.compile(r"^[-+]?\d+$")
FLOAT_PATTERN = re.compile(r"^[-+]?(?:(?:\d+\.\d*|\.\d+)(?:[eE][-+]?\d+)?|\d+[eE][-+]?\d+)$")

BLOCK_SCALAR_INDICATORS = ("|", "|-", "|+", ">", ">-", ">+")

# YAML 1.1/1.2 的无穷大和 NaN 写法
_SPECIAL_FLOATS = {
    ".inf": math.inf,
    "+.inf": math.inf,
    "-.inf": -math.inf,
    ".nan": math.nan,
}

# 需要加引号的字符
_SPECIAL_CHARS = set(":#[]{}|>!@%&*?,'\"`")

# YAML 1.1 读取器会当作非字符串的裸值
_YAML11_RESERVED = {"on", "off", "y", "n"}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\", "/": "/", "0": "\0"}


@dataclass(frozen=True)
class ParseResult:
    """解析结果: frontmatter 映射 + 正文"""

    metadata: dict[str, Any] = field(default_factory=dict)
    body: str = ""


# ---------------------------------------------------------------------------
# 标量
# ---------------------------------------------------------------------------


def _strip_inline_comment(value: str) -> str:
    """去掉引号外的行尾注释 ( # 前面必须是空白)"""
    quote: Optional[str] = None
    escaped = False
    for i, ch in enumerate(value):
        if quote:
            if quote == '"' and ch == "\\" and not escaped:
                escaped = True
                continue
            if ch == quote and not escaped:
                quote = None
            escaped = False
            continue
        if ch in ("'", '"') and (i == 0 or value[i - 1] in " [,{"):
            quote = ch
        elif ch == "#" and (i == 0 or value[i - 1] in " \t"):
            return value[:i].rstrip()
    return value


def _unescape_double(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            out.append(_ESCAPES.get(nxt, "\\" + nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _split_flow(inner: str) -> list[str]:
    """按顶层逗号切分行内列表/映射的内容 (忽略引号和括号内的逗号)"""
    parts: list[str] = []
    depth = 0
    quote: Optional[str] = None
    escaped = False
    current: list[str] = []
    for ch in inner:
        if quote:
            current.append(ch)
            if quote == '"' and ch == "\\" and not escaped:
                escaped = True
                continue
            if ch == quote and not escaped:
                quote = None
            escaped = False
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tail = "".join(current).strip()
    if tail or parts:
        parts.append(tail)
    return parts


def parse_scalar(value: str) -> Any:
    """
    解析单个标量值

    Args:
        value: 冒号后面的原始文本

    Returns:
        str / bool / None / int / float / list / dict
    """
    value = _strip_inline_comment(value.strip())

    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return _unescape_double(value[1:-1])
    if len(value) >= 2 and value[0] == "'" and value[-1] == "'":
        return value[1:-1].replace("''", "'")

    lower = value.lower()
    if lower in ("true", "yes"):
        return True
    if lower in ("false", "no"):
        return False
    if lower in ("null", "~"):
        return None

    if lower in _SPECIAL_FLOATS:
        return _SPECIAL_FLOATS[lower]

    if INT_PATTERN.match(value):
        return int(value)
    if FLOAT_PATTERN.match(value):
        return float(value)

    if value.startswith("[") and value.endswith("]"):
        return [parse_scalar(item) for item in _split_flow(value[1:-1])]

    if value.startswith("{") and value.endswith("}"):
        mapping: dict[str, Any] = {}
        for item in _split_flow(value[1:-1]):
            if not item:
                continue
            key, sep, raw = item.partition(":")
            if not sep:
                raise SkillParseError(f"Invalid inline mapping entry: '{item}'")
            key = key.strip().strip("'\"")
            # 键名规则与块映射相同
            if not KEY_PATTERN.match(f"{key}:"):
                raise SkillParseError(f"Invalid inline mapping key: '{key}'")
            mapping[key] = parse_scalar(raw) if raw.strip() else None
        return mapping

    return value


# ---------------------------------------------------------------------------
# 块解析
# ---------------------------------------------------------------------------


class _BlockParser:
    """
    基于缩进的行状态机

    每个块 (映射或列表) 由其第一行的缩进决定层级，
    缩进更深的行属于上一个键/列表项，缩进更浅的行结束当前块。
    """

    def __init__(self, lines: list[str], first_line_no: int = 2):
        self.lines = [line.expandtabs(2).rstrip() for line in lines]
        self.first_line_no = first_line_no
        self.pos = 0

    def parse(self) -> dict[str, Any]:
        self._skip_blank()
        if self.pos >= len(self.lines):
            return {}

        indent, text = self._current()
        if self._is_list_item(text):
            raise SkillParseError("Frontmatter must be a mapping, not a list")

        result = self._parse_mapping(indent)

        self._skip_blank()
        if self.pos < len(self.lines):
            self._fail("Unexpected indentation")
        return result

    # -- 工具方法 --

    def _skip_blank(self) -> None:
        while self.pos < len(self.lines):
            stripped = self.lines[self.pos].strip()
            if stripped and not stripped.startswith("#"):
                return
            self.pos += 1

    def _current(self) -> tuple[int, str]:
        line = self.lines[self.pos]
        text = line.lstrip(" ")
        return len(line) - len(text), text

    def _peek_indent(self) -> Optional[int]:
        self._skip_blank()
        if self.pos >= len(self.lines):
            return None
        return self._current()[0]

    @staticmethod
    def _is_list_item(text: str) -> bool:
        return text == "-" or text.startswith("- ")

    def _fail(self, reason: str) -> None:
        line_no = self.first_line_no + self.pos
        raise SkillParseError(f"{reason} at line {line_no}: '{self.lines[self.pos].strip()}'")

    # -- 映射 --

    def _parse_mapping(self, indent: int) -> dict[str, Any]:
        result: dict[str, Any] = {}

        while True:
            current_indent = self._peek_indent()
            if current_indent is None or current_indent < indent:
                break
            if current_indent > indent:
                self._fail("Unexpected indentation")

            _, text = self._current()
            if self._is_list_item(text):
                # 同级的列表项只能出现在空值键之后
                self._fail("Unexpected list item")

            match = KEY_PATTERN.match(text)
            if not match:
                self._fail("Invalid mapping entry")

            key = match.group(1)
            raw_value = _strip_inline_comment((match.group(2) or "").strip())
            self.pos += 1

            if raw_value in BLOCK_SCALAR_INDICATORS:
                result[key] = self._parse_block_scalar(indent, raw_value)
            elif raw_value:
                result[key] = parse_scalar(raw_value)
            else:
                result[key] = self._parse_nested(indent)

        return result

    def _parse_nested(self, parent_indent: int, allow_sibling_list: bool = True) -> Any:
        """解析空值键 (或空列表项) 下面的嵌套块"""
        next_indent = self._peek_indent()
        if next_indent is None:
            return None

        _, text = self._current()
        if next_indent > parent_indent:
            if self._is_list_item(text):
                return self._parse_list(next_indent)
            return self._parse_mapping(next_indent)

        # 允许列表项与父键同级:
        # tags:
        # - a
        if allow_sibling_list and next_indent == parent_indent and self._is_list_item(text):
            return self._parse_list(next_indent)

        return None

    # -- 列表 --

    def _parse_list(self, indent: int) -> list[Any]:
        result: list[Any] = []

        while True:
            current_indent = self._peek_indent()
            if current_indent is None or current_indent < indent:
                break
            if current_indent > indent:
                self._fail("Unexpected indentation")

            _, text = self._current()
            if not self._is_list_item(text):
                break

            item_text = text[1:].lstrip(" ")
            if not item_text or item_text.startswith("#"):
                self.pos += 1
                result.append(self._parse_nested(indent, allow_sibling_list=False))
                continue

            if item_text[0] not in ("'", '"', "[", "{") and KEY_PATTERN.match(item_text):
                # "- key: value" 开始一个映射，后续键与 key 对齐
                item_indent = indent + (len(text) - len(item_text))
                self.lines[self.pos] = " " * item_indent + item_text
                result.append(self._parse_mapping(item_indent))
                continue

            self.pos += 1
            result.append(parse_scalar(item_text))

        return result

    # -- 块标量 --

    def _parse_block_scalar(self, parent_indent: int, indicator: str) -> str:
        collected: list[str] = []
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            stripped = line.strip()
            if stripped and len(line) - len(line.lstrip(" ")) <= parent_indent:
                break
            collected.append(line)
            self.pos += 1

        content_lines = [line for line in collected if line.strip()]
        if not content_lines:
            return ""
        block_indent = min(len(line) - len(line.lstrip(" ")) for line in content_lines)
        dedented = [line[block_indent:] if line.strip() else "" for line in collected]

        if indicator.startswith("|"):
            text = "\n".join(dedented)
        else:
            paragraphs: list[str] = []
            current: list[str] = []
            for line in dedented:
                if line:
                    current.append(line)
                else:
                    paragraphs.append(" ".join(current))
                    current = []
            paragraphs.append(" ".join(current))
            text = "\n".join(paragraphs)

        if indicator.endswith("-"):
            return text.rstrip("\n")
        if indicator.endswith("+"):
            return text + "\n"
        return text.rstrip("\n") + "\n"


# ---------------------------------------------------------------------------
# 生成
# ---------------------------------------------------------------------------


def _needs_quoting(value: str) -> bool:
    if value == "" or value != value.strip():
        return True
    if "\n" in value or "\t" in value or "\r" in value:
        return True
    if any(ch in _SPECIAL_CHARS for ch in value):
        return True
    if value[0] in "-+.0123456789~":
        return True
    if value.lower() in _YAML11_RESERVED:
        return True
    return not isinstance(parse_scalar(value), str)


def _quote(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def format_scalar(value: Any) -> str:
    """把标量转换为 frontmatter 文本"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return ".nan"
        if math.isinf(value):
            return ".inf" if value > 0 else "-.inf"
        return repr(value)
    if isinstance(value, int):
        return repr(value)
    text = str(value)
    return _quote(text) if _needs_quoting(text) else text


def _is_scalar(value: Any) -> bool:
    return not isinstance(value, (dict, list, tuple))


def _check_key(key: Any) -> str:
    key = str(key)
    if not KEY_PATTERN.match(f"{key}:"):
        raise ValueError(f"Unsupported frontmatter key: '{key}'")
    return key


def _emit_mapping(data: dict, level: int) -> list[str]:
    prefix = "  " * level
    lines: list[str] = []
    for raw_key, value in data.items():
        key = _check_key(raw_key)
        if isinstance(value, dict):
            if not value:
                lines.append(f"{prefix}{key}: {{}}")
            else:
                lines.append(f"{prefix}{key}:")
                lines.extend(_emit_mapping(value, level + 1))
        elif isinstance(value, (list, tuple)):
            if all(_is_scalar(item) for item in value):
                items = ", ".join(format_scalar(item) for item in value)
                lines.append(f"{prefix}{key}: [{items}]")
            else:
                lines.append(f"{prefix}{key}:")
                lines.extend(_emit_list(list(value), level + 1))
        else:
            lines.append(f"{prefix}{key}: {format_scalar(value)}")
    return lines


def _emit_list(items: list, level: int) -> list[str]:
    prefix = "  " * level
    lines: list[str] = []
    for item in items:
        if isinstance(item, dict):
            if not item:
                lines.append(f"{prefix}- {{}}")
                continue
            nested = _emit_mapping(item, level + 1)
            # 第一行的缩进换成 "- "，列对齐保持不变
            nested[0] = f"{prefix}- " + nested[0][len(prefix) + 2:]
            lines.extend(nested)
        elif isinstance(item, (list, tuple)):
            if all(_is_scalar(sub) for sub in item):
                lines.append(f"{prefix}- [{', '.join(format_scalar(sub) for sub in item)}]")
            else:
                lines.append(f"{prefix}-")
                lines.extend(_emit_list(list(item), level + 1))
        else:
            lines.append(f"{prefix}- {format_scalar(item)}")
    return lines


# ---------------------------------------------------------------------------
# 对外接口
# ---------------------------------------------------------------------------


class FrontmatterCodec:
    """
    frontmatter 编解码器

    parse(generate(m)).metadata == m 对 SkillMetadata.to_dict() 产出的任何映射成立。
    """

    def parse(self, content: str) -> ParseResult:
        """
        解析 SKILL.md 内容

        Args:
            content: 原始文件内容

        Returns:
            ParseResult

        Raises:
            MalformedInputError: 不以 --- 开头
            UnterminatedBlockError: 没有结尾的 ---
            SkillParseError: frontmatter 语法错误
        """
        text = content.replace("\r\n", "\n").replace("\r", "\n").lstrip()
        lines = text.split("\n")

        if not lines or lines[0].strip() != DELIMITER:
            raise MalformedInputError("SKILL.md must start with YAML frontmatter (---)")

        closing = None
        for i in range(1, len(lines)):
            if lines[i].strip() == DELIMITER:
                closing = i
                break
        if closing is None:
            raise UnterminatedBlockError("SKILL.md frontmatter must be closed with ---")

        metadata = _BlockParser(lines[1:closing]).parse()
        body = "\n".join(lines[closing + 1:]).strip()
        return ParseResult(metadata=metadata, body=body)

    def generate(self, metadata: dict[str, Any]) -> str:
        """
        生成带分隔符的 frontmatter

        Args:
            metadata: frontmatter 映射

        Returns:
            "---\\n...\\n---\\n"
        """
        lines = _emit_mapping(metadata, 0)
        block = "\n".join(lines) + "\n" if lines else ""
        return f"{DELIMITER}\n{block}{DELIMITER}\n"

    def generate_document(self, metadata: dict[str, Any], body: str = "") -> str:
        """生成完整的 SKILL.md (frontmatter + 正文)"""
        document = self.generate(metadata)
        body = body.strip()
        if body:
            document += "\n" + body + "\n"
        return document


# 全局编解码器实例
frontmatter_codec = FrontmatterCodec()


def parse_frontmatter(content: str) -> ParseResult:
    """便捷函数：解析 SKILL.md 内容"""
    return frontmatter_codec.parse(content)


def generate_frontmatter(metadata: dict[str, Any]) -> str:
    """便捷函数：生成 frontmatter"""
    return frontmatter_codec.generate(metadata)
