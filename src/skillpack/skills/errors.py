"""
技能系统异常

异常层级:
- SkillError: 基类
  - SkillParseError: frontmatter 解析失败
    - MalformedInputError: 缺少开头的 --- 分隔符
    - UnterminatedBlockError: 缺少结尾的 --- 分隔符
  - SkillValidationError: 校验失败 (携带错误列表)
  - SkillNotFoundError: 技能不存在 (注册中心/加载器/安装目录)
  - SkillLoadError: 读取或解析 SKILL.md 失败
  - SkillInstallError: 安装/卸载失败
    - SkillAlreadyInstalledError: 目标目录已存在
  - SkillExportError: 导出失败

批量发现时单个技能的失败只记录日志，其余操作直接把异常抛给调用方，不做重试。
"""

from typing import Any, Optional


class SkillError(Exception):
    """技能系统错误基类"""

    def __init__(self, message: str, *, skill_name: Optional[str] = None) -> None:
        self.message = message
        self.skill_name = skill_name
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """序列化为字典"""
        result: dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
        }
        if self.skill_name:
            result["skill"] = self.skill_name
        return result


class SkillParseError(SkillError):
    """frontmatter 解析错误"""

    pass


class MalformedInputError(SkillParseError):
    """内容不以 --- 开头"""

    pass


class UnterminatedBlockError(SkillParseError):
    """frontmatter 没有闭合"""

    pass


class SkillValidationError(SkillError):
    """校验失败"""

    def __init__(
        self,
        message: str,
        errors: Optional[list[str]] = None,
        *,
        skill_name: Optional[str] = None,
    ) -> None:
        self.errors = list(errors or [])
        super().__init__(message, skill_name=skill_name)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errors"] = self.errors
        return result


class SkillNotFoundError(SkillError, LookupError):
    """技能不存在"""

    @classmethod
    def with_name(cls, name: str) -> "SkillNotFoundError":
        return cls(f"Skill not found: '{name}'", skill_name=name)

    @classmethod
    def no_skill_file(cls, path: str) -> "SkillNotFoundError":
        return cls(f"No SKILL.md found in: '{path}'")


class SkillLoadError(SkillError):
    """加载失败"""

    @classmethod
    def read_error(cls, path: str) -> "SkillLoadError":
        return cls(f"Cannot read skill file: '{path}'")

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "SkillLoadError":
        return cls(f"Failed to parse skill file '{path}': {reason}")


class SkillInstallError(SkillError):
    """安装/卸载失败"""

    @classmethod
    def install_failed(cls, name: str, reason: str) -> "SkillInstallError":
        return cls(f"Failed to install skill '{name}': {reason}", skill_name=name)

    @classmethod
    def remove_failed(cls, name: str, reason: str) -> "SkillInstallError":
        return cls(f"Failed to remove skill '{name}': {reason}", skill_name=name)


class SkillAlreadyInstalledError(SkillInstallError):
    """技能已安装"""

    @classmethod
    def with_name(cls, name: str) -> "SkillAlreadyInstalledError":
        return cls(f"Skill '{name}' is already installed", skill_name=name)


class SkillExportError(SkillError):
    """导出失败"""

    pass
