"""
skillpack 配置模块
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置"""

    # 路径配置
    project_root: Path = Field(
        default_factory=lambda: Path.cwd(), description="项目根目录 (默认为当前工作目录)"
    )
    skills_dir: str = Field(default="skills", description="受管技能目录 (相对 project_root)")
    extra_skill_paths: list[str] = Field(
        default_factory=list,
        description="附加的技能扫描目录，优先级低于 skills_dir",
    )

    # === 技能配置 ===
    skill_cache_enabled: bool = Field(default=True, description="是否缓存已加载的技能")
    resolve_threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="技能相关性阈值 (0~1)，低于该分数的技能不会被自动加载",
    )

    # === 日志配置 ===
    log_level: str = Field(default="INFO", description="根日志级别 (DEBUG/INFO/WARNING/ERROR)")
    log_dir: str = Field(default="logs", description="日志目录 (相对 project_root)")
    log_file_prefix: str = Field(default="skillpack", description="主日志文件名前缀")
    log_max_size_mb: int = Field(default=10, ge=1, description="主日志单文件上限 (MB)，超过后轮转")
    log_backup_count: int = Field(default=30, ge=0, description="轮转后保留的旧日志数量")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="logging.Formatter 格式串",
    )
    log_to_console: bool = Field(default=True, description="日志输出到 stderr")
    log_to_file: bool = Field(default=False, description="日志写入 log_dir (CLI 默认关闭)")

    model_config = {
        "env_prefix": "SKILLPACK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        # 忽略空字符串环境变量，避免 "" 被解析成 bool/float 失败
        "env_ignore_empty": True,
    }

    @property
    def skills_path(self) -> Path:
        """技能目录路径"""
        return self.project_root / self.skills_dir

    @property
    def extra_skill_path_list(self) -> list[Path]:
        """附加技能目录 (相对路径基于 project_root，支持 ~)"""
        paths = []
        for raw in self.extra_skill_paths:
            path = Path(raw).expanduser()
            paths.append(path if path.is_absolute() else self.project_root / path)
        return paths

    @property
    def log_dir_path(self) -> Path:
        """日志目录完整路径"""
        return self.project_root / self.log_dir


# 全局配置实例
settings = Settings()
